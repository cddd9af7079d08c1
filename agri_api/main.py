import logging

from fastapi import FastAPI
from sqlalchemy import inspect
from prometheus_fastapi_instrumentator import Instrumentator

from agri_api.version import VERSION
from agri_api.api.v1 import routes_auth, routes_farmers, routes_products, routes_categories
from agri_api.core.config import settings
from agri_api.core.errors import register_exception_handlers
from agri_api.core.logs import configure_logging, log_routes
from agri_api.db.session import SessionLocal, engine
from agri_api.db.seed import seed_defaults

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title='Agri-Energy Connect API', version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/api/metrics",
    should_gzip=True,
)

register_exception_handlers(app)

@app.get('/health')
def health(): return {'status':'ok'}

@app.get('/api/health')
def api_health(): return {'status':'ok'}

@app.get('/v1/_info')
def info(): return {'service':'agri-api','version':VERSION}

@app.on_event("startup")
async def startup_event():
    log_routes(app, logger)
    if not inspect(engine).has_table("users"):
        logger.warning("Database schema missing, run `alembic upgrade head` (or scripts/seed.py)")
        return
    db = SessionLocal()
    try:
        seed_defaults(db, settings)
    finally:
        db.close()

app.include_router(routes_auth.router,       prefix='/api/auth',          tags=['auth'])
app.include_router(routes_farmers.router,    prefix='/api/FarmerAccount', tags=['farmer-accounts'])
app.include_router(routes_products.router,   prefix='/api/Product',       tags=['products'])
app.include_router(routes_categories.router, prefix='/api/categories',    tags=['categories'])
