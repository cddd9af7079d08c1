import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.sessions import SessionMiddleware

from agri_web.version import VERSION
from agri_web.api import account, categories, farmers, home, products
from agri_web.core.config import settings
from agri_web.api.templating import render
from agri_web.core.errors import LOGIN_PATH, ApiError, ApiUnauthorized, register_exception_handlers
from agri_web.core.logs import configure_logging
from agri_web.services.session import clear_session

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# separate from the API app registry
instrumentator = Instrumentator(registry=CollectorRegistry())

app = FastAPI(title='Agri-Energy Connect', version=VERSION, docs_url=None, redoc_url=None)

instrumentator.instrument(app).expose(app, include_in_schema=False, endpoint="/metrics")

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.session_max_age,
    same_site='strict',
    https_only=settings.COOKIE_SECURE,
)

register_exception_handlers(app)

@app.exception_handler(ApiUnauthorized)
async def api_unauthorized_handler(request: Request, exc: ApiUnauthorized):
    # the API no longer accepts the token; drop the stale session with it
    logger.warning("API returned 401 for %s %s, sending user to login", request.method, request.url.path)
    response = RedirectResponse(LOGIN_PATH, status_code=303)
    clear_session(request, response, settings)
    return response

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    logger.error("API error %s on %s %s", exc.status_code, request.method, request.url.path)
    # 503 means the API could not be reached; other API failures are a bad gateway
    status = exc.status_code if exc.status_code < 500 or exc.status_code == 503 else 502
    return render(request, "error.html", status_code=status, message=exc.message())

@app.get('/health')
def health(): return {'status':'ok'}

@app.get('/v1/_info')
def info(): return {'service':'agri-web','version':VERSION,'api':settings.API_BASE_URL}

@app.on_event("startup")
async def startup_event():
    logger.info("Web front-end talking to API at %s", settings.API_BASE_URL)

app.include_router(home.router, tags=['home'])
app.include_router(account.router,    prefix='/account',    tags=['account'])
app.include_router(farmers.router,    prefix='/farmers',    tags=['farmers'])
app.include_router(products.router,   prefix='/products',   tags=['products'])
app.include_router(categories.router, prefix='/categories', tags=['categories'])
