from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from agri_api.core.config import settings

class Base(DeclarativeBase): pass

def make_engine(url: str, **kwargs) -> Engine:
    if url.startswith('sqlite'):
        kwargs.setdefault('connect_args', {'check_same_thread': False})
    engine = create_engine(url, pool_pre_ping=True, **kwargs)
    if engine.dialect.name == 'sqlite':
        # cascade/restrict rules on products live in the foreign keys
        event.listen(engine, 'connect', _enable_sqlite_fks)
    return engine

def _enable_sqlite_fks(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute('PRAGMA foreign_keys=ON')
    cur.close()

engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
