# backend/receiving/core/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.engine import make_url

from .config import get_settings

DSN = get_settings().database_url


def make_engine(dsn: str):
    url = make_url(dsn)
    engine_kwargs = dict(pool_pre_ping=True)

    # Dialect specific settings
    backend = url.get_backend_name()  # e.g. 'sqlite', 'mssql', 'postgresql'
    if backend.startswith("sqlite"):
        # no thread check on SQLite, no pool sizing args
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    elif backend.startswith("mssql"):
        engine_kwargs.update(pool_size=5, max_overflow=10, fast_executemany=True)
    return create_engine(dsn, **engine_kwargs)


engine = make_engine(DSN)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
