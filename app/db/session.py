"""
Engine and session factory for DATABASE_URL.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core import config


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        # sessions cross the threadpool that runs sync dependencies and routes
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
