"""Catalog database engine and session factory"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from skyflix_recommendation_service.config import get_database_url

DATABASE_URL = get_database_url()

if DATABASE_URL is None:
    raise ValueError("DATABASE_URL is not configured. Set the DATABASE_URL environment variable.")


def _engine_options(url: str) -> dict:
    """Connection options for the catalog store behind ``url``."""
    if url.startswith("sqlite"):
        # Request handlers on different threads share one engine
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

# Catalog access is read-only apart from the loader script
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yield a catalog session and close it afterwards"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
