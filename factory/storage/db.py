# FILE: factory/storage/db.py
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from config.settings import get_settings

# Default: ./data/factory.db relative to the working directory
# Override with FACTORY_DATABASE_URL
DATABASE_URL = get_settings().database_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session for the factory routers."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create the briefs, ir_specs and patches tables on bind (default: engine)."""
    # registers the tables on Base.metadata
    from factory.storage import models  # noqa: F401

    if bind is None:
        url = make_url(DATABASE_URL)
        if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
            os.makedirs(os.path.dirname(url.database) or ".", exist_ok=True)
    Base.metadata.create_all(bind=bind or engine)
