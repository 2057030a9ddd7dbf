"""Database engine and session factory"""

from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from gestornet.config import settings
from gestornet.infrastructure.database.models import Base


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine; sqlite gets thread-sharing enabled for the writer thread"""
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory sqlite: every connection must see the same database
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create tables if missing and return a session factory bound to the engine"""
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
