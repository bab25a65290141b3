"""Database session management."""

import logging
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from showfinder.config import get_settings
from showfinder.database.base import Base

logger = logging.getLogger(__name__)

def get_engine(database_url: Optional[str] = None) -> Engine:
    """Create SQLAlchemy engine with configuration."""
    settings = get_settings()
    url = database_url or settings.DATABASE_URL
    if url.startswith('sqlite'):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW
    )

# Create engine and session factory
engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database schema."""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database schema created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating database schema: {str(e)}")
        raise

def get_db():
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
