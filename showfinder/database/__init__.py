"""Database package initialization."""

from .base import Base
from .models import ShowModel, ZipCodeModel
from .session import SessionLocal, get_db, get_engine, init_db

__all__ = [
    'Base',
    'ShowModel',
    'ZipCodeModel',
    'SessionLocal',
    'get_db',
    'get_engine',
    'init_db'
]
