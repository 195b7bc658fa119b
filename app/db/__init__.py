"""
Database Module
===============

Provides database session management, base model and generic CRUD access.
"""

from app.db.base import Base
from app.db.crud import CRUDRepository
from app.db.session import get_db, get_session_factory, init_db, close_db

__all__ = [
    "Base",
    "CRUDRepository",
    "get_db",
    "get_session_factory",
    "init_db",
    "close_db",
]
