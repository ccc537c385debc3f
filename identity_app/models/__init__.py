# identity_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .contact import Contact, LinkPrecedence

__all__ = [
    "db",
    "BaseModel",
    "Contact",
    "LinkPrecedence",
]
