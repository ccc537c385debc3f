# identity_app/models/contact/__init__.py
"""
Contact models package.
"""

from .base import Contact
from .enums import LinkPrecedence

__all__ = [
    "Contact",
    "LinkPrecedence",
]
