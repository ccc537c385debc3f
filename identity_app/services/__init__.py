# identity_app/services/__init__.py
"""
Business logic services
"""

from .contact_store import ContactStore
from .errors import IdentityError, StorageError, ValidationError
from .identity_service import ContactGroupView, IdentityResolver, Resolution

__all__ = [
    "ContactStore",
    "IdentityResolver",
    "ContactGroupView",
    "Resolution",
    "IdentityError",
    "ValidationError",
    "StorageError",
]
