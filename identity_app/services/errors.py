# identity_app/services/errors.py
"""
Exceptions raised by the identity services.
"""


class IdentityError(Exception):
    """Base class for identity resolution failures"""


class ValidationError(IdentityError):
    """The submitted identity cannot be resolved (e.g. neither email nor phone)"""


class StorageError(IdentityError):
    """The contact store was unavailable or rejected an operation"""

    def __init__(self, operation, message=None):
        self.operation = operation
        super().__init__(message or f"Contact store operation failed: {operation}")
