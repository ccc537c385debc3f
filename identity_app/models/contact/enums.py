# identity_app/models/contact/enums.py
"""
Enums for contact models.
"""

from enum import Enum as PyEnum


class LinkPrecedence(PyEnum):
    """Role of a contact row within its identity cluster"""

    PRIMARY = "primary"
    SECONDARY = "secondary"
