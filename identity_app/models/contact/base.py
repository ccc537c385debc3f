# identity_app/models/contact/base.py
"""
Contact model: one row per observed (email, phone number) identity.
Rows are grouped into clusters of one primary and its secondaries.
"""

from sqlalchemy import Enum, Index
from sqlalchemy.orm import validates

from ..base import BaseModel, db
from .enums import LinkPrecedence


class Contact(BaseModel):
    """
    A customer contact row.

    A secondary row always links directly to its cluster's primary through
    ``linked_id``; a primary row never carries a ``linked_id``.
    """

    __tablename__ = "contacts"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    linked_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=True)
    link_precedence = db.Column(
        Enum(LinkPrecedence, name="link_precedence_enum"),
        nullable=False,
        default=LinkPrecedence.PRIMARY,
    )
    # Set by administrative tooling only; soft-deleted rows are invisible to lookups
    deleted_at = db.Column(db.DateTime, nullable=True)

    # Indexes for the identify lookups
    __table_args__ = (
        Index("idx_contact_email", "email"),
        Index("idx_contact_phone_number", "phone_number"),
        Index("idx_contact_linked_id", "linked_id"),
    )

    def __repr__(self):
        precedence = self.link_precedence.value if self.link_precedence else None
        return f"<Contact {self.id} ({precedence}) email={self.email} phone={self.phone_number}>"

    @validates("link_precedence")
    def validate_link_precedence(self, key, value):
        """Accept plain strings ('primary' / 'secondary') as well as enum members"""
        if isinstance(value, str):
            return LinkPrecedence(value)
        return value

    @property
    def is_primary(self):
        return self.link_precedence == LinkPrecedence.PRIMARY

    @property
    def primary_id(self):
        """Id of the primary this row defers to (its own id when primary)"""
        return self.id if self.is_primary else self.linked_id

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "linkedId": self.linked_id,
            "linkPrecedence": self.link_precedence.value if self.link_precedence else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "deletedAt": self.deleted_at.isoformat() if self.deleted_at else None,
        }
