"""
SQLAlchemy-backed store for contact rows.

All reads skip soft-deleted rows. Writes are flushed immediately so that ids and
timestamps are assigned, but nothing is committed until :meth:`ContactStore.commit`
is called; the caller owns the transaction.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from identity_app.models import Contact, LinkPrecedence, db
from identity_app.models.base import utcnow
from identity_app.services.errors import StorageError


class ContactStore:
    """Storage collaborator used by the identity resolver."""

    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.error(f"Contact store error during {operation}: {str(exc)}")
            raise StorageError(operation) from exc

    def _active(self):
        return self.session.query(Contact).filter(Contact.deleted_at.is_(None))

    def find_by_email_or_phone(self, email: str | None, phone_number: str | None) -> list[Contact]:
        """Return every row matching the email OR the phone number; absent inputs are skipped."""
        clauses = []
        if email:
            clauses.append(Contact.email == email)
        if phone_number:
            clauses.append(Contact.phone_number == phone_number)
        if not clauses:
            return []

        with self._guard("find_by_email_or_phone"):
            return (
                self._active()
                .filter(or_(*clauses))
                .order_by(Contact.created_at.asc(), Contact.id.asc())
                .all()
            )

    def find_by_id_or_linked_id(self, contact_id: int) -> list[Contact]:
        """Return the row ``contact_id`` and every row linked to it, oldest first."""
        with self._guard("find_by_id_or_linked_id"):
            return (
                self._active()
                .filter(or_(Contact.id == contact_id, Contact.linked_id == contact_id))
                .order_by(Contact.created_at.asc(), Contact.id.asc())
                .all()
            )

    def find_by_ids(self, contact_ids: Iterable[int]) -> list[Contact]:
        ids = sorted(set(contact_ids))
        if not ids:
            return []
        with self._guard("find_by_ids"):
            return self._active().filter(Contact.id.in_(ids)).order_by(Contact.id.asc()).all()

    def insert(
        self,
        *,
        email: str | None,
        phone_number: str | None,
        link_precedence: LinkPrecedence,
        linked_id: int | None = None,
    ) -> Contact:
        """Add a row and flush it so ``id`` and ``created_at`` are populated."""
        contact = Contact(
            email=email,
            phone_number=phone_number,
            link_precedence=link_precedence,
            linked_id=linked_id,
        )
        with self._guard("insert"):
            self.session.add(contact)
            self.session.flush()
        return contact

    def update_precedence(self, contact_id: int, link_precedence: LinkPrecedence, linked_id: int | None) -> None:
        with self._guard("update_precedence"):
            contact = self.session.get(Contact, contact_id)
            if contact is None:
                raise StorageError("update_precedence", f"Contact {contact_id} not found")
            contact.link_precedence = link_precedence
            contact.linked_id = linked_id
            self.session.flush()

    def relink_secondaries(self, from_id: int, to_id: int) -> int:
        """Point every secondary linked to ``from_id`` at ``to_id``; returns the number of rows moved."""
        with self._guard("relink_secondaries"):
            moved = (
                self._active()
                .filter(
                    Contact.linked_id == from_id,
                    Contact.link_precedence == LinkPrecedence.SECONDARY,
                )
                .update(
                    {Contact.linked_id: to_id, Contact.updated_at: utcnow()},
                    synchronize_session="fetch",
                )
            )
        return moved

    def commit(self) -> None:
        with self._guard("commit"):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
