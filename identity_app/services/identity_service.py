"""
Identity resolution for the /identify endpoint.

Given an email and/or phone number, the resolver finds every contact row that
shares either value, folds the clusters those rows belong to into the one with
the oldest primary, records any genuinely new information as a secondary row
and returns the consolidated view of the cluster.

Clusters are kept flat: after a resolve every secondary links directly to the
primary, including secondaries that used to hang off a primary demoted by the
merge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from flask import current_app

from identity_app.models import Contact, LinkPrecedence
from identity_app.services.contact_store import ContactStore
from identity_app.services.errors import ValidationError

MISSING_IDENTITY_MESSAGE = "email or phone number required"


@dataclass
class ContactGroupView:
    """Consolidated view of one identity cluster."""

    primary_contact_id: int
    emails: list[str]
    phone_numbers: list[str]
    secondary_contact_ids: list[int]

    @classmethod
    def from_cluster(cls, primary: Contact, members: list[Contact]) -> "ContactGroupView":
        """Build the view; ``members`` must be in first-seen order and may include ``primary``."""
        emails = _ordered_unique([primary.email] + [member.email for member in members])
        phone_numbers = _ordered_unique([primary.phone_number] + [member.phone_number for member in members])
        secondary_ids = [member.id for member in members if member.id != primary.id and not member.is_primary]
        return cls(
            primary_contact_id=primary.id,
            emails=emails,
            phone_numbers=phone_numbers,
            secondary_contact_ids=secondary_ids,
        )

    def to_dict(self) -> dict:
        return {
            "primaryContactId": self.primary_contact_id,
            "emails": list(self.emails),
            "phoneNumbers": list(self.phone_numbers),
            "secondaryContactIds": list(self.secondary_contact_ids),
        }


@dataclass
class Resolution:
    """Outcome of a resolve call: the view plus what was written to get there."""

    view: ContactGroupView
    outcome: str
    created_contact_id: int | None = None
    demoted_contact_ids: list[int] = field(default_factory=list)
    relinked_count: int = 0


def _ordered_unique(values):
    seen = set()
    ordered = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def _seniority(contact: Contact):
    """Sort key: oldest ``created_at`` first, lowest id on ties."""
    created_at = contact.created_at
    if created_at is not None and created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
    return (created_at or datetime.max, contact.id)


class IdentityResolver:
    """Resolves a submitted (email, phone number) pair to its contact cluster."""

    def __init__(self, store: ContactStore | None = None):
        self.store = store or ContactStore()

    def resolve(self, email: str | None, phone_number: str | None) -> ContactGroupView:
        return self.reconcile(email, phone_number).view

    def reconcile(self, email: str | None, phone_number: str | None) -> Resolution:
        """
        Resolve the identity and apply every required write in one transaction.

        Raises:
            ValidationError: neither email nor phone number was supplied
            StorageError: any store operation failed; pending writes are rolled back
        """
        email = email or None
        phone_number = phone_number or None
        if email is None and phone_number is None:
            raise ValidationError(MISSING_IDENTITY_MESSAGE)

        matches = self.store.find_by_email_or_phone(email, phone_number)

        if not matches:
            contact = self.store.insert(
                email=email,
                phone_number=phone_number,
                link_precedence=LinkPrecedence.PRIMARY,
            )
            self.store.commit()
            current_app.logger.info(f"Created primary contact {contact.id}")
            return Resolution(
                view=ContactGroupView.from_cluster(contact, [contact]),
                outcome="created_primary",
                created_contact_id=contact.id,
            )

        primaries, secondaries, dangling_ids = self._discover(matches)
        root, demoted_ids, relinked, promoted = self._merge(primaries, secondaries, dangling_ids)

        members = self.store.find_by_id_or_linked_id(root.id)

        created = None
        known_emails = {member.email for member in members if member.email}
        known_phones = {member.phone_number for member in members if member.phone_number}
        email_is_new = email is not None and email not in known_emails
        phone_is_new = phone_number is not None and phone_number not in known_phones
        if email_is_new or phone_is_new:
            created = self.store.insert(
                email=email,
                phone_number=phone_number,
                link_precedence=LinkPrecedence.SECONDARY,
                linked_id=root.id,
            )
            members.append(created)

        wrote = bool(promoted or demoted_ids or relinked or created is not None)
        if wrote:
            self.store.commit()

        if demoted_ids or relinked:
            outcome = "merged"
            current_app.logger.info(
                f"Merged contacts {demoted_ids} into primary {root.id} ({relinked} secondaries relinked)"
            )
        elif created is not None:
            outcome = "created_secondary"
        elif promoted:
            outcome = "promoted"
        else:
            outcome = "unchanged"
            current_app.logger.debug(f"Identity already known to primary contact {root.id}")

        if created is not None:
            current_app.logger.info(f"Created secondary contact {created.id} linked to {root.id}")

        return Resolution(
            view=ContactGroupView.from_cluster(root, members),
            outcome=outcome,
            created_contact_id=created.id if created is not None else None,
            demoted_contact_ids=demoted_ids,
            relinked_count=relinked,
        )

    def _discover(self, matches: list[Contact]) -> tuple[list[Contact], list[Contact], set[int]]:
        """
        Walk matched rows up their ``linked_id`` references.

        Returns every primary reached and every secondary visited on the way,
        including intermediate rows of legacy secondary-to-secondary chains,
        plus the ids of parents that could not be loaded (soft-deleted or gone).
        """
        primaries: dict[int, Contact] = {}
        secondaries: dict[int, Contact] = {}
        seen: set[int] = set()
        dangling_ids: set[int] = set()
        frontier = list(matches)

        while frontier:
            parent_ids = set()
            for contact in frontier:
                if contact.id in seen:
                    continue
                seen.add(contact.id)
                if contact.is_primary:
                    primaries[contact.id] = contact
                    continue
                secondaries[contact.id] = contact
                if contact.linked_id is not None and contact.linked_id not in seen:
                    parent_ids.add(contact.linked_id)
            frontier = self.store.find_by_ids(parent_ids) if parent_ids else []
            dangling_ids |= parent_ids - {contact.id for contact in frontier}

        return list(primaries.values()), list(secondaries.values()), dangling_ids

    def _merge(
        self,
        primaries: list[Contact],
        secondaries: list[Contact],
        dangling_ids: set[int],
    ) -> tuple[Contact, list[int], int, bool]:
        """
        Fold every cluster into the oldest primary.

        Returns the root primary, the ids of demoted primaries, the number of
        secondaries re-pointed at the root and whether the root had to be promoted.
        """
        relinked = 0
        promoted = False
        if primaries:
            root = min(primaries, key=_seniority)
        else:
            # Only orphaned secondaries matched; the oldest one takes over the cluster
            root = min(secondaries, key=_seniority)
            current_app.logger.warning(f"Promoting orphaned secondary contact {root.id} to primary")
            self.store.update_precedence(root.id, LinkPrecedence.PRIMARY, None)
            promoted = True

        losing = sorted((p for p in primaries if p.id != root.id), key=_seniority)
        for primary in losing:
            self.store.update_precedence(primary.id, LinkPrecedence.SECONDARY, root.id)
            relinked += self.store.relink_secondaries(primary.id, root.id)

        # Siblings of a soft-deleted parent join the root, not just the matched rows
        for dangling_id in sorted(dangling_ids):
            relinked += self.store.relink_secondaries(dangling_id, root.id)

        losing_ids = {primary.id for primary in losing}
        for secondary in sorted(secondaries, key=_seniority):
            if secondary.id == root.id or secondary.linked_id == root.id or secondary.linked_id in losing_ids:
                continue
            self.store.update_precedence(secondary.id, LinkPrecedence.SECONDARY, root.id)
            relinked += 1 + self.store.relink_secondaries(secondary.id, root.id)

        demoted_ids = [primary.id for primary in losing]
        return root, demoted_ids, relinked, promoted
