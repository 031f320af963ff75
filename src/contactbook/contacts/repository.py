"""
Contact repository for database operations.

Records handed out by this module are detached from the session, so callers
can edit them freely; only ``update`` writes changes back.
"""

from typing import Protocol, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.contacts.models import Contact
from contactbook.shared.exceptions import (
    EditConflictError,
    NotFoundError,
    PersistenceError,
)
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)


class ContactRepositoryProtocol(Protocol):
    """Protocol for contact repository operations."""

    async def insert(self, first: str, last: str, phone: str, email: str) -> int:
        """Create a contact and return its ID."""
        ...

    async def get(self, contact_id: int) -> Contact:
        """Get a contact by ID."""
        ...

    async def list_all(self) -> Sequence[Contact]:
        """Get every contact in alphabetical order."""
        ...

    async def update(self, contact: Contact) -> int:
        """Update a contact if its version is current."""
        ...

    async def delete(self, contact_id: int) -> None:
        """Delete a contact."""
        ...


class ContactRepository:
    """Repository for contact database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def insert(self, first: str, last: str, phone: str, email: str) -> int:
        """Create a contact.

        The creation timestamp and initial version come from the column
        defaults.

        Returns:
            ID of the new contact.

        Raises:
            PersistenceError: On any database fault.
        """
        contact = Contact(first=first, last=last, phone=phone, email=email)
        try:
            self._session.add(contact)
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to insert contact") from exc

        contact_id = contact.id

        logger.info("Contact inserted", extra={"contact_id": contact_id})
        return contact_id

    async def get(self, contact_id: int) -> Contact:
        """Get a contact by ID.

        Args:
            contact_id: Contact ID.

        Returns:
            The matching contact.

        Raises:
            NotFoundError: If no contact has this ID.
            PersistenceError: On any other database fault.
        """
        stmt = (
            select(Contact)
            .where(Contact.id == contact_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
            contact = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to fetch contact", details={"contact_id": contact_id}) from exc

        if contact is None:
            raise NotFoundError(details={"contact_id": contact_id})

        self._session.expunge(contact)
        return contact

    async def list_all(self) -> Sequence[Contact]:
        """Get every contact, ordered by first name, then last name."""
        stmt = select(Contact).order_by(Contact.first, Contact.last, Contact.id)
        try:
            result = await self._session.execute(stmt)
            contacts = result.scalars().all()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to list contacts") from exc

        for contact in contacts:
            self._session.expunge(contact)
        return contacts

    async def update(self, contact: Contact) -> int:
        """Write the contact's fields back if nobody else changed it first.

        The row must still carry ``contact.version``; the version is then
        bumped by one and stored on ``contact``. The caller should check that
        the record exists beforehand, since a missing row and a stale version
        look the same here.

        Returns:
            The new version.

        Raises:
            EditConflictError: If no row matched the ID and version.
            PersistenceError: On any other database fault.
        """
        stmt = (
            update(Contact)
            .where(Contact.id == contact.id, Contact.version == contact.version)
            .values(
                first=contact.first,
                last=contact.last,
                phone=contact.phone,
                email=contact.email,
                version=Contact.version + 1,
            )
            .returning(Contact.version)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            new_version = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to update contact", details={"contact_id": contact.id}) from exc

        if new_version is None:
            logger.info(
                "Contact edit conflict",
                extra={"contact_id": contact.id, "stale_version": contact.version},
            )
            raise EditConflictError(
                details={"contact_id": contact.id, "version": contact.version},
            )

        contact.version = new_version
        return new_version

    async def delete(self, contact_id: int) -> None:
        """Permanently remove a contact.

        Raises:
            NotFoundError: If no contact has this ID.
            PersistenceError: On any other database fault.
        """
        stmt = (
            delete(Contact)
            .where(Contact.id == contact_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to delete contact", details={"contact_id": contact_id}) from exc

        if result.rowcount == 0:
            raise NotFoundError(details={"contact_id": contact_id})

        logger.info("Contact deleted", extra={"contact_id": contact_id})
