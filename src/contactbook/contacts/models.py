"""
SQLAlchemy models for contacts.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from contactbook.shared.database import Base

INITIAL_VERSION = 1


class Contact(Base):
    """A single contact record.

    ``version`` starts at ``INITIAL_VERSION`` and is advanced only by
    ``ContactRepository.update``.
    """

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    first: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    phone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=INITIAL_VERSION,
        server_default=str(INITIAL_VERSION),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first} {self.last}"

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.full_name!r}, version={self.version})>"
