"""
Contact create/edit form handling.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from contactbook.contacts.models import Contact
from contactbook.shared.exceptions import FormDecodeError, ValidationError
from contactbook.validator import (
    EMAIL_RX,
    Validator,
    matches,
    max_chars,
    not_blank,
    validate_phone_number_input,
)

NAME_MAX_CHARS = 100

BLANK_MESSAGE = "This field can't be blank."
TOO_LONG_MESSAGE = f"This can't contain more than {NAME_MAX_CHARS} characters."
INVALID_EMAIL_MESSAGE = "Invalid email."
INVALID_PHONE_MESSAGE = "Invalid phone number."


@dataclass
class ContactForm:
    """Values submitted through the create and edit forms."""

    id: int = 0
    first: str = ""
    last: str = ""
    phone: str = ""
    email: str = ""
    version: int = 0
    validator: Validator = field(default_factory=Validator)

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactForm":
        return cls(
            id=contact.id,
            first=contact.first,
            last=contact.last,
            phone=contact.phone,
            email=contact.email,
            version=contact.version,
        )

    @property
    def field_errors(self) -> dict[str, str]:
        return self.validator.field_errors

    @property
    def non_field_errors(self) -> list[str]:
        return self.validator.non_field_errors

    def validate(self) -> None:
        """Run the field checks, keeping the errors on ``self.validator``.

        Raises:
            ValidationError: If any check failed.
        """
        self.validator = validate_contact_form(self)
        if not self.validator.valid():
            raise ValidationError(
                "Contact form has errors",
                details={"fields": dict(self.validator.field_errors)},
            )

    def to_contact(self) -> Contact:
        """Build a detached ``Contact`` carrying the submitted values."""
        return Contact(
            id=self.id,
            first=self.first,
            last=self.last,
            phone=self.phone,
            email=self.email,
            version=self.version,
        )


def _int_field(data: Mapping[str, Any], name: str) -> int:
    raw = data.get(name)
    if raw is None or str(raw).strip() == "":
        return 0
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise FormDecodeError(
            f"Field {name!r} must be an integer",
            details={"field": name, "value": str(raw)},
        ) from exc


def _text_field(data: Mapping[str, Any], name: str) -> str:
    raw = data.get(name)
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise FormDecodeError(f"Field {name!r} must be text", details={"field": name})
    return raw


def decode_contact_form(data: Mapping[str, Any]) -> ContactForm:
    """Map posted form data onto a ``ContactForm``.

    Missing text fields decode to empty strings so that validation reports
    them; ``id`` and ``version`` must be integers when present.

    Raises:
        FormDecodeError: If a field has the wrong type.
    """
    return ContactForm(
        id=_int_field(data, "id"),
        first=_text_field(data, "first"),
        last=_text_field(data, "last"),
        phone=_text_field(data, "phone"),
        email=_text_field(data, "email"),
        version=_int_field(data, "version"),
    )


def validate_contact_form(form: ContactForm) -> Validator:
    """Check every field of ``form`` and return the collected errors."""
    v = Validator()

    v.check_field(not_blank(form.first), "first", BLANK_MESSAGE)
    v.check_field(max_chars(form.first, NAME_MAX_CHARS), "first", TOO_LONG_MESSAGE)
    v.check_field(not_blank(form.last), "last", BLANK_MESSAGE)
    v.check_field(max_chars(form.last, NAME_MAX_CHARS), "last", TOO_LONG_MESSAGE)
    v.check_field(not_blank(form.email), "email", BLANK_MESSAGE)
    v.check_field(matches(form.email, EMAIL_RX), "email", INVALID_EMAIL_MESSAGE)
    v.check_field(not_blank(form.phone), "phone", BLANK_MESSAGE)
    v.check_field(validate_phone_number_input(form.phone), "phone", INVALID_PHONE_MESSAGE)

    return v
