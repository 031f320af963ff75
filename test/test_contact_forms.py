"""
Unit tests for contact form decoding and validation.
"""

import pytest

from contactbook.contacts.forms import (
    BLANK_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    INVALID_PHONE_MESSAGE,
    TOO_LONG_MESSAGE,
    ContactForm,
    decode_contact_form,
    validate_contact_form,
)
from contactbook.contacts.models import Contact
from contactbook.shared.exceptions import FormDecodeError, ValidationError


def _valid_form(**overrides) -> ContactForm:
    values = {
        "first": "Ada",
        "last": "Lovelace",
        "phone": "(123) 456-7890",
        "email": "ada@example.com",
    }
    values.update(overrides)
    return ContactForm(**values)


class TestDecodeContactForm:
    """Tests for decode_contact_form."""

    def test_full_submission(self):
        form = decode_contact_form(
            {
                "id": "7",
                "first": "Ada",
                "last": "Lovelace",
                "phone": "123-456-7890",
                "email": "ada@example.com",
                "version": "3",
                "csrf_token": "ignored",
            }
        )

        assert form.id == 7
        assert form.version == 3
        assert form.first == "Ada"
        assert form.email == "ada@example.com"
        assert form.validator.valid()

    def test_missing_fields_default(self):
        form = decode_contact_form({})

        assert form.id == 0
        assert form.version == 0
        assert form.first == ""
        assert form.last == ""
        assert form.phone == ""
        assert form.email == ""

    def test_blank_integers_default_to_zero(self):
        form = decode_contact_form({"id": "", "version": "  "})

        assert form.id == 0
        assert form.version == 0

    def test_values_are_not_trimmed(self):
        form = decode_contact_form({"first": "  Ada "})

        assert form.first == "  Ada "

    @pytest.mark.parametrize("field", ["id", "version"])
    def test_non_integer_rejected(self, field):
        with pytest.raises(FormDecodeError) as exc_info:
            decode_contact_form({field: "abc"})

        assert exc_info.value.details["field"] == field

    def test_non_text_rejected(self):
        with pytest.raises(FormDecodeError):
            decode_contact_form({"first": object()})


class TestValidateContactForm:
    """Tests for validate_contact_form."""

    def test_valid(self):
        assert validate_contact_form(_valid_form()).valid()

    def test_all_blank(self):
        v = validate_contact_form(ContactForm())

        assert v.field_errors == {
            "first": BLANK_MESSAGE,
            "last": BLANK_MESSAGE,
            "email": BLANK_MESSAGE,
            "phone": BLANK_MESSAGE,
        }
        assert v.non_field_errors == []

    def test_whitespace_is_blank(self):
        v = validate_contact_form(_valid_form(first="   "))

        assert v.field_errors == {"first": BLANK_MESSAGE}

    def test_name_length(self):
        v = validate_contact_form(_valid_form(first="a" * 100, last="b" * 101))

        assert v.field_errors == {"last": TOO_LONG_MESSAGE}
        assert TOO_LONG_MESSAGE == "This can't contain more than 100 characters."

    def test_name_length_counts_characters(self):
        assert validate_contact_form(_valid_form(first="\u00e9" * 100)).valid()

    def test_invalid_email(self):
        v = validate_contact_form(_valid_form(email="ada@"))

        assert v.field_errors == {"email": INVALID_EMAIL_MESSAGE}

    def test_blank_email_reports_blank_only(self):
        """The first failing check on a field is the one reported."""
        v = validate_contact_form(_valid_form(email=""))

        assert v.field_errors == {"email": BLANK_MESSAGE}

    @pytest.mark.parametrize("phone", ["123-456-ABCD", "+0234", "12345"])
    def test_invalid_phone(self, phone):
        v = validate_contact_form(_valid_form(phone=phone))

        assert v.field_errors == {"phone": INVALID_PHONE_MESSAGE}

    @pytest.mark.parametrize("phone", ["123-456-7890", "+442071234567"])
    def test_valid_phone(self, phone):
        assert validate_contact_form(_valid_form(phone=phone)).valid()

    def test_validate_raises_and_keeps_errors(self):
        form = _valid_form(email="nope")

        with pytest.raises(ValidationError) as exc_info:
            form.validate()

        assert form.field_errors == {"email": INVALID_EMAIL_MESSAGE}
        assert exc_info.value.details == {"fields": {"email": INVALID_EMAIL_MESSAGE}}

    def test_validate_passes(self):
        form = _valid_form()

        form.validate()

        assert form.validator.valid()

    def test_returns_fresh_validator(self):
        form = _valid_form(first="")
        first = validate_contact_form(form)
        form.first = "Ada"
        second = validate_contact_form(form)

        assert not first.valid()
        assert second.valid()
        assert form.validator.valid()


class TestContactFormConversion:
    """Tests for ContactForm <-> Contact."""

    def test_from_contact(self):
        contact = Contact(
            id=5,
            first="Ada",
            last="Lovelace",
            phone="123-456-7890",
            email="ada@example.com",
            version=4,
        )

        form = ContactForm.from_contact(contact)

        assert (form.id, form.first, form.last, form.version) == (5, "Ada", "Lovelace", 4)
        assert form.field_errors == {}
        assert form.non_field_errors == []

    def test_to_contact(self):
        form = _valid_form(id=9, version=2)

        contact = form.to_contact()

        assert isinstance(contact, Contact)
        assert contact.id == 9
        assert contact.version == 2
        assert contact.phone == "(123) 456-7890"
