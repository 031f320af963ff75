"""
Form validation helpers.

A ``Validator`` collects every problem with a submission instead of stopping
at the first one, so a form can be re-rendered with all of its messages. The
module-level predicates are pure and shared between forms.
"""

import re
from dataclasses import dataclass, field
from typing import Any

# Email pattern recommended by W3C.
# https://html.spec.whatwg.org/multipage/input.html#valid-e-mail-address
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

# Permissive US-style phone numbers: "123-456-7890", "(123) 456-7890",
# "+123 456 7890" and the like. A separator is a hyphen or ASCII whitespace
# other than vertical tab.
PERMISSIVE_PHONE_NUMBER_RX = re.compile(
    r"^\+?(?:\(\d{3}\)|\d{3})[-\t\n\f\r ]?\d{3}[-\t\n\f\r ]?\d{4}$", re.ASCII
)

# E.164 international phone numbers.
# https://www.itu.int/rec/T-REC-E.164/en
E164_PHONE_NUMBER_RX = re.compile(r"^\+[1-9]\d{1,14}$", re.ASCII)


@dataclass
class Validator:
    """Accumulates field and non-field validation errors."""

    # Errors tied to a specific form field; first message per field wins.
    field_errors: dict[str, str] = field(default_factory=dict)

    # Errors that aren't associated with a specific field.
    non_field_errors: list[str] = field(default_factory=list)

    def valid(self) -> bool:
        """Return True if no errors have been recorded."""
        return not self.field_errors and not self.non_field_errors

    def add_field_error(self, name: str, message: str) -> None:
        """Record ``message`` for ``name`` unless that field already has one."""
        self.field_errors.setdefault(name, message)

    def add_non_field_error(self, message: str) -> None:
        self.non_field_errors.append(message)

    def check_field(self, ok: bool, name: str, message: str) -> None:
        """Record ``message`` for ``name`` if ``ok`` is false.

        Args:
            ok: Outcome of a predicate, True when the field is valid.
            name: Name of the input field.
            message: Message shown next to the field.
        """
        if not ok:
            self.add_field_error(name, message)


def not_blank(value: str) -> bool:
    return value.strip() != ""


def max_chars(value: str, n: int) -> bool:
    """True if ``value`` has at most ``n`` characters (code points)."""
    return len(value) <= n


def min_chars(value: str, n: int) -> bool:
    """True if ``value`` has at least ``n`` characters (code points)."""
    return len(value) >= n


def matches(value: str, pattern: re.Pattern[str] | str) -> bool:
    """True if the whole of ``value`` matches ``pattern``."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    return pattern.fullmatch(value) is not None


def permitted_value(value: Any, *permitted_values: Any) -> bool:
    return value in permitted_values


def validate_phone_number_input(phone_number: str) -> bool:
    """True if the number is a permissive US-style or an E.164 number."""
    return matches(phone_number, PERMISSIVE_PHONE_NUMBER_RX) or matches(
        phone_number, E164_PHONE_NUMBER_RX
    )
