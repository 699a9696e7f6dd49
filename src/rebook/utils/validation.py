"""Input normalisation and validation shared by the engine and the API schemas."""

from __future__ import annotations

import re

from rebook.errors.definitions import (
    ErrInvalidContactName,
    ErrInvalidPasscode,
    ErrInvalidPhoneNumber,
)

# Optional leading "+", a non-zero digit, then 1-14 more digits.
PHONE_NUMBER_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$", re.ASCII)
PASSCODE_PATTERN = re.compile(r"^\d{6}$", re.ASCII)

CONTACT_NAME_MAX_LENGTH = 50


def normalize_phone_number(value: object) -> str:
    """Trim and validate a phone number.

    Raises:
        ValidationError: If the value is not an E.164-like number.
    """
    if not isinstance(value, str):
        raise ErrInvalidPhoneNumber()
    phone_number = value.strip()
    if not PHONE_NUMBER_PATTERN.fullmatch(phone_number):
        raise ErrInvalidPhoneNumber()
    return phone_number


def validate_passcode(value: object) -> str:
    """Return *value* unchanged if it is exactly six ASCII digits.

    Raises:
        ValidationError: Otherwise.
    """
    if not isinstance(value, str) or not PASSCODE_PATTERN.fullmatch(value):
        raise ErrInvalidPasscode()
    return value


def normalize_contact_name(value: object) -> str:
    """Trim a contact display name and enforce 1..50 characters.

    Raises:
        ValidationError: If the trimmed name is empty or too long.
    """
    if not isinstance(value, str):
        raise ErrInvalidContactName()
    name = value.strip()
    if not name or len(name) > CONTACT_NAME_MAX_LENGTH:
        raise ErrInvalidContactName()
    return name
