"""Normalization helpers for user- and model-supplied permit fields.

Form payloads and model output both arrive as loosely typed values. The
helpers here turn them into enum members, calendar dates and clean strings
without raising on bad input.
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional, Type, TypeVar

from dateutil import parser as dateparser

from permit_buddy.database.enums import DocumentCategory, DocumentStatus

EnumType = TypeVar("EnumType", bound=Enum)

_SEPARATORS = re.compile(r"[\s-]+")
_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7E]+")

TRUTHY_STRINGS = {"true", "yes"}
FALSY_STRINGS = {"false", "no"}

_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def normalize_enum(value: Any, enum_cls: Type[EnumType], default: EnumType) -> EnumType:
    """Map a free-form string onto an enum member.

    Matching ignores case and surrounding whitespace, and treats runs of
    spaces or hyphens as underscores ("pending renewal", "Pending-Renewal"
    and "PENDING_RENEWAL" are equivalent).

    Args:
        value: Raw value from a payload or model response
        enum_cls: Target enum class (members valued by their upper-case name)
        default: Member returned when the value is not recognised

    Returns:
        The matching enum member, or ``default``
    """
    if not isinstance(value, str):
        return default
    key = _SEPARATORS.sub("_", value.strip().upper())
    try:
        return enum_cls(key)
    except ValueError:
        return default


def normalize_category(value: Any) -> DocumentCategory:
    return normalize_enum(value, DocumentCategory, DocumentCategory.PERMIT)


def normalize_status(value: Any) -> DocumentStatus:
    return normalize_enum(value, DocumentStatus, DocumentStatus.ACTIVE)


def parse_date(value: Any) -> Optional[date]:
    """Parse a date string into a calendar date.

    Args:
        value: Candidate date string (ISO, US-style, long form...)

    Returns:
        The parsed date, or None for non-strings, blanks, unparseable text
        and text missing a year, month or day
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    try:
        first = dateparser.parse(trimmed, default=_FILL_A).date()
        second = dateparser.parse(trimmed, default=_FILL_B).date()
    except (ValueError, OverflowError):
        return None
    # Text missing a year, month or day picks it up from the fill value.
    return first if first == second else None


def format_date(value: Any) -> str:
    """Return a parsed date as ``YYYY-MM-DD``, or an empty string."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ""


def coerce_bool(value: Any, default: bool = False) -> bool:
    """Coerce booleans and yes/no-like strings; anything else is ``default``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUTHY_STRINGS:
            return True
        if normalized in FALSY_STRINGS:
            return False
    return default


def sanitize_ascii(value: str) -> str:
    """Drop characters outside printable ASCII."""
    return _NON_PRINTABLE_ASCII.sub("", value)


def clean_text(value: Any) -> str:
    """Trim a string value; non-strings become an empty string."""
    return value.strip() if isinstance(value, str) else ""


def optional_text(value: Any) -> Optional[str]:
    """Trim a string value, mapping blanks and non-strings to None."""
    cleaned = clean_text(value)
    return cleaned or None


def parse_size(value: Any) -> Optional[float]:
    """Parse a byte size from a number or a numeric string.

    Returns:
        A finite number, or None when the value cannot be read as one
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def pick_first(data: dict, keys: Iterable[str], strings_only: bool = False) -> Any:
    """Return the value of the first key present in ``data``.

    Args:
        data: Mapping to search
        keys: Candidate keys in priority order
        strings_only: Skip values that are not strings instead of null values

    Returns:
        The first matching value, or None
    """
    for key in keys:
        value = data.get(key)
        if strings_only:
            if isinstance(value, str):
                return value
        elif value is not None:
            return value
    return None


def infer_status_from_dates(
    start_date: Optional[date],
    end_date: Optional[date],
    today: date,
) -> DocumentStatus:
    """Derive a permit status from its validity window.

    Rules are applied in order: a future start date means the permit is not
    active yet, a past end date means it has expired, and everything else
    (including missing dates) counts as active.
    """
    if start_date and start_date > today:
        return DocumentStatus.PENDING_ACTIVATION
    if end_date and end_date < today:
        return DocumentStatus.EXPIRED
    return DocumentStatus.ACTIVE


def display_name_from_email(email: Optional[str]) -> Optional[str]:
    """Capitalize the local part of an email address."""
    if not email:
        return None
    local_part = email.split("@", 1)[0].strip()
    if not local_part:
        return None
    return local_part[0].upper() + local_part[1:]
