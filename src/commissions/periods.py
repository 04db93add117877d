"""Helpers for ``YYYY-MM`` month keys."""
from __future__ import annotations

import re

from django.utils import timezone

MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def validate_month(month: str) -> str:
    """Return ``month`` unchanged, or raise ``ValueError`` if it is not ``YYYY-MM``."""
    if not isinstance(month, str) or not MONTH_RE.match(month):
        raise ValueError(f"Invalid month key {month!r}, expected YYYY-MM.")
    return month


def previous_month(month: str) -> str:
    year, mon = (int(part) for part in validate_month(month).split("-"))
    if mon == 1:
        return f"{year - 1}-12"
    return f"{year}-{mon - 1:02d}"


def month_of(value) -> str:
    """Month key of a date/datetime; ``None`` means today (local time)."""
    if value is None:
        value = timezone.localdate()
    return f"{value.year}-{value.month:02d}"


def current_month() -> str:
    return month_of(None)
