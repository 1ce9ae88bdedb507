"""Miscellaneous helpers for the scan pipeline."""

from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

TimeZoneLike = str | tzinfo

DOCUMENT_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S.%f"

# None means the host's local time
_STATE: dict[str, tzinfo | None] = {"tz": None}


def _coerce_timezone(tz: TimeZoneLike | None) -> tzinfo | None:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def set_default_timezone(tz: TimeZoneLike | None) -> None:
    """Set the default timezone used by tz_now (None restores local time)."""
    _STATE["tz"] = _coerce_timezone(tz)


def get_default_timezone() -> tzinfo | None:
    """Return the configured default timezone, None for local time."""
    return _STATE["tz"]


def tz_now() -> datetime:
    """Return the current time as an aware datetime in the default timezone."""
    tz = _STATE["tz"]
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def document_filename(prefix: str = "", now: datetime | None = None) -> str:
    """Build the merged document name, e.g. ``invoices2024-05-01-09-30-12.123456.pdf``."""
    stamp = (now or tz_now()).strftime(DOCUMENT_TIMESTAMP_FORMAT)
    return f"{prefix}{stamp}.pdf"
