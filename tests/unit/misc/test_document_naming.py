"""Tests for time helpers and document naming."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from scanpdf.misc import (
    document_filename,
    get_default_timezone,
    set_default_timezone,
    tz_now,
)


@pytest.fixture(autouse=True)
def restore_timezone():
    previous = get_default_timezone()
    yield
    set_default_timezone(previous)


class TestTimezone:
    """Tests for the default timezone."""

    def test_default_is_local_time(self):
        assert get_default_timezone() is None
        now = tz_now()
        local = datetime.now().astimezone()
        assert now.utcoffset() == local.utcoffset()
        assert abs(now.replace(tzinfo=None) - local.replace(tzinfo=None)) < timedelta(seconds=5)

    def test_set_by_name(self):
        set_default_timezone("Europe/Berlin")
        assert str(get_default_timezone()) == "Europe/Berlin"

    def test_set_by_tzinfo(self):
        tz = timezone(timedelta(hours=2))
        set_default_timezone(tz)
        assert tz_now().utcoffset() == timedelta(hours=2)

    def test_none_restores_local_time(self):
        set_default_timezone("UTC")
        set_default_timezone(None)
        assert get_default_timezone() is None


class TestDocumentFilename:
    """Tests for merged document names."""

    def test_microsecond_timestamp(self):
        now = datetime(2024, 1, 2, 3, 4, 5, 6, tzinfo=UTC)
        assert document_filename("", now) == "2024-01-02-03-04-05.000006.pdf"

    def test_prefix(self):
        now = datetime(2024, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
        assert document_filename("tax", now) == "tax2024-12-31-23-59-59.999999.pdf"

    def test_uses_local_wall_clock_by_default(self):
        """Without a configured zone the name carries the host's wall-clock time."""
        before = datetime.now()
        name = document_filename()
        stamp = datetime.strptime(name.removesuffix(".pdf"), "%Y-%m-%d-%H-%M-%S.%f")
        assert before - timedelta(seconds=1) <= stamp <= datetime.now() + timedelta(seconds=1)

    def test_uses_configured_timezone(self):
        set_default_timezone(timezone(timedelta(hours=-7)))
        stamp = datetime.strptime(document_filename().removesuffix(".pdf"), "%Y-%m-%d-%H-%M-%S.%f")
        expected = datetime.now(UTC).replace(tzinfo=None) - timedelta(hours=7)
        assert abs(stamp - expected) < timedelta(seconds=5)
