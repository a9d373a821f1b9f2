"""Tests for time expression parsing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tldrbot.errors import ParseError
from tldrbot.time_reference import get_timezone, resolve, resolve_from_timestamp

NOW = datetime(2024, 3, 20, 16, 30, 15, tzinfo=timezone.utc)


class TestRelative:
    """Relative ``<n> <unit>s ago`` expressions."""

    @pytest.mark.parametrize("n", [1, 2, 5, 48])
    def test_hours_ago(self, n):
        result = resolve(f"{n} hours ago", now=NOW)
        expected = int(NOW.timestamp()) - n * 3600
        assert abs(result.epoch_seconds - expected) <= 1

    def test_singular_unit(self):
        assert resolve("1 hour ago", now=NOW).instant == NOW - timedelta(hours=1)

    def test_minutes_and_days(self):
        assert resolve("15 minutes ago", now=NOW).instant == NOW - timedelta(minutes=15)
        assert resolve("2 days ago", now=NOW).instant == NOW - timedelta(hours=48)

    def test_case_and_whitespace_are_ignored(self):
        assert resolve("  3 HOURS Ago  ", now=NOW).instant == NOW - timedelta(hours=3)

    def test_display_format(self):
        assert resolve("2 hours ago", now=NOW).display == "20.03.2024 14:30"

    def test_uses_current_time_by_default(self):
        before = datetime.now(tz=timezone.utc).timestamp()
        result = resolve("1 minute ago")
        assert abs(result.epoch_seconds - (before - 60)) <= 2

    def test_unknown_unit_is_rejected(self):
        with pytest.raises(ParseError):
            resolve("2 weeks ago", now=NOW)


class TestAbsolute:
    """Absolute date and date-time forms."""

    def test_dotted_and_iso_forms_agree(self):
        assert resolve("2024-03-20 14:30") == resolve("20.03.2024 14:30")

    def test_date_only_is_midnight(self):
        result = resolve("20.03.2024")
        assert result.instant == datetime(2024, 3, 20, tzinfo=timezone.utc)
        assert result.display == "20.03.2024 00:00"
        assert resolve("2024-03-20") == result

    def test_epoch_seconds_matches_instant(self):
        result = resolve("20.03.2024 14:30")
        assert result.epoch_seconds == int(datetime(2024, 3, 20, 14, 30, tzinfo=timezone.utc).timestamp())

    @pytest.mark.parametrize("text", ["30.02.2024", "32.01.2024", "2024-13-01", "31.04.2024 10:00", "20.03.2024 25:00"])
    def test_impossible_dates_do_not_roll_over(self, text):
        with pytest.raises(ParseError):
            resolve(text)

    def test_timezone_applies_to_naive_dates(self):
        berlin = ZoneInfo("Europe/Berlin")
        result = resolve("20.03.2024 14:30", tz=berlin)
        assert result.instant.utcoffset() == timedelta(hours=1)
        assert result.epoch_seconds == int(datetime(2024, 3, 20, 13, 30, tzinfo=timezone.utc).timestamp())
        assert result.display == "20.03.2024 14:30"


class TestErrors:
    """Unparseable input."""

    @pytest.mark.parametrize("text", ["", "yesterday", "20/03/2024", "two hours ago"])
    def test_garbage_raises_parse_error(self, text):
        with pytest.raises(ParseError):
            resolve(text, now=NOW)

    @pytest.mark.parametrize("text", ["1000000 days ago", "99999999999999999999 minutes ago"])
    def test_out_of_range_relative_raises_parse_error(self, text):
        with pytest.raises(ParseError):
            resolve(text, now=NOW)

    def test_help_text_lists_every_form(self):
        with pytest.raises(ParseError) as excinfo:
            resolve("whenever")
        message = str(excinfo.value)
        for example in ("2 hours ago", "20.03.2024 14:30", "20.03.2024", "2024-03-20 14:30", "2024-03-20"):
            assert example in message


class TestFromTimestamp:
    """Anchor-message timestamps."""

    def test_display_and_epoch(self):
        ts = datetime(2024, 3, 20, 9, 5, 42, tzinfo=timezone.utc).timestamp() + 0.75
        result = resolve_from_timestamp(ts)
        assert result.epoch_seconds == int(ts)
        assert result.display == "20.03.2024 09:05"

    def test_display_uses_timezone(self):
        ts = datetime(2024, 7, 1, 22, 0, tzinfo=timezone.utc).timestamp()
        assert resolve_from_timestamp(ts, tz=ZoneInfo("Europe/Berlin")).display == "02.07.2024 00:00"


class TestGetTimezone:
    def test_utc_default(self):
        assert get_timezone("") is timezone.utc
        assert get_timezone("UTC") is timezone.utc

    def test_named_zone(self):
        assert get_timezone("Europe/Berlin") == ZoneInfo("Europe/Berlin")

    def test_unknown_zone_falls_back(self):
        assert get_timezone("Mars/Olympus_Mons") is timezone.utc
