"""Parsing of free-text time references into absolute instants."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tldrbot.errors import ParseError

__all__ = [
    "DISPLAY_FORMAT",
    "ResolvedInstant",
    "get_timezone",
    "resolve",
    "resolve_from_timestamp",
]

_LOG = logging.getLogger(__name__)

DISPLAY_FORMAT = "%d.%m.%Y %H:%M"

_RELATIVE_RE = re.compile(r"^(?P<amount>\d+)\s*(?P<unit>hour|minute|day)s?\s+ago$", re.IGNORECASE)
_UNIT_SECONDS = {
    "minute": 60,
    "hour": 3600,
    "day": 24 * 3600,
}

# Tried in order; the first that yields a real calendar date wins.
_ABSOLUTE_FORMATS = (
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

HELP_TEXT = (
    "Could not understand that time reference. Use one of:\n"
    "- `<n> minutes ago`, `<n> hours ago` or `<n> days ago` (e.g. `2 hours ago`)\n"
    "- `DD.MM.YYYY HH:MM` (e.g. `20.03.2024 14:30`)\n"
    "- `DD.MM.YYYY` (e.g. `20.03.2024`)\n"
    "- `YYYY-MM-DD HH:MM` (e.g. `2024-03-20 14:30`)\n"
    "- `YYYY-MM-DD` (e.g. `2024-03-20`)"
)


@dataclass(frozen=True, slots=True)
class ResolvedInstant:
    """An absolute point in time plus its display form."""

    instant: datetime
    epoch_seconds: int
    display: str

    @classmethod
    def from_datetime(cls, instant: datetime, tz: tzinfo) -> "ResolvedInstant":
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=tz)
        return cls(
            instant=instant,
            epoch_seconds=math.floor(instant.timestamp()),
            display=instant.astimezone(tz).strftime(DISPLAY_FORMAT),
        )


def get_timezone(name: str | None) -> tzinfo:
    """Return the IANA zone called *name*, or UTC if it is empty or unknown."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _LOG.warning("Unknown timezone %r; using UTC", name)
        return timezone.utc


def _parse_relative(text: str, now: datetime) -> Optional[datetime]:
    match = _RELATIVE_RE.match(text)
    if match is None:
        return None
    seconds = int(match.group("amount")) * _UNIT_SECONDS[match.group("unit").lower()]
    try:
        return now - timedelta(seconds=seconds)
    except OverflowError:
        # Further back than datetime can represent.
        return None


def _parse_absolute(text: str, tz: tzinfo) -> Optional[datetime]:
    for fmt in _ABSOLUTE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=tz)
    return None


def resolve(
    text: str,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> ResolvedInstant:
    """Resolve a time expression such as ``2 hours ago`` or ``20.03.2024``.

    Relative expressions are tried before absolute dates. Naive absolute
    dates are read in *tz* (UTC by default), which is also the display zone.

    Raises:
        ParseError: if *text* matches none of the accepted forms.
    """
    tz = tz or timezone.utc
    now = now or datetime.now(tz=timezone.utc)
    cleaned = (text or "").strip()

    attempts: list[Callable[[], Optional[datetime]]] = [
        lambda: _parse_relative(cleaned, now),
        lambda: _parse_absolute(cleaned, tz),
    ]
    for attempt in attempts:
        instant = attempt()
        if instant is None:
            continue
        try:
            return ResolvedInstant.from_datetime(instant, tz)
        except (OverflowError, ValueError, OSError):
            # Representable date whose epoch or local form is out of range.
            break
    raise ParseError(HELP_TEXT)


def resolve_from_timestamp(epoch_seconds: float, *, tz: tzinfo | None = None) -> ResolvedInstant:
    """Build a :class:`ResolvedInstant` for a message timestamp."""
    tz = tz or timezone.utc
    instant = datetime.fromtimestamp(math.floor(epoch_seconds), tz=timezone.utc)
    return ResolvedInstant.from_datetime(instant, tz)
