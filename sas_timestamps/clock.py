"""Base instant and timestamp renderings.

No wall clock is consulted: every instant is derived from the fixed base
local time and an offset in seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from .config import BASE_LOCAL, EngineConfig


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def local_zone(name: str | None) -> tzinfo | None:
    """Configured zone, or None for the host's local zone."""

    return ZoneInfo(name) if name else None


def base_instant(config: EngineConfig) -> datetime:
    """2098-12-31 23:59:59 local civil time, as an absolute UTC instant."""

    zone = local_zone(config.timezone)
    if zone is None:
        # Naive astimezone() resolves against the host zone rules for that date.
        local = datetime(*BASE_LOCAL).astimezone()
    else:
        local = datetime(*BASE_LOCAL, tzinfo=zone)
    return local.astimezone(timezone.utc)


def instant_before(base: datetime, seconds: int) -> datetime:
    return base - timedelta(seconds=seconds)


def epoch_millis(instant: datetime) -> int:
    return (instant - EPOCH) // timedelta(milliseconds=1)


def iso_utc(instant: datetime) -> str:
    """``2098-12-31T23:59:59.000Z`` style."""

    utc = instant.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000 on every platform.
    return f"{utc.year:04d}-{utc.strftime('%m-%dT%H:%M:%S')}.{utc.microsecond // 1000:03d}Z"


def iso_local(instant: datetime, zone_name: str | None = None) -> str:
    """en-US style local rendering, e.g. ``12/31/2098, 11:59:59 PM``."""

    zone = local_zone(zone_name)
    local = instant.astimezone(zone) if zone is not None else instant.astimezone()
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
