"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

TTL value object and normalization helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .errors import InvalidArgumentError

SECONDS_IN_MINUTE = 60
SECONDS_IN_HOUR = 3600
SECONDS_IN_DAY = 86400


@dataclass(frozen=True, slots=True)
class Ttl:
    """
    Duration in whole seconds, or forever when `value` is `None`.

    Example::

        Ttl.minutes(5).to_seconds()  # 300
        Ttl.forever().to_seconds()   # None
    """

    value: int | None

    @classmethod
    def create(cls, sec: int = 0, min: int = 0, hour: int = 0, day: int = 0) -> Ttl:
        """Build TTL from a combination of seconds, minutes, hours and days."""
        return cls(
            sec
            + min * SECONDS_IN_MINUTE
            + hour * SECONDS_IN_HOUR
            + day * SECONDS_IN_DAY
        )

    @classmethod
    def seconds(cls, sec: int) -> Ttl:
        return cls(sec)

    @classmethod
    def minutes(cls, min: int) -> Ttl:
        return cls(min * SECONDS_IN_MINUTE)

    @classmethod
    def hours(cls, hour: int) -> Ttl:
        return cls(hour * SECONDS_IN_HOUR)

    @classmethod
    def days(cls, day: int) -> Ttl:
        return cls(day * SECONDS_IN_DAY)

    @classmethod
    def forever(cls) -> Ttl:
        return cls(None)

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> Ttl:
        """Convert a `timedelta`, truncating sub-second precision."""
        return cls(int(delta.total_seconds()))

    @property
    def is_forever(self) -> bool:
        return self.value is None

    def to_seconds(self) -> int | None:
        return self.value


TtlLike = Ttl | timedelta | int | None


def normalize_ttl(ttl: TtlLike) -> int | None:
    """
    Normalize any accepted TTL form into seconds (`None` meaning forever).

    Raises:
        InvalidArgumentError: For unsupported TTL types.
    """
    if ttl is None:
        return None
    if isinstance(ttl, Ttl):
        return ttl.value
    if isinstance(ttl, timedelta):
        return Ttl.from_timedelta(ttl).value
    if isinstance(ttl, int) and not isinstance(ttl, bool):
        return ttl
    raise InvalidArgumentError(
        f"Invalid TTL {ttl!r} ({type(ttl).__name__}). "
        "It must be a Ttl, a timedelta, an integer or None."
    )
