"""Typed codecs — map domain values onto the primitives a store can hold.

A store only understands ``str``, ``int``, ``float`` and ``bool``.  Every
richer value (instants, local dates and times, enum members) goes through
exactly one :class:`Codec` on its way in and out.

Decoding never raises.  A missing raw value, the codec's absence sentinel,
a raw value of the wrong primitive type, or one that fails to parse all
degrade to the caller's default; the last two are logged as warnings.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M")

ABSENT = -1
"""Raw marker written by the numeric temporal codecs for a ``None`` value."""

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_EPOCH_NAIVE = datetime(1970, 1, 1)
_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()
_SECONDS_PER_DAY = 86_400
_MILLISECOND = timedelta(milliseconds=1)
_SECOND = timedelta(seconds=1)

INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1


class Codec(ABC, Generic[T]):
    """Bidirectional mapping between one domain type and one stored primitive.

    Subclasses implement :meth:`_encode` and :meth:`_decode` for present
    values only.  The base class owns the absence policy shared by every
    codec.

    Class Variables:
        type_name: Label used in diagnostics.
        raw_types: Primitive types accepted on decode.
        sentinel:  Raw value that stands for "absent", or ``None`` when the
                   codec has no sentinel and absence means key removal.
    """

    type_name: ClassVar[str] = "value"
    raw_types: ClassVar[tuple[type, ...]] = ()
    sentinel: ClassVar[Any] = None

    def encode(self, value: T | None) -> Any:
        """Return the raw value to persist.

        ``None`` maps to :attr:`sentinel`; a ``None`` result tells the
        caller to remove the key instead of writing anything.
        """
        if value is None:
            return self.sentinel
        return self._encode(value)

    def decode(self, raw: Any, default: T | None = None, *, key: str = "") -> T | None:
        """Return the domain value for *raw*, or *default* if there is none."""
        if raw is None or self.is_absent(raw):
            return default
        if not self.accepts(raw):
            logger.warning(
                "Could not read %s for key %r: unexpected raw value %r", self.type_name, key, raw
            )
            return default
        try:
            return self._decode(raw)
        except (LookupError, OverflowError, TypeError, ValueError) as exc:
            logger.warning(
                "Could not decode %s for key %r from %r: %s", self.type_name, key, raw, exc
            )
            return default

    def is_absent(self, raw: Any) -> bool:
        """``True`` if *raw* is this codec's absence sentinel."""
        if self.sentinel is None or isinstance(raw, bool):
            return False
        return bool(raw == self.sentinel)

    def accepts(self, raw: Any) -> bool:
        """``True`` if *raw* has a primitive type this codec can decode."""
        if isinstance(raw, bool) and bool not in self.raw_types:
            return False
        return isinstance(raw, self.raw_types)

    @abstractmethod
    def _encode(self, value: T) -> Any: ...

    @abstractmethod
    def _decode(self, raw: Any) -> T: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ── primitives ───────────────────────────────────────────────


class StringCodec(Codec[str]):
    """Plain strings.  ``""`` is a real value, never treated as absent."""

    type_name = "string"
    raw_types = (str,)

    def _encode(self, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        return value

    def _decode(self, raw: Any) -> str:
        return str(raw)


class _IntegerCodec(Codec[int]):
    raw_types = (int,)
    minimum: ClassVar[int]
    maximum: ClassVar[int]

    def _encode(self, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected int, got {type(value).__name__}")
        if not self.minimum <= value <= self.maximum:
            raise ValueError(f"{value} does not fit in a {self.type_name}")
        return value

    def _decode(self, raw: Any) -> int:
        if not self.minimum <= raw <= self.maximum:
            raise ValueError(f"{raw} does not fit in a {self.type_name}")
        return int(raw)


class IntCodec(_IntegerCodec):
    """32-bit signed integers."""

    type_name = "int"
    minimum = INT_MIN
    maximum = INT_MAX


class LongCodec(_IntegerCodec):
    """64-bit signed integers."""

    type_name = "long"
    minimum = LONG_MIN
    maximum = LONG_MAX


class FloatCodec(Codec[float]):
    type_name = "float"
    raw_types = (float, int)

    def _encode(self, value: float) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"expected float, got {type(value).__name__}")
        return float(value)

    def _decode(self, raw: Any) -> float:
        return float(raw)


class BoolCodec(Codec[bool]):
    type_name = "boolean"
    raw_types = (bool,)

    def _encode(self, value: bool) -> bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}")
        return value

    def _decode(self, raw: Any) -> bool:
        return bool(raw)


# ── temporal values as integers ──────────────────────────────


class DateCodec(Codec[datetime]):
    """Instants as milliseconds since the Unix epoch.

    Naive datetimes are taken to be UTC.  Decoded values are always
    timezone-aware UTC datetimes.
    """

    type_name = "date"
    raw_types = (int,)
    sentinel = ABSENT

    def _encode(self, value: datetime) -> int:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return (value - EPOCH) // _MILLISECOND

    def _decode(self, raw: Any) -> datetime:
        return EPOCH + timedelta(milliseconds=raw)


class LocalDateTimeCodec(Codec[datetime]):
    """Naive date-times as whole seconds since the epoch, read as UTC.

    Aware values are converted to UTC first.  Sub-second precision is
    dropped.
    """

    type_name = "local date-time"
    raw_types = (int,)
    sentinel = ABSENT

    def _encode(self, value: datetime) -> int:
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return (value - _EPOCH_NAIVE) // _SECOND

    def _decode(self, raw: Any) -> datetime:
        return _EPOCH_NAIVE + timedelta(seconds=raw)


class LocalDateCodec(Codec[date]):
    """Calendar dates as a day count since 1970-01-01."""

    type_name = "local date"
    raw_types = (int,)
    sentinel = ABSENT

    def _encode(self, value: date) -> int:
        return value.toordinal() - _EPOCH_ORDINAL

    def _decode(self, raw: Any) -> date:
        return date.fromordinal(raw + _EPOCH_ORDINAL)


class LocalTimeCodec(Codec[time]):
    """Times of day as seconds since midnight.  Microseconds are dropped."""

    type_name = "local time"
    raw_types = (int,)
    sentinel = ABSENT

    def _encode(self, value: time) -> int:
        return value.hour * 3600 + value.minute * 60 + value.second

    def _decode(self, raw: Any) -> time:
        if not 0 <= raw < _SECONDS_PER_DAY:
            raise ValueError(f"{raw} is not a second of the day")
        hours, rest = divmod(raw, 3600)
        minutes, seconds = divmod(rest, 60)
        return time(hours, minutes, seconds)


# ── temporal values as ISO-8601 strings ──────────────────────


class IsoLocalDateTimeCodec(Codec[datetime]):
    type_name = "local date-time"
    raw_types = (str,)

    def _encode(self, value: datetime) -> str:
        return value.isoformat()

    def _decode(self, raw: Any) -> datetime:
        return datetime.fromisoformat(raw)


class IsoLocalDateCodec(Codec[date]):
    type_name = "local date"
    raw_types = (str,)

    def _encode(self, value: date) -> str:
        if isinstance(value, datetime):
            value = value.date()
        return value.isoformat()

    def _decode(self, raw: Any) -> date:
        return date.fromisoformat(raw)


class IsoLocalTimeCodec(Codec[time]):
    type_name = "local time"
    raw_types = (str,)

    def _encode(self, value: time) -> str:
        return value.isoformat()

    def _decode(self, raw: Any) -> time:
        return time.fromisoformat(raw)


# ── enumerations ─────────────────────────────────────────────


class EnumCodec(Codec[M]):
    """Enumeration members stored by symbolic name.

    The codec is built from an explicit ``name -> member`` table, so decoding
    is a plain lookup.  Names match exactly.  A blank raw string means
    absent, and ``None`` encodes to ``""``.

    Parameters:
        members:   Table of every member that may be stored.
        type_name: Label used in diagnostics.
    """

    raw_types = (str,)
    sentinel = ""

    def __init__(self, members: Mapping[str, M], type_name: str = "enum") -> None:
        self._members: dict[str, M] = dict(members)
        self._names: dict[M, str] = {member: name for name, member in self._members.items()}
        self.type_name = type_name  # type: ignore[misc]

    @classmethod
    def of(cls, enum_cls: type[Enum]) -> EnumCodec[Any]:
        """Build the table for an :class:`~enum.Enum` subclass."""
        return cls({member.name: member for member in enum_cls}, type_name=enum_cls.__name__)

    @property
    def names(self) -> list[str]:
        return list(self._members)

    def is_absent(self, raw: Any) -> bool:
        return isinstance(raw, str) and not raw.strip()

    def _encode(self, value: M) -> str:
        try:
            return self._names[value]
        except (KeyError, TypeError):
            raise ValueError(f"{value!r} is not a registered {self.type_name} member") from None

    def _decode(self, raw: Any) -> M:
        member = self._members.get(raw)
        if member is None:
            raise LookupError(f"no {self.type_name} member named {raw!r}")
        return member

    def __repr__(self) -> str:
        return f"EnumCodec({self.type_name}, names={self.names!r})"
