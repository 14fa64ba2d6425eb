"""Typed key handles — a preference name bound to the codec that stores it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Generic, TypeVar

from prefs_helper.codecs import (
    BoolCodec,
    Codec,
    DateCodec,
    EnumCodec,
    FloatCodec,
    IntCodec,
    IsoLocalDateCodec,
    IsoLocalDateTimeCodec,
    IsoLocalTimeCodec,
    LocalDateCodec,
    LocalDateTimeCodec,
    LocalTimeCodec,
    LongCodec,
    StringCodec,
)

T = TypeVar("T")

_STRING = StringCodec()
_INT = IntCodec()
_LONG = LongCodec()
_FLOAT = FloatCodec()
_BOOL = BoolCodec()
_DATE = DateCodec()
_LOCAL_DATE_TIME = LocalDateTimeCodec()
_LOCAL_DATE = LocalDateCodec()
_LOCAL_TIME = LocalTimeCodec()
_ISO_LOCAL_DATE_TIME = IsoLocalDateTimeCodec()
_ISO_LOCAL_DATE = IsoLocalDateCodec()
_ISO_LOCAL_TIME = IsoLocalTimeCodec()


@dataclass(frozen=True)
class Key(Generic[T]):
    """A preference name plus the codec used to read and write it.

    Keys are used verbatim by the underlying store; no escaping or
    validation is applied to ``name``.
    """

    name: str
    codec: Codec[T]

    def encode(self, value: T | None) -> Any:
        return self.codec.encode(value)

    def decode(self, raw: Any, default: T | None = None) -> T | None:
        return self.codec.decode(raw, default, key=self.name)


def string_key(name: str) -> Key[str]:
    return Key(name, _STRING)


def int_key(name: str) -> Key[int]:
    return Key(name, _INT)


def long_key(name: str) -> Key[int]:
    return Key(name, _LONG)


def float_key(name: str) -> Key[float]:
    return Key(name, _FLOAT)


def bool_key(name: str) -> Key[bool]:
    return Key(name, _BOOL)


def date_key(name: str) -> Key[datetime]:
    """Instant stored as epoch milliseconds."""
    return Key(name, _DATE)


def local_date_time_key(name: str, *, iso: bool = False) -> Key[datetime]:
    """Naive date-time stored as UTC epoch seconds, or as ISO text with ``iso=True``."""
    return Key(name, _ISO_LOCAL_DATE_TIME if iso else _LOCAL_DATE_TIME)


def local_date_key(name: str, *, iso: bool = False) -> Key[date]:
    """Date stored as an epoch day count, or as ISO text with ``iso=True``."""
    return Key(name, _ISO_LOCAL_DATE if iso else _LOCAL_DATE)


def local_time_key(name: str, *, iso: bool = False) -> Key[time]:
    """Time of day stored as seconds since midnight, or as ISO text with ``iso=True``."""
    return Key(name, _ISO_LOCAL_TIME if iso else _LOCAL_TIME)


def enum_key(name: str, members: type[Enum] | Mapping[str, Any] | EnumCodec[Any]) -> Key[Any]:
    """Enum member stored by name.

    *members* is an :class:`~enum.Enum` subclass, an explicit
    ``name -> member`` table, or a ready-made :class:`EnumCodec`.
    """
    if isinstance(members, EnumCodec):
        codec = members
    elif isinstance(members, type) and issubclass(members, Enum):
        codec = EnumCodec.of(members)
    else:
        codec = EnumCodec(members)
    return Key(name, codec)
