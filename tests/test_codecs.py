"""Tests for the typed codec layer."""

import enum
import logging
from datetime import UTC, date, datetime, time, timedelta, timezone

import pytest

from prefs_helper.codecs import (
    ABSENT,
    BoolCodec,
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


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


# ── primitives ───────────────────────────────────────────────


def test_string_empty_is_a_value():
    codec = StringCodec()
    assert codec.encode("") == ""
    assert codec.decode("", "default") == ""


def test_string_none_means_remove():
    assert StringCodec().encode(None) is None


def test_missing_raw_returns_default():
    assert StringCodec().decode(None, "fallback") == "fallback"
    assert IntCodec().decode(None) is None


def test_int_range_checked_on_encode():
    codec = IntCodec()
    assert codec.encode(2**31 - 1) == 2**31 - 1
    with pytest.raises(ValueError):
        codec.encode(2**31)


def test_long_accepts_64_bit():
    assert LongCodec().encode(2**40) == 2**40
    with pytest.raises(ValueError):
        LongCodec().encode(2**63)


def test_int_decode_out_of_range_returns_default():
    assert IntCodec().decode(2**40, 7) == 7


def test_bool_is_not_an_int():
    assert IntCodec().decode(True, 3) == 3
    with pytest.raises(TypeError):
        IntCodec().encode(True)


def test_int_rejects_string_raw(caplog):
    with caplog.at_level(logging.WARNING, logger="prefs_helper.codecs"):
        assert IntCodec().decode("12", 0, key="count") == 0
    assert "count" in caplog.text


def test_float_accepts_int_raw():
    assert FloatCodec().decode(3, 0.0) == 3.0
    assert FloatCodec().encode(2) == 2.0


def test_bool_round_trip():
    codec = BoolCodec()
    assert codec.decode(codec.encode(False), True) is False
    assert codec.decode(1, False) is False


# ── temporal integers ────────────────────────────────────────


def test_date_encodes_epoch_millis():
    value = datetime.fromtimestamp(1234567890, tz=UTC)
    assert DateCodec().encode(value) == 1234567890000
    assert DateCodec().decode(1234567890000) == value


def test_date_keeps_millisecond_precision():
    value = datetime(2023, 11, 25, 10, 30, 45, 123000, tzinfo=UTC)
    codec = DateCodec()
    assert codec.decode(codec.encode(value)) == value


def test_date_naive_is_utc():
    assert DateCodec().encode(datetime(1970, 1, 1, 0, 0, 1)) == 1000


def test_date_other_timezone_normalised():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(1970, 1, 1, 2, 0, 0, tzinfo=plus_two)
    assert DateCodec().encode(value) == 0


def test_date_none_writes_sentinel():
    assert DateCodec().encode(None) == ABSENT == -1


def test_sentinel_reads_as_default():
    fallback = datetime(2000, 1, 1, tzinfo=UTC)
    assert DateCodec().decode(-1, fallback) == fallback
    assert LocalDateCodec().decode(-1) is None
    assert LocalTimeCodec().decode(-1) is None
    assert LocalDateTimeCodec().decode(-1) is None


def test_local_date_time_epoch_seconds():
    value = datetime(2023, 11, 25, 10, 30, 45)
    expected = (value - datetime(1970, 1, 1)) // timedelta(seconds=1)
    codec = LocalDateTimeCodec()
    assert codec.encode(value) == expected
    assert codec.decode(expected) == value


def test_local_date_time_drops_microseconds():
    codec = LocalDateTimeCodec()
    value = datetime(2023, 11, 25, 10, 30, 45, 999999)
    assert codec.decode(codec.encode(value)) == datetime(2023, 11, 25, 10, 30, 45)


def test_local_date_time_aware_is_utc_normalised():
    plus_one = timezone(timedelta(hours=1))
    value = datetime(2023, 11, 25, 11, 0, tzinfo=plus_one)
    codec = LocalDateTimeCodec()
    assert codec.decode(codec.encode(value)) == datetime(2023, 11, 25, 10, 0)


def test_local_date_epoch_day():
    value = date(2023, 11, 25)
    codec = LocalDateCodec()
    assert codec.encode(value) == (value - date(1970, 1, 1)).days
    assert codec.decode(codec.encode(value)) == date(2023, 11, 25)


def test_local_date_before_epoch():
    codec = LocalDateCodec()
    assert codec.encode(date(1969, 12, 30)) == -2
    assert codec.decode(-2) == date(1969, 12, 30)


def test_local_date_unrepresentable_returns_default():
    assert LocalDateCodec().decode(-10**9, date(2000, 1, 1)) == date(2000, 1, 1)


def test_local_time_second_of_day():
    codec = LocalTimeCodec()
    assert codec.encode(time(14, 30, 45)) == 52245
    assert codec.decode(52245) == time(14, 30, 45)


def test_local_time_out_of_range_returns_default(caplog):
    with caplog.at_level(logging.WARNING, logger="prefs_helper.codecs"):
        assert LocalTimeCodec().decode(90000, time(8, 0), key="alarm") == time(8, 0)
    assert "alarm" in caplog.text


# ── temporal strings ─────────────────────────────────────────


def test_iso_local_date_time_round_trip():
    codec = IsoLocalDateTimeCodec()
    value = datetime(2023, 11, 25, 10, 30, 45)
    assert codec.encode(value) == "2023-11-25T10:30:45"
    assert codec.decode("2023-11-25T10:30:45") == value


def test_iso_local_date_round_trip():
    codec = IsoLocalDateCodec()
    assert codec.encode(date(2023, 11, 25)) == "2023-11-25"
    assert codec.decode("2023-11-25") == date(2023, 11, 25)


def test_iso_local_time_round_trip():
    codec = IsoLocalTimeCodec()
    assert codec.decode(codec.encode(time(14, 30, 45))) == time(14, 30, 45)


def test_iso_malformed_returns_default(caplog):
    with caplog.at_level(logging.WARNING, logger="prefs_helper.codecs"):
        assert IsoLocalDateCodec().decode("not-a-date", date(2000, 1, 1)) == date(2000, 1, 1)
        assert IsoLocalTimeCodec().decode("25:99") is None
    assert "not-a-date" in caplog.text


def test_iso_none_means_remove():
    assert IsoLocalDateCodec().encode(None) is None


# ── enums ────────────────────────────────────────────────────


def test_enum_by_name():
    codec = EnumCodec.of(Color)
    assert codec.encode(Color.GREEN) == "GREEN"
    assert codec.decode("GREEN") is Color.GREEN


def test_enum_none_encodes_blank():
    assert EnumCodec.of(Color).encode(None) == ""


def test_enum_blank_is_absent():
    codec = EnumCodec.of(Color)
    assert codec.decode("", Color.RED) is Color.RED
    assert codec.decode("   ") is None


def test_enum_unknown_name_returns_default(caplog):
    codec = EnumCodec.of(Color)
    with caplog.at_level(logging.WARNING, logger="prefs_helper.codecs"):
        assert codec.decode("PURPLE", Color.BLUE, key="theme") is Color.BLUE
    assert "PURPLE" in caplog.text
    assert "theme" in caplog.text


def test_enum_match_is_case_sensitive():
    assert EnumCodec.of(Color).decode("green") is None


def test_enum_explicit_table():
    codec = EnumCodec({"on": True, "off": False}, type_name="switch")
    assert codec.encode(False) == "off"
    assert codec.decode("on") is True


def test_enum_unregistered_member_rejected_on_encode():
    codec = EnumCodec({"RED": Color.RED})
    with pytest.raises(ValueError):
        codec.encode(Color.BLUE)


def test_enum_names():
    assert EnumCodec.of(Color).names == ["RED", "GREEN", "BLUE"]
