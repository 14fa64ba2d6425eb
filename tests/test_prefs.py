"""Tests for BasePrefs — typed access to a synchronous store."""

import enum
import json
import math
from datetime import UTC, date, datetime, time

import pytest

from prefs_helper import (
    BasePrefs,
    StoreError,
    enum_key,
    float_key,
    int_key,
    long_key,
    string_key,
)
from prefs_helper.codecs import INT_MAX, INT_MIN, LONG_MAX, LONG_MIN
from prefs_helper.stores import InMemoryPreferences, JsonFilePreferences
from prefs_helper.stores.base import same_value


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class FailingCommitPreferences(InMemoryPreferences):
    def _persist(self, snapshot, generation, *, blocking):
        return not blocking


# ── scenarios ────────────────────────────────────────────────


def test_set_then_get_then_clear(prefs):
    prefs.set_int("count", 5)
    assert prefs.get_int("count", 0) == 5
    prefs.clear_all()
    assert prefs.get_int("count", 0) == 0
    assert not prefs.contains("count")


def test_missing_keys_return_defaults(prefs):
    assert prefs.get_string("s") == ""
    assert prefs.get_string("s", "x") == "x"
    assert prefs.get_int("i") == 0
    assert prefs.get_long("l", 9) == 9
    assert prefs.get_float("f") == 0.0
    assert prefs.get_boolean("b", True) is True
    assert prefs.get_date("d") is None
    assert prefs.get_local_date("ld") is None
    assert prefs.get_local_time("lt") is None
    assert prefs.get_local_date_time("ldt") is None
    assert prefs.get_enum(Color, "e") is None


def test_empty_string_round_trips(prefs):
    prefs.set_string("name", "")
    assert prefs.get_string("name", "default") == ""
    assert prefs.contains("name")


def test_primitives_round_trip(prefs):
    prefs.set_string("s", "hello")
    prefs.set_long("l", 2**40)
    prefs.set_float("f", 2.5)
    prefs.set_boolean("b", True)
    assert prefs.get_string("s") == "hello"
    assert prefs.get_long("l") == 2**40
    assert prefs.get_float("f") == 2.5
    assert prefs.get_boolean("b") is True


def test_contains_is_type_independent(prefs):
    prefs.set_boolean("flag", False)
    assert prefs.contains("flag")
    assert prefs.contains(int_key("flag"))


def test_type_mismatch_returns_default(prefs):
    prefs.set_string("count", "five")
    assert prefs.get_int("count", 7) == 7


# ── temporal values ──────────────────────────────────────────


def test_date_stored_as_millis(prefs, preferences):
    value = datetime.fromtimestamp(1234567890, tz=UTC)
    prefs.set_date("date_key", value)
    assert preferences.get("date_key") == 1234567890000
    assert prefs.get_date("date_key") == value


def test_null_date_writes_sentinel(prefs, preferences):
    prefs.set_date("date_key", None)
    assert preferences.get("date_key") == -1
    assert prefs.get_date("date_key") is None


def test_local_date_time(prefs):
    value = datetime(2023, 11, 25, 10, 30, 45)
    prefs.set_local_date_time("datetime_key", value)
    assert prefs.get_local_date_time("datetime_key") == value


def test_local_date(prefs):
    prefs.set_local_date("date_key", date(2023, 11, 25))
    assert prefs.get_local_date("date_key") == date(2023, 11, 25)


def test_local_time(prefs, preferences):
    prefs.set_local_time("time_key", time(14, 30, 45))
    assert preferences.get("time_key") == 52245
    assert prefs.get_local_time("time_key") == time(14, 30, 45)


def test_null_local_values_write_sentinel(prefs, preferences):
    prefs.set_local_date("a", None)
    prefs.set_local_time("b", None)
    prefs.set_local_date_time("c", None)
    assert preferences.all() == {"a": -1, "b": -1, "c": -1}
    assert prefs.get_local_date("a", date(2000, 1, 1)) == date(2000, 1, 1)


# ── enums ────────────────────────────────────────────────────


def test_enum_round_trip(prefs, preferences):
    prefs.set_enum("color", Color.GREEN)
    assert preferences.get("color") == "GREEN"
    assert prefs.get_enum(Color, "color") is Color.GREEN


def test_null_enum_writes_blank(prefs, preferences):
    prefs.set_enum("color", None)
    assert preferences.get("color") == ""
    assert prefs.get_enum(Color, "color", Color.RED) is Color.RED


def test_unknown_enum_name_returns_default(prefs):
    prefs.set_string("color", "PURPLE")
    assert prefs.get_enum(Color, "color", Color.RED) is Color.RED
    assert prefs.get_enum(Color, "color") is None


def test_enum_key_with_table(prefs):
    key = enum_key("size", {"S": "small", "L": "large"})
    prefs.set(key, "large")
    assert prefs.get_string("size") == "L"
    assert prefs.get(key) == "large"


# ── generic access ───────────────────────────────────────────


def test_set_none_removes_key_without_sentinel(prefs):
    key = string_key("name")
    prefs.set(key, "Ada")
    prefs.set(key, None)
    assert not prefs.contains(key)
    assert prefs.get(key, "default") == "default"


def test_remove(prefs):
    prefs.set_int("count", 1)
    prefs.remove("count")
    assert not prefs.contains("count")


def test_encode_errors_raise(prefs):
    with pytest.raises(ValueError):
        prefs.set_int("count", 2**40)
    assert not prefs.contains("count")


def test_commit_failure_raises():
    prefs = BasePrefs(FailingCommitPreferences())
    prefs.set_int("count", 1)
    with pytest.raises(StoreError):
        prefs.set(int_key("count"), 2, commit=True)
    with pytest.raises(StoreError):
        prefs.clear_all()


def test_clear_all_is_durable(tmp_path):
    path = tmp_path / "user_prefs.json"
    store = JsonFilePreferences(path)
    try:
        prefs = BasePrefs(store)
        prefs.set_string("name", "Ada")
        prefs.clear_all()
        assert json.loads(path.read_text()) == {}
    finally:
        store.close()


BOUNDARY_VALUES = [
    pytest.param(int_key("int"), INT_MIN, id="int-min"),
    pytest.param(int_key("int"), INT_MAX, id="int-max"),
    pytest.param(long_key("long"), LONG_MIN, id="long-min"),
    pytest.param(long_key("long"), LONG_MAX, id="long-max"),
    pytest.param(float_key("float"), math.inf, id="inf"),
    pytest.param(float_key("float"), -math.inf, id="-inf"),
    pytest.param(float_key("float"), math.nan, id="nan"),
    pytest.param(string_key("text"), "   ", id="blank"),
    pytest.param(string_key("text"), "\t\n", id="whitespace"),
]


@pytest.mark.parametrize(("key", "value"), BOUNDARY_VALUES)
def test_file_boundary_values_survive_reopen(tmp_path, key, value):
    path = tmp_path / "user_prefs.json"
    store = JsonFilePreferences(path)
    BasePrefs(store).set(key, value, commit=True)
    store.close()

    reopened = JsonFilePreferences(path)
    try:
        assert same_value(BasePrefs(reopened).get(key), value)
    finally:
        reopened.close()
