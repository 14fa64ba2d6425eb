"""Primitive key-value stores the preference adapters sit on."""

from prefs_helper.stores.base import DataStore, Editor, Preferences
from prefs_helper.stores.file import JsonFilePreferences
from prefs_helper.stores.memory import InMemoryDataStore, InMemoryPreferences
from prefs_helper.stores.sqlite import SQLiteDataStore

__all__ = [
    "DataStore",
    "Editor",
    "InMemoryDataStore",
    "InMemoryPreferences",
    "JsonFilePreferences",
    "Preferences",
    "SQLiteDataStore",
]
