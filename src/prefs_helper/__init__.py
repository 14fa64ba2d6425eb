"""prefs_helper — typed preferences over key-value stores.

Two adapters share one codec layer:

* :class:`BasePrefs` reads from a synchronous store's resident snapshot.
* :class:`BaseDataStore` reads and writes an asynchronous transactional
  store through subscriptions, awaited transactions and a fire-and-forget
  queue.

Dates, times and enums are encoded to the primitives the stores hold by
the codecs in :mod:`prefs_helper.codecs`; decoding never raises.
"""

from prefs_helper._internal.dispatcher import Dispatcher
from prefs_helper.config import DataStoreConfig, PreferencesConfig, StoreFactory
from prefs_helper.datastore import READ_TIMEOUT, BaseDataStore, Flow
from prefs_helper.exceptions import ConfigError, PrefsError, StoreError
from prefs_helper.keys import (
    Key,
    bool_key,
    date_key,
    enum_key,
    float_key,
    int_key,
    local_date_key,
    local_date_time_key,
    local_time_key,
    long_key,
    string_key,
)
from prefs_helper.prefs import BasePrefs
from prefs_helper.properties import DataStorePreference, Preference

__all__ = [
    "READ_TIMEOUT",
    "BaseDataStore",
    "BasePrefs",
    "ConfigError",
    "DataStoreConfig",
    "DataStorePreference",
    "Dispatcher",
    "Flow",
    "Key",
    "Preference",
    "PreferencesConfig",
    "PrefsError",
    "StoreError",
    "StoreFactory",
    "bool_key",
    "date_key",
    "enum_key",
    "float_key",
    "int_key",
    "local_date_key",
    "local_date_time_key",
    "local_time_key",
    "long_key",
    "string_key",
]
