# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Store configuration and the factory that turns it into stores.

The configuration models are plain Pydantic models, so they can be loaded
from JSON, YAML or environment-derived dicts with ``model_validate``.
Store types are looked up in a class-level registry that applications may
extend with :meth:`StoreFactory.register_preferences` and
:meth:`StoreFactory.register_data_store`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, Field, ValidationError

from prefs_helper._internal.dispatcher import Dispatcher
from prefs_helper.datastore import READ_TIMEOUT, BaseDataStore
from prefs_helper.exceptions import ConfigError
from prefs_helper.prefs import BasePrefs
from prefs_helper.stores import (
    DataStore,
    InMemoryDataStore,
    InMemoryPreferences,
    JsonFilePreferences,
    Preferences,
    SQLiteDataStore,
)

C = TypeVar("C", bound=BaseModel)


class PreferencesConfig(BaseModel):
    """Configuration for a synchronous preference store.

    Attributes:
        name:      Store identifier.  Also the file name for ``"file"`` stores.
        type:      Store type (``"memory"`` or ``"file"``).
        directory: Directory holding ``<name>.json`` (for file type).
    """

    name: str = "preferences"
    type: str = "memory"
    directory: str = ""


class DataStoreConfig(BaseModel):
    """Configuration for an asynchronous transactional store.

    Attributes:
        name:         Store identifier.
        type:         Store type (``"memory"`` or ``"sqlite"``).
        path:         Path to the SQLite database file (for sqlite type).
        read_timeout: Seconds a blocking read waits before using the default.
    """

    name: str = "datastore"
    type: str = "memory"
    path: str = ""
    read_timeout: float = Field(default=READ_TIMEOUT, gt=0)


def _memory_preferences(config: PreferencesConfig) -> Preferences:
    return InMemoryPreferences()


def _file_preferences(config: PreferencesConfig) -> Preferences:
    if not config.directory:
        raise ConfigError(config.name, "file store requires 'directory'")
    return JsonFilePreferences(Path(config.directory) / f"{config.name}.json")


def _memory_data_store(config: DataStoreConfig) -> DataStore:
    return InMemoryDataStore()


def _sqlite_data_store(config: DataStoreConfig) -> DataStore:
    if not config.path:
        raise ConfigError(config.name, "sqlite store requires 'path'")
    return SQLiteDataStore(config.path)


class StoreFactory:
    """Creates stores and adapters from configuration.

    Example:
        factory = StoreFactory()
        prefs = factory.open_prefs({"name": "user_prefs", "type": "file", "directory": "/tmp"})
        data = factory.open_data_store(DataStoreConfig(type="sqlite", path="prefs.db"))
    """

    _preferences_registry: ClassVar[dict[str, Callable[[PreferencesConfig], Preferences]]] = {
        "memory": _memory_preferences,
        "file": _file_preferences,
    }
    _data_store_registry: ClassVar[dict[str, Callable[[DataStoreConfig], DataStore]]] = {
        "memory": _memory_data_store,
        "sqlite": _sqlite_data_store,
    }

    @classmethod
    def register_preferences(
        cls, type_name: str, builder: Callable[[PreferencesConfig], Preferences]
    ) -> None:
        """Register a custom synchronous store type."""
        cls._preferences_registry[type_name] = builder

    @classmethod
    def register_data_store(
        cls, type_name: str, builder: Callable[[DataStoreConfig], DataStore]
    ) -> None:
        """Register a custom transactional store type."""
        cls._data_store_registry[type_name] = builder

    @classmethod
    def registered_types(cls) -> dict[str, list[str]]:
        return {
            "preferences": sorted(cls._preferences_registry),
            "data_store": sorted(cls._data_store_registry),
        }

    # ── stores ───────────────────────────────────────────────

    def create_preferences(self, config: PreferencesConfig | Mapping[str, Any]) -> Preferences:
        cfg = _validate(PreferencesConfig, config)
        builder = self._preferences_registry.get(cfg.type)
        if builder is None:
            available = ", ".join(sorted(self._preferences_registry))
            raise ConfigError(cfg.name, f"unknown type '{cfg.type}'. Available types: {available}")
        return builder(cfg)

    def create_data_store(self, config: DataStoreConfig | Mapping[str, Any]) -> DataStore:
        cfg = _validate(DataStoreConfig, config)
        builder = self._data_store_registry.get(cfg.type)
        if builder is None:
            available = ", ".join(sorted(self._data_store_registry))
            raise ConfigError(cfg.name, f"unknown type '{cfg.type}'. Available types: {available}")
        return builder(cfg)

    # ── adapters ─────────────────────────────────────────────

    def open_prefs(self, config: PreferencesConfig | Mapping[str, Any]) -> BasePrefs:
        return BasePrefs(self.create_preferences(config))

    def open_data_store(
        self,
        config: DataStoreConfig | Mapping[str, Any],
        dispatcher: Dispatcher | None = None,
    ) -> BaseDataStore:
        cfg = _validate(DataStoreConfig, config)
        return BaseDataStore(
            self.create_data_store(cfg),
            dispatcher=dispatcher,
            read_timeout=cfg.read_timeout,
        )


def _validate(model: type[C], config: C | Mapping[str, Any]) -> C:
    if isinstance(config, model):
        return config
    try:
        return model.model_validate(config)
    except ValidationError as exc:
        name = config.get("name", "<unnamed>") if isinstance(config, Mapping) else "<unnamed>"
        raise ConfigError(str(name), str(exc)) from exc
