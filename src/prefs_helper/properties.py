"""Attribute-style preferences.

Declare a preference once on a :class:`~prefs_helper.prefs.BasePrefs` or
:class:`~prefs_helper.datastore.BaseDataStore` subclass and use it like a
plain attribute::

    class UserPrefs(BasePrefs):
        nickname = Preference(string_key("nickname"), default="")

    prefs = UserPrefs(InMemoryPreferences())
    prefs.nickname = "Ada"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

if TYPE_CHECKING:
    from prefs_helper.datastore import BaseDataStore, Flow
    from prefs_helper.keys import Key
    from prefs_helper.prefs import BasePrefs

T = TypeVar("T")


class Preference(Generic[T]):
    """Descriptor bound to one key of a :class:`BasePrefs` subclass.

    Reading returns the stored value or *default*; assigning writes it;
    ``del`` removes the key.
    """

    def __init__(self, key: Key[T], default: T | None = None) -> None:
        self.key = key
        self.default = default
        self.attr_name = key.name

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr_name = name

    @overload
    def __get__(self, instance: None, owner: type | None = None) -> Preference[T]: ...

    @overload
    def __get__(self, instance: Any, owner: type | None = None) -> T | None: ...

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self._read(instance)

    def __set__(self, instance: Any, value: T | None) -> None:
        self._write(instance, value)

    def __delete__(self, instance: Any) -> None:
        self._write(instance, None)

    def _read(self, prefs: BasePrefs) -> T | None:
        return prefs.get(self.key, self.default)

    def _write(self, prefs: BasePrefs, value: T | None) -> None:
        if value is None:
            prefs.remove(self.key)
        else:
            prefs.set(self.key, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key.name!r}, default={self.default!r})"


class DataStorePreference(Preference[T]):
    """Descriptor bound to one key of a :class:`BaseDataStore` subclass.

    Reading blocks for at most the store's read timeout; assigning queues
    a fire-and-forget write.  Use :meth:`flow` for a live stream.
    """

    def _read(self, store: BaseDataStore) -> T | None:  # type: ignore[override]
        return store.read_blocking(self.key, self.default)

    def _write(self, store: BaseDataStore, value: T | None) -> None:  # type: ignore[override]
        store.write_async(self.key, value)

    def flow(self, store: BaseDataStore) -> Flow[T | None]:
        return store.read_flow(self.key, self.default)
