"""Shared test fixtures."""

import asyncio

import pytest

from prefs_helper import BaseDataStore, BasePrefs, Dispatcher
from prefs_helper.stores import InMemoryDataStore, InMemoryPreferences


@pytest.fixture
def preferences():
    return InMemoryPreferences()


@pytest.fixture
def prefs(preferences):
    return BasePrefs(preferences)


@pytest.fixture
def dispatcher():
    d = Dispatcher()
    yield d
    d.close()


@pytest.fixture
def data_store():
    return InMemoryDataStore()


@pytest.fixture
def ds(data_store, dispatcher):
    adapter = BaseDataStore(data_store, dispatcher=dispatcher)
    yield adapter
    adapter.close()


@pytest.fixture
def wait_for_subscribers():
    """Poll until a store has exactly the given number of listeners."""

    async def wait(store, count, timeout=2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while store.subscriber_count != count:
            if loop.time() > deadline:
                raise AssertionError(f"expected {count} subscribers, have {store.subscriber_count}")
            await asyncio.sleep(0.01)

    return wait
