"""
prefs_helper — Hello World

One codec layer, two stores: a synchronous flat file for settings read
on every frame, and a transactional store whose values can be watched.
"""

import asyncio
import enum
import tempfile
from datetime import date
from pathlib import Path

from prefs_helper import (
    BaseDataStore,
    BasePrefs,
    DataStorePreference,
    Preference,
    StoreFactory,
    enum_key,
    local_date_key,
    string_key,
)


class Theme(enum.Enum):
    LIGHT = "light"
    DARK = "dark"


# ─── Your preference classes ───


class UserPrefs(BasePrefs):
    nickname = Preference(string_key("nickname"), default="")
    theme = Preference(enum_key("theme", Theme), default=Theme.LIGHT)


class UserDataStore(BaseDataStore):
    nickname = DataStorePreference(string_key("nickname"), default="")
    birthday = DataStorePreference(local_date_key("birthday"))


async def main(workdir: Path):
    factory = StoreFactory()

    # ──────────────────────────────────────
    #  1. Synchronous preferences
    # ──────────────────────────────────────
    prefs = UserPrefs(
        factory.create_preferences(
            {"name": "user_prefs", "type": "file", "directory": str(workdir)}
        )
    )
    prefs.nickname = "Ada"
    prefs.theme = Theme.DARK
    print(f"  prefs: nickname={prefs.nickname!r} theme={prefs.theme}")

    prefs.clear_all()
    print(f"  prefs after clear: nickname={prefs.nickname!r} theme={prefs.theme}")

    # ──────────────────────────────────────
    #  2. Transactional store with a live flow
    # ──────────────────────────────────────
    config = {"name": "normal_dataStore", "type": "sqlite", "path": str(workdir / "prefs.db")}
    with UserDataStore(factory.create_data_store(config)) as data:

        async def watch():
            async for name in UserDataStore.nickname.flow(data):
                print(f"  flow: nickname={name!r}")
                if name == "Linus":
                    break

        watcher = asyncio.create_task(watch())
        await asyncio.sleep(0.1)

        await data.write(string_key("nickname"), "Grace")
        data.nickname = "Linus"
        await asyncio.wait_for(watcher, 2)

        await data.write(local_date_key("birthday"), date(1815, 12, 10))
        print(f"  blocking read: birthday={data.birthday}")

        await data.clear_all()
        print(f"  after clear: nickname={data.nickname!r} birthday={data.birthday}")


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(main(Path(tmp)))
