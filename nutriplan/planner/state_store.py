"""Per-browser transient state: async access to the client_state table.

One row per (sid, key), where sid is the browser's state cookie. Holds what
a single-page client would keep in session storage: who is logged in, the
onboarding answers, the current nutrition plan and the last generated menus.
Values are JSON text.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from nutriplan.planner.models import PortionBudget

# Keys
ONBOARDING = "onboarding"
USER_ID = "userId"
USER_NAME = "userName"
USER_FULL_NAME = "userFullName"
SESSION_ID = "sessionId"
PREVIOUS_SESSION_ID = "previousSessionId"
USER_PROFILE = "userProfile"
NUTRITION_PLAN = "nutritionPlan"
USER_MONTH = "userMonth"
ADMIN_USER = "adminUser"
DAILY_MENU = "dailyMenu"
WEEKLY_MENU = "weeklyMenu"
MONTHLY_MENU = "monthlyMenu"

MENU_KEYS = (DAILY_MENU, WEEKLY_MENU, MONTHLY_MENU)

M = TypeVar("M", bound=BaseModel)


class ClientState:
    """Key/value state for one browser."""

    def __init__(self, sid: str):
        self.sid = sid

    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def remove(self, *keys: str) -> None:
        raise NotImplementedError

    async def clear(self) -> None:
        raise NotImplementedError

    async def get_json(self, key: str) -> Any | None:
        """Decoded value, or None when missing or unreadable."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    async def set_json(self, key: str, value: Any) -> None:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", by_alias=True)
        await self.set(key, json.dumps(value))

    async def get_model(self, key: str, model: type[M]) -> M | None:
        data = await self.get_json(key)
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except ValidationError:
            return None


class SqlClientState(ClientState):
    def __init__(self, session: AsyncSession, sid: str):
        super().__init__(sid)
        self._session = session

    async def get(self, key: str) -> str | None:
        result = await self._session.execute(
            text("SELECT value FROM client_state WHERE sid = :sid AND key = :key"),
            {"sid": self.sid, "key": key},
        )
        row = result.fetchone()
        return row[0] if row is not None else None

    async def set(self, key: str, value: str) -> None:
        await self._session.execute(
            text(
                "INSERT INTO client_state (sid, key, value, updated_at) "
                "VALUES (:sid, :key, :value, :updated_at) "
                "ON CONFLICT (sid, key) DO UPDATE "
                "SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at"
            ),
            {"sid": self.sid, "key": key, "value": value, "updated_at": datetime.now(timezone.utc)},
        )
        await self._session.commit()

    async def remove(self, *keys: str) -> None:
        for key in keys:
            await self._session.execute(
                text("DELETE FROM client_state WHERE sid = :sid AND key = :key"),
                {"sid": self.sid, "key": key},
            )
        await self._session.commit()

    async def clear(self) -> None:
        await self._session.execute(text("DELETE FROM client_state WHERE sid = :sid"), {"sid": self.sid})
        await self._session.commit()


_MEMORY: dict[str, dict[str, str]] = {}


class MemoryClientState(ClientState):
    """In-process state; for single-worker development and tests."""

    def __init__(self, sid: str, store: dict[str, dict[str, str]] | None = None):
        super().__init__(sid)
        self._store = _MEMORY if store is None else store

    @property
    def _data(self) -> dict[str, str]:
        return self._store.setdefault(self.sid, {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def clear(self) -> None:
        self._store.pop(self.sid, None)


# ---------------------------------------------------------------------------
# Generated menus
# ---------------------------------------------------------------------------


def menu_fingerprint(portions: PortionBudget, region: str, days: int | None = None) -> str:
    """Identity of a generated menu: the inputs it was generated for."""
    return json.dumps([portions.model_dump(), region, days], sort_keys=True)


async def load_cached_menu(
    state: ClientState, key: str, fingerprint: str, max_age_seconds: float
) -> dict[str, Any] | None:
    """Last menu stored under `key`, if generated for the same inputs and still fresh."""
    entry = await state.get_json(key)
    if not isinstance(entry, dict) or entry.get("key") != fingerprint:
        return None
    if time.time() - float(entry.get("storedAt", 0)) > max_age_seconds:
        return None
    return entry.get("menu")


async def store_cached_menu(state: ClientState, key: str, fingerprint: str, menu: BaseModel) -> None:
    await state.set_json(
        key,
        {
            "key": fingerprint,
            "storedAt": time.time(),
            "menu": menu.model_dump(mode="json", by_alias=True),
        },
    )


async def patch_cached_menu(state: ClientState, key: str, fingerprint: str, path: tuple[str, str], value: Any) -> bool:
    """Replace one entry (e.g. ("monthlyMenu", "12")) of a cached menu in place.

    Returns False when there is no menu cached for these inputs; the cache's
    timestamp is left untouched.
    """
    entry = await state.get_json(key)
    if not isinstance(entry, dict) or entry.get("key") != fingerprint:
        return False
    container, item = path
    menu = entry.get("menu") or {}
    if not isinstance(menu.get(container), dict):
        return False
    menu[container][item] = value
    await state.set_json(key, entry)
    return True
