"""Tests for the per-browser state store and plan helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from nutriplan.planner import state_store as keys
from nutriplan.planner.models import CalculateResponse, MenuResponse, PortionBudget, UserProfile
from nutriplan.planner.plan_session import load_plan, load_region, require_user_id, store_plan
from nutriplan.planner.state_store import (
    MemoryClientState,
    SqlClientState,
    load_cached_menu,
    menu_fingerprint,
    patch_cached_menu,
    store_cached_menu,
)
from nutriplan.planner.transforms import transform_menu_response
from tests.conftest import PLAN, PORTIONS, PROFILE, make_menu_data


@pytest.fixture()
def state():
    return MemoryClientState("sid-1", {})


class TestMemoryClientState:
    @pytest.mark.asyncio
    async def test_get_set_remove(self, state):
        await state.set("userId", "u1")
        assert await state.get("userId") == "u1"
        await state.remove("userId", "missing")
        assert await state.get("userId") is None

    @pytest.mark.asyncio
    async def test_browsers_are_isolated(self):
        store: dict = {}
        a = MemoryClientState("a", store)
        b = MemoryClientState("b", store)
        await a.set("userId", "u1")
        assert await b.get("userId") is None

    @pytest.mark.asyncio
    async def test_clear(self, state):
        await state.set("a", "1")
        await state.clear()
        assert await state.get("a") is None

    @pytest.mark.asyncio
    async def test_json_round_trip_uses_aliases(self, state):
        await state.set_json(keys.NUTRITION_PLAN, CalculateResponse.model_validate(PLAN))
        raw = await state.get_json(keys.NUTRITION_PLAN)
        assert raw["details"]["targetCalories"] == 1448.2

    @pytest.mark.asyncio
    async def test_unreadable_json_is_none(self, state):
        await state.set(keys.USER_PROFILE, "{not json")
        assert await state.get_json(keys.USER_PROFILE) is None
        assert await state.get_model(keys.USER_PROFILE, UserProfile) is None

    @pytest.mark.asyncio
    async def test_get_model_invalid_shape(self, state):
        await state.set_json(keys.USER_PROFILE, {"gender": "robot"})
        assert await state.get_model(keys.USER_PROFILE, UserProfile) is None


class FakeSqlSession:
    """Records statements; answers SELECTs with a preset value."""

    def __init__(self, value=None):
        self.value = value
        self.statements: list[tuple[str, dict]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        self.statements.append((str(stmt), params or {}))
        return self

    def fetchone(self):
        return (self.value,) if self.value is not None else None

    async def commit(self):
        self.commits += 1


class TestSqlClientState:
    @pytest.mark.asyncio
    async def test_get(self):
        session = FakeSqlSession("u1")
        state = SqlClientState(session, "sid-1")
        assert await state.get("userId") == "u1"
        sql, params = session.statements[0]
        assert sql.startswith("SELECT value FROM client_state")
        assert params == {"sid": "sid-1", "key": "userId"}

    @pytest.mark.asyncio
    async def test_get_missing(self):
        assert await SqlClientState(FakeSqlSession(), "sid-1").get("userId") is None

    @pytest.mark.asyncio
    async def test_set_upserts_and_commits(self):
        session = FakeSqlSession()
        await SqlClientState(session, "sid-1").set("userId", "u1")
        sql, params = session.statements[0]
        assert "ON CONFLICT (sid, key) DO UPDATE" in sql
        assert params["value"] == "u1"
        assert session.commits == 1

    @pytest.mark.asyncio
    async def test_remove_each_key(self):
        session = FakeSqlSession()
        await SqlClientState(session, "sid-1").remove("a", "b")
        assert [p["key"] for _, p in session.statements] == ["a", "b"]
        assert session.commits == 1


class TestMenuCache:
    def _menu(self) -> MenuResponse:
        return transform_menu_response(make_menu_data())

    @pytest.mark.asyncio
    async def test_fresh_hit(self, state):
        fp = menu_fingerprint(PortionBudget(**PORTIONS), "senegal")
        await store_cached_menu(state, keys.DAILY_MENU, fp, self._menu())
        cached = await load_cached_menu(state, keys.DAILY_MENU, fp, 300)
        assert cached["region"] == "senegal"
        assert len(cached["meals"]) == 4

    @pytest.mark.asyncio
    async def test_other_inputs_miss(self, state):
        fp = menu_fingerprint(PortionBudget(**PORTIONS), "senegal")
        await store_cached_menu(state, keys.DAILY_MENU, fp, self._menu())
        other = menu_fingerprint(PortionBudget(**PORTIONS), "mali")
        assert await load_cached_menu(state, keys.DAILY_MENU, other, 300) is None

    @pytest.mark.asyncio
    async def test_stale_miss(self, state):
        fp = menu_fingerprint(PortionBudget(**PORTIONS), "senegal")
        with patch("nutriplan.planner.state_store.time.time", return_value=1000.0):
            await store_cached_menu(state, keys.DAILY_MENU, fp, self._menu())
        with patch("nutriplan.planner.state_store.time.time", return_value=1301.0):
            assert await load_cached_menu(state, keys.DAILY_MENU, fp, 300) is None

    @pytest.mark.asyncio
    async def test_days_change_fingerprint(self):
        budget = PortionBudget(**PORTIONS)
        assert menu_fingerprint(budget, "general", 30) != menu_fingerprint(budget, "general", 7)

    @pytest.mark.asyncio
    async def test_patch(self, state):
        fp = "fp"
        await state.set_json(keys.MONTHLY_MENU, {"key": fp, "storedAt": 1.0, "menu": {"monthlyMenu": {"3": []}}})
        assert await patch_cached_menu(state, keys.MONTHLY_MENU, fp, ("monthlyMenu", "3"), ["new"]) is True
        entry = await state.get_json(keys.MONTHLY_MENU)
        assert entry["menu"]["monthlyMenu"]["3"] == ["new"]
        assert entry["storedAt"] == 1.0

    @pytest.mark.asyncio
    async def test_patch_without_cache(self, state):
        assert await patch_cached_menu(state, keys.MONTHLY_MENU, "fp", ("monthlyMenu", "3"), []) is False


class TestPlanSession:
    @pytest.mark.asyncio
    async def test_missing_plan_redirects(self, state):
        with pytest.raises(HTTPException) as info:
            await load_plan(state)
        assert info.value.detail["redirect"] == "/onboarding"

    @pytest.mark.asyncio
    async def test_old_plan_shape_is_cleared(self, state):
        await state.set_json(keys.NUTRITION_PLAN, {"targetCalories": 1800})
        await state.set_json(keys.USER_PROFILE, PROFILE)
        with pytest.raises(HTTPException):
            await load_plan(state)
        assert await state.get(keys.NUTRITION_PLAN) is None
        assert await state.get(keys.USER_PROFILE) is None

    @pytest.mark.asyncio
    async def test_store_plan_drops_menus(self, state):
        await state.set(keys.DAILY_MENU, "{}")
        profile = UserProfile.model_validate(PROFILE)
        await store_plan(state, profile, CalculateResponse.model_validate(PLAN), session_id="s1", month=2)
        assert await state.get(keys.DAILY_MENU) is None
        assert await state.get(keys.SESSION_ID) == "s1"
        assert await state.get(keys.USER_MONTH) == "2"
        assert (await load_plan(state)).calories == 1450

    @pytest.mark.asyncio
    async def test_region(self, state):
        assert await load_region(state) == "general"
        await state.set_json(keys.USER_PROFILE, PROFILE)
        assert await load_region(state) == "senegal"

    @pytest.mark.asyncio
    async def test_require_user_id(self, state):
        with pytest.raises(HTTPException) as info:
            await require_user_id(state, redirect="/onboarding")
        assert info.value.status_code == 401
        assert info.value.detail["redirect"] == "/onboarding"
        await state.set(keys.USER_ID, "u1")
        assert await require_user_id(state) == "u1"
