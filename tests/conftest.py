"""Shared fixtures for the test suite."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from nutriplan.db import get_session
from nutriplan.main import app
from nutriplan.planner.deps import get_client_state, get_http_transport
from nutriplan.planner.state_store import MemoryClientState


# ---------------------------------------------------------------------------
# Fake meal-plan backend (no network needed)
# ---------------------------------------------------------------------------

class FakeBackend:
    """Serves canned `{success, data}` / `{error}` envelopes per (method, path)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def reply(
        self,
        method: str,
        path: str,
        data: Any = None,
        status: int = 200,
        error: str | None = None,
    ) -> None:
        body = {"error": error} if error is not None else {"success": True, "data": data}
        self.routes[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"No route {request.method} {path}"})
        status, body = route
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.removeprefix("/api") == path]

    def last_json(self, method: str, path: str) -> Any:
        return json.loads(self.calls(method, path)[-1].content)


class FakeSession:
    """Minimal stand-in for AsyncSession; raises `error` on execute when set."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.statements: list[str] = []

    async def execute(self, stmt, params=None):
        self.statements.append(str(stmt))
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def client_state():
    """In-memory state for the one browser the tests drive."""
    return MemoryClientState("test-sid", {})


@pytest.fixture()
def override_deps(backend, client_state):
    """Route backend calls to the fake and state to memory."""
    app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(backend.handler)
    app.dependency_overrides[get_client_state] = lambda: client_state
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_session():
    return FakeSession()


@pytest.fixture()
def override_session(fake_session):
    """Override the database session dependency so no real Postgres is needed."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    yield fake_session
    app.dependency_overrides.pop(get_session, None)


@pytest.fixture()
async def client(override_deps):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Backend payload builders
# ---------------------------------------------------------------------------

PORTIONS = {"starch": 6, "fruit": 3, "milk": 2, "veg": 4, "protein": 5, "fat": 3}

CALC_DATA = {
    "bmr": 1450.5,
    "tdee": 1998.2,
    "targetCalories": 1448.2,
    "roundedCalories": 1450,
    "portionBudget": PORTIONS,
    "descriptions": {"activity": "Modérément actif", "goal": "Perte de poids"},
}


def make_item(aliment: str, groupe: str = "starch", portions: float = 1, quantite: str = "1 portion") -> dict:
    return {"aliment": aliment, "groupe": groupe, "portions": portions, "quantite": quantite}


def make_meal(name: str, *items: dict) -> dict:
    return {"name": name, "items": list(items)}


def make_daily_menu(tag: str = "") -> dict[str, Any]:
    """One backend day: four meals with one or two items each."""
    return {
        "jour": tag,
        "petit_dejeuner": make_meal("Petit-déjeuner", make_item(f"Bouillie de mil{tag}", "starch", 2, "1 bol")),
        "collation": make_meal("Collation", make_item(f"Mangue{tag}", "fruit", 1, "1 fruit")),
        "dejeuner": make_meal(
            "Déjeuner",
            make_item(f"Riz{tag}", "starch", 3, "1 assiette"),
            make_item(f"Poisson{tag}", "protein", 2, "100 g"),
        ),
        "diner": make_meal("Dîner", make_item(f"Couscous{tag}", "starch", 1, "1 assiette")),
    }


def make_menu_data(region: str = "senegal") -> dict[str, Any]:
    return {
        "menu": make_daily_menu(),
        "summary": {"total_portions": PORTIONS, "nombre_aliments": 5},
        "region": region,
    }


def make_weekly_data(region: str = "senegal") -> dict[str, Any]:
    days = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
    return {
        "weeklyMenu": {day: make_daily_menu(f" {day}") for day in days},
        "summary": {"totalPortionsPerDay": PORTIONS, "totalFoodsPerDay": 5, "daysGenerated": 7},
        "region": region,
    }


def make_monthly_data(days: int = 30, region: str = "senegal") -> dict[str, Any]:
    return {
        "monthlyMenu": {str(day): make_daily_menu(f" {day}") for day in range(1, days + 1)},
        "summary": {"totalPortionsPerDay": PORTIONS, "totalFoodsPerDay": 5, "daysGenerated": days},
        "region": region,
    }


def make_session(
    session_id: str = "s1",
    month: int = 1,
    weight: float = 80,
    goal: str = "lose",
    rate: Any = 0.5,
) -> dict[str, Any]:
    return {
        "id": session_id,
        "month": month,
        "weight": weight,
        "age": 30,
        "activityLevel": "moderate",
        "goal": goal,
        "rate": rate,
        "bmr": 1450.5,
        "tdee": 1998.2,
        "targetCalories": 1448.2,
        "portionBudget": PORTIONS,
        "createdAt": "2026-01-05T10:00:00.000Z",
    }


def make_user(sessions: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "id": "u1",
        "email": "awa@example.com",
        "firstName": "Awa",
        "lastName": "Diop",
        "gender": "female",
        "height": 165,
        "country": "senegal",
        "sessions": sessions or [],
    }


def make_license(
    license_id: str = "l1",
    code: str = "NUTRI-ABCD-EFGH-2345",
    license_type: str = "QUOTA",
    name: str = "Clinique Dakar",
    is_active: bool = True,
) -> dict[str, Any]:
    return {
        "id": license_id,
        "code": code,
        "type": license_type,
        "name": name,
        "description": None,
        "menuQuota": 10 if license_type == "QUOTA" else None,
        "durationDays": 30 if license_type == "SUBSCRIPTION" else None,
        "isActive": is_active,
        "createdBy": "a1",
        "createdAt": "2026-01-01T00:00:00.000Z",
        "activations": [],
    }


PROFILE = {
    "gender": "female",
    "age": 30,
    "weight": 80,
    "height": 165,
    "activity": "moderate",
    "goal": "lose",
    "rate": "0.5",
    "country": "senegal",
}

PLAN = {
    "calories": 1450,
    "portions": PORTIONS,
    "details": {"bmr": 1450.5, "tdee": 1998.2, "targetCalories": 1448.2},
    "descriptions": {"activity": "", "goal": ""},
}
