"""Dashboard HTTP router: plan summary, menus and export."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from fastapi import APIRouter, Depends, Path, Query, Response
from pydantic import BaseModel, ValidationError

from nutriplan.config import settings
from nutriplan.planner import state_store as keys
from nutriplan.planner.backend_client import BackendClient
from nutriplan.planner.deps import get_backend_client, get_client_state
from nutriplan.planner.export_pdf import render_weekly_plan_pdf
from nutriplan.planner.labels import (
    ACTIVITY_LABELS,
    COUNTRY_LABELS,
    DAY_LABELS,
    DAY_SHORT_LABELS,
    DAYS_ORDER,
    FOOD_GROUP_LABELS,
    GOAL_LABELS,
    MONTH_DAYS,
    PORTION_ROWS,
    RATE_LABELS,
)
from nutriplan.planner.models import (
    CalculateResponse,
    DayOfWeek,
    MenuResponse,
    MonthlyMenuResponse,
    UserProfile,
    WeeklyMenuResponse,
)
from nutriplan.planner.plan_session import load_plan, load_profile, load_region
from nutriplan.planner.state_store import (
    ClientState,
    load_cached_menu,
    menu_fingerprint,
    patch_cached_menu,
    store_cached_menu,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])

M = TypeVar("M", bound=BaseModel)


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)


def _portion_rows(plan: CalculateResponse) -> list[dict]:
    portions = plan.portions.model_dump()
    return [{"group": group.value, "label": label, "value": portions[group.value]} for group, label in PORTION_ROWS]


def _profile_labels(profile: UserProfile | None) -> dict | None:
    if profile is None:
        return None
    return {
        "goal": GOAL_LABELS[profile.goal],
        "activity": ACTIVITY_LABELS[profile.activity],
        "country": COUNTRY_LABELS[profile.country],
        "rate": RATE_LABELS[profile.rate] if profile.rate else None,
    }


async def _cached_or_generate(
    state: ClientState,
    key: str,
    fingerprint: str,
    max_age_seconds: float,
    model: type[M],
    generate: Callable[[], Awaitable[M]],
) -> M:
    cached = await load_cached_menu(state, key, fingerprint, max_age_seconds)
    if cached is not None:
        try:
            return model.model_validate(cached)
        except ValidationError:
            logger.warning("Discarding unreadable cached %s", key)
    menu = await generate()
    await store_cached_menu(state, key, fingerprint, menu)
    return menu


async def _weekly_menu(state: ClientState, client: BackendClient, plan: CalculateResponse) -> WeeklyMenuResponse:
    region = await load_region(state)
    return await _cached_or_generate(
        state,
        keys.WEEKLY_MENU,
        menu_fingerprint(plan.portions, region),
        settings.monthly_menu_stale_seconds,
        WeeklyMenuResponse,
        lambda: client.generate_weekly_menu(plan.portions, region),
    )


# ---------------------------------------------------------------------------
# / and /dashboard
# ---------------------------------------------------------------------------


@router.get("/")
async def home(state: ClientState = Depends(get_client_state)) -> dict:
    has_plan = await state.get(keys.NUTRITION_PLAN) is not None
    return {
        "status": "ok",
        "hasPlan": has_plan,
        "isLoggedIn": bool(await state.get(keys.USER_ID)),
        "next": "/dashboard" if has_plan else "/onboarding",
    }


@router.get("/dashboard")
async def dashboard(state: ClientState = Depends(get_client_state)) -> dict:
    plan = await load_plan(state)
    profile = await load_profile(state)
    month = await state.get(keys.USER_MONTH)
    return {
        "userName": await state.get(keys.USER_NAME),
        "userFullName": await state.get(keys.USER_FULL_NAME),
        "sessionId": await state.get(keys.SESSION_ID),
        "month": int(month) if month and month.isdigit() else None,
        "plan": _dump(plan),
        "profile": _dump(profile) if profile else None,
        "labels": _profile_labels(profile),
        "portionRows": _portion_rows(plan),
        "calendar": {
            "days": [{"value": d.value, "label": DAY_LABELS[d], "short": DAY_SHORT_LABELS[d]} for d in DAYS_ORDER],
            "monthDays": MONTH_DAYS,
        },
        "foodGroups": {group.value: label for group, label in FOOD_GROUP_LABELS.items()},
    }


# ---------------------------------------------------------------------------
# Daily menu
# ---------------------------------------------------------------------------


@router.get("/dashboard/menu/daily")
async def daily_menu(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    menu = await _cached_or_generate(
        state,
        keys.DAILY_MENU,
        menu_fingerprint(plan.portions, region),
        settings.daily_menu_stale_seconds,
        MenuResponse,
        lambda: client.generate_menu(plan.portions, region),
    )
    return _dump(menu)


@router.post("/dashboard/menu/daily/regenerate")
async def regenerate_daily_menu(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    menu = await client.regenerate_menu(plan.portions, region)
    await store_cached_menu(state, keys.DAILY_MENU, menu_fingerprint(plan.portions, region), menu)
    return _dump(menu)


# ---------------------------------------------------------------------------
# Weekly menu
# ---------------------------------------------------------------------------


@router.get("/dashboard/menu/weekly")
async def weekly_menu(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    return _dump(await _weekly_menu(state, client, plan))


@router.post("/dashboard/menu/weekly/{day}/regenerate")
async def regenerate_weekday(
    day: DayOfWeek,
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    meals = await client.regenerate_day(day, plan.portions, region)
    dumped = [_dump(meal) for meal in meals]
    await patch_cached_menu(
        state, keys.WEEKLY_MENU, menu_fingerprint(plan.portions, region), ("weeklyMenu", day.value), dumped
    )
    return {"day": day.value, "meals": dumped, "message": f"Jour {DAY_LABELS[day]} régénéré !"}


# ---------------------------------------------------------------------------
# Monthly menu
# ---------------------------------------------------------------------------


@router.get("/dashboard/menu/monthly")
async def monthly_menu(
    days: int | None = Query(default=None, ge=1, le=31, description="Days to generate"),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    days = days or settings.monthly_menu_days
    menu = await _cached_or_generate(
        state,
        keys.MONTHLY_MENU,
        menu_fingerprint(plan.portions, region, days),
        settings.monthly_menu_stale_seconds,
        MonthlyMenuResponse,
        lambda: client.generate_monthly_menu(plan.portions, region, days),
    )
    return _dump(menu)


@router.post("/dashboard/menu/monthly/regenerate")
async def regenerate_month(
    days: int | None = Query(default=None, ge=1, le=31),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    days = days or settings.monthly_menu_days
    menu = await client.generate_monthly_menu(plan.portions, region, days)
    await store_cached_menu(state, keys.MONTHLY_MENU, menu_fingerprint(plan.portions, region, days), menu)
    body = _dump(menu)
    body["message"] = "Menu du mois régénéré !"
    return body


@router.post("/dashboard/menu/monthly/{day}/regenerate")
async def regenerate_month_day(
    day: int = Path(..., ge=1, le=31),
    days: int | None = Query(default=None, ge=1, le=31),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    region = await load_region(state)
    days = days or settings.monthly_menu_days
    meals = await client.regenerate_month_day(day, plan.portions, region)
    dumped = [_dump(meal) for meal in meals]
    await patch_cached_menu(
        state,
        keys.MONTHLY_MENU,
        menu_fingerprint(plan.portions, region, days),
        ("monthlyMenu", str(day)),
        dumped,
    )
    return {"day": day, "meals": dumped, "message": f"Jour {day} régénéré !"}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@router.get("/dashboard/export")
async def export_plan(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    plan = await load_plan(state)
    profile = await load_profile(state)
    weekly = await _weekly_menu(state, client, plan)
    return {
        "userName": await state.get(keys.USER_FULL_NAME),
        "plan": _dump(plan),
        "profile": _dump(profile) if profile else None,
        "labels": _profile_labels(profile),
        "portionRows": _portion_rows(plan),
        "weeklyMenu": _dump(weekly)["weeklyMenu"],
        "pdf": "/dashboard/export.pdf",
    }


@router.get("/dashboard/export.pdf")
async def export_plan_pdf(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> Response:
    plan = await load_plan(state)
    profile = await load_profile(state)
    weekly = await _weekly_menu(state, client, plan)
    content = render_weekly_plan_pdf(plan, weekly, profile, await state.get(keys.USER_FULL_NAME))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="nutriplan-plan-hebdomadaire.pdf"'},
    )
