"""Typed reads and writes of the plan-related client state."""

from __future__ import annotations

from pydantic import ValidationError

from nutriplan.config import settings
from nutriplan.errors import redirect_error
from nutriplan.planner import state_store as keys
from nutriplan.planner.models import AuthenticatedUser, CalculateResponse, UserProfile
from nutriplan.planner.state_store import ClientState

NO_PLAN_MESSAGE = "Veuillez compléter le questionnaire"
NOT_LOGGED_IN_MESSAGE = "Veuillez vous connecter"


async def load_plan(state: ClientState) -> CalculateResponse:
    """Current nutrition plan; redirects to onboarding when there is none.

    A stored plan in an older shape (no calories or portions) is dropped
    together with the profile it was computed from.
    """
    raw = await state.get_json(keys.NUTRITION_PLAN)
    if raw is None:
        raise redirect_error(409, NO_PLAN_MESSAGE, "/onboarding")

    plan = None
    if isinstance(raw, dict) and raw.get("calories") and raw.get("portions"):
        try:
            plan = CalculateResponse.model_validate(raw)
        except ValidationError:
            plan = None
    if plan is None:
        await state.remove(keys.NUTRITION_PLAN, keys.USER_PROFILE)
        raise redirect_error(409, NO_PLAN_MESSAGE, "/onboarding")
    return plan


async def load_profile(state: ClientState) -> UserProfile | None:
    return await state.get_model(keys.USER_PROFILE, UserProfile)


async def load_region(state: ClientState) -> str:
    """Menu region: the profile's country, else the default region."""
    profile = await load_profile(state)
    if profile is not None:
        return profile.country.value
    return settings.default_region


async def require_user_id(state: ClientState, redirect: str = "/login") -> str:
    user_id = await state.get(keys.USER_ID)
    if not user_id:
        raise redirect_error(401, NOT_LOGGED_IN_MESSAGE, redirect)
    return user_id


async def store_user(state: ClientState, user: AuthenticatedUser) -> None:
    await state.set(keys.USER_ID, user.id)
    await state.set(keys.USER_NAME, user.first_name)
    await state.set(keys.USER_FULL_NAME, user.full_name)


async def store_plan(
    state: ClientState,
    profile: UserProfile,
    plan: CalculateResponse,
    session_id: str | None = None,
    month: int | None = None,
) -> None:
    """Make `plan` the current plan; menus generated for the old one are dropped."""
    if session_id is not None:
        await state.set(keys.SESSION_ID, session_id)
    if month is not None:
        await state.set(keys.USER_MONTH, str(month))
    await state.set_json(keys.USER_PROFILE, profile)
    await state.set_json(keys.NUTRITION_PLAN, plan)
    await state.remove(*keys.MENU_KEYS)
