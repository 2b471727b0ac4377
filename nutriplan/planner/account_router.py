"""Login, logout, monthly check-in and progress."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from nutriplan.auth import remove_user_token, set_user_token
from nutriplan.errors import BackendError, redirect_error
from nutriplan.planner import state_store as keys
from nutriplan.planner.backend_client import BackendClient
from nutriplan.planner.deps import get_backend_client, get_client_state
from nutriplan.planner.labels import GOAL_PROGRESS_LABELS, onboarding_options
from nutriplan.planner.models import SessionData
from nutriplan.planner.plan_session import (
    NO_PLAN_MESSAGE,
    load_profile,
    require_user_id,
    store_plan,
    store_user,
)
from nutriplan.planner.state_store import ClientState
from nutriplan.planner.transforms import plan_from_session, profile_from_login
from nutriplan.planner.validations import NewSessionForm, validate_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=["account"])

USER_KEYS = (
    keys.USER_ID,
    keys.USER_NAME,
    keys.USER_FULL_NAME,
    keys.SESSION_ID,
    keys.PREVIOUS_SESSION_ID,
    keys.USER_PROFILE,
    keys.NUTRITION_PLAN,
    keys.USER_MONTH,
    *keys.MENU_KEYS,
)


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# /login, /logout
# ---------------------------------------------------------------------------


@router.post("/login")
async def login(
    response: Response,
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    """Log in; with a latest session the plan is recalculated from it."""
    email = str(body.get("email") or "").strip()
    password = str(body.get("password") or "")
    if not email or not password:
        raise HTTPException(status_code=422, detail={"error": "Email et mot de passe requis"})

    user, token = await client.login_user(email, password)
    set_user_token(response, token)
    await store_user(state, user)

    latest = user.sessions[0] if user.sessions else None
    if latest is None:
        return {"message": f"Bienvenue, {user.first_name} !", "redirect": "/new-session"}

    profile = profile_from_login(user, latest)
    plan = await client.calculate_calories(profile)
    await store_plan(state, profile, plan, session_id=latest.id, month=latest.month)
    return {
        "message": f"Bon retour, {user.first_name} !",
        "redirect": "/dashboard",
        "plan": _dump(plan),
    }


@router.post("/logout")
async def logout(response: Response, state: ClientState = Depends(get_client_state)) -> dict:
    remove_user_token(response)
    await state.remove(*USER_KEYS)
    return {"redirect": "/"}


# ---------------------------------------------------------------------------
# /new-session
# ---------------------------------------------------------------------------


@router.get("/new-session")
async def new_session_form(state: ClientState = Depends(get_client_state)) -> dict:
    """Check-in form, prefilled from the current profile when there is one."""
    await require_user_id(state)
    profile = await load_profile(state)
    prefill: dict[str, Any] = {"weight": None, "age": None, "activityLevel": None, "goal": None, "rate": None}
    if profile is not None:
        prefill = {
            "weight": profile.weight,
            "age": profile.age,
            "activityLevel": profile.activity.value,
            "goal": profile.goal.value,
            "rate": profile.rate.value if profile.rate else None,
        }
    options = onboarding_options()
    return {
        "prefill": prefill,
        "options": {name: options[name] for name in ("activity", "goal", "rate")},
    }


@router.post("/new-session")
async def create_new_session(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    user_id = await require_user_id(state)
    form = validate_form(NewSessionForm, body)
    current = await load_profile(state)
    if current is None:
        # gender, height and country only come from onboarding or a previous session
        raise redirect_error(409, NO_PLAN_MESSAGE, "/onboarding")

    session = await client.create_session(user_id, form)
    profile = current.model_copy(
        update={
            "weight": form.weight,
            "age": form.age,
            "activity": form.activity_level,
            "goal": form.goal,
            "rate": form.rate,
        }
    )
    plan = await client.calculate_calories(profile)
    await store_plan(state, profile, plan, session_id=session.id, month=session.month)
    logger.info("Session %s created for user %s (month %s)", session.id, user_id, session.month)
    return {
        "message": "Nouveau plan généré !",
        "redirect": "/dashboard",
        "session": _dump(session),
        "plan": _dump(plan),
    }


# ---------------------------------------------------------------------------
# /progress
# ---------------------------------------------------------------------------


def _weight_diff(sessions: list[SessionData]) -> float | None:
    if len(sessions) < 2:
        return None
    return round(sessions[-1].weight - sessions[0].weight, 1)


@router.get("/progress")
async def progress(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    # Coming back from viewing an older session's menu.
    previous = await state.get(keys.PREVIOUS_SESSION_ID)
    if previous:
        await state.set(keys.SESSION_ID, previous)
        await state.remove(keys.PREVIOUS_SESSION_ID)

    user_id = await require_user_id(state, redirect="/onboarding")
    try:
        sessions = await client.get_user_sessions(user_id)
    except BackendError as exc:
        logger.warning("Could not load sessions for user %s: %s", user_id, exc.message)
        sessions = []
    sessions.sort(key=lambda s: s.month)

    items = []
    for session in sessions:
        item = _dump(session)
        item["goalLabel"] = GOAL_PROGRESS_LABELS.get(session.goal, session.goal.value)
        item["targetCalories"] = round(session.target_calories)
        items.append(item)

    return {
        "userName": await state.get(keys.USER_NAME) or "",
        "sessions": items,
        "initialWeight": sessions[0].weight if sessions else None,
        "currentWeight": sessions[-1].weight if sessions else None,
        "weightDiff": _weight_diff(sessions),
    }


@router.post("/progress/{session_id}/view")
async def view_session_menu(
    session_id: str,
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    """Make an older session's plan current; /progress restores the session id."""
    user_id = await require_user_id(state, redirect="/onboarding")
    sessions = await client.get_user_sessions(user_id)
    session = next((s for s in sessions if s.id == session_id), None)
    if session is None:
        raise HTTPException(status_code=404, detail={"error": "Session introuvable"})

    plan = plan_from_session(session)
    current = await state.get(keys.SESSION_ID)
    await state.set(keys.PREVIOUS_SESSION_ID, current or "")
    await state.set(keys.SESSION_ID, session.id)
    await state.set_json(keys.NUTRITION_PLAN, plan)
    return {"redirect": "/dashboard/export", "plan": _dump(plan)}
