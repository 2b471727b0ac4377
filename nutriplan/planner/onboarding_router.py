"""Onboarding questionnaire HTTP router."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from nutriplan.auth import set_user_token
from nutriplan.planner import state_store as keys
from nutriplan.planner.backend_client import BackendClient
from nutriplan.planner.deps import get_backend_client, get_client_state
from nutriplan.planner.labels import onboarding_options
from nutriplan.planner.models import ActivityLevel, Country, Goal, WeightChangeRate
from nutriplan.planner.onboarding import OnboardingState
from nutriplan.planner.plan_session import store_plan, store_user
from nutriplan.planner.state_store import ClientState
from nutriplan.planner.validations import (
    ACTIVITY_MESSAGE,
    COUNTRY_MESSAGE,
    GOAL_MESSAGE,
    RATE_MESSAGE,
    IdentityForm,
    PhysicalInfoForm,
    coerce_rate,
    validate_form,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

INCOMPLETE_MESSAGE = "Veuillez compléter toutes les informations"
STEP_INCOMPLETE_MESSAGE = "Veuillez compléter cette étape"

E = TypeVar("E", bound=Enum)


async def _load(state: ClientState) -> OnboardingState:
    return await state.get_model(keys.ONBOARDING, OnboardingState) or OnboardingState()


async def _save(state: ClientState, wizard: OnboardingState) -> dict[str, Any]:
    await state.set_json(keys.ONBOARDING, wizard)
    return wizard.view()


def _pick(enum_cls: type[E], body: dict[str, Any], field: str, message: str) -> E:
    try:
        return enum_cls(body.get(field))
    except ValueError:
        raise HTTPException(status_code=422, detail={"error": message, "fields": {field: message}})


# ---------------------------------------------------------------------------
# /onboarding
# ---------------------------------------------------------------------------


@router.get("")
async def onboarding_view(state: ClientState = Depends(get_client_state)) -> dict:
    return (await _load(state)).view()


@router.get("/options")
async def onboarding_choices() -> dict:
    return onboarding_options()


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------


@router.put("/identity")
async def put_identity(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    form = validate_form(IdentityForm, body)
    wizard = await _load(state)
    wizard.set_identity(form)
    return await _save(state, wizard)


@router.put("/physical")
async def put_physical(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    form = validate_form(PhysicalInfoForm, body)
    wizard = await _load(state)
    wizard.set_physical_info(form)
    return await _save(state, wizard)


@router.put("/activity")
async def put_activity(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    activity = _pick(ActivityLevel, body, "activity", ACTIVITY_MESSAGE)
    wizard = await _load(state)
    wizard.set_activity(activity)
    return await _save(state, wizard)


@router.put("/goal")
async def put_goal(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    goal = _pick(Goal, body, "goal", GOAL_MESSAGE)
    wizard = await _load(state)
    wizard.set_goal(goal)
    return await _save(state, wizard)


@router.put("/rate")
async def put_rate(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    body = {**body, "rate": coerce_rate(body.get("rate"))}
    rate = _pick(WeightChangeRate, body, "rate", RATE_MESSAGE)
    wizard = await _load(state)
    wizard.set_rate(rate)
    return await _save(state, wizard)


@router.put("/country")
async def put_country(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
) -> dict:
    country = _pick(Country, body, "country", COUNTRY_MESSAGE)
    wizard = await _load(state)
    wizard.set_country(country)
    return await _save(state, wizard)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


@router.post("/next")
async def onboarding_next(
    response: Response,
    body: dict[str, Any] | None = Body(default=None),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    """Advance one step; on the last step this submits the questionnaire.

    The password is not part of the stored answers, so the final call
    carries it in the body: `{"password": "..."}`.
    """
    wizard = await _load(state)
    if not wizard.can_proceed():
        raise HTTPException(status_code=422, detail={"error": STEP_INCOMPLETE_MESSAGE})
    if wizard.is_last_step():
        return await _submit(wizard, (body or {}).get("password"), response, state, client)
    wizard.next_step()
    return await _save(state, wizard)


@router.post("/back")
async def onboarding_back(state: ClientState = Depends(get_client_state)) -> dict:
    wizard = await _load(state)
    wizard.prev_step()
    return await _save(state, wizard)


@router.post("/reset")
async def onboarding_reset(state: ClientState = Depends(get_client_state)) -> dict:
    wizard = OnboardingState()
    return await _save(state, wizard)


@router.post("/submit")
async def onboarding_submit(
    response: Response,
    body: dict[str, Any] | None = Body(default=None),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    return await _submit(await _load(state), (body or {}).get("password"), response, state, client)


async def _submit(
    wizard: OnboardingState,
    password: Any,
    response: Response,
    state: ClientState,
    client: BackendClient,
) -> dict:
    profile = wizard.get_profile()
    if profile is None:
        raise HTTPException(status_code=422, detail={"error": INCOMPLETE_MESSAGE})
    identity = validate_form(IdentityForm, wizard.identity_payload(password))

    user, token = await client.register_user(identity, profile)
    set_user_token(response, token)
    await store_user(state, user)

    plan = await client.calculate_calories(profile)
    latest = user.sessions[0] if user.sessions else None
    await store_plan(
        state,
        profile,
        plan,
        session_id=latest.id if latest else None,
        month=latest.month if latest else None,
    )
    await state.remove(keys.ONBOARDING)
    logger.info("Onboarding completed for user %s", user.id)

    return {
        "message": "Votre plan a été calculé !",
        "redirect": "/dashboard",
        "plan": plan.model_dump(mode="json", by_alias=True),
    }
