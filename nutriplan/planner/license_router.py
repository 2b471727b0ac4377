"""License code formatting and activation for the logged-in user."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from nutriplan.errors import BackendError
from nutriplan.planner.backend_client import BackendClient
from nutriplan.planner.deps import get_backend_client, get_client_state
from nutriplan.planner.license_code import (
    INVALID_FORMAT_MESSAGE,
    clean_license_code,
    format_license_input,
    is_valid_license_code,
)
from nutriplan.planner.plan_session import require_user_id
from nutriplan.planner.state_store import ClientState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["license"])

EMPTY_CODE_MESSAGE = "Veuillez entrer un code de licence"


async def _current_license(client: BackendClient, user_id: str) -> Any:
    try:
        return await client.get_user_license(user_id)
    except BackendError as exc:
        logger.warning("Could not load license for user %s: %s", user_id, exc.message)
        return None


@router.post("/license-code/format")
async def format_code(body: dict[str, Any] = Body(...)) -> dict:
    """Auto-format a code as it is being typed."""
    formatted = format_license_input(str(body.get("code") or ""))
    return {"code": formatted, "isValid": is_valid_license_code(formatted)}


@router.get("/dashboard/profile/license")
async def profile_license(
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    user_id = await require_user_id(state)
    return {"license": await _current_license(client, user_id)}


@router.post("/dashboard/profile/license/activate")
async def activate_license(
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    user_id = await require_user_id(state)
    code = clean_license_code(str(body.get("code") or ""))
    if not code:
        raise HTTPException(status_code=422, detail={"error": EMPTY_CODE_MESSAGE})
    if not is_valid_license_code(code):
        raise HTTPException(status_code=422, detail={"error": INVALID_FORMAT_MESSAGE})

    activation = await client.activate_license(user_id, code)
    logger.info("License %s activated for user %s", code, user_id)
    return {
        "message": "Licence activée avec succès !",
        "activation": activation,
        "license": await _current_license(client, user_id),
    }
