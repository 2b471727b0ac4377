"""Admin panel HTTP router: session, stats, users and licenses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from nutriplan.auth import remove_admin_token, require_admin_token, set_admin_token
from nutriplan.errors import redirect_error
from nutriplan.planner import state_store as keys
from nutriplan.planner.backend_client import AdminClient
from nutriplan.planner.deps import get_admin_client, get_admin_login_client, get_client_state
from nutriplan.planner.license_code import filter_licenses
from nutriplan.planner.models import AdminUser
from nutriplan.planner.state_store import ClientState
from nutriplan.planner.validations import LicenseCreateForm, validate_form

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

DEACTIVATION_REASON = "Désactivée par l'admin"

_STATUS_TO_IS_ACTIVE = {"active": "true", "inactive": "false"}


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@router.post("/login")
async def admin_login(
    response: Response,
    body: dict[str, Any] = Body(...),
    state: ClientState = Depends(get_client_state),
    client: AdminClient = Depends(get_admin_login_client),
) -> dict:
    email = str(body.get("email") or "").strip()
    password = str(body.get("password") or "")
    if not email or not password:
        raise HTTPException(status_code=422, detail={"error": "Email et mot de passe requis"})

    token, admin = await client.login(email, password)
    set_admin_token(response, token)
    await state.set_json(keys.ADMIN_USER, admin)
    logger.info("Admin %s logged in", admin.email)
    return {"admin": _dump(admin), "redirect": "/admin"}


@router.post("/logout")
async def admin_logout(response: Response, state: ClientState = Depends(get_client_state)) -> dict:
    remove_admin_token(response)
    await state.remove(keys.ADMIN_USER)
    return {"redirect": "/admin/login"}


@router.get("/me")
async def admin_me(
    state: ClientState = Depends(get_client_state),
    _: str = Depends(require_admin_token),
) -> dict:
    admin = await state.get_model(keys.ADMIN_USER, AdminUser)
    if admin is None:
        raise redirect_error(401, "Veuillez vous connecter", "/admin/login")
    return _dump(admin)


# ---------------------------------------------------------------------------
# Stats & users
# ---------------------------------------------------------------------------


@router.get("/stats")
async def admin_stats(client: AdminClient = Depends(get_admin_client)) -> dict:
    return _dump(await client.stats())


@router.get("/users")
async def admin_users(
    page: int = Query(default=1, ge=1),
    search: str | None = Query(default=None),
    client: AdminClient = Depends(get_admin_client),
) -> dict:
    return _dump(await client.list_users(page, (search or "").strip() or None))


@router.get("/users/{user_id}")
async def admin_user_detail(user_id: str, client: AdminClient = Depends(get_admin_client)) -> dict:
    return _dump(await client.user_detail(user_id))


@router.delete("/users/{user_id}")
async def admin_delete_user(user_id: str, client: AdminClient = Depends(get_admin_client)) -> dict:
    await client.delete_user(user_id)
    logger.info("Admin deleted user %s", user_id)
    return {"deleted": user_id, "redirect": "/admin/users"}


# ---------------------------------------------------------------------------
# Licenses
# ---------------------------------------------------------------------------


@router.get("/licenses")
async def admin_licenses(
    license_type: str | None = Query(default=None, alias="type", description="QUOTA | SUBSCRIPTION | all"),
    status: str | None = Query(default=None, description="active | inactive | all"),
    search: str | None = Query(default=None, description="Code or name"),
    client: AdminClient = Depends(get_admin_client),
) -> list[dict]:
    licenses = await client.list_licenses(
        license_type if license_type and license_type != "all" else None,
        _STATUS_TO_IS_ACTIVE.get(status or ""),
        (search or "").strip() or None,
    )
    # The backend may ignore filters it does not know; apply them here as well.
    return [_dump(lic) for lic in filter_licenses(licenses, license_type, status, search)]


@router.get("/licenses/{license_id}")
async def admin_license_detail(license_id: str, client: AdminClient = Depends(get_admin_client)) -> dict:
    return _dump(await client.license_detail(license_id))


@router.post("/licenses", status_code=201)
async def admin_create_license(
    body: dict[str, Any] = Body(...),
    client: AdminClient = Depends(get_admin_client),
) -> dict:
    form = validate_form(LicenseCreateForm, body)
    created = await client.create_license(form)
    logger.info("License %s created (%s)", created.code, created.type.value)
    return {"message": "Licence créée avec succès !", "license": _dump(created)}


@router.post("/licenses/{license_id}/deactivate")
async def admin_deactivate_license(license_id: str, client: AdminClient = Depends(get_admin_client)) -> dict:
    result = await client.deactivate_license(license_id, DEACTIVATION_REASON)
    return {"message": "Licence désactivée", "result": result}
