"""HTTP client for the external meal-plan backend.

Every backend response is an envelope `{"success": bool, "data": ...}` on
success and `{"error": "message"}` on failure. The client unwraps `data`,
translates shapes where the browser needs them, and turns any failure into
a BackendError carrying the backend's message. No retries.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from nutriplan.config import Settings, settings as default_settings
from nutriplan.errors import AdminSessionExpired, BackendError
from nutriplan.planner import transforms
from nutriplan.planner.models import (
    AdminStats,
    AdminUser,
    AuthenticatedUser,
    CalculateResponse,
    DayOfWeek,
    License,
    Meal,
    MenuResponse,
    MonthlyMenuResponse,
    PortionBudget,
    SessionData,
    UserDetail,
    UserListResponse,
    UserProfile,
    WeeklyMenuResponse,
)
from nutriplan.planner.validations import IdentityForm, LicenseCreateForm, NewSessionForm, split_full_name

logger = logging.getLogger(__name__)

_REDACTED_KEYS = {"password"}


def build_async_client(
    settings: Settings | None = None,
    *,
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` pointed at the backend API."""
    settings = settings or default_settings
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=settings.backend_api_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


def _redact(payload: Any) -> Any:
    if isinstance(payload, dict):
        return {k: ("***" if k in _REDACTED_KEYS else v) for k, v in payload.items()}
    return payload


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return f"Request failed with status code {response.status_code}"


def _portion_payload(portions: PortionBudget) -> dict[str, float]:
    return portions.model_dump()


class BackendClient:
    """User-facing backend operations (calculation, menus, account, license)."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings | None = None):
        self._http = http
        self._settings = settings or default_settings

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        if self._settings.is_development:
            logger.debug("[API] %s %s %s", method, path, _redact(json))

        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            message = str(exc) or None
            logger.error("[API Error] %s %s: %s", method, path, message or type(exc).__name__)
            raise BackendError(message) from exc

        if response.is_error:
            message = _error_message(response)
            logger.error("[API Error] %s %s: %s", method, path, message)
            self._raise_for_status(response, message)

        if not response.content:
            return None
        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def _raise_for_status(self, response: httpx.Response, message: str) -> None:
        raise BackendError(message, status_code=response.status_code)

    # -- calculation & menus ------------------------------------------------

    async def calculate_calories(self, profile: UserProfile) -> CalculateResponse:
        """POST /calculate: BMR, TDEE, target calories and portion budget."""
        payload: dict[str, Any] = {
            "age": profile.age,
            "weight": profile.weight,
            "height": profile.height,
            "gender": profile.gender.value,
            "activity": profile.activity.value,
            "goal": profile.goal.value,
        }
        if profile.rate is not None:
            payload["rate"] = profile.rate.value
        data = await self._request("POST", "/calculate", json=payload)
        return transforms.transform_calorie_response(data)

    async def generate_menu(self, portions: PortionBudget, region: str | None = None) -> MenuResponse:
        """POST /generate-menu: one day of meals for the portion budget."""
        payload = {"portionBudget": _portion_payload(portions), "preferredRegion": region}
        data = await self._request("POST", "/generate-menu", json=payload)
        return transforms.transform_menu_response(data)

    async def regenerate_menu(self, portions: PortionBudget, region: str | None = None) -> MenuResponse:
        # The backend has no partial swap endpoint; a regeneration is a new menu.
        return await self.generate_menu(portions, region)

    async def generate_weekly_menu(
        self, portions: PortionBudget, region: str | None = None
    ) -> WeeklyMenuResponse:
        """POST /generate-weekly-menu: seven days, Monday to Sunday."""
        payload = {"portionBudget": _portion_payload(portions), "preferredRegion": region}
        data = await self._request("POST", "/generate-weekly-menu", json=payload)
        return transforms.transform_weekly_menu_response(data)

    async def regenerate_day(
        self, day: DayOfWeek, portions: PortionBudget, region: str | None = None
    ) -> list[Meal]:
        """POST /regenerate-day: a fresh menu for one weekday."""
        payload = {"day": day.value, "portionBudget": _portion_payload(portions), "preferredRegion": region}
        data = await self._request("POST", "/regenerate-day", json=payload)
        day_index = list(DayOfWeek).index(day)
        return transforms.transform_daily_menu_to_meals(data["menu"], day_index)

    async def generate_monthly_menu(
        self, portions: PortionBudget, region: str | None = None, days: int = 30
    ) -> MonthlyMenuResponse:
        """POST /generate-monthly-menu: `days` days of menus."""
        payload = {
            "portionBudget": _portion_payload(portions),
            "preferredRegion": region,
            "days": days,
        }
        data = await self._request("POST", "/generate-monthly-menu", json=payload)
        return transforms.transform_monthly_menu_response(data)

    async def regenerate_month_day(
        self, day: int, portions: PortionBudget, region: str | None = None
    ) -> list[Meal]:
        """POST /regenerate-month-day: a fresh menu for one day of the month."""
        payload = {"day": day, "portionBudget": _portion_payload(portions), "preferredRegion": region}
        data = await self._request("POST", "/regenerate-month-day", json=payload)
        return transforms.transform_daily_menu_to_meals(data["menu"], day)

    # -- account & sessions -------------------------------------------------

    async def register_user(
        self, identity: IdentityForm, profile: UserProfile
    ) -> tuple[AuthenticatedUser, str]:
        """POST /users: create the account and its first monthly session."""
        first_name, last_name = split_full_name(identity.full_name or "")
        payload: dict[str, Any] = {
            "firstName": first_name,
            "lastName": last_name,
            "email": identity.email,
            "password": identity.password,
            "gender": profile.gender.value,
            "height": profile.height,
            "country": profile.country.value,
            "age": profile.age,
            "weight": profile.weight,
            "activityLevel": profile.activity.value,
            "goal": profile.goal.value,
        }
        if profile.rate is not None:
            payload["rate"] = profile.rate.value
        data = await self._request("POST", "/users", json=payload)
        return AuthenticatedUser.model_validate(data["user"]), data["token"]

    async def login_user(self, email: str, password: str) -> tuple[AuthenticatedUser, str]:
        """POST /users/login: user record (sessions latest first) and token."""
        data = await self._request("POST", "/users/login", json={"email": email, "password": password})
        return AuthenticatedUser.model_validate(data["user"]), data["token"]

    async def get_user_sessions(self, user_id: str) -> list[SessionData]:
        data = await self._request("GET", f"/users/{user_id}/sessions")
        return [SessionData.model_validate(item) for item in data or []]

    async def create_session(self, user_id: str, form: NewSessionForm) -> SessionData:
        """POST /users/:id/sessions: this month's check-in."""
        data = await self._request("POST", f"/users/{user_id}/sessions", json=form.to_payload())
        return SessionData.model_validate(data)

    # -- license --------------------------------------------------------------

    async def activate_license(self, user_id: str, code: str) -> Any:
        return await self._request("POST", f"/users/{user_id}/license/activate", json={"code": code})

    async def get_user_license(self, user_id: str) -> Any:
        return await self._request("GET", f"/users/{user_id}/license")


class AdminClient(BackendClient):
    """Admin panel operations; a 401 means the admin token is no longer valid."""

    def _raise_for_status(self, response: httpx.Response, message: str) -> None:
        if response.status_code == 401:
            raise AdminSessionExpired(message)
        super()._raise_for_status(response, message)

    async def login(self, email: str, password: str) -> tuple[str, AdminUser]:
        data = await self._request("POST", "/admin/login", json={"email": email, "password": password})
        return data["token"], AdminUser.model_validate(data["admin"])

    async def stats(self) -> AdminStats:
        return AdminStats.model_validate(await self._request("GET", "/admin/stats"))

    async def list_users(self, page: int = 1, search: str | None = None) -> UserListResponse:
        params: dict[str, Any] = {"page": str(page)}
        if search:
            params["search"] = search
        return UserListResponse.model_validate(await self._request("GET", "/admin/users", params=params))

    async def user_detail(self, user_id: str) -> UserDetail:
        return UserDetail.model_validate(await self._request("GET", f"/admin/users/{user_id}"))

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/admin/users/{user_id}")

    async def list_licenses(
        self,
        license_type: str | None = None,
        is_active: str | None = None,
        search: str | None = None,
    ) -> list[License]:
        params: dict[str, Any] = {}
        if license_type:
            params["type"] = license_type
        if is_active:
            params["isActive"] = is_active
        if search:
            params["search"] = search
        data = await self._request("GET", "/admin/licenses", params=params or None)
        return [License.model_validate(item) for item in data or []]

    async def license_detail(self, license_id: str) -> License:
        return License.model_validate(await self._request("GET", f"/admin/licenses/{license_id}"))

    async def create_license(self, form: LicenseCreateForm) -> License:
        data = await self._request("POST", "/admin/licenses", json=form.to_payload())
        return License.model_validate(data)

    async def deactivate_license(self, license_id: str, reason: str | None = None) -> Any:
        return await self._request(
            "POST", f"/admin/licenses/{license_id}/deactivate", json={"reason": reason}
        )
