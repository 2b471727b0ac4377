"""Error types surfaced to the browser as `{"error": message}` responses."""

from __future__ import annotations

from fastapi import HTTPException

DEFAULT_ERROR_MESSAGE = "Une erreur est survenue"


class BackendError(Exception):
    """A call to the meal-plan backend failed.

    `status_code` is the backend's status, or 502 when it could not be reached.
    """

    def __init__(self, message: str | None = None, status_code: int = 502):
        self.message = message or DEFAULT_ERROR_MESSAGE
        self.status_code = status_code
        super().__init__(self.message)


class AdminSessionExpired(BackendError):
    """The backend rejected the admin token (HTTP 401)."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Session administrateur expirée", status_code=401)


def redirect_error(status_code: int, message: str, redirect: str) -> HTTPException:
    """HTTPException telling the browser which screen to go to instead."""
    return HTTPException(status_code=status_code, detail={"error": message, "redirect": redirect})
