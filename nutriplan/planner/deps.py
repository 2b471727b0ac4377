"""FastAPI dependencies: backend clients and client state."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
from fastapi import Depends

from nutriplan.auth import browser_id, get_user_token, require_admin_token
from nutriplan.config import settings
from nutriplan.db import async_session
from nutriplan.errors import AdminSessionExpired
from nutriplan.planner import state_store as keys
from nutriplan.planner.backend_client import AdminClient, BackendClient, build_async_client
from nutriplan.planner.state_store import ClientState, MemoryClientState, SqlClientState


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for backend calls; None means the default network transport."""
    return None


async def get_client_state(sid: str = Depends(browser_id)) -> AsyncIterator[ClientState]:
    if settings.client_state_backend == "memory":
        yield MemoryClientState(sid)
        return
    async with async_session() as session:
        yield SqlClientState(session, sid)


async def get_backend_client(
    token: str | None = Depends(get_user_token),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> AsyncIterator[BackendClient]:
    async with build_async_client(token=token, transport=transport) as http:
        yield BackendClient(http)


async def get_admin_client(
    token: str = Depends(require_admin_token),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    state: ClientState = Depends(get_client_state),
) -> AsyncIterator[AdminClient]:
    """Admin client; a rejected token also drops the stored `adminUser`."""
    async with build_async_client(token=token, transport=transport) as http:
        try:
            yield AdminClient(http)
        except AdminSessionExpired:
            await state.remove(keys.ADMIN_USER)
            raise


async def get_admin_login_client(
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> AsyncIterator[AdminClient]:
    async with build_async_client(transport=transport) as http:
        yield AdminClient(http)
