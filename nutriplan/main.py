from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from nutriplan.auth import ADMIN_TOKEN_COOKIE
from nutriplan.config import settings
from nutriplan.db import get_session, init_schema
from nutriplan.errors import AdminSessionExpired, BackendError
from nutriplan.logging_config import configure_logging
from nutriplan.planner.account_router import router as account_router
from nutriplan.planner.admin_router import router as admin_router
from nutriplan.planner.dashboard_router import router as dashboard_router
from nutriplan.planner.license_router import router as license_router
from nutriplan.planner.onboarding_router import router as onboarding_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    if settings.client_state_backend == "database":
        await init_schema()
    yield


app = FastAPI(title="NutriPlan", version="0.1.0", lifespan=lifespan)
app.include_router(onboarding_router)
app.include_router(account_router)
app.include_router(dashboard_router)
app.include_router(license_router)
app.include_router(admin_router)


@app.exception_handler(AdminSessionExpired)
async def admin_session_expired_handler(_: Request, exc: AdminSessionExpired) -> JSONResponse:
    response = JSONResponse({"error": exc.message, "redirect": "/admin/login"}, status_code=401)
    response.delete_cookie(ADMIN_TOKEN_COOKIE, path="/")
    return response


@app.exception_handler(BackendError)
async def backend_error_handler(_: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(HTTPException)
async def http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    fields = {".".join(str(p) for p in err["loc"][1:]) or "_form": err["msg"] for err in errors}
    message = errors[0]["msg"] if errors else "Requête invalide"
    return JSONResponse({"error": message, "fields": fields}, status_code=422)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/ready")
async def readiness(session: AsyncSession = Depends(get_session)) -> JSONResponse:
    if settings.client_state_backend != "database":
        return JSONResponse({"status": "ok", "state": settings.client_state_backend})
    try:
        await session.execute(text("SELECT 1"))
    except Exception as exc:
        return JSONResponse({"status": "degraded", "error": str(exc)}, status_code=503)
    return JSONResponse({"status": "ok", "state": "database"})
