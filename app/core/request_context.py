from enum import Enum
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.common.constants import ROLE_PERMISSIONS
from app.core.errors import ErrorCode
from app.core.exceptions import AccessDenied
from app.core.messages import ErrorMessage
from app.utils.response import ApiResponse, ErrorDetail

PUBLIC_PATH_PREFIXES = ("/api/v1/health", "/api/v1/docs", "/api/v1/redoc", "/api/v1/openapi.json")


class AuthStatus(str, Enum):
    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"


class UserContext(BaseModel):
    auth_status: AuthStatus
    user_id: Optional[str] = None
    type: Optional[str] = None
    session_id: Optional[str] = None


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ApiResponse(
            success=False,
            statusCode=401,
            message=ErrorMessage.AUTH_CONTEXT_MISSING,
            data=None,
            errors=[
                ErrorDetail(
                    code=ErrorCode.ACCESS_TOKEN_REQUIRED,
                    message=message,
                )
            ],
        ).model_dump(),
    )


class GatewayAuthContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(PUBLIC_PATH_PREFIXES):
            return await call_next(request)

        auth_status = request.headers.get("AuthStatus")
        user_id = request.headers.get("UserId")
        user_type = request.headers.get("UserType")
        session_id = request.headers.get("X-Session-Id")

        # Enforce gateway presence
        if not auth_status:
            return _unauthorized("Request must pass through gateway")

        if auth_status not in AuthStatus.__members__:
            return _unauthorized("Invalid AuthStatus header")

        request.state.user_context = UserContext(
            auth_status=AuthStatus[auth_status],
            user_id=user_id,
            type=user_type,
            session_id=session_id,
        )

        return await call_next(request)


def _get_user_context(request: Request) -> UserContext:
    user_ctx = getattr(request.state, "user_context", None)

    if not user_ctx:
        raise AccessDenied(ErrorMessage.AUTH_CONTEXT_MISSING)

    return user_ctx


def is_valid_user(request: Request) -> None:
    user_ctx = _get_user_context(request)

    if user_ctx.auth_status != AuthStatus.AUTHENTICATED:
        raise AccessDenied(ErrorMessage.USER_NOT_AUTHENTICATED)

    if not user_ctx.user_id:
        raise AccessDenied(ErrorMessage.USER_ID_MISSING)


def has_permission(user_ctx: UserContext, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(user_ctx.type or "", frozenset())


def require_permission(permission: str):
    """Route dependency: authenticated user whose role grants ``permission``."""

    def dependency(request: Request) -> UserContext:
        is_valid_user(request)
        user_ctx = _get_user_context(request)
        if not has_permission(user_ctx, permission):
            raise AccessDenied(ErrorMessage.PERMISSION_REQUIRED)
        return user_ctx

    return dependency


def get_idempotency_key(request: Request) -> Optional[str]:
    idempotency_key = request.headers.get("Idempotency-Key")
    if not idempotency_key:
        return None

    idempotency_key = idempotency_key.strip()
    return idempotency_key or None
