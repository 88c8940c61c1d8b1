from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable, Sequence

import structlog
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.core.auth import (
    ApiKeyValidator,
    AuthError,
    Role,
    StaticApiKeyValidator,
    TokenError,
    create_access_token,
    decode_access_token,
    ensure_api_key,
    extract_api_key,
)
from tutorial_portal.core.clock import Clock, ReferenceClock
from tutorial_portal.core.config import get_settings
from tutorial_portal.domain.models import User
from tutorial_portal.infrastructure.db.session import get_session
from tutorial_portal.libs.webhook_client import FulfillmentWebhookClient, WebhookClientProtocol

bearer_scheme = HTTPBearer(auto_error=False)
logger = structlog.get_logger()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> User:
    """Resolve the authenticated employee from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user_id = payload.get("sub")
    roles: Iterable[str] = payload.get("roles", [])

    if not user_id:
        raise _unauthorized("Token missing subject")

    if not roles:
        raise _forbidden("Token missing required roles")

    return User(user_id=user_id, email=payload.get("email", ""), roles=list(roles))


def require_roles(required_roles: Sequence[str]) -> Callable[[User], User]:
    """Dependency factory enforcing that the authenticated user has one of the required roles."""
    settings = get_settings()
    allowed = set(settings.allowed_roles)

    invalid_roles = [role for role in required_roles if role not in allowed]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise ValueError(f"Unsupported role(s) requested: {joined_roles}")

    required = set(required_roles)

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if not required.intersection(user.roles):
            raise _forbidden("Insufficient role privileges")
        return user

    return dependency


def get_api_key_validator() -> ApiKeyValidator:
    """Credential check for automation callers; override to plug in scoped keys."""
    return StaticApiKeyValidator()


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(None, alias="x-api-key"),
    authorization: str | None = Header(None, alias="Authorization"),
    validator: ApiKeyValidator = Depends(get_api_key_validator),  # noqa: B008
) -> None:
    """Gate for the polling/confirmation endpoints used by the automation system."""
    try:
        ensure_api_key(validator, extract_api_key(x_api_key, authorization))
    except AuthError as exc:
        await logger.awarning("api_key_rejected", path=request.url.path, reason=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=(
                "API Key inválida ou ausente. Forneça o header 'x-api-key' "
                "ou 'Authorization: Bearer <key>'"
            ),
        ) from exc


def get_clock() -> Clock:
    return ReferenceClock()


def get_webhook_client() -> WebhookClientProtocol:
    return FulfillmentWebhookClient()


def issue_smoke_token(user_id: str, *, role: Role, email: str | None = None) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(user_id, roles=[role.value], email=email)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
