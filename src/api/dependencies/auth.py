"""Authentication dependencies for FastAPI."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings, get_settings
from core.exceptions import AuthenticationError, AuthorizationError, ErrorCode
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import AuthenticatedSubject, IAuthProvider

logger = structlog.get_logger(__name__)

# Identity propagation headers set by the API gateway
HEADER_USER_ID = "X-User-ID"
HEADER_USER_ROLE = "X-User-Role"

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


def subject_from_gateway_headers(
    user_id: str, user_role: str | None
) -> AuthenticatedSubject:
    """Build a subject from trusted gateway headers; malformed ids fail closed."""
    try:
        subject_id = UUID(user_id)
    except ValueError:
        logger.warning("authentication_failed", reason="invalid_user_id_header")
        raise AuthenticationError(
            message="Authentication failed",
            error_code=ErrorCode.INVALID_TOKEN,
        ) from None
    roles = (user_role,) if user_role else ()
    return AuthenticatedSubject(id=subject_id, roles=roles)


async def get_current_subject(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedSubject:
    """
    Dependency to resolve the caller's identity.

    Gateway headers take precedence when trusted; otherwise a bearer token
    is required. The resolved subject is attached to ``request.state`` and
    bound into the log context.

    Raises:
        AuthenticationError: If no identity is present or it is invalid
    """
    if settings.trust_gateway_headers and HEADER_USER_ID in request.headers:
        subject = subject_from_gateway_headers(
            request.headers[HEADER_USER_ID], request.headers.get(HEADER_USER_ROLE)
        )
        source = "gateway"
    else:
        if not credentials:
            raise AuthenticationError(
                message="Authentication required",
                error_code=ErrorCode.UNAUTHORIZED,
            )
        token_subject = await auth_provider.validate_token(credentials.credentials)
        if not token_subject:
            raise AuthenticationError(
                message="Invalid or expired token",
                error_code=ErrorCode.INVALID_TOKEN,
            )
        subject = token_subject
        source = "bearer"

    request.state.subject = subject
    structlog.contextvars.bind_contextvars(user_id=str(subject.id))
    logger.debug("request_authenticated", source=source, roles=list(subject.roles))
    return subject


class RoleRequirement:
    """Per-route role gate.

    The roles for ``route_key`` come from ``Settings.route_required_roles``
    so every protected route's policy is visible in one place. A route with
    no configured roles admits any authenticated subject.
    """

    def __init__(self, route_key: str) -> None:
        self.route_key = route_key

    async def __call__(
        self,
        subject: Annotated[AuthenticatedSubject, Depends(get_current_subject)],
        settings: Settings = Depends(get_settings),
    ) -> AuthenticatedSubject:
        required = settings.roles_for_route(self.route_key)
        if not subject.has_any_role(required):
            logger.info(
                "role_check_failed",
                route=self.route_key,
                required_roles=sorted(required),
            )
            raise AuthorizationError()
        return subject

