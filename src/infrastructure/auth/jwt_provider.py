"""JWT authentication provider implementation.

Bearer tokens are HMAC-signed with a shared secret. Payload structure:
    {
        "sub": "user-uuid",          # "user_id" is accepted as a fallback
        "email": "user@example.com", # optional
        "roles": ["user"],           # a single "role" string is also accepted
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from core.config import settings
from infrastructure.auth.provider import AuthenticatedSubject

logger = structlog.get_logger(__name__)

SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


class JWTAuthProvider:
    """JWT-based authentication provider.

    Only the configured signing algorithm is accepted; a token whose header
    declares any other algorithm is rejected before signature verification.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT signing algorithm: {algorithm}")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[AuthenticatedSubject]:
        """
        Validate a JWT token and extract the subject.

        Args:
            token: The JWT to validate

        Returns:
            AuthenticatedSubject if valid, None if invalid, expired or
            signed with an unexpected algorithm
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") != self._algorithm:
                logger.debug("token_rejected", reason="unexpected_algorithm", alg=header.get("alg"))
                return None

            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_aud": False, "require_exp": True},
            )
        except ExpiredSignatureError:
            logger.debug("token_rejected", reason="expired")
            return None
        except JWTError as exc:
            logger.debug("token_rejected", reason="invalid", error=str(exc))
            return None

        return self._subject_from_claims(payload)

    def create_token(self, subject: AuthenticatedSubject) -> str:
        """
        Create a JWT token for a subject.

        Args:
            subject: The subject to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict[str, Any] = {
            "sub": str(subject.id),
            "roles": list(subject.roles),
            "exp": expire,
        }
        if subject.email:
            payload["email"] = subject.email

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    @staticmethod
    def _subject_from_claims(payload: dict[str, Any]) -> Optional[AuthenticatedSubject]:
        raw_id = payload.get("sub") or payload.get("user_id")
        if not raw_id:
            return None
        try:
            subject_id = UUID(str(raw_id))
        except ValueError:
            logger.debug("token_rejected", reason="malformed_subject")
            return None

        roles = payload.get("roles")
        if roles is None and payload.get("role"):
            roles = [payload["role"]]
        if not isinstance(roles, (list, tuple)):
            roles = []

        return AuthenticatedSubject(
            id=subject_id,
            email=payload.get("email") or None,
            roles=tuple(str(role) for role in roles),
        )
