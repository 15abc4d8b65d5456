"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass(frozen=True)
class AuthenticatedSubject:
    """Identity resolved from a gateway header or a bearer token."""

    id: UUID
    email: Optional[str] = None
    roles: tuple[str, ...] = ()

    def has_any_role(self, required: frozenset[str]) -> bool:
        """True when no roles are required or at least one role matches."""
        if not required:
            return True
        return not required.isdisjoint(self.roles)


class IAuthProvider(Protocol):
    """Protocol for bearer-token authentication providers."""

    async def validate_token(self, token: str) -> Optional[AuthenticatedSubject]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            AuthenticatedSubject if valid, None if invalid
        """
        ...

    def create_token(self, subject: AuthenticatedSubject) -> str:
        """
        Create an authentication token for a subject.

        Args:
            subject: The subject to create a token for

        Returns:
            The generated token string
        """
        ...
