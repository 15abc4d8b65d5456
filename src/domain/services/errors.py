"""Service-layer error taxonomy."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Sequence

from domain.repositories.errors import RepositoryError, RepositoryErrorKind


class ServiceErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ServiceError(Exception):
    """A use case failed with one of the service error kinds."""

    def __init__(
        self,
        kind: ServiceErrorKind,
        operation: str,
        service: str,
        detail: str = "",
        violations: Sequence[FieldViolation] = (),
    ) -> None:
        self.kind = kind
        self.operation = operation
        self.service = service
        self.detail = detail
        self.violations = tuple(violations)
        super().__init__(str(self))

    def __str__(self) -> str:
        message = f"{self.operation} failed in {self.service} service: {self.kind.value}"
        if self.violations:
            return f"{message} (validation errors)"
        if self.detail:
            return f"{message} ({self.detail})"
        return message

    @classmethod
    def validation(
        cls, operation: str, service: str, violations: Sequence[FieldViolation]
    ) -> "ServiceError":
        return cls(ServiceErrorKind.VALIDATION, operation, service, violations=violations)


_REPOSITORY_KIND_MAP: dict[RepositoryErrorKind, ServiceErrorKind] = {
    RepositoryErrorKind.NOT_FOUND: ServiceErrorKind.NOT_FOUND,
    RepositoryErrorKind.DUPLICATE_KEY: ServiceErrorKind.DUPLICATE,
}


def classify_repository_error(exc: Exception) -> ServiceErrorKind:
    """Map a store failure to exactly one service kind; unknown causes are INTERNAL."""
    if isinstance(exc, RepositoryError) and exc.kind is not None:
        return _REPOSITORY_KIND_MAP.get(exc.kind, ServiceErrorKind.INTERNAL)
    return ServiceErrorKind.INTERNAL
