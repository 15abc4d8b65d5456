"""Persistence-layer error taxonomy."""

from enum import StrEnum


class RepositoryErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    DUPLICATE_KEY = "duplicate_key"
    INVALID_OPERATION = "invalid_operation"
    TRANSACTION_FAILED = "transaction_failed"


class RepositoryError(Exception):
    """A store operation failed.

    ``kind`` is ``None`` when the underlying storage failure could not be
    classified (connectivity, deadline expiry, driver errors). The original
    exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        kind: RepositoryErrorKind | None,
        operation: str,
        entity: str,
        detail: str = "",
    ) -> None:
        self.kind = kind
        self.operation = operation
        self.entity = entity
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        reason = self.kind.value if self.kind else "storage failure"
        if self.__cause__ is not None and self.kind is None:
            reason = f"{reason}: {self.__cause__!r}"
        message = f"{self.operation} failed for {self.entity}: {reason}"
        if self.detail:
            message = f"{message} ({self.detail})"
        return message

    def is_kind(self, kind: RepositoryErrorKind) -> bool:
        return self.kind is kind
