"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.repositories.errors import RepositoryError, RepositoryErrorKind
from infrastructure.database.repositories.sqlalchemy_profile_repo import (
    ENTITY,
    SQLAlchemyProfileRepository,
)

T = TypeVar("T")


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout
        self._session: Optional[AsyncSession] = None

    @property
    def profiles(self) -> SQLAlchemyProfileRepository:
        """Get profile repository."""
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return SQLAlchemyProfileRepository(self._session, timeout=self._timeout)

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            try:
                await self._session.commit()
            except SQLAlchemyError as exc:
                raise RepositoryError(
                    RepositoryErrorKind.TRANSACTION_FAILED, "Commit", ENTITY
                ) from exc

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def with_transaction(self, fn: Callable[["SQLAlchemyUnitOfWork"], Awaitable[T]]) -> T:
        """Run ``fn`` in a single transaction, committing only if it succeeds."""
        async with self:
            result = await fn(self)
            await self.commit()
            return result

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager, rolling back on error, and cleanup."""
        if self._session:
            try:
                if exc_type:
                    await self.rollback()
            finally:
                await self._session.close()
                self._session = None
