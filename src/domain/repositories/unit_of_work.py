"""Unit of Work protocol."""

from typing import Awaitable, Callable, Protocol, TypeVar

from domain.repositories.profile_repository import IProfileRepository

T = TypeVar("T")


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    profiles: IProfileRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def with_transaction(self, fn: Callable[["IUnitOfWork"], Awaitable[T]]) -> T:
        """Run ``fn`` in one atomic unit of work.

        Commits when ``fn`` returns; any exception raised by ``fn`` rolls the
        unit of work back and propagates. The transaction is released on
        every exit path.
        """
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
