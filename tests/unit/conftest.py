"""Shared fixtures for unit tests."""

from datetime import date, datetime
from typing import Any, Awaitable, Callable, TypeVar
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from domain.entities.profile import (
    Community,
    HomeDistrict,
    MaritalStatus,
    Nationality,
    Profile,
    ProfileCreatedBy,
    ProfileInput,
)

T = TypeVar("T")

# Clock used by service tests
NOW = datetime(2024, 6, 15, 12, 0, 0)
TODAY = NOW.date()


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked profile repository for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def with_transaction(self, fn: Callable[["FakeUnitOfWork"], Awaitable[T]]) -> T:
        try:
            result = await fn(self)
        except BaseException:
            await self.rollback()
            raise
        await self.commit()
        return result

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_input(**overrides: Any) -> ProfileInput:
    """A valid payload; any field can be overridden."""
    fields: dict[str, Any] = {
        "is_groom": True,
        "profile_created_by": ProfileCreatedBy.SELF,
        "name": "Muhammed Fawas",
        "date_of_birth": "1996-04-12",
        "community": Community.SUNNI,
        "nationality": Nationality.INDIA,
        "height": 172.5,
        "weight": 68.0,
        "marital_status": MaritalStatus.NEVER_MARRIED,
        "home_district": HomeDistrict.MALAPPURAM,
    }
    fields.update(overrides)
    return ProfileInput(**fields)


def make_profile(user_id: UUID, **overrides: Any) -> Profile:
    """A stored profile owned by ``user_id``."""
    fields: dict[str, Any] = {
        "user_id": user_id,
        "is_groom": True,
        "profile_created_by": ProfileCreatedBy.SELF,
        "name": "Muhammed Fawas",
        "date_of_birth": date(1996, 4, 12),
        "community": Community.SUNNI,
        "nationality": Nationality.INDIA,
        "height": 172.5,
        "weight": 68.0,
        "marital_status": MaritalStatus.NEVER_MARRIED,
        "home_district": HomeDistrict.MALAPPURAM,
        "created_at": datetime(2024, 1, 1, 9, 30),
        "updated_at": datetime(2024, 1, 1, 9, 30),
    }
    fields.update(overrides)
    return Profile(**fields)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def logger() -> MagicMock:
    """Stand-in structlog logger for asserting audit events."""
    return MagicMock()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def other_user_id() -> UUID:
    """A random user ID distinct from user_id."""
    return uuid4()
