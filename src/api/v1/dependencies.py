"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

import structlog

from core.config import settings
from domain.services.profile_service import ProfileService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(
            async_session_factory,
            timeout=settings.db_operation_timeout_seconds,
        )

    return factory


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        logger=structlog.get_logger("domain.services.profile_service"),
    )
