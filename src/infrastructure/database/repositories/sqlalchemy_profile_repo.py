"""SQLAlchemy implementation of Profile repository."""

import asyncio
import operator
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Callable
from uuid import UUID

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from domain.repositories.errors import RepositoryError, RepositoryErrorKind
from domain.repositories.profile_repository import (
    Predicate,
    PredicateOp,
    ProfileFilter,
    normalize_page,
    page_offset,
)
from infrastructure.database.models import ProfileModel

ENTITY = "UserProfile"

# SQLSTATE for unique_violation in PostgreSQL
UNIQUE_VIOLATION = "23505"

_FILTER_COLUMNS: dict[str, Any] = {
    "is_groom": ProfileModel.is_groom,
    "community": ProfileModel.community,
    "nationality": ProfileModel.nationality,
    "marital_status": ProfileModel.marital_status,
    "home_district": ProfileModel.home_district,
    "date_of_birth": ProfileModel.date_of_birth,
    "height": ProfileModel.height,
    "is_physically_challenged": ProfileModel.is_physically_challenged,
    "created_at": ProfileModel.created_at,
}

_OPERATORS: dict[PredicateOp, Callable[[Any, Any], ColumnElement[bool]]] = {
    PredicateOp.EQ: operator.eq,
    PredicateOp.GT: operator.gt,
    PredicateOp.GTE: operator.ge,
    PredicateOp.LTE: operator.le,
    PredicateOp.IN: lambda column, values: column.in_(values),
}


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether the driver reported a unique constraint violation."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    return "UNIQUE constraint failed" in str(orig)


def predicate_to_clause(predicate: Predicate) -> ColumnElement[bool]:
    """Translate a backend-independent predicate into a SQLAlchemy clause."""
    try:
        column = _FILTER_COLUMNS[predicate.field]
    except KeyError:
        raise ValueError(f"Unsupported filter field: {predicate.field}") from None
    return _OPERATORS[predicate.op](column, predicate.value)


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository.

    Every operation runs under an optional deadline (``timeout`` seconds).
    Storage failures are re-raised as ``RepositoryError`` tagged with the
    operation and entity name; task cancellation propagates unchanged.
    """

    def __init__(
        self,
        session: AsyncSession,
        timeout: float | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._session = session
        self._timeout = timeout
        self._today = today

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile."""
        op = "Create"
        if profile.user_id is None or profile.user_id.int == 0:
            raise RepositoryError(
                RepositoryErrorKind.INVALID_OPERATION, op, ENTITY, "user_id is required"
            )

        async with self._guard(op):
            model = self._to_model(profile)
            self._session.add(model)
            try:
                await self._session.flush()
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    raise RepositoryError(
                        RepositoryErrorKind.DUPLICATE_KEY,
                        op,
                        ENTITY,
                        "profile already exists for this user",
                    ) from exc
                raise
            await self._session.refresh(model)
            return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Profile:
        """Get a non-deleted profile by ID."""
        op = "GetByID"
        async with self._guard(op):
            model = await self._get_active_model(ProfileModel.id == id)
        if not model:
            raise RepositoryError(RepositoryErrorKind.NOT_FOUND, op, ENTITY, f"id: {id}")
        return self._to_entity(model)

    async def get_by_owner(self, user_id: UUID) -> Profile:
        """Get the non-deleted profile owned by an account."""
        op = "GetByUserID"
        async with self._guard(op):
            model = await self._get_active_model(ProfileModel.user_id == user_id)
        if not model:
            raise RepositoryError(
                RepositoryErrorKind.NOT_FOUND, op, ENTITY, f"user_id: {user_id}"
            )
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile:
        """Replace all mutable fields and stamp the update time."""
        op = "Update"
        if profile.id is None or profile.id.int == 0:
            raise RepositoryError(
                RepositoryErrorKind.INVALID_OPERATION, op, ENTITY, "id is required"
            )

        async with self._guard(op):
            model = await self._get_active_model(ProfileModel.id == profile.id)
            if not model:
                raise RepositoryError(
                    RepositoryErrorKind.NOT_FOUND, op, ENTITY, f"id: {profile.id}"
                )

            model.user_id = profile.user_id
            model.is_groom = profile.is_groom
            model.profile_created_by = profile.profile_created_by
            model.name = profile.name
            model.date_of_birth = profile.date_of_birth
            model.community = profile.community
            model.nationality = profile.nationality
            model.height = profile.height
            model.weight = profile.weight
            model.marital_status = profile.marital_status
            model.is_physically_challenged = profile.is_physically_challenged
            model.home_district = profile.home_district
            model.updated_at = datetime.utcnow()

            await self._session.flush()
            return self._to_entity(model)

    async def delete(self, id: UUID) -> None:
        """Soft-delete a profile by stamping ``deleted_at``."""
        op = "Delete"
        async with self._guard(op):
            now = datetime.utcnow()
            stmt = (
                update(ProfileModel)
                .where(ProfileModel.id == id, ProfileModel.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
            )
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise RepositoryError(RepositoryErrorKind.NOT_FOUND, op, ENTITY, f"id: {id}")

    async def search(
        self, filter: ProfileFilter, page: int, page_size: int
    ) -> tuple[list[Profile], int]:
        """Return one page of matching profiles and the total match count."""
        op = "SearchProfiles"
        page, page_size = normalize_page(page, page_size)
        conditions = [ProfileModel.deleted_at.is_(None)]
        conditions.extend(
            predicate_to_clause(predicate) for predicate in filter.to_predicates(self._today())
        )

        async with self._guard(op):
            count_stmt = select(func.count()).select_from(ProfileModel).where(*conditions)
            total = (await self._session.execute(count_stmt)).scalar() or 0

            stmt = (
                select(ProfileModel)
                .where(*conditions)
                .order_by(ProfileModel.created_at, ProfileModel.id)
                .offset(page_offset(page, page_size))
                .limit(page_size)
            )
            result = await self._session.execute(stmt)
            profiles = [self._to_entity(model) for model in result.scalars()]

        return profiles, total

    async def _get_active_model(self, condition: ColumnElement[bool]) -> ProfileModel | None:
        stmt = select(ProfileModel).where(condition, ProfileModel.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        """Apply the deadline and wrap storage failures for ``operation``."""
        try:
            async with asyncio.timeout(self._timeout):
                yield
        except RepositoryError:
            raise
        except TimeoutError as exc:
            raise RepositoryError(None, operation, ENTITY, "deadline exceeded") from exc
        except SQLAlchemyError as exc:
            raise RepositoryError(None, operation, ENTITY) from exc

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            user_id=model.user_id,
            is_groom=model.is_groom,
            profile_created_by=model.profile_created_by,
            name=model.name,
            date_of_birth=model.date_of_birth,
            community=model.community,
            nationality=model.nationality,
            height=float(model.height),
            weight=float(model.weight),
            marital_status=model.marital_status,
            is_physically_challenged=model.is_physically_challenged,
            home_district=model.home_district,
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            user_id=entity.user_id,
            is_groom=entity.is_groom,
            profile_created_by=entity.profile_created_by,
            name=entity.name,
            date_of_birth=entity.date_of_birth,
            community=entity.community,
            nationality=entity.nationality,
            height=entity.height,
            weight=entity.weight,
            marital_status=entity.marital_status,
            is_physically_challenged=entity.is_physically_challenged,
            home_district=entity.home_district,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            deleted_at=entity.deleted_at,
        )
