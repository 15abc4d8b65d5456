"""Integration tests for SQLAlchemyProfileRepository against SQLite."""

import asyncio
from datetime import date, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.entities.profile import (
    Community,
    HomeDistrict,
    MaritalStatus,
    Nationality,
    Profile,
    ProfileCreatedBy,
)
from domain.repositories.errors import RepositoryError, RepositoryErrorKind
from domain.repositories.profile_repository import Predicate, PredicateOp, ProfileFilter
from infrastructure.database.models import ProfileModel
from infrastructure.database.repositories.sqlalchemy_profile_repo import (
    SQLAlchemyProfileRepository,
    predicate_to_clause,
)
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

TODAY = date(2024, 6, 15)
BASE_TIME = datetime(2024, 1, 1, 8, 0)


def _profile(user_id: UUID | None = None, **overrides: Any) -> Profile:
    fields: dict[str, Any] = {
        "user_id": user_id or uuid4(),
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
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    fields.update(overrides)
    return Profile(**fields)


@pytest.fixture
def repo(db_session: AsyncSession) -> SQLAlchemyProfileRepository:
    return SQLAlchemyProfileRepository(db_session, today=lambda: TODAY)


class TestCreateAndGet:
    @pytest.mark.asyncio
    async def test_round_trip(self, repo: SQLAlchemyProfileRepository):
        profile = _profile(marital_status=MaritalStatus.NIKAH_DIVORCE)

        await repo.create(profile)
        loaded = await repo.get_by_id(profile.id)

        assert loaded.id == profile.id
        assert loaded.user_id == profile.user_id
        assert loaded.marital_status is MaritalStatus.NIKAH_DIVORCE
        assert loaded.date_of_birth == date(1996, 4, 12)
        assert loaded.height == pytest.approx(172.5)
        assert (await repo.get_by_owner(profile.user_id)).id == profile.id

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_found(self, repo: SQLAlchemyProfileRepository):
        with pytest.raises(RepositoryError) as exc_info:
            await repo.get_by_id(uuid4())

        assert exc_info.value.is_kind(RepositoryErrorKind.NOT_FOUND)
        assert exc_info.value.operation == "GetByID"
        assert exc_info.value.entity == "UserProfile"

    @pytest.mark.asyncio
    async def test_second_active_profile_for_owner_is_duplicate(
        self, repo: SQLAlchemyProfileRepository
    ):
        owner = uuid4()
        await repo.create(_profile(owner))

        with pytest.raises(RepositoryError) as exc_info:
            await repo.create(_profile(owner))

        assert exc_info.value.is_kind(RepositoryErrorKind.DUPLICATE_KEY)

    @pytest.mark.asyncio
    async def test_nil_owner_is_invalid(self, repo: SQLAlchemyProfileRepository):
        with pytest.raises(RepositoryError) as exc_info:
            await repo.create(_profile(UUID(int=0)))

        assert exc_info.value.is_kind(RepositoryErrorKind.INVALID_OPERATION)


class TestUpdate:
    @pytest.mark.asyncio
    async def test_replaces_fields_and_stamps_update_time(
        self, repo: SQLAlchemyProfileRepository
    ):
        profile = await repo.create(_profile())
        replacement = _profile(
            profile.user_id,
            id=profile.id,
            name="Fawas K",
            home_district=HomeDistrict.KANNUR,
        )

        updated = await repo.update(replacement)

        assert updated.name == "Fawas K"
        assert updated.home_district is HomeDistrict.KANNUR
        assert updated.created_at == BASE_TIME
        assert updated.updated_at > BASE_TIME

    @pytest.mark.asyncio
    async def test_unknown_profile_is_not_found(self, repo: SQLAlchemyProfileRepository):
        with pytest.raises(RepositoryError) as exc_info:
            await repo.update(_profile())

        assert exc_info.value.is_kind(RepositoryErrorKind.NOT_FOUND)


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_deleted_profile_is_hidden_but_row_kept(
        self, repo: SQLAlchemyProfileRepository, db_session: AsyncSession
    ):
        profile = await repo.create(_profile())

        await repo.delete(profile.id)

        with pytest.raises(RepositoryError) as exc_info:
            await repo.get_by_id(profile.id)
        assert exc_info.value.is_kind(RepositoryErrorKind.NOT_FOUND)
        with pytest.raises(RepositoryError):
            await repo.get_by_owner(profile.user_id)

        row = (
            await db_session.execute(select(ProfileModel).where(ProfileModel.id == profile.id))
        ).scalar_one()
        assert row.deleted_at is not None

    @pytest.mark.asyncio
    async def test_deleting_twice_is_not_found(self, repo: SQLAlchemyProfileRepository):
        profile = await repo.create(_profile())
        await repo.delete(profile.id)

        with pytest.raises(RepositoryError) as exc_info:
            await repo.delete(profile.id)

        assert exc_info.value.is_kind(RepositoryErrorKind.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_owner_may_create_again_after_deletion(
        self, repo: SQLAlchemyProfileRepository
    ):
        owner = uuid4()
        first = await repo.create(_profile(owner))
        await repo.delete(first.id)

        second = await repo.create(_profile(owner))

        assert (await repo.get_by_owner(owner)).id == second.id


class TestSearch:
    @pytest.mark.asyncio
    async def test_pagination(self, repo: SQLAlchemyProfileRepository):
        for i in range(25):
            await repo.create(_profile(created_at=BASE_TIME + timedelta(minutes=i)))

        first, total = await repo.search(ProfileFilter(), 1, 10)
        second, second_total = await repo.search(ProfileFilter(), 2, 10)
        third, _ = await repo.search(ProfileFilter(), 3, 10)
        page_zero, _ = await repo.search(ProfileFilter(), 0, 10)

        assert total == 25
        assert len(first) == 10
        assert len(second) == 10
        assert second_total == 25
        assert not {p.id for p in first} & {p.id for p in second}
        assert len(third) == 5
        assert [p.id for p in page_zero] == [p.id for p in first]

    @pytest.mark.asyncio
    async def test_pages_do_not_overlap(self, repo: SQLAlchemyProfileRepository):
        for i in range(6):
            await repo.create(_profile(created_at=BASE_TIME + timedelta(minutes=i)))

        page_one, _ = await repo.search(ProfileFilter(), 1, 3)
        page_two, _ = await repo.search(ProfileFilter(), 2, 3)

        assert not {p.id for p in page_one} & {p.id for p in page_two}
        assert [p.created_at for p in page_one + page_two] == sorted(
            p.created_at for p in page_one + page_two
        )

    @pytest.mark.asyncio
    async def test_excludes_deleted_profiles(self, repo: SQLAlchemyProfileRepository):
        kept = await repo.create(_profile())
        gone = await repo.create(_profile())
        await repo.delete(gone.id)

        profiles, total = await repo.search(ProfileFilter(), 1, 10)

        assert total == 1
        assert [p.id for p in profiles] == [kept.id]

    @pytest.mark.asyncio
    async def test_filters_combine(self, repo: SQLAlchemyProfileRepository):
        match = await repo.create(
            _profile(is_groom=False, community=Community.SALAFI, height=160)
        )
        await repo.create(_profile(is_groom=True, community=Community.SALAFI, height=160))
        await repo.create(_profile(is_groom=False, community=Community.SHIA, height=160))
        await repo.create(_profile(is_groom=False, community=Community.SALAFI, height=190))

        profiles, total = await repo.search(
            ProfileFilter(
                is_groom=False,
                communities=[Community.SALAFI, Community.HANAFI],
                max_height=170,
            ),
            1,
            10,
        )

        assert total == 1
        assert profiles[0].id == match.id

    @pytest.mark.asyncio
    async def test_age_range(self, repo: SQLAlchemyProfileRepository):
        # Ages on 2024-06-15: 18, 30, 31
        eighteen = await repo.create(_profile(date_of_birth=date(2006, 6, 15)))
        thirty = await repo.create(_profile(date_of_birth=date(1993, 6, 16)))
        await repo.create(_profile(date_of_birth=date(1993, 6, 15)))

        profiles, total = await repo.search(ProfileFilter(min_age=18, max_age=30), 1, 10)

        assert total == 2
        assert {p.id for p in profiles} == {eighteen.id, thirty.id}


class TestPredicateTranslation:
    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValueError):
            predicate_to_clause(Predicate("password", PredicateOp.EQ, "x"))


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_with_transaction_commits(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        profile = _profile()

        async def _create(uow: SQLAlchemyUnitOfWork) -> Profile:
            return await uow.profiles.create(profile)

        await SQLAlchemyUnitOfWork(session_factory).with_transaction(_create)

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert (await uow.profiles.get_by_id(profile.id)).id == profile.id

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, session_factory: async_sessionmaker[AsyncSession]):
        profile = _profile()

        async def _create_then_fail(uow: SQLAlchemyUnitOfWork) -> None:
            await uow.profiles.create(profile)
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            await SQLAlchemyUnitOfWork(session_factory).with_transaction(_create_then_fail)

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            with pytest.raises(RepositoryError):
                await uow.profiles.get_by_id(profile.id)

    @pytest.mark.asyncio
    async def test_repository_requires_context(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        with pytest.raises(RuntimeError):
            SQLAlchemyUnitOfWork(session_factory).profiles


async def _stalled_execute(*args: Any, **kwargs: Any) -> None:
    await asyncio.sleep(1)


class TestDeadline:
    @pytest.mark.asyncio
    async def test_slow_read_stops_at_deadline(self):
        session = MagicMock(spec=AsyncSession)
        session.execute = AsyncMock(side_effect=_stalled_execute)
        repo = SQLAlchemyProfileRepository(session, timeout=0.05, today=lambda: TODAY)

        with pytest.raises(RepositoryError) as exc_info:
            await repo.get_by_id(uuid4())

        assert exc_info.value.kind is None
        assert exc_info.value.operation == "GetByID"
        assert exc_info.value.detail == "deadline exceeded"
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.asyncio
    async def test_slow_search_stops_at_deadline(self):
        session = MagicMock(spec=AsyncSession)
        session.execute = AsyncMock(side_effect=_stalled_execute)
        repo = SQLAlchemyProfileRepository(session, timeout=0.05, today=lambda: TODAY)

        with pytest.raises(RepositoryError) as exc_info:
            await repo.search(ProfileFilter(), 1, 10)

        assert exc_info.value.kind is None
        assert exc_info.value.detail == "deadline exceeded"
