"""Profile repository protocol and search filter."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Protocol
from uuid import UUID

from domain.entities.profile import (
    Community,
    HomeDistrict,
    MaritalStatus,
    Nationality,
    Profile,
    years_before,
)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PredicateOp(StrEnum):
    EQ = "eq"
    IN = "in"
    GT = "gt"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True, slots=True)
class Predicate:
    """A single backend-independent condition on a profile column."""

    field: str
    op: PredicateOp
    value: Any


@dataclass
class ProfileFilter:
    """Search criteria; every unset field imposes no condition."""

    is_groom: bool | None = None
    communities: list[Community] = field(default_factory=list)
    nationalities: list[Nationality] = field(default_factory=list)
    marital_statuses: list[MaritalStatus] = field(default_factory=list)
    home_districts: list[HomeDistrict] = field(default_factory=list)
    min_age: int | None = None
    max_age: int | None = None
    min_height: float | None = None
    max_height: float | None = None
    is_physically_challenged: bool | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None

    def to_predicates(self, today: date) -> list[Predicate]:
        """Translate the filter into a conjunctive list of predicates.

        Ages are turned into a date-of-birth range relative to ``today``:
        age >= min_age means born on or before today - min_age years, and
        age <= max_age means born after today - (max_age + 1) years.
        """
        predicates: list[Predicate] = []

        if self.is_groom is not None:
            predicates.append(Predicate("is_groom", PredicateOp.EQ, self.is_groom))

        for column, values in (
            ("community", self.communities),
            ("nationality", self.nationalities),
            ("marital_status", self.marital_statuses),
            ("home_district", self.home_districts),
        ):
            if values:
                predicates.append(Predicate(column, PredicateOp.IN, list(values)))

        if self.min_age is not None:
            predicates.append(
                Predicate("date_of_birth", PredicateOp.LTE, years_before(today, self.min_age))
            )
        if self.max_age is not None:
            oldest = years_before(today, self.max_age + 1)
            predicates.append(Predicate("date_of_birth", PredicateOp.GT, oldest))

        if self.min_height is not None:
            predicates.append(Predicate("height", PredicateOp.GTE, self.min_height))
        if self.max_height is not None:
            predicates.append(Predicate("height", PredicateOp.LTE, self.max_height))

        if self.is_physically_challenged is not None:
            predicates.append(
                Predicate(
                    "is_physically_challenged", PredicateOp.EQ, self.is_physically_challenged
                )
            )

        if self.created_after is not None:
            predicates.append(Predicate("created_at", PredicateOp.GTE, self.created_after))
        if self.created_before is not None:
            predicates.append(Predicate("created_at", PredicateOp.LTE, self.created_before))

        return predicates


def normalize_page(page: int, page_size: int) -> tuple[int, int]:
    """Coerce pagination input: page < 1 becomes 1, page_size <= 0 the default."""
    if page < 1:
        page = 1
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    return page, min(page_size, MAX_PAGE_SIZE)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


class IProfileRepository(Protocol):
    """Repository interface for Profile entities.

    Lookups never return soft-deleted profiles. Failures are raised as
    ``RepositoryError``.
    """

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile."""
        ...

    async def get_by_id(self, id: UUID) -> Profile:
        """Get a non-deleted profile by ID."""
        ...

    async def get_by_owner(self, user_id: UUID) -> Profile:
        """Get the non-deleted profile owned by an account."""
        ...

    async def update(self, profile: Profile) -> Profile:
        """Replace all mutable fields of an existing profile."""
        ...

    async def delete(self, id: UUID) -> None:
        """Soft-delete a profile."""
        ...

    async def search(
        self, filter: ProfileFilter, page: int, page_size: int
    ) -> tuple[list[Profile], int]:
        """Return one page of matching profiles and the total match count."""
        ...
