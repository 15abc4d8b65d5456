"""SQLAlchemy ORM models."""

from datetime import date, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, Enum, Index, Numeric, String, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from domain.entities.profile import (
    Community,
    HomeDistrict,
    MaritalStatus,
    Nationality,
    ProfileCreatedBy,
)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _enum_column(enum_cls: type[PyEnum], name: str) -> Enum:
    """Store enum *values* (e.g. "Never married") rather than member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class ProfileModel(Base):
    """Matrimony profile, one active row per owning account."""

    __tablename__ = "user_profiles"
    __table_args__ = (
        Index(
            "uq_user_profiles_user_id_active",
            "user_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    is_groom: Mapped[bool] = mapped_column(Boolean, nullable=False)
    profile_created_by: Mapped[ProfileCreatedBy] = mapped_column(
        _enum_column(ProfileCreatedBy, "profile_created_by"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    community: Mapped[Community] = mapped_column(
        _enum_column(Community, "community_type"), nullable=False
    )
    nationality: Mapped[Nationality] = mapped_column(
        _enum_column(Nationality, "nationality_type"), nullable=False
    )
    height: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False)
    weight: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False)
    marital_status: Mapped[MaritalStatus] = mapped_column(
        _enum_column(MaritalStatus, "marital_status_type"), nullable=False
    )
    is_physically_challenged: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    home_district: Mapped[HomeDistrict] = mapped_column(
        _enum_column(HomeDistrict, "home_district_type"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, index=True)
