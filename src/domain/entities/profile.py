"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID, uuid4

DATE_FORMAT = "%Y-%m-%d"


class ProfileCreatedBy(StrEnum):
    """Relationship of the person who created the profile."""

    SELF = "Self"
    BROTHER = "Brother"
    SISTER = "Sister"
    PARENTS = "Parents"
    FRIEND = "Friend"
    RELATIVE = "Relative"


class Community(StrEnum):
    """Religious sub-community."""

    A_MUSLIM = "A muslim"
    HANAFI = "Hanafi"
    SALAFI = "Salafi"
    SUNNI = "Sunni"
    THABLEEGH = "Thableegh"
    SHIA = "Shia"
    JAMAT_ISLAMI = "Jamat Islami"


class Nationality(StrEnum):
    INDIA = "India"
    UAE = "UAE"
    UK = "UK"
    USA = "USA"


class MaritalStatus(StrEnum):
    NEVER_MARRIED = "Never married"
    WIDOWER = "Widower"
    DIVORCED = "Divorced"
    NIKAH_DIVORCE = "Nikah Divorce"


class HomeDistrict(StrEnum):
    """The 14 districts of Kerala."""

    THIRUVANANTHAPURAM = "Thiruvananthapuram"
    KOLLAM = "Kollam"
    PATHANAMTHITTA = "Pathanamthitta"
    ALAPPUZHA = "Alappuzha"
    KOTTAYAM = "Kottayam"
    IDUKKI = "Idukki"
    ERNAKULAM = "Ernakulam"
    THRISSUR = "Thrissur"
    PALAKKAD = "Palakkad"
    MALAPPURAM = "Malappuram"
    KOZHIKODE = "Kozhikode"
    WAYANAD = "Wayanad"
    KANNUR = "Kannur"
    KASARAGOD = "Kasaragod"


def calculate_age(date_of_birth: date, today: date) -> int:
    """Whole years between ``date_of_birth`` and ``today``.

    One year is subtracted while this year's birthday has not been reached.
    """
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def years_before(today: date, years: int) -> date:
    """The calendar date ``years`` years before ``today`` (Feb 29 falls back to Feb 28)."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


@dataclass
class Profile:
    """Domain entity for a matrimony profile.

    ``id`` and ``created_at`` never change after creation. Deletion is a
    state transition recorded in ``deleted_at``; deleted profiles are never
    returned by the store.
    """

    user_id: UUID
    is_groom: bool
    profile_created_by: ProfileCreatedBy
    name: str
    date_of_birth: date
    community: Community
    nationality: Nationality
    height: float
    weight: float
    marital_status: MaritalStatus
    home_district: HomeDistrict
    is_physically_challenged: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def age(self, today: date | None = None) -> int:
        """Age derived from the date of birth; never persisted."""
        return calculate_age(self.date_of_birth, today or date.today())

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, at: datetime | None = None) -> None:
        """Transition the profile from active to deleted."""
        if self.is_deleted:
            raise ValueError(f"Profile {self.id} is already deleted")
        self.deleted_at = at or datetime.utcnow()

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.user_id == user_id


@dataclass(frozen=True)
class ProfileInput:
    """Creation/update payload as received from the caller.

    Enumerations are already parsed; ``date_of_birth`` is the raw
    ``YYYY-MM-DD`` string so the validator can report a malformed date as a
    field violation.
    """

    is_groom: bool
    profile_created_by: ProfileCreatedBy
    name: str
    date_of_birth: str
    community: Community
    nationality: Nationality
    height: float
    weight: float
    marital_status: MaritalStatus
    home_district: HomeDistrict
    is_physically_challenged: bool = False

    def parsed_date_of_birth(self) -> date:
        """Parse ``date_of_birth``; raises ValueError on a malformed date."""
        return datetime.strptime(self.date_of_birth, DATE_FORMAT).date()

    def to_entity(self, user_id: UUID) -> Profile:
        """Build a new Profile owned by ``user_id``."""
        return Profile(
            user_id=user_id,
            is_groom=self.is_groom,
            profile_created_by=self.profile_created_by,
            name=self.name,
            date_of_birth=self.parsed_date_of_birth(),
            community=self.community,
            nationality=self.nationality,
            height=self.height,
            weight=self.weight,
            marital_status=self.marital_status,
            is_physically_challenged=self.is_physically_challenged,
            home_district=self.home_district,
        )


@dataclass(frozen=True, slots=True)
class ProfileView:
    """Read-only external view of a profile with the computed age."""

    id: UUID
    user_id: UUID
    is_groom: bool
    profile_created_by: str
    name: str
    date_of_birth: str
    age: int
    community: str
    nationality: str
    height: float
    weight: float
    marital_status: str
    is_physically_challenged: bool
    home_district: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile, today: date | None = None) -> "ProfileView":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            is_groom=profile.is_groom,
            profile_created_by=profile.profile_created_by.value,
            name=profile.name,
            date_of_birth=profile.date_of_birth.strftime(DATE_FORMAT),
            age=profile.age(today),
            community=profile.community.value,
            nationality=profile.nationality.value,
            height=float(profile.height),
            weight=float(profile.weight),
            marital_status=profile.marital_status.value,
            is_physically_challenged=profile.is_physically_challenged,
            home_district=profile.home_district.value,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
