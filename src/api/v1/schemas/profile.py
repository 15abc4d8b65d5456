"""Pydantic schemas for Profile API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import (
    Community,
    HomeDistrict,
    MaritalStatus,
    Nationality,
    ProfileCreatedBy,
    ProfileInput,
)


class ProfileCreate(BaseModel):
    """Schema for creating or replacing a Profile.

    Only the request shape is enforced here (types, required fields and the
    closed enumerations). Business rules such as name length, age and
    height/weight ranges are reported by the service as field violations.
    """

    model_config = ConfigDict(
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "is_groom": True,
                "profile_created_by": "Self",
                "name": "Muhammed Fawas",
                "date_of_birth": "1996-04-12",
                "community": "Sunni",
                "nationality": "India",
                "height": 172.5,
                "weight": 68.0,
                "marital_status": "Never married",
                "is_physically_challenged": False,
                "home_district": "Malappuram",
            }
        }
    )

    is_groom: bool
    profile_created_by: ProfileCreatedBy
    name: str
    date_of_birth: str = Field(..., description="YYYY-MM-DD")
    community: Community
    nationality: Nationality
    height: float = Field(..., description="Height in cm")
    weight: float = Field(..., description="Weight in kg")
    marital_status: MaritalStatus
    is_physically_challenged: bool = False
    home_district: HomeDistrict

    def to_input(self) -> ProfileInput:
        return ProfileInput(
            is_groom=self.is_groom,
            profile_created_by=self.profile_created_by,
            name=self.name,
            date_of_birth=self.date_of_birth,
            community=self.community,
            nationality=self.nationality,
            height=self.height,
            weight=self.weight,
            marital_status=self.marital_status,
            is_physically_challenged=self.is_physically_challenged,
            home_district=self.home_district,
        )


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(from_attributes=True)

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


class ProfileSearchResult(BaseModel):
    """One page of search results."""

    profiles: list[ProfileResponse]
    total: int
    page: int
    page_size: int
