"""Profile API routes."""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.v1.dependencies import get_profile_service
from api.v1.schemas.common import StandardResponse
from api.v1.schemas.profile import ProfileCreate, ProfileResponse, ProfileSearchResult
from api.dependencies.auth import RoleRequirement
from core.rate_limit import limiter
from domain.entities.profile import Community, HomeDistrict, MaritalStatus, Nationality
from domain.repositories.profile_repository import (
    DEFAULT_PAGE_SIZE,
    ProfileFilter,
    normalize_page,
)
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import AuthenticatedSubject

router = APIRouter(prefix="/user", tags=["profiles"])

# Route keys looked up in Settings.route_required_roles
CREATE_ROUTE = "profiles:create"
READ_ROUTE = "profiles:read"
UPDATE_ROUTE = "profiles:update"
DELETE_ROUTE = "profiles:delete"
SEARCH_ROUTE = "profiles:search"

ProfileEnvelope = StandardResponse[ProfileResponse]


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an offset-aware timestamp to the naive UTC form stored in the DB."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@router.post(
    "/profile",
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create the caller's profile",
    responses={
        201: {"description": "Profile created successfully"},
        400: {"description": "Validation failed"},
        401: {"description": "Authentication required"},
        409: {"description": "A profile already exists for this user"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    body: ProfileCreate,
    subject: AuthenticatedSubject = Depends(RoleRequirement(CREATE_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    """Create a profile owned by the authenticated account. One per account."""
    view = await service.create_profile(subject.id, body.to_input())
    return ProfileEnvelope(
        status=True,
        message="Profile created successfully",
        data=ProfileResponse.model_validate(view),
    )


@router.get(
    "/profile",
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
    summary="Get the caller's own profile",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_own_profile(
    request: Request,
    subject: AuthenticatedSubject = Depends(RoleRequirement(READ_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    view = await service.get_profile_by_owner(subject.id, subject.id)
    return ProfileEnvelope(status=True, data=ProfileResponse.model_validate(view))


@router.get(
    "/profile/owner/{user_id}",
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
    summary="Get the profile owned by an account",
    responses={404: {"description": "Profile not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_profile_by_owner(
    request: Request,
    user_id: UUID,
    subject: AuthenticatedSubject = Depends(RoleRequirement(READ_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    view = await service.get_profile_by_owner(user_id, subject.id)
    return ProfileEnvelope(status=True, data=ProfileResponse.model_validate(view))


@router.get(
    "/profile/{profile_id}",
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
    summary="Get a profile by ID",
    responses={404: {"description": "Profile not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    profile_id: UUID,
    subject: AuthenticatedSubject = Depends(RoleRequirement(READ_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    """Any authenticated account may view a profile; access is audited."""
    view = await service.get_profile_by_id(profile_id, subject.id)
    return ProfileEnvelope(status=True, data=ProfileResponse.model_validate(view))


@router.put(
    "/profile/{profile_id}",
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
    summary="Replace a profile",
    responses={
        400: {"description": "Validation failed"},
        403: {"description": "Profile belongs to another account"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    profile_id: UUID,
    body: ProfileCreate,
    subject: AuthenticatedSubject = Depends(RoleRequirement(UPDATE_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    """Replace every field of the caller's profile."""
    view = await service.update_profile(subject.id, profile_id, body.to_input())
    return ProfileEnvelope(
        status=True,
        message="Profile updated successfully",
        data=ProfileResponse.model_validate(view),
    )


@router.delete(
    "/profile/{profile_id}",
    response_model=StandardResponse[None],
    response_model_exclude_none=True,
    summary="Delete a profile",
    responses={
        403: {"description": "Profile belongs to another account"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_profile(
    request: Request,
    profile_id: UUID,
    subject: AuthenticatedSubject = Depends(RoleRequirement(DELETE_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
) -> StandardResponse[None]:
    """Soft-delete the caller's profile."""
    await service.delete_profile(subject.id, profile_id)
    return StandardResponse[None](status=True, message="Profile deleted successfully")


@router.get(
    "/profiles/search",
    response_model=StandardResponse[ProfileSearchResult],
    response_model_exclude_none=True,
    summary="Search profiles",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def search_profiles(
    request: Request,
    subject: AuthenticatedSubject = Depends(RoleRequirement(SEARCH_ROUTE)),
    service: ProfileService = Depends(get_profile_service),
    is_groom: bool | None = Query(None),
    community: list[Community] | None = Query(None),
    nationality: list[Nationality] | None = Query(None),
    marital_status: list[MaritalStatus] | None = Query(None),
    home_district: list[HomeDistrict] | None = Query(None),
    min_age: int | None = Query(None, ge=0),
    max_age: int | None = Query(None, ge=0),
    min_height: float | None = Query(None, gt=0, allow_inf_nan=False),
    max_height: float | None = Query(None, gt=0, allow_inf_nan=False),
    is_physically_challenged: bool | None = Query(None),
    created_after: datetime | None = Query(None),
    created_before: datetime | None = Query(None),
    page: int = Query(1, description="Values below 1 are treated as 1"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description="Values of 0 or less use the default"),
) -> StandardResponse[ProfileSearchResult]:
    """Filter profiles; every omitted parameter imposes no condition."""
    profile_filter = ProfileFilter(
        is_groom=is_groom,
        communities=community or [],
        nationalities=nationality or [],
        marital_statuses=marital_status or [],
        home_districts=home_district or [],
        min_age=min_age,
        max_age=max_age,
        min_height=min_height,
        max_height=max_height,
        is_physically_challenged=is_physically_challenged,
        created_after=as_naive_utc(created_after),
        created_before=as_naive_utc(created_before),
    )
    views, total = await service.search_profiles(profile_filter, page, page_size)
    page, page_size = normalize_page(page, page_size)
    return StandardResponse[ProfileSearchResult](
        status=True,
        data=ProfileSearchResult(
            profiles=[ProfileResponse.model_validate(view) for view in views],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )
