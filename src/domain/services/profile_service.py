"""Profile service layer with business logic."""

from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Tuple
from uuid import UUID

import structlog

from domain.entities.profile import Profile, ProfileInput, ProfileView
from domain.repositories.errors import RepositoryError, RepositoryErrorKind
from domain.repositories.profile_repository import ProfileFilter
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.errors import (
    FieldViolation,
    ServiceError,
    ServiceErrorKind,
    classify_repository_error,
)
from domain.services.profile_validator import ProfileValidator

SERVICE_NAME = "UserProfileService"


class ProfileService:
    """Service layer for profile use cases.

    Each use case checks, in order: payload validity, existence of the
    target, ownership of the target, and only then mutates. Store failures
    are translated into exactly one ``ServiceErrorKind``.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        validator: Optional[ProfileValidator] = None,
        logger: Any = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._validator = validator or ProfileValidator(today=lambda: self._clock().date())
        self._logger = logger or structlog.get_logger(__name__)

    async def create_profile(self, owner_id: Optional[UUID], payload: ProfileInput) -> ProfileView:
        """Create the single profile owned by ``owner_id``."""
        op = "CreateProfile"

        if owner_id is None or owner_id.int == 0:
            raise ServiceError.validation(
                op, SERVICE_NAME, [FieldViolation("user_id", "User ID is required")]
            )
        self._validate(op, payload)

        async def _create(uow: IUnitOfWork) -> Profile:
            try:
                await uow.profiles.get_by_owner(owner_id)
            except RepositoryError as exc:
                if not exc.is_kind(RepositoryErrorKind.NOT_FOUND):
                    self._logger.error(
                        "existing_profile_check_failed", user_id=str(owner_id), error=str(exc)
                    )
                    raise self._error(
                        ServiceErrorKind.INTERNAL, op, "failed to check for existing profile"
                    ) from exc
            else:
                raise self._error(
                    ServiceErrorKind.DUPLICATE, op, "profile already exists for this user"
                )

            profile = payload.to_entity(owner_id)
            profile.created_at = profile.updated_at = self._clock()
            try:
                return await uow.profiles.create(profile)
            except RepositoryError as exc:
                self._logger.error("profile_create_failed", user_id=str(owner_id), error=str(exc))
                if classify_repository_error(exc) is ServiceErrorKind.DUPLICATE:
                    raise self._error(
                        ServiceErrorKind.DUPLICATE, op, "profile already exists for this user"
                    ) from exc
                raise self._error(
                    ServiceErrorKind.INTERNAL, op, "failed to create profile"
                ) from exc

        created = await self._in_transaction(op, _create)
        self._audit(
            "profile_created",
            owner_id,
            created.id,
            name=created.name,
            is_groom=created.is_groom,
        )
        return self._view(created)

    async def get_profile_by_id(self, profile_id: UUID, requester_id: UUID) -> ProfileView:
        """Any authenticated caller may read a profile; access is audited."""
        op = "GetProfileByID"
        async with self._uow_factory() as uow:
            profile = await self._load(
                op, uow.profiles.get_by_id(profile_id), f"profile with ID {profile_id}"
            )
        self._audit_access(profile, requester_id)
        return self._view(profile)

    async def get_profile_by_owner(self, user_id: UUID, requester_id: UUID) -> ProfileView:
        op = "GetProfileByUserID"
        async with self._uow_factory() as uow:
            profile = await self._load(
                op, uow.profiles.get_by_owner(user_id), f"profile for user {user_id}"
            )
        self._audit_access(profile, requester_id)
        return self._view(profile)

    async def update_profile(
        self, requester_id: UUID, profile_id: UUID, payload: ProfileInput
    ) -> ProfileView:
        """Replace the profile's fields; only its owner may do so."""
        op = "UpdateProfile"
        self._validate(op, payload)

        async def _update(uow: IUnitOfWork) -> Profile:
            existing = await self._load(
                op, uow.profiles.get_by_id(profile_id), f"profile with ID {profile_id}"
            )
            if not existing.is_owned_by(requester_id):
                self._logger.warning(
                    "unauthorized_profile_update",
                    requester_id=str(requester_id),
                    profile_id=str(profile_id),
                    owner_id=str(existing.user_id),
                )
                raise self._error(
                    ServiceErrorKind.UNAUTHORIZED, op, "you can only update your own profile"
                )

            replacement = payload.to_entity(existing.user_id)
            replacement.id = existing.id
            replacement.created_at = existing.created_at
            replacement.updated_at = self._clock()
            try:
                return await uow.profiles.update(replacement)
            except RepositoryError as exc:
                self._logger.error(
                    "profile_update_failed", profile_id=str(profile_id), error=str(exc)
                )
                raise self._error(
                    ServiceErrorKind.INTERNAL, op, "failed to update profile"
                ) from exc

        updated = await self._in_transaction(op, _update)
        self._audit("profile_updated", requester_id, profile_id, name=updated.name)
        return self._view(updated)

    async def delete_profile(self, requester_id: UUID, profile_id: UUID) -> None:
        """Soft-delete the profile; only its owner may do so."""
        op = "DeleteProfile"

        async def _delete(uow: IUnitOfWork) -> Profile:
            existing = await self._load(
                op, uow.profiles.get_by_id(profile_id), f"profile with ID {profile_id}"
            )
            if not existing.is_owned_by(requester_id):
                self._logger.warning(
                    "unauthorized_profile_deletion",
                    requester_id=str(requester_id),
                    profile_id=str(profile_id),
                    owner_id=str(existing.user_id),
                )
                raise self._error(
                    ServiceErrorKind.UNAUTHORIZED, op, "you can only delete your own profile"
                )
            try:
                await uow.profiles.delete(profile_id)
            except RepositoryError as exc:
                self._logger.error(
                    "profile_delete_failed", profile_id=str(profile_id), error=str(exc)
                )
                raise self._error(
                    ServiceErrorKind.INTERNAL, op, "failed to delete profile"
                ) from exc
            existing.mark_deleted(self._clock())
            return existing

        deleted = await self._in_transaction(op, _delete)
        self._audit(
            "profile_deleted",
            requester_id,
            profile_id,
            deleted_at=deleted.deleted_at.isoformat() if deleted.deleted_at else None,
        )

    async def search_profiles(
        self, filter: ProfileFilter, page: int, page_size: int
    ) -> Tuple[List[ProfileView], int]:
        """Return one page of matching profile views and the total match count."""
        op = "SearchProfiles"
        try:
            async with self._uow_factory() as uow:
                profiles, total = await uow.profiles.search(filter, page, page_size)
        except RepositoryError as exc:
            self._logger.error("profile_search_failed", error=str(exc))
            raise self._error(ServiceErrorKind.INTERNAL, op, "failed to search profiles") from exc

        return [self._view(profile) for profile in profiles], total

    def _validate(self, operation: str, payload: ProfileInput) -> None:
        violations = self._validator.validate(payload)
        if violations:
            raise ServiceError.validation(operation, SERVICE_NAME, violations)

    async def _load(self, operation: str, lookup: Awaitable[Profile], what: str) -> Profile:
        """Await a store lookup, translating its failure into a service error."""
        try:
            return await lookup
        except RepositoryError as exc:
            kind = classify_repository_error(exc)
            if kind is ServiceErrorKind.NOT_FOUND:
                raise self._error(kind, operation, f"{what} not found") from exc
            self._logger.error("profile_lookup_failed", operation=operation, error=str(exc))
            raise self._error(
                ServiceErrorKind.INTERNAL, operation, "failed to retrieve profile"
            ) from exc

    async def _in_transaction(
        self, operation: str, fn: Callable[[IUnitOfWork], Awaitable[Any]]
    ) -> Any:
        """Run ``fn`` atomically; commit failures surface as INTERNAL."""
        try:
            return await self._uow_factory().with_transaction(fn)
        except RepositoryError as exc:
            self._logger.error("profile_transaction_failed", operation=operation, error=str(exc))
            raise self._error(ServiceErrorKind.INTERNAL, operation, "transaction failed") from exc

    def _error(self, kind: ServiceErrorKind, operation: str, detail: str) -> ServiceError:
        return ServiceError(kind, operation, SERVICE_NAME, detail)

    def _view(self, profile: Profile) -> ProfileView:
        return ProfileView.from_entity(profile, today=self._clock().date())

    def _audit_access(self, profile: Profile, requester_id: UUID) -> None:
        if profile.is_owned_by(requester_id):
            self._audit("profile_accessed_by_owner", requester_id, profile.id)
        else:
            self._audit(
                "profile_accessed", requester_id, profile.id, owner_id=str(profile.user_id)
            )

    def _audit(self, event: str, user_id: UUID, profile_id: UUID, **fields: Any) -> None:
        self._logger.info(
            event,
            module="user_profile",
            user_id=str(user_id),
            profile_id=str(profile_id),
            **fields,
        )
