from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.users import User
from tournament_hub.db.repo.users_repo import UsersRepo

logger = structlog.get_logger(__name__)


class UserProfileError(Exception):
    code = "E_USER_PROFILE"
    message = "User profile request failed"


class UserProfileExistsError(UserProfileError):
    code = "E_USER_PROFILE_EXISTS"
    message = "A profile already exists for this account or email"


class UserProfileNotFoundError(UserProfileError):
    code = "E_USER_PROFILE_NOT_FOUND"
    message = "User profile not found"


@dataclass(frozen=True, slots=True)
class UserProfileSnapshot:
    user_id: UUID
    name: str
    email: str
    phone: str | None
    handicap: int | None
    created_at: datetime


def _as_snapshot(user: User) -> UserProfileSnapshot:
    return UserProfileSnapshot(
        user_id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        handicap=user.handicap,
        created_at=user.created_at,
    )


class UserProfilesService:
    @staticmethod
    async def create_profile(
        session: AsyncSession,
        *,
        user_id: UUID,
        name: str,
        email: str,
        phone: str | None,
        handicap: int | None,
        now_utc: datetime,
    ) -> UserProfileSnapshot:
        user = User(
            id=user_id,
            name=name.strip(),
            email=email.strip().lower(),
            phone=(phone or "").strip() or None,
            handicap=handicap,
            created_at=now_utc,
        )
        try:
            async with session.begin_nested():
                await UsersRepo.create(session, user=user)
        except IntegrityError as exc:
            logger.info("user_profile_conflict", user_id=str(user_id))
            raise UserProfileExistsError from exc

        logger.info("user_profile_created", user_id=str(user_id))
        return _as_snapshot(user)

    @staticmethod
    async def get_profile(session: AsyncSession, user_id: UUID) -> UserProfileSnapshot:
        user = await UsersRepo.get_by_id(session, user_id)
        if user is None:
            raise UserProfileNotFoundError
        return _as_snapshot(user)
