"""Persistence seam for code allocation and joins.

The allocator and the join coordinator only talk to a ``TournamentStore``.
``SqlTournamentStore`` runs inside the caller's transaction; the per-tournament
lock it hands out is a row lock, so it lasts until that transaction commits or
rolls back.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.tournaments import Tournament
from tournament_hub.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from tournament_hub.db.repo.tournaments_repo import TournamentsRepo
from tournament_hub.tournaments.constants import TOURNAMENT_STATUS_UPCOMING
from tournament_hub.tournaments.errors import (
    MembershipConflictError,
    ProfileRequiredError,
    RegistrationCodeConflictError,
)
from tournament_hub.tournaments.internal import build_membership_snapshot, build_tournament_snapshot
from tournament_hub.tournaments.types import MembershipSnapshot, TournamentDraft, TournamentSnapshot

logger = structlog.get_logger(__name__)

REGISTRATION_CODE_CONSTRAINT = "uq_tournaments_registration_code"
FOREIGN_KEY_VIOLATION_SQLSTATE = "23503"


class TournamentStore(Protocol):
    async def get_tournament(self, tournament_id: UUID) -> TournamentSnapshot | None: ...

    async def find_tournament_by_code(
        self, registration_code: str
    ) -> TournamentSnapshot | None: ...

    async def insert_tournament(
        self,
        draft: TournamentDraft,
        *,
        registration_code: str,
        created_at: datetime,
    ) -> TournamentSnapshot: ...

    def lock_tournament(
        self,
        tournament_id: UUID,
    ) -> AbstractAsyncContextManager[TournamentSnapshot | None]: ...

    async def find_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
    ) -> MembershipSnapshot | None: ...

    async def count_memberships(self, tournament_id: UUID) -> int: ...

    async def insert_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
        joined_at: datetime,
    ) -> MembershipSnapshot: ...


def _is_registration_code_violation(exc: IntegrityError) -> bool:
    return REGISTRATION_CODE_CONSTRAINT in str(exc.orig)


# A missing users row is the only foreign key a caller can break: tournaments
# are locked or freshly inserted before anything references them.
def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    return getattr(exc.orig, "sqlstate", None) == FOREIGN_KEY_VIOLATION_SQLSTATE


class SqlTournamentStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_tournament(self, tournament_id: UUID) -> TournamentSnapshot | None:
        tournament = await TournamentsRepo.get_by_id(self._session, tournament_id)
        return None if tournament is None else build_tournament_snapshot(tournament)

    async def find_tournament_by_code(self, registration_code: str) -> TournamentSnapshot | None:
        tournament = await TournamentsRepo.get_by_registration_code(
            self._session,
            registration_code,
        )
        return None if tournament is None else build_tournament_snapshot(tournament)

    async def insert_tournament(
        self,
        draft: TournamentDraft,
        *,
        registration_code: str,
        created_at: datetime,
    ) -> TournamentSnapshot:
        tournament = Tournament(
            id=uuid4(),
            registration_code=registration_code,
            title=draft.title,
            description=draft.description,
            game=draft.game,
            location=draft.location,
            start_at=draft.start_at,
            end_at=draft.end_at,
            prize_pool=draft.prize_pool,
            rules=draft.rules,
            max_participants=draft.max_participants,
            status=TOURNAMENT_STATUS_UPCOMING,
            created_by=draft.created_by,
            created_at=created_at,
        )
        try:
            # Savepoint keeps the outer transaction usable after a collision.
            async with self._session.begin_nested():
                await TournamentsRepo.create(self._session, tournament=tournament)
        except IntegrityError as exc:
            if _is_foreign_key_violation(exc):
                logger.info("tournament_organizer_unknown", created_by=str(draft.created_by))
                raise ProfileRequiredError from exc
            if not _is_registration_code_violation(exc):
                raise
            logger.info("registration_code_collision", registration_code=registration_code)
            raise RegistrationCodeConflictError(registration_code) from exc
        return build_tournament_snapshot(tournament)

    @asynccontextmanager
    async def lock_tournament(
        self, tournament_id: UUID
    ) -> AsyncIterator[TournamentSnapshot | None]:
        tournament = await TournamentsRepo.get_by_id_for_update(self._session, tournament_id)
        yield None if tournament is None else build_tournament_snapshot(tournament)

    async def find_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
    ) -> MembershipSnapshot | None:
        row = await TournamentParticipantsRepo.get(
            self._session,
            tournament_id=tournament_id,
            user_id=user_id,
        )
        return None if row is None else build_membership_snapshot(row)

    async def count_memberships(self, tournament_id: UUID) -> int:
        return await TournamentParticipantsRepo.count_for_tournament(
            self._session,
            tournament_id=tournament_id,
        )

    async def insert_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
        joined_at: datetime,
    ) -> MembershipSnapshot:
        try:
            async with self._session.begin_nested():
                created = await TournamentParticipantsRepo.create_once(
                    self._session,
                    tournament_id=tournament_id,
                    user_id=user_id,
                    joined_at=joined_at,
                )
        except IntegrityError as exc:
            if not _is_foreign_key_violation(exc):
                raise
            raise ProfileRequiredError from exc
        if not created:
            raise MembershipConflictError(f"{tournament_id}:{user_id}")
        return MembershipSnapshot(tournament_id=tournament_id, user_id=user_id, joined_at=joined_at)
