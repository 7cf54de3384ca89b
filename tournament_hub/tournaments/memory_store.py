from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from uuid import UUID, uuid4

from tournament_hub.tournaments.constants import TOURNAMENT_STATUS_UPCOMING
from tournament_hub.tournaments.errors import (
    MembershipConflictError,
    ProfileRequiredError,
    RegistrationCodeConflictError,
)
from tournament_hub.tournaments.types import MembershipSnapshot, TournamentDraft, TournamentSnapshot


class InMemoryTournamentStore:
    """Process-local ``TournamentStore``; joins are serialised per tournament with asyncio locks.

    When ``registered_user_ids`` is given, inserts for users outside it fail the
    way a missing ``users`` row does in the database.
    """

    def __init__(self, *, registered_user_ids: set[UUID] | None = None) -> None:
        self._registered_user_ids = registered_user_ids
        self._tournaments: dict[UUID, TournamentSnapshot] = {}
        self._ids_by_code: dict[str, UUID] = {}
        self._memberships: dict[UUID, dict[UUID, MembershipSnapshot]] = {}
        self._locks: dict[UUID, asyncio.Lock] = {}

    async def get_tournament(self, tournament_id: UUID) -> TournamentSnapshot | None:
        return self._tournaments.get(tournament_id)

    async def find_tournament_by_code(self, registration_code: str) -> TournamentSnapshot | None:
        tournament_id = self._ids_by_code.get(registration_code)
        return None if tournament_id is None else self._tournaments[tournament_id]

    async def insert_tournament(
        self,
        draft: TournamentDraft,
        *,
        registration_code: str,
        created_at: datetime,
    ) -> TournamentSnapshot:
        self._require_registered(draft.created_by)
        if registration_code in self._ids_by_code:
            raise RegistrationCodeConflictError(registration_code)
        tournament = TournamentSnapshot(
            tournament_id=uuid4(),
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
        self._tournaments[tournament.tournament_id] = tournament
        self._ids_by_code[registration_code] = tournament.tournament_id
        self._memberships[tournament.tournament_id] = {}
        self._locks[tournament.tournament_id] = asyncio.Lock()
        return tournament

    def _require_registered(self, user_id: UUID) -> None:
        if self._registered_user_ids is not None and user_id not in self._registered_user_ids:
            raise ProfileRequiredError

    def set_status(self, tournament_id: UUID, status: str) -> TournamentSnapshot:
        updated = replace(self._tournaments[tournament_id], status=status)
        self._tournaments[tournament_id] = updated
        return updated

    @asynccontextmanager
    async def lock_tournament(
        self, tournament_id: UUID
    ) -> AsyncIterator[TournamentSnapshot | None]:
        lock = self._locks.get(tournament_id)
        if lock is None:
            yield None
            return
        async with lock:
            yield self._tournaments[tournament_id]

    async def find_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
    ) -> MembershipSnapshot | None:
        return self._memberships.get(tournament_id, {}).get(user_id)

    async def count_memberships(self, tournament_id: UUID) -> int:
        return len(self._memberships.get(tournament_id, {}))

    async def insert_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
        joined_at: datetime,
    ) -> MembershipSnapshot:
        self._require_registered(user_id)
        members = self._memberships.setdefault(tournament_id, {})
        if user_id in members:
            raise MembershipConflictError(f"{tournament_id}:{user_id}")
        membership = MembershipSnapshot(
            tournament_id=tournament_id,
            user_id=user_id,
            joined_at=joined_at,
        )
        members[user_id] = membership
        return membership
