from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID

import structlog

from tournament_hub.core.registration_codes import normalize_registration_code
from tournament_hub.tournaments.errors import (
    AlreadyJoinedError,
    InvalidRegistrationCodeError,
    MembershipConflictError,
    RegistrationClosedError,
    TournamentError,
    TournamentFullError,
    TournamentNotFoundError,
)
from tournament_hub.tournaments.events import (
    EventPublisher,
    NullEventPublisher,
    publish_safely,
    tournament_joined_event,
)
from tournament_hub.tournaments.internal import accepts_joins
from tournament_hub.tournaments.store import TournamentStore
from tournament_hub.tournaments.types import TournamentJoinResult

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JoinCoordinator:
    """Admits users into tournaments while keeping memberships unique and within capacity.

    The membership check, the capacity count and the insert all run while the
    store's per-tournament lock is held, so concurrent joins for the last open
    slot cannot both succeed.
    """

    def __init__(
        self,
        store: TournamentStore,
        *,
        publisher: EventPublisher | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._publisher = publisher or NullEventPublisher()
        self._clock = clock

    async def join_by_tournament(
        self, *, user_id: UUID, tournament_id: UUID
    ) -> TournamentJoinResult:
        try:
            result = await self._admit(user_id=user_id, tournament_id=tournament_id)
        except TournamentError as exc:
            logger.info(
                "tournament_join_rejected",
                tournament_id=str(tournament_id),
                user_id=str(user_id),
                reason=exc.code,
            )
            raise

        logger.info(
            "tournament_joined",
            tournament_id=str(tournament_id),
            user_id=str(user_id),
            participants_total=result.participants_total,
        )
        await publish_safely(
            self._publisher,
            tournament_joined_event(
                result.membership,
                participants_total=result.participants_total,
            ),
        )
        return result

    async def join_by_code(self, *, user_id: UUID, registration_code: str) -> TournamentJoinResult:
        code = normalize_registration_code(registration_code)
        tournament = await self._store.find_tournament_by_code(code) if code else None
        if tournament is None:
            logger.info("tournament_join_rejected", user_id=str(user_id), reason="E_INVALID_CODE")
            raise InvalidRegistrationCodeError
        if not accepts_joins(tournament):
            logger.info(
                "tournament_join_rejected",
                tournament_id=str(tournament.tournament_id),
                user_id=str(user_id),
                reason=RegistrationClosedError.code,
            )
            raise RegistrationClosedError
        return await self.join_by_tournament(
            user_id=user_id, tournament_id=tournament.tournament_id
        )

    async def _admit(self, *, user_id: UUID, tournament_id: UUID) -> TournamentJoinResult:
        async with self._store.lock_tournament(tournament_id) as tournament:
            if tournament is None:
                raise TournamentNotFoundError

            existing = await self._store.find_membership(
                tournament_id=tournament_id,
                user_id=user_id,
            )
            if existing is not None:
                raise AlreadyJoinedError
            if not accepts_joins(tournament):
                raise RegistrationClosedError

            participants_total = await self._store.count_memberships(tournament_id)
            if participants_total >= tournament.max_participants:
                raise TournamentFullError

            try:
                membership = await self._store.insert_membership(
                    tournament_id=tournament_id,
                    user_id=user_id,
                    joined_at=self._clock(),
                )
            except MembershipConflictError as exc:
                raise AlreadyJoinedError from exc

        return TournamentJoinResult(
            tournament=tournament,
            membership=membership,
            participants_total=participants_total + 1,
        )
