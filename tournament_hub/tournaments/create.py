from __future__ import annotations

from datetime import datetime

import structlog

from tournament_hub.tournaments.allocator import RegistrationCodeAllocator
from tournament_hub.tournaments.constants import TOURNAMENT_MAX_PARTICIPANTS_LIMIT
from tournament_hub.tournaments.errors import TournamentValidationError
from tournament_hub.tournaments.events import (
    EventPublisher,
    NullEventPublisher,
    publish_safely,
    tournament_created_event,
)
from tournament_hub.tournaments.types import TournamentDraft, TournamentSnapshot

logger = structlog.get_logger(__name__)


def validate_tournament_draft(draft: TournamentDraft) -> None:
    if not draft.title.strip():
        raise TournamentValidationError("Tournament title is required")
    if not draft.game.strip():
        raise TournamentValidationError("Game is required")
    if not draft.location.strip():
        raise TournamentValidationError("Location is required")
    if not 1 <= int(draft.max_participants) <= TOURNAMENT_MAX_PARTICIPANTS_LIMIT:
        raise TournamentValidationError(
            f"Max participants must be between 1 and {TOURNAMENT_MAX_PARTICIPANTS_LIMIT}"
        )
    times = (draft.start_at,) if draft.end_at is None else (draft.start_at, draft.end_at)
    if any(value.tzinfo is None for value in times):
        raise TournamentValidationError("Tournament times must include a timezone")
    if draft.end_at is not None and draft.end_at < draft.start_at:
        raise TournamentValidationError("Tournament cannot end before it starts")


async def create_tournament(
    allocator: RegistrationCodeAllocator,
    *,
    draft: TournamentDraft,
    now_utc: datetime,
    publisher: EventPublisher | None = None,
) -> TournamentSnapshot:
    validate_tournament_draft(draft)
    tournament = await allocator.create_tournament(draft, now_utc=now_utc)
    logger.info(
        "tournament_created",
        tournament_id=str(tournament.tournament_id),
        registration_code=tournament.registration_code,
        created_by=str(tournament.created_by),
        max_participants=tournament.max_participants,
    )
    await publish_safely(
        publisher or NullEventPublisher(),
        tournament_created_event(tournament, now_utc=now_utc),
    )
    return tournament
