from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.tournament_messages import TournamentMessage
from tournament_hub.db.models.tournaments import Tournament
from tournament_hub.db.repo.tournament_messages_repo import TournamentMessagesRepo
from tournament_hub.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from tournament_hub.db.repo.tournaments_repo import TournamentsRepo
from tournament_hub.db.repo.users_repo import UsersRepo
from tournament_hub.tournaments.constants import (
    CHAT_HISTORY_DEFAULT_LIMIT,
    CHAT_HISTORY_MAX_LIMIT,
    CHAT_MESSAGE_MAX_LENGTH,
)
from tournament_hub.tournaments.errors import (
    ChatMessageInvalidError,
    TournamentAccessError,
    TournamentNotFoundError,
)
from tournament_hub.tournaments.events import (
    EventPublisher,
    NullEventPublisher,
    publish_safely,
    tournament_message_sent_event,
)
from tournament_hub.tournaments.types import ChatMessageSnapshot

logger = structlog.get_logger(__name__)


def normalize_message_body(raw_body: str) -> str:
    body = raw_body.strip()
    if not body or len(body) > CHAT_MESSAGE_MAX_LENGTH:
        raise ChatMessageInvalidError
    return body


async def _load_tournament_for_member(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    user_id: UUID,
) -> Tournament:
    tournament = await TournamentsRepo.get_by_id(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError
    if tournament.created_by == user_id:
        return tournament
    membership = await TournamentParticipantsRepo.get(
        session,
        tournament_id=tournament_id,
        user_id=user_id,
    )
    if membership is None:
        raise TournamentAccessError
    return tournament


async def list_messages(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    viewer_user_id: UUID,
    created_after: datetime | None = None,
    limit: int = CHAT_HISTORY_DEFAULT_LIMIT,
) -> list[ChatMessageSnapshot]:
    await _load_tournament_for_member(
        session,
        tournament_id=tournament_id,
        user_id=viewer_user_id,
    )
    rows = await TournamentMessagesRepo.list_for_tournament(
        session,
        tournament_id=tournament_id,
        created_after=created_after,
        limit=min(max(1, int(limit)), CHAT_HISTORY_MAX_LIMIT),
    )
    authors = await UsersRepo.list_by_ids(session, [row.user_id for row in rows])
    names = {author.id: author.name for author in authors}
    return [
        ChatMessageSnapshot(
            message_id=row.id,
            tournament_id=row.tournament_id,
            user_id=row.user_id,
            user_name=names.get(row.user_id),
            body=row.body,
            created_at=row.created_at,
        )
        for row in rows
    ]


async def send_message(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    user_id: UUID,
    body: str,
    now_utc: datetime,
    publisher: EventPublisher | None = None,
) -> ChatMessageSnapshot:
    normalized_body = normalize_message_body(body)
    await _load_tournament_for_member(session, tournament_id=tournament_id, user_id=user_id)

    row = await TournamentMessagesRepo.create(
        session,
        message=TournamentMessage(
            id=uuid4(),
            tournament_id=tournament_id,
            user_id=user_id,
            body=normalized_body,
            created_at=now_utc,
        ),
    )
    author = await UsersRepo.get_by_id(session, user_id)
    message = ChatMessageSnapshot(
        message_id=row.id,
        tournament_id=row.tournament_id,
        user_id=row.user_id,
        user_name=None if author is None else author.name,
        body=row.body,
        created_at=row.created_at,
    )
    logger.info(
        "tournament_message_sent",
        tournament_id=str(tournament_id),
        user_id=str(user_id),
        message_id=str(message.message_id),
    )
    await publish_safely(publisher or NullEventPublisher(), tournament_message_sent_event(message))
    return message
