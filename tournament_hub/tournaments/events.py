from __future__ import annotations

from datetime import datetime
from typing import Protocol

import structlog

from tournament_hub.tournaments.constants import (
    EVENT_TOURNAMENT_CREATED,
    EVENT_TOURNAMENT_JOINED,
    EVENT_TOURNAMENT_MESSAGE_SENT,
)
from tournament_hub.tournaments.types import (
    ChatMessageSnapshot,
    DomainEvent,
    MembershipSnapshot,
    TournamentSnapshot,
)

logger = structlog.get_logger(__name__)


class EventPublisher(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


class NullEventPublisher:
    async def publish(self, event: DomainEvent) -> None:
        del event


class BufferedEventPublisher:
    """Holds events raised inside a transaction until ``flush`` is called after commit."""

    def __init__(self, target: EventPublisher) -> None:
        self._target = target
        self._pending: list[DomainEvent] = []

    @property
    def pending(self) -> tuple[DomainEvent, ...]:
        return tuple(self._pending)

    async def publish(self, event: DomainEvent) -> None:
        self._pending.append(event)

    def discard(self) -> None:
        self._pending.clear()

    async def flush(self) -> int:
        events, self._pending = self._pending, []
        for event in events:
            await publish_safely(self._target, event)
        return len(events)


async def publish_safely(publisher: EventPublisher, event: DomainEvent) -> bool:
    try:
        await publisher.publish(event)
    except Exception:
        logger.exception("domain_event_publish_failed", event_name=event.name)
        return False
    return True


def tournament_created_event(tournament: TournamentSnapshot, *, now_utc: datetime) -> DomainEvent:
    return DomainEvent(
        name=EVENT_TOURNAMENT_CREATED,
        occurred_at=now_utc,
        payload={
            "tournament_id": str(tournament.tournament_id),
            "registration_code": tournament.registration_code,
            "title": tournament.title,
            "game": tournament.game,
            "max_participants": tournament.max_participants,
            "start_at": tournament.start_at.isoformat(),
            "created_by": str(tournament.created_by),
        },
    )


def tournament_joined_event(
    membership: MembershipSnapshot,
    *,
    participants_total: int,
) -> DomainEvent:
    return DomainEvent(
        name=EVENT_TOURNAMENT_JOINED,
        occurred_at=membership.joined_at,
        payload={
            "tournament_id": str(membership.tournament_id),
            "user_id": str(membership.user_id),
            "participants_total": participants_total,
        },
    )


def tournament_message_sent_event(message: ChatMessageSnapshot) -> DomainEvent:
    return DomainEvent(
        name=EVENT_TOURNAMENT_MESSAGE_SENT,
        occurred_at=message.created_at,
        payload={
            "message_id": str(message.message_id),
            "tournament_id": str(message.tournament_id),
            "user_id": str(message.user_id),
            "user_name": message.user_name,
            "body": message.body,
        },
    )
