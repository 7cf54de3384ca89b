from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from tournament_hub.tournaments.memory_store import InMemoryTournamentStore
from tournament_hub.tournaments.types import (
    DomainEvent,
    MembershipSnapshot,
    TournamentDraft,
    TournamentSnapshot,
)

UTC = timezone.utc
NOW_UTC = datetime(2026, 5, 4, 9, 30, tzinfo=UTC)


def make_draft(*, created_by: UUID | None = None, **overrides: object) -> TournamentDraft:
    draft = TournamentDraft(
        created_by=created_by or uuid4(),
        title="Spring Open",
        game="Golf",
        location="Pine Valley",
        start_at=NOW_UTC + timedelta(days=7),
        max_participants=16,
    )
    return replace(draft, **overrides)


async def seed_tournament(
    store: InMemoryTournamentStore,
    *,
    registration_code: str = "GOLF-4821QX",
    status: str | None = None,
    **draft_overrides: object,
) -> TournamentSnapshot:
    tournament = await store.insert_tournament(
        make_draft(**draft_overrides),
        registration_code=registration_code,
        created_at=NOW_UTC,
    )
    if status is not None:
        tournament = store.set_status(tournament.tournament_id, status)
    return tournament


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)


class FailingPublisher:
    def __init__(self) -> None:
        self.calls = 0

    async def publish(self, event: DomainEvent) -> None:
        self.calls += 1
        raise RuntimeError(f"broker down for {event.name}")


class YieldingStore(InMemoryTournamentStore):
    """Gives other tasks a chance to run between the capacity check and the insert."""

    async def count_memberships(self, tournament_id: UUID) -> int:
        total = await super().count_memberships(tournament_id)
        await asyncio.sleep(0)
        return total

    async def find_membership(
        self,
        *,
        tournament_id: UUID,
        user_id: UUID,
    ) -> MembershipSnapshot | None:
        await asyncio.sleep(0)
        return await super().find_membership(tournament_id=tournament_id, user_id=user_id)
