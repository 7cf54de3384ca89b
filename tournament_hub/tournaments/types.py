from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class TournamentDraft:
    created_by: UUID
    title: str
    game: str
    location: str
    start_at: datetime
    max_participants: int
    description: str | None = None
    end_at: datetime | None = None
    prize_pool: str | None = None
    rules: str | None = None


@dataclass(frozen=True, slots=True)
class TournamentSnapshot:
    tournament_id: UUID
    registration_code: str
    title: str
    description: str | None
    game: str
    location: str
    start_at: datetime
    end_at: datetime | None
    prize_pool: str | None
    rules: str | None
    max_participants: int
    status: str
    created_by: UUID
    created_at: datetime


@dataclass(frozen=True, slots=True)
class MembershipSnapshot:
    tournament_id: UUID
    user_id: UUID
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class TournamentJoinResult:
    tournament: TournamentSnapshot
    membership: MembershipSnapshot
    participants_total: int


@dataclass(frozen=True, slots=True)
class ParticipantView:
    user_id: UUID
    name: str | None
    handicap: int | None
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class TournamentDetails:
    tournament: TournamentSnapshot
    participants: tuple[ParticipantView, ...]
    viewer_joined: bool
    viewer_is_creator: bool

    @property
    def participants_total(self) -> int:
        return len(self.participants)


@dataclass(frozen=True, slots=True)
class TournamentListItem:
    tournament: TournamentSnapshot
    participants_total: int
    joined_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class UserTournaments:
    created: tuple[TournamentListItem, ...]
    joined: tuple[TournamentListItem, ...]


@dataclass(frozen=True, slots=True)
class ChatMessageSnapshot:
    message_id: UUID
    tournament_id: UUID
    user_id: UUID
    user_name: str | None
    body: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class DomainEvent:
    name: str
    occurred_at: datetime
    payload: dict[str, object] = field(default_factory=dict)
