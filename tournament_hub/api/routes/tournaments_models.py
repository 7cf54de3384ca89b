from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field

from tournament_hub.tournaments.constants import (
    CHAT_MESSAGE_MAX_LENGTH,
    TOURNAMENT_MAX_PARTICIPANTS_LIMIT,
)
from tournament_hub.tournaments.types import (
    ChatMessageSnapshot,
    TournamentJoinResult,
    TournamentListItem,
    TournamentSnapshot,
)


class TournamentCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=4000)
    game: str = Field(min_length=1, max_length=64)
    location: str = Field(min_length=1, max_length=256)
    start_at: AwareDatetime
    end_at: AwareDatetime | None = None
    prize_pool: str | None = Field(default=None, max_length=128)
    rules: str | None = Field(default=None, max_length=8000)
    max_participants: int = Field(gt=0, le=TOURNAMENT_MAX_PARTICIPANTS_LIMIT)


class JoinByCodeRequest(BaseModel):
    registration_code: str = Field(min_length=1, max_length=16)


class ChatMessageRequest(BaseModel):
    body: str = Field(min_length=1, max_length=CHAT_MESSAGE_MAX_LENGTH * 2)


class TournamentResponse(BaseModel):
    id: UUID
    registration_code: str
    title: str
    description: str | None = None
    game: str
    location: str
    start_at: datetime
    end_at: datetime | None = None
    prize_pool: str | None = None
    rules: str | None = None
    max_participants: int
    status: str
    created_by: UUID
    created_at: datetime


class TournamentListItemResponse(BaseModel):
    tournament: TournamentResponse
    participants_total: int = Field(ge=0)
    joined_at: datetime | None = None


class TournamentListResponse(BaseModel):
    tournaments: list[TournamentListItemResponse]


class MyTournamentsResponse(BaseModel):
    created: list[TournamentListItemResponse]
    joined: list[TournamentListItemResponse]


class ParticipantResponse(BaseModel):
    user_id: UUID
    name: str | None = None
    handicap: int | None = None
    joined_at: datetime


class TournamentDetailsResponse(BaseModel):
    tournament: TournamentResponse
    participants: list[ParticipantResponse]
    participants_total: int = Field(ge=0)
    viewer_joined: bool
    viewer_is_creator: bool


class MembershipResponse(BaseModel):
    tournament_id: UUID
    user_id: UUID
    joined_at: datetime
    participants_total: int = Field(ge=0)
    max_participants: int


class ChatMessageResponse(BaseModel):
    id: UUID
    tournament_id: UUID
    user_id: UUID
    user_name: str | None = None
    body: str
    created_at: datetime


class ChatMessageListResponse(BaseModel):
    messages: list[ChatMessageResponse]


def tournament_as_response(tournament: TournamentSnapshot) -> TournamentResponse:
    return TournamentResponse(
        id=tournament.tournament_id,
        registration_code=tournament.registration_code,
        title=tournament.title,
        description=tournament.description,
        game=tournament.game,
        location=tournament.location,
        start_at=tournament.start_at,
        end_at=tournament.end_at,
        prize_pool=tournament.prize_pool,
        rules=tournament.rules,
        max_participants=tournament.max_participants,
        status=tournament.status,
        created_by=tournament.created_by,
        created_at=tournament.created_at,
    )


def list_item_as_response(item: TournamentListItem) -> TournamentListItemResponse:
    return TournamentListItemResponse(
        tournament=tournament_as_response(item.tournament),
        participants_total=item.participants_total,
        joined_at=item.joined_at,
    )


def join_result_as_response(result: TournamentJoinResult) -> MembershipResponse:
    return MembershipResponse(
        tournament_id=result.membership.tournament_id,
        user_id=result.membership.user_id,
        joined_at=result.membership.joined_at,
        participants_total=result.participants_total,
        max_participants=result.tournament.max_participants,
    )


def chat_message_as_response(message: ChatMessageSnapshot) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.message_id,
        tournament_id=message.tournament_id,
        user_id=message.user_id,
        user_name=message.user_name,
        body=message.body,
        created_at=message.created_at,
    )
