from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import APIRouter, Request, status

from tournament_hub.api.routes.route_helpers import as_http_error, authenticate_user
from tournament_hub.api.routes.tournaments_models import (
    JoinByCodeRequest,
    MembershipResponse,
    MyTournamentsResponse,
    ParticipantResponse,
    TournamentCreateRequest,
    TournamentDetailsResponse,
    TournamentListResponse,
    TournamentResponse,
    join_result_as_response,
    list_item_as_response,
    tournament_as_response,
)
from tournament_hub.core.config import get_settings
from tournament_hub.core.retry import RetryPolicy
from tournament_hub.db.session import SessionLocal
from tournament_hub.services.automation_events import build_event_publisher
from tournament_hub.tournaments.allocator import RegistrationCodeAllocator
from tournament_hub.tournaments.create import create_tournament
from tournament_hub.tournaments.errors import TournamentError
from tournament_hub.tournaments.events import BufferedEventPublisher
from tournament_hub.tournaments.join import JoinCoordinator
from tournament_hub.tournaments.queries import (
    get_tournament_details,
    list_available_tournaments,
    list_user_tournaments,
)
from tournament_hub.tournaments.store import SqlTournamentStore, TournamentStore
from tournament_hub.tournaments.types import TournamentDraft

router = APIRouter(tags=["tournaments"])
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def open_tournament_store() -> AsyncIterator[TournamentStore]:
    async with SessionLocal.begin() as session:
        yield SqlTournamentStore(session)


def _event_buffer() -> BufferedEventPublisher:
    return BufferedEventPublisher(build_event_publisher(get_settings()))


@router.post(
    "/tournaments",
    response_model=TournamentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_tournament_route(
    payload: TournamentCreateRequest,
    request: Request,
) -> TournamentResponse:
    user_id = authenticate_user(request)
    events = _event_buffer()
    draft = TournamentDraft(
        created_by=user_id,
        title=payload.title.strip(),
        description=payload.description,
        game=payload.game.strip(),
        location=payload.location.strip(),
        start_at=payload.start_at,
        end_at=payload.end_at,
        prize_pool=payload.prize_pool,
        rules=payload.rules,
        max_participants=payload.max_participants,
    )
    try:
        async with open_tournament_store() as store:
            allocator = RegistrationCodeAllocator(
                store,
                retry_policy=RetryPolicy.for_registration_codes(get_settings()),
            )
            tournament = await create_tournament(
                allocator,
                draft=draft,
                now_utc=datetime.now(timezone.utc),
                publisher=events,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc

    await events.flush()
    return tournament_as_response(tournament)


@router.get("/tournaments/available", response_model=TournamentListResponse)
async def list_available_route(request: Request) -> TournamentListResponse:
    user_id = authenticate_user(request)
    async with SessionLocal() as session:
        items = await list_available_tournaments(session, user_id=user_id)
    return TournamentListResponse(tournaments=[list_item_as_response(item) for item in items])


@router.get("/tournaments/mine", response_model=MyTournamentsResponse)
async def list_mine_route(request: Request) -> MyTournamentsResponse:
    user_id = authenticate_user(request)
    async with SessionLocal() as session:
        mine = await list_user_tournaments(session, user_id=user_id)
    return MyTournamentsResponse(
        created=[list_item_as_response(item) for item in mine.created],
        joined=[list_item_as_response(item) for item in mine.joined],
    )


@router.post(
    "/tournaments/join-by-code",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_by_code_route(payload: JoinByCodeRequest, request: Request) -> MembershipResponse:
    user_id = authenticate_user(request)
    events = _event_buffer()
    try:
        async with open_tournament_store() as store:
            result = await JoinCoordinator(store, publisher=events).join_by_code(
                user_id=user_id,
                registration_code=payload.registration_code,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc

    await events.flush()
    return join_result_as_response(result)


@router.get("/tournaments/{tournament_id}", response_model=TournamentDetailsResponse)
async def get_tournament_route(tournament_id: UUID, request: Request) -> TournamentDetailsResponse:
    user_id = authenticate_user(request)
    try:
        async with SessionLocal() as session:
            details = await get_tournament_details(
                session,
                tournament_id=tournament_id,
                viewer_user_id=user_id,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc

    return TournamentDetailsResponse(
        tournament=tournament_as_response(details.tournament),
        participants=[
            ParticipantResponse(
                user_id=item.user_id,
                name=item.name,
                handicap=item.handicap,
                joined_at=item.joined_at,
            )
            for item in details.participants
        ],
        participants_total=details.participants_total,
        viewer_joined=details.viewer_joined,
        viewer_is_creator=details.viewer_is_creator,
    )


@router.post(
    "/tournaments/{tournament_id}/join",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_tournament_route(tournament_id: UUID, request: Request) -> MembershipResponse:
    user_id = authenticate_user(request)
    events = _event_buffer()
    try:
        async with open_tournament_store() as store:
            result = await JoinCoordinator(store, publisher=events).join_by_tournament(
                user_id=user_id,
                tournament_id=tournament_id,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc

    await events.flush()
    return join_result_as_response(result)
