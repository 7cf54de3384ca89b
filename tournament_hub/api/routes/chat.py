from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from tournament_hub.api.routes.route_helpers import as_http_error, authenticate_user
from tournament_hub.api.routes.tournaments_models import (
    ChatMessageListResponse,
    ChatMessageRequest,
    ChatMessageResponse,
    chat_message_as_response,
)
from tournament_hub.core.config import get_settings
from tournament_hub.db.session import SessionLocal
from tournament_hub.services.automation_events import build_event_publisher
from tournament_hub.tournaments.chat import list_messages, send_message
from tournament_hub.tournaments.constants import (
    CHAT_HISTORY_DEFAULT_LIMIT,
    CHAT_HISTORY_MAX_LIMIT,
)
from tournament_hub.tournaments.errors import TournamentError
from tournament_hub.tournaments.events import BufferedEventPublisher

router = APIRouter(tags=["chat"])


@router.get("/tournaments/{tournament_id}/messages", response_model=ChatMessageListResponse)
async def list_messages_route(
    tournament_id: UUID,
    request: Request,
    after: datetime | None = Query(default=None),
    limit: int = Query(default=CHAT_HISTORY_DEFAULT_LIMIT, ge=1, le=CHAT_HISTORY_MAX_LIMIT),
) -> ChatMessageListResponse:
    user_id = authenticate_user(request)
    try:
        async with SessionLocal() as session:
            messages = await list_messages(
                session,
                tournament_id=tournament_id,
                viewer_user_id=user_id,
                created_after=after,
                limit=limit,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc
    return ChatMessageListResponse(messages=[chat_message_as_response(item) for item in messages])


@router.post(
    "/tournaments/{tournament_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message_route(
    tournament_id: UUID,
    payload: ChatMessageRequest,
    request: Request,
) -> ChatMessageResponse:
    user_id = authenticate_user(request)
    events = BufferedEventPublisher(build_event_publisher(get_settings()))
    try:
        async with SessionLocal.begin() as session:
            message = await send_message(
                session,
                tournament_id=tournament_id,
                user_id=user_id,
                body=payload.body,
                now_utc=datetime.now(timezone.utc),
                publisher=events,
            )
    except TournamentError as exc:
        raise as_http_error(exc) from exc

    await events.flush()
    return chat_message_as_response(message)
