from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from tournament_hub.api.routes.route_helpers import (
    as_http_error,
    assert_gateway_access,
    authenticate_user,
)
from tournament_hub.db.session import SessionLocal
from tournament_hub.services.contact_messages import ContactMessagesService
from tournament_hub.services.user_profiles import (
    UserProfileError,
    UserProfileSnapshot,
    UserProfilesService,
)

router = APIRouter(tags=["users"])

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserProfileCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, max_length=32)
    handicap: int | None = Field(default=None, ge=-10, le=54)


class UserProfileResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    handicap: int | None = None
    created_at: datetime


class ContactMessageRequest(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    message: str = Field(min_length=1, max_length=4000)


class ContactMessageResponse(BaseModel):
    id: int
    status: str = "received"


def _profile_as_response(profile: UserProfileSnapshot) -> UserProfileResponse:
    return UserProfileResponse(
        id=profile.user_id,
        name=profile.name,
        email=profile.email,
        phone=profile.phone,
        handicap=profile.handicap,
        created_at=profile.created_at,
    )


@router.post("/users", response_model=UserProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile_route(
    payload: UserProfileCreateRequest,
    request: Request,
) -> UserProfileResponse:
    user_id = authenticate_user(request)
    try:
        async with SessionLocal.begin() as session:
            profile = await UserProfilesService.create_profile(
                session,
                user_id=user_id,
                name=payload.name,
                email=str(payload.email),
                phone=payload.phone,
                handicap=payload.handicap,
                now_utc=datetime.now(timezone.utc),
            )
    except UserProfileError as exc:
        raise as_http_error(exc) from exc
    return _profile_as_response(profile)


@router.get("/users/me", response_model=UserProfileResponse)
async def get_own_profile_route(request: Request) -> UserProfileResponse:
    user_id = authenticate_user(request)
    try:
        async with SessionLocal() as session:
            profile = await UserProfilesService.get_profile(session, user_id)
    except UserProfileError as exc:
        raise as_http_error(exc) from exc
    return _profile_as_response(profile)


@router.post(
    "/contact",
    response_model=ContactMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_contact_route(
    payload: ContactMessageRequest,
    request: Request,
) -> ContactMessageResponse:
    assert_gateway_access(request)
    async with SessionLocal.begin() as session:
        contact_message_id = await ContactMessagesService.submit(
            session,
            name=payload.name,
            email=str(payload.email),
            message=payload.message,
        )
    return ContactMessageResponse(id=contact_message_id)
