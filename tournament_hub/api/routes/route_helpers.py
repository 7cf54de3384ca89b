from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, Request

from tournament_hub.core.config import get_settings
from tournament_hub.services.request_auth import (
    extract_client_ip,
    extract_user_id,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)
from tournament_hub.services.user_profiles import (
    UserProfileError,
    UserProfileExistsError,
    UserProfileNotFoundError,
)
from tournament_hub.tournaments.errors import (
    AlreadyJoinedError,
    ChatMessageInvalidError,
    InvalidRegistrationCodeError,
    ProfileRequiredError,
    RegistrationClosedError,
    RegistrationCodeExhaustedError,
    TournamentAccessError,
    TournamentError,
    TournamentFullError,
    TournamentNotFoundError,
    TournamentValidationError,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES: dict[type[Exception], int] = {
    AlreadyJoinedError: 409,
    TournamentFullError: 409,
    RegistrationClosedError: 409,
    ProfileRequiredError: 409,
    InvalidRegistrationCodeError: 404,
    TournamentNotFoundError: 404,
    TournamentAccessError: 403,
    TournamentValidationError: 422,
    ChatMessageInvalidError: 422,
    RegistrationCodeExhaustedError: 503,
    UserProfileExistsError: 409,
    UserProfileNotFoundError: 404,
}


def forbidden() -> HTTPException:
    return HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def assert_gateway_access(request: Request) -> str | None:
    settings = get_settings()
    client_ip = extract_client_ip(request, trusted_proxies=settings.internal_api_trusted_proxies)

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("api_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise forbidden()

    if not is_internal_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning("api_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise forbidden()

    return client_ip


def authenticate_user(request: Request) -> UUID:
    client_ip = assert_gateway_access(request)
    user_id = extract_user_id(request)
    if user_id is None:
        logger.warning("api_auth_failed", reason="missing_user_id", client_ip=client_ip)
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"})
    return user_id


def as_http_error(exc: TournamentError | UserProfileError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": exc.message},
    )
