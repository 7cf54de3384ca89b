from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog

from tournament_hub.core.registration_codes import (
    build_fallback_registration_code,
    generate_registration_code,
)
from tournament_hub.core.retry import RetryPolicy
from tournament_hub.tournaments.errors import (
    RegistrationCodeConflictError,
    RegistrationCodeExhaustedError,
)
from tournament_hub.tournaments.store import TournamentStore
from tournament_hub.tournaments.types import TournamentDraft, TournamentSnapshot

logger = structlog.get_logger(__name__)


class RegistrationCodeAllocator:
    """Picks short shareable codes such as ``GOLF-4821QX`` for new tournaments.

    ``allocate_code`` only checks the store before returning a code, so two
    concurrent creations can still pick the same one. ``create_tournament``
    closes that gap: it inserts with the candidate and treats the unique
    constraint violation as the signal to try again.
    """

    def __init__(
        self,
        store: TournamentStore,
        *,
        retry_policy: RetryPolicy | None = None,
        rng: random.Random | None = None,
        now_ms: Callable[[], int] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._retry_policy = retry_policy or RetryPolicy()
        self._rng = rng
        self._now_ms = now_ms
        self._sleep = sleep

    def _candidate(self, seed: str | None) -> str:
        return generate_registration_code(seed, rng=self._rng)

    def _fallback(self) -> str:
        return build_fallback_registration_code(
            now_ms=None if self._now_ms is None else self._now_ms()
        )

    async def _wait_before(self, attempt: int) -> None:
        delay = self._retry_policy.delay_before_attempt(attempt)
        if delay > 0:
            await self._sleep(delay)

    async def _is_taken(self, code: str) -> bool:
        return await self._store.find_tournament_by_code(code) is not None

    async def allocate_code(self, seed: str | None) -> str:
        for attempt in range(1, self._retry_policy.max_attempts + 1):
            await self._wait_before(attempt)
            candidate = self._candidate(seed)
            if not await self._is_taken(candidate):
                return candidate

        fallback = self._fallback()
        logger.warning(
            "registration_code_fallback_used",
            attempts=self._retry_policy.max_attempts,
            registration_code=fallback,
        )
        return fallback

    async def create_tournament(
        self,
        draft: TournamentDraft,
        *,
        now_utc: datetime,
    ) -> TournamentSnapshot:
        for attempt in range(1, self._retry_policy.max_attempts + 1):
            await self._wait_before(attempt)
            candidate = self._candidate(draft.game)
            if await self._is_taken(candidate):
                continue
            try:
                return await self._store.insert_tournament(
                    draft,
                    registration_code=candidate,
                    created_at=now_utc,
                )
            except RegistrationCodeConflictError:
                continue

        fallback = self._fallback()
        logger.warning(
            "registration_code_fallback_used",
            attempts=self._retry_policy.max_attempts,
            registration_code=fallback,
        )
        try:
            return await self._store.insert_tournament(
                draft,
                registration_code=fallback,
                created_at=now_utc,
            )
        except RegistrationCodeConflictError as exc:
            logger.error("registration_code_exhausted", registration_code=fallback)
            raise RegistrationCodeExhaustedError from exc
