from __future__ import annotations

from dataclasses import dataclass

from tournament_hub.core.config import Settings


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 10
    backoff_seconds: float = 0.0
    backoff_multiplier: float = 2.0
    backoff_max_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        if self.backoff_seconds < 0 or self.backoff_max_seconds < 0:
            raise ValueError("backoff must not be negative")

    def delay_before_attempt(self, attempt: int) -> float:
        """Seconds to wait before the given 1-based attempt; the first attempt never waits."""
        if attempt <= 1 or self.backoff_seconds <= 0:
            return 0.0
        delay = self.backoff_seconds * (self.backoff_multiplier ** (attempt - 2))
        return min(self.backoff_max_seconds, delay)

    @classmethod
    def for_registration_codes(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=int(settings.registration_code_max_attempts),
            backoff_seconds=float(settings.registration_code_retry_backoff_seconds),
            backoff_max_seconds=float(settings.registration_code_retry_backoff_max_seconds),
        )
