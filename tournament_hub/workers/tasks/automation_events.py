from __future__ import annotations

import asyncio
import random
from datetime import datetime

import structlog
from celery import Task

from tournament_hub.core.config import get_settings
from tournament_hub.services.automation_webhook import deliver_automation_event
from tournament_hub.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)
settings = get_settings()
TASK_MAX_RETRIES = max(0, int(settings.automation_event_max_retries))
TASK_RETRY_BACKOFF_MAX_SECONDS = max(1, int(settings.automation_event_retry_backoff_max_seconds))
RETRY_JITTER_RATIO = 0.25


class AutomationEventDeliveryError(RuntimeError):
    pass


def retry_backoff_seconds(*, next_retry_attempt: int, backoff_max_seconds: int) -> int:
    safe_retry_attempt = max(1, int(next_retry_attempt))
    safe_backoff_max_seconds = max(1, int(backoff_max_seconds))
    base_delay = min(safe_backoff_max_seconds, 2 ** (safe_retry_attempt - 1))
    max_jitter = max(0, int(base_delay * RETRY_JITTER_RATIO))
    jitter = random.randint(0, max_jitter) if max_jitter > 0 else 0
    return min(safe_backoff_max_seconds, base_delay + jitter)


async def deliver_event_async(
    *,
    event_name: str,
    payload: dict[str, object],
    occurred_at: str,
) -> None:
    delivered = await deliver_automation_event(
        event_name=event_name,
        payload=payload,
        occurred_at=datetime.fromisoformat(occurred_at),
    )
    if not delivered:
        raise AutomationEventDeliveryError(event_name)


@celery_app.task(
    name="tournament_hub.workers.tasks.automation_events.deliver_automation_event",
    bind=True,
    max_retries=TASK_MAX_RETRIES,
    acks_late=True,
)
def deliver_automation_event_task(
    self: Task,
    event_name: str,
    payload: dict[str, object],
    occurred_at: str,
) -> str:
    try:
        asyncio.run(
            deliver_event_async(
                event_name=event_name,
                payload=payload,
                occurred_at=occurred_at,
            )
        )
    except AutomationEventDeliveryError as exc:
        current_retries = max(0, int(getattr(self.request, "retries", 0) or 0))
        if current_retries >= TASK_MAX_RETRIES:
            logger.error(
                "automation_event_failed_final",
                event_name=event_name,
                retries=current_retries,
                max_retries=TASK_MAX_RETRIES,
            )
            return "failed"
        countdown = retry_backoff_seconds(
            next_retry_attempt=current_retries + 1,
            backoff_max_seconds=TASK_RETRY_BACKOFF_MAX_SECONDS,
        )
        logger.warning(
            "automation_event_retry_scheduled",
            event_name=event_name,
            retry_in_seconds=countdown,
            next_retry_attempt=current_retries + 1,
        )
        raise self.retry(exc=exc, countdown=countdown) from exc
    return "delivered"
