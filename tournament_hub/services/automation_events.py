from __future__ import annotations

import asyncio

import structlog

from tournament_hub.core.config import Settings
from tournament_hub.tournaments.events import EventPublisher, NullEventPublisher
from tournament_hub.tournaments.types import DomainEvent
from tournament_hub.workers.tasks.automation_events import deliver_automation_event_task

logger = structlog.get_logger(__name__)


class CeleryEventPublisher:
    """Hands domain events to a Celery worker that forwards them to the automation webhook."""

    async def publish(self, event: DomainEvent) -> None:
        await asyncio.to_thread(
            deliver_automation_event_task.delay,
            event.name,
            event.payload,
            event.occurred_at.isoformat(),
        )
        logger.info("automation_event_enqueued", event_name=event.name)


def build_event_publisher(settings: Settings) -> EventPublisher:
    if not settings.automation_webhook_url.strip():
        return NullEventPublisher()
    return CeleryEventPublisher()
