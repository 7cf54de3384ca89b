from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog

from tournament_hub.core.config import get_settings

logger = structlog.get_logger(__name__)


def build_webhook_body(
    *,
    event_name: str,
    payload: dict[str, Any],
    occurred_at: datetime,
    app_env: str,
) -> dict[str, Any]:
    return {
        "event": event_name,
        "occurred_at": occurred_at.isoformat(),
        "environment": app_env,
        "payload": payload,
    }


async def post_json(
    *,
    client: httpx.AsyncClient,
    url: str,
    body: dict[str, Any],
    event_name: str,
) -> bool:
    try:
        response = await client.post(url, json=body)
        response.raise_for_status()
        return True
    except Exception:
        logger.exception("automation_event_delivery_failed", event_name=event_name)
        return False


async def deliver_automation_event(
    *,
    event_name: str,
    payload: dict[str, Any],
    occurred_at: datetime,
) -> bool:
    """POSTs one domain event to the automation webhook; returns False when delivery failed."""
    settings = get_settings()
    url = settings.automation_webhook_url.strip()
    if not url:
        return False

    body = build_webhook_body(
        event_name=event_name,
        payload=payload,
        occurred_at=occurred_at,
        app_env=settings.app_env,
    )
    async with httpx.AsyncClient(timeout=settings.automation_webhook_timeout_seconds) as client:
        delivered = await post_json(client=client, url=url, body=body, event_name=event_name)
    if delivered:
        logger.info("automation_event_delivered", event_name=event_name)
    return delivered
