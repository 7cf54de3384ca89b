from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.repo.contact_messages_repo import ContactMessagesRepo

logger = structlog.get_logger(__name__)


class ContactMessagesService:
    @staticmethod
    async def submit(
        session: AsyncSession,
        *,
        name: str,
        email: str,
        message: str,
    ) -> int:
        contact_message = await ContactMessagesRepo.create(
            session,
            name=name.strip(),
            email=email.strip().lower(),
            message=message.strip(),
        )
        logger.info("contact_message_submitted", contact_message_id=contact_message.id)
        return int(contact_message.id)
