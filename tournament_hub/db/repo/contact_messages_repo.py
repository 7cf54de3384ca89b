from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.contact_messages import ContactMessage


class ContactMessagesRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        name: str,
        email: str,
        message: str,
    ) -> ContactMessage:
        contact_message = ContactMessage(name=name, email=email, message=message)
        session.add(contact_message)
        await session.flush()
        return contact_message
