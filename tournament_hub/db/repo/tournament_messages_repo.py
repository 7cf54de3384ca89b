from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.tournament_messages import TournamentMessage


class TournamentMessagesRepo:
    @staticmethod
    async def create(session: AsyncSession, *, message: TournamentMessage) -> TournamentMessage:
        session.add(message)
        await session.flush()
        return message

    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        created_after: datetime | None,
        limit: int,
    ) -> list[TournamentMessage]:
        stmt = select(TournamentMessage).where(TournamentMessage.tournament_id == tournament_id)
        if created_after is not None:
            stmt = stmt.where(TournamentMessage.created_at > created_after)
        stmt = stmt.order_by(
            TournamentMessage.created_at.asc(),
            TournamentMessage.id.asc(),
        ).limit(max(1, int(limit)))
        result = await session.execute(stmt)
        return list(result.scalars().all())
