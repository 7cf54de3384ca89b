from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.tournament_participants import TournamentParticipant


class TournamentParticipantsRepo:
    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: UUID,
        joined_at: datetime,
    ) -> bool:
        stmt = (
            insert(TournamentParticipant)
            .values(
                tournament_id=tournament_id,
                user_id=user_id,
                joined_at=joined_at,
            )
            .on_conflict_do_nothing(
                index_elements=[
                    TournamentParticipant.tournament_id,
                    TournamentParticipant.user_id,
                ]
            )
            .returning(TournamentParticipant.user_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def get(
        session: AsyncSession,
        *,
        tournament_id: UUID,
        user_id: UUID,
    ) -> TournamentParticipant | None:
        return await session.get(TournamentParticipant, (tournament_id, user_id))

    @staticmethod
    async def count_for_tournament(session: AsyncSession, *, tournament_id: UUID) -> int:
        stmt = select(func.count(TournamentParticipant.user_id)).where(
            TournamentParticipant.tournament_id == tournament_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_tournament_ids(
        session: AsyncSession,
        *,
        tournament_ids: Sequence[UUID],
    ) -> dict[UUID, int]:
        ids = tuple(set(tournament_ids))
        if not ids:
            return {}
        stmt = (
            select(TournamentParticipant.tournament_id, func.count(TournamentParticipant.user_id))
            .where(TournamentParticipant.tournament_id.in_(ids))
            .group_by(TournamentParticipant.tournament_id)
        )
        result = await session.execute(stmt)
        return {tournament_id: int(total) for tournament_id, total in result.all()}

    @staticmethod
    async def list_for_tournament(
        session: AsyncSession,
        *,
        tournament_id: UUID,
    ) -> list[TournamentParticipant]:
        stmt = (
            select(TournamentParticipant)
            .where(TournamentParticipant.tournament_id == tournament_id)
            .order_by(TournamentParticipant.joined_at.asc(), TournamentParticipant.user_id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_tournament_ids_for_user(
        session: AsyncSession,
        *,
        user_id: UUID,
    ) -> set[UUID]:
        stmt = select(TournamentParticipant.tournament_id).where(
            TournamentParticipant.user_id == user_id
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())
