from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.models.tournament_participants import TournamentParticipant
from tournament_hub.db.models.tournaments import Tournament


class TournamentsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, tournament: Tournament) -> Tournament:
        session.add(tournament)
        await session.flush()
        return tournament

    @staticmethod
    async def get_by_id(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        return await session.get(Tournament, tournament_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, tournament_id: UUID) -> Tournament | None:
        stmt = (
            select(Tournament)
            .where(Tournament.id == tournament_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_registration_code(
        session: AsyncSession,
        registration_code: str,
    ) -> Tournament | None:
        stmt = select(Tournament).where(Tournament.registration_code == registration_code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_status(
        session: AsyncSession,
        *,
        status: str,
        limit: int,
    ) -> list[Tournament]:
        stmt = (
            select(Tournament)
            .where(Tournament.status == status)
            .order_by(Tournament.start_at.asc(), Tournament.id.asc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_created_by(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int,
    ) -> list[Tournament]:
        stmt = (
            select(Tournament)
            .where(Tournament.created_by == user_id)
            .order_by(Tournament.created_at.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_joined_by(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int,
    ) -> list[tuple[Tournament, datetime]]:
        stmt = (
            select(Tournament, TournamentParticipant.joined_at)
            .join(TournamentParticipant, TournamentParticipant.tournament_id == Tournament.id)
            .where(TournamentParticipant.user_id == user_id)
            .order_by(TournamentParticipant.joined_at.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return [(tournament, joined_at) for tournament, joined_at in result.all()]
