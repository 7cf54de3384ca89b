from __future__ import annotations

from collections.abc import Collection, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tournament_hub.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from tournament_hub.db.repo.tournaments_repo import TournamentsRepo
from tournament_hub.db.repo.users_repo import UsersRepo
from tournament_hub.tournaments.constants import TOURNAMENT_LIST_LIMIT, TOURNAMENT_STATUS_UPCOMING
from tournament_hub.tournaments.errors import TournamentNotFoundError
from tournament_hub.tournaments.internal import accepts_joins, build_tournament_snapshot
from tournament_hub.tournaments.types import (
    ParticipantView,
    TournamentDetails,
    TournamentListItem,
    TournamentSnapshot,
    UserTournaments,
)


def is_available_to_join(
    tournament: TournamentSnapshot,
    *,
    joined_tournament_ids: Collection[UUID],
) -> bool:
    return accepts_joins(tournament) and tournament.tournament_id not in joined_tournament_ids


def filter_available(
    tournaments: Iterable[TournamentSnapshot],
    *,
    joined_tournament_ids: Collection[UUID],
) -> list[TournamentSnapshot]:
    return [
        tournament
        for tournament in tournaments
        if is_available_to_join(tournament, joined_tournament_ids=joined_tournament_ids)
    ]


async def get_tournament_details(
    session: AsyncSession,
    *,
    tournament_id: UUID,
    viewer_user_id: UUID,
) -> TournamentDetails:
    tournament = await TournamentsRepo.get_by_id(session, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError

    rows = await TournamentParticipantsRepo.list_for_tournament(
        session,
        tournament_id=tournament.id,
    )
    users = await UsersRepo.list_by_ids(session, [row.user_id for row in rows])
    users_by_id = {user.id: user for user in users}

    participants: list[ParticipantView] = []
    for row in rows:
        user = users_by_id.get(row.user_id)
        participants.append(
            ParticipantView(
                user_id=row.user_id,
                name=None if user is None else user.name,
                handicap=None if user is None else user.handicap,
                joined_at=row.joined_at,
            )
        )

    return TournamentDetails(
        tournament=build_tournament_snapshot(tournament),
        participants=tuple(participants),
        viewer_joined=any(item.user_id == viewer_user_id for item in participants),
        viewer_is_creator=tournament.created_by == viewer_user_id,
    )


async def list_available_tournaments(
    session: AsyncSession,
    *,
    user_id: UUID,
    limit: int = TOURNAMENT_LIST_LIMIT,
) -> list[TournamentListItem]:
    upcoming = await TournamentsRepo.list_by_status(
        session,
        status=TOURNAMENT_STATUS_UPCOMING,
        limit=limit,
    )
    joined_ids = await TournamentParticipantsRepo.list_tournament_ids_for_user(
        session,
        user_id=user_id,
    )
    available = filter_available(
        (build_tournament_snapshot(item) for item in upcoming),
        joined_tournament_ids=joined_ids,
    )
    totals = await TournamentParticipantsRepo.count_by_tournament_ids(
        session,
        tournament_ids=[item.tournament_id for item in available],
    )
    return [
        TournamentListItem(
            tournament=item,
            participants_total=totals.get(item.tournament_id, 0),
        )
        for item in available
    ]


async def list_user_tournaments(
    session: AsyncSession,
    *,
    user_id: UUID,
    limit: int = TOURNAMENT_LIST_LIMIT,
) -> UserTournaments:
    created = await TournamentsRepo.list_created_by(session, user_id=user_id, limit=limit)
    joined = await TournamentsRepo.list_joined_by(session, user_id=user_id, limit=limit)
    totals = await TournamentParticipantsRepo.count_by_tournament_ids(
        session,
        tournament_ids=[item.id for item in created] + [item.id for item, _ in joined],
    )
    return UserTournaments(
        created=tuple(
            TournamentListItem(
                tournament=build_tournament_snapshot(item),
                participants_total=totals.get(item.id, 0),
            )
            for item in created
        ),
        joined=tuple(
            TournamentListItem(
                tournament=build_tournament_snapshot(item),
                participants_total=totals.get(item.id, 0),
                joined_at=joined_at,
            )
            for item, joined_at in joined
        ),
    )
