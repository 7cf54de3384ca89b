from __future__ import annotations

from tournament_hub.db.models.tournament_participants import TournamentParticipant
from tournament_hub.db.models.tournaments import Tournament
from tournament_hub.tournaments.constants import TOURNAMENT_STATUS_UPCOMING
from tournament_hub.tournaments.types import MembershipSnapshot, TournamentSnapshot


def build_tournament_snapshot(tournament: Tournament) -> TournamentSnapshot:
    return TournamentSnapshot(
        tournament_id=tournament.id,
        registration_code=tournament.registration_code,
        title=tournament.title,
        description=tournament.description,
        game=tournament.game,
        location=tournament.location,
        start_at=tournament.start_at,
        end_at=tournament.end_at,
        prize_pool=tournament.prize_pool,
        rules=tournament.rules,
        max_participants=int(tournament.max_participants),
        status=tournament.status,
        created_by=tournament.created_by,
        created_at=tournament.created_at,
    )


def build_membership_snapshot(row: TournamentParticipant) -> MembershipSnapshot:
    return MembershipSnapshot(
        tournament_id=row.tournament_id,
        user_id=row.user_id,
        joined_at=row.joined_at,
    )


def accepts_joins(tournament: TournamentSnapshot) -> bool:
    return tournament.status == TOURNAMENT_STATUS_UPCOMING
