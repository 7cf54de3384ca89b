from tournament_hub.db.repo.contact_messages_repo import ContactMessagesRepo
from tournament_hub.db.repo.tournament_messages_repo import TournamentMessagesRepo
from tournament_hub.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from tournament_hub.db.repo.tournaments_repo import TournamentsRepo
from tournament_hub.db.repo.users_repo import UsersRepo

__all__ = [
    "ContactMessagesRepo",
    "TournamentMessagesRepo",
    "TournamentParticipantsRepo",
    "TournamentsRepo",
    "UsersRepo",
]
