from tournament_hub.db.models.contact_messages import ContactMessage
from tournament_hub.db.models.tournament_messages import TournamentMessage
from tournament_hub.db.models.tournament_participants import TournamentParticipant
from tournament_hub.db.models.tournaments import Tournament
from tournament_hub.db.models.users import User

__all__ = [
    "ContactMessage",
    "Tournament",
    "TournamentMessage",
    "TournamentParticipant",
    "User",
]
