TOURNAMENT_STATUS_UPCOMING = "upcoming"
TOURNAMENT_STATUS_ONGOING = "ongoing"
TOURNAMENT_STATUS_COMPLETED = "completed"
TOURNAMENT_STATUSES = (
    TOURNAMENT_STATUS_UPCOMING,
    TOURNAMENT_STATUS_ONGOING,
    TOURNAMENT_STATUS_COMPLETED,
)

TOURNAMENT_MAX_PARTICIPANTS_LIMIT = 1024
TOURNAMENT_LIST_LIMIT = 200

CHAT_MESSAGE_MAX_LENGTH = 1000
CHAT_HISTORY_DEFAULT_LIMIT = 100
CHAT_HISTORY_MAX_LIMIT = 500

EVENT_TOURNAMENT_CREATED = "tournament-created"
EVENT_TOURNAMENT_JOINED = "tournament-joined"
EVENT_TOURNAMENT_MESSAGE_SENT = "tournament-message-sent"
