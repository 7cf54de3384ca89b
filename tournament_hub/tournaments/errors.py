class TournamentError(Exception):
    code = "E_TOURNAMENT"
    message = "Tournament request failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class TournamentNotFoundError(TournamentError):
    code = "E_TOURNAMENT_NOT_FOUND"
    message = "Tournament not found"


class TournamentAccessError(TournamentError):
    code = "E_TOURNAMENT_ACCESS_DENIED"
    message = "Only participants and the organizer can do this"


class TournamentValidationError(TournamentError):
    code = "E_TOURNAMENT_INVALID"
    message = "Tournament details are invalid"


class AlreadyJoinedError(TournamentError):
    code = "E_ALREADY_JOINED"
    message = "You have already joined this tournament"


class TournamentFullError(TournamentError):
    code = "E_TOURNAMENT_FULL"
    message = "Tournament is full"


class InvalidRegistrationCodeError(TournamentError):
    code = "E_INVALID_CODE"
    message = "Invalid registration code"


class RegistrationClosedError(TournamentError):
    code = "E_REGISTRATION_CLOSED"
    message = "Tournament is not open for registration"


class RegistrationCodeExhaustedError(TournamentError):
    code = "E_REGISTRATION_CODE_EXHAUSTED"
    message = "Could not allocate a registration code, please try again"


class ProfileRequiredError(TournamentError):
    code = "E_PROFILE_REQUIRED"
    message = "Create your profile before organizing or joining tournaments"


class ChatMessageInvalidError(TournamentError):
    code = "E_CHAT_MESSAGE_INVALID"
    message = "Message must not be empty or longer than 1000 characters"


class RegistrationCodeConflictError(Exception):
    """Raised by a store when the registration code is already taken."""


class MembershipConflictError(Exception):
    """Raised by a store when the user already has a membership row."""
