"""Domain errors shared by the server and the client."""


class TradeArenaError(Exception):
    """Base class for all Trade Arena errors."""


class CompetitionNotFoundError(TradeArenaError):
    """Raised when a competition id is unknown."""

    def __init__(self, competition_id: str):
        super().__init__(f"competition not found: {competition_id}")
        self.competition_id = competition_id


class InvalidRequestError(TradeArenaError):
    """Raised when required request fields are missing or blank."""


class PersistenceWriteError(TradeArenaError):
    """Raised by a durable store when a save does not complete."""


class TransportError(TradeArenaError):
    """Raised or reported when the client transport fails."""
