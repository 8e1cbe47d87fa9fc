"""FastAPI dependencies for dependency injection."""

from fastapi.requests import HTTPConnection

from tradearena.services import BroadcastHub, CompetitionStore


def get_store(connection: HTTPConnection) -> CompetitionStore:
    """Get the competition store created at app startup."""
    store = getattr(connection.app.state, "store", None)
    if store is None:
        raise RuntimeError("CompetitionStore not initialized. Is the app lifespan running?")
    return store


def get_hub(connection: HTTPConnection) -> BroadcastHub:
    """Get the broadcast hub created at app startup."""
    hub = getattr(connection.app.state, "hub", None)
    if hub is None:
        raise RuntimeError("BroadcastHub not initialized. Is the app lifespan running?")
    return hub
