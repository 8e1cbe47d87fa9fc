from .transport import (
    Transport,
    TransportFactory,
    TransportHandlers,
    WebSocketTransport,
    websocket_transport_factory,
)
from .multiplexer import ConnectionMultiplexer, ConnectionStatus
from .reconciler import LeaderboardReconciler
from .api_client import CompetitionApiClient
from .view import LeaderboardView

__all__ = [
    "Transport",
    "TransportFactory",
    "TransportHandlers",
    "WebSocketTransport",
    "websocket_transport_factory",
    "ConnectionMultiplexer",
    "ConnectionStatus",
    "LeaderboardReconciler",
    "CompetitionApiClient",
    "LeaderboardView",
]
