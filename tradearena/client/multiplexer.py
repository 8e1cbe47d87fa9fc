"""One shared feed connection for every leaderboard view in a session."""

import logging
from enum import Enum
from typing import Callable, Optional, Union

from pydantic import ValidationError

from tradearena.errors import TransportError
from tradearena.models import ScoreUpdateMessage, SnapshotMessage, parse_message
from .transport import (
    Transport,
    TransportFactory,
    TransportHandlers,
    websocket_transport_factory,
)

logger = logging.getLogger(__name__)

FeedMessage = Union[SnapshotMessage, ScoreUpdateMessage]
MessageHandler = Callable[[FeedMessage], None]
StatusHandler = Callable[["ConnectionStatus"], None]
Unsubscribe = Callable[[], None]


class ConnectionStatus(str, Enum):
    """Lifecycle of the shared connection: connecting -> open -> closed."""
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ConnectionMultiplexer:
    """
    Shares a single transport between any number of subscribers.

    The first subscriber opens the connection and later ones reuse it.
    Unsubscribing never closes it; only ``teardown()`` does, e.g. on
    logout. A dropped connection is not reopened automatically: it
    stays closed until the next subscription calls ``ensure_connection()``.

    Every handler runs in isolation, so one handler raising does not
    keep the message or status from reaching the others.
    """

    def __init__(self, transport_factory: TransportFactory):
        self.transport_factory = transport_factory
        self._transport: Optional[Transport] = None
        self._status = ConnectionStatus.CLOSED
        self._generation = 0
        self._message_handlers: list[MessageHandler] = []
        self._status_handlers: list[StatusHandler] = []

    @classmethod
    def for_url(cls, url: str) -> "ConnectionMultiplexer":
        """Multiplexer over a websocket connection to ``url``."""
        return cls(websocket_transport_factory(url))

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    @property
    def subscriber_count(self) -> int:
        return len(self._message_handlers) + len(self._status_handlers)

    def subscribe_messages(self, handler: MessageHandler) -> Unsubscribe:
        """
        Register a handler for every inbound feed message.

        Returns:
            Callable that removes the handler
        """
        self.ensure_connection()
        self._message_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._message_handlers:
                self._message_handlers.remove(handler)

        return unsubscribe

    def subscribe_status(self, handler: StatusHandler) -> Unsubscribe:
        """
        Register a handler for connection status changes.

        The handler is called right away with the current status.

        Returns:
            Callable that removes the handler
        """
        self.ensure_connection()
        self._status_handlers.append(handler)
        self._call(handler, self._status)

        def unsubscribe() -> None:
            if handler in self._status_handlers:
                self._status_handlers.remove(handler)

        return unsubscribe

    def ensure_connection(self) -> Transport:
        """Return the live transport, opening a new one if there is none or it has closed."""
        if self._transport is not None and not self._transport.closed:
            return self._transport

        self._generation += 1
        generation = self._generation
        self._set_status(ConnectionStatus.CONNECTING)

        handlers = TransportHandlers(
            on_open=lambda: self._handle_open(generation),
            on_message=lambda raw: self._handle_message(generation, raw),
            on_close=lambda error: self._handle_close(generation, error),
        )
        try:
            self._transport = self.transport_factory(handlers)
        except Exception as e:
            self._transport = None
            self._set_status(ConnectionStatus.CLOSED)
            raise TransportError(f"Failed to open connection: {e}") from e

        return self._transport

    def teardown(self) -> None:
        """Close the shared connection and drop every subscriber."""
        # Events still in flight from the old transport are ignored from here on
        self._generation += 1
        transport = self._transport
        self._transport = None

        if transport is not None and not transport.closed:
            try:
                transport.close()
            except Exception as e:
                logger.warning(f"Error while closing connection: {e}")

        self._message_handlers = []
        self._set_status(ConnectionStatus.CLOSED, force=True)
        self._status_handlers = []

    def _handle_open(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._set_status(ConnectionStatus.OPEN)

    def _handle_close(self, generation: int, error: Optional[TransportError]) -> None:
        if generation != self._generation:
            return
        if error is not None:
            logger.warning(f"Connection lost: {error}")
        self._set_status(ConnectionStatus.CLOSED)

    def _handle_message(self, generation: int, raw: Union[str, bytes]) -> None:
        if generation != self._generation:
            return
        try:
            message = parse_message(raw)
        except (ValidationError, UnicodeDecodeError) as e:
            logger.error(f"Failed to parse WebSocket message: {e}")
            return

        for handler in list(self._message_handlers):
            self._call(handler, message)

    def _set_status(self, status: ConnectionStatus, force: bool = False) -> None:
        if status == self._status and not force:
            return
        self._status = status
        for handler in list(self._status_handlers):
            self._call(handler, status)

    @staticmethod
    def _call(handler: Callable, value) -> None:
        try:
            handler(value)
        except Exception:
            logger.exception(f"Subscriber {handler!r} failed")
