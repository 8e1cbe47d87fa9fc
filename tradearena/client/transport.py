"""Client transports carrying the leaderboard feed."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Union

import websockets
from websockets.exceptions import WebSocketException

from tradearena.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class TransportHandlers:
    """Callbacks a transport reports its lifecycle and frames to."""
    on_open: Callable[[], None]
    on_message: Callable[[Union[str, bytes]], None]
    on_close: Callable[[Optional[TransportError]], None]


class Transport(ABC):
    """
    A single persistent connection to the feed.
    
    Implementations start connecting as soon as they are created and
    report through their ``TransportHandlers``: ``on_open`` once
    connected, ``on_message`` per frame (text or bytes) and ``on_close`` exactly
    once, with an error unless the close was clean or local.
    """

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once the connection has ended or failed."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        pass


TransportFactory = Callable[[TransportHandlers], Transport]


class WebSocketTransport(Transport):
    """Transport over a ``websockets`` client connection on the running loop."""

    def __init__(self, url: str, handlers: TransportHandlers):
        self.url = url
        self.handlers = handlers
        self._closed = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._task.done():
            self._task.cancel()

    async def _run(self) -> None:
        error: Optional[TransportError] = None
        try:
            async with websockets.connect(self.url) as ws:
                self.handlers.on_open()
                async for frame in ws:
                    self.handlers.on_message(frame)
        except asyncio.CancelledError:
            logger.debug(f"Connection to {self.url} closed locally")
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.warning(f"Connection to {self.url} failed: {e}")
            error = TransportError(str(e))
        finally:
            self._closed = True
            self.handlers.on_close(error)


def websocket_transport_factory(url: str) -> TransportFactory:
    """Factory that opens a ``WebSocketTransport`` to ``url``."""
    def factory(handlers: TransportHandlers) -> Transport:
        return WebSocketTransport(url, handlers)
    return factory
