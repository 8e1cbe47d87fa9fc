"""Fan-out of leaderboard messages to connected viewers."""

import asyncio
import logging
from typing import Optional, Union

from starlette.websockets import WebSocket, WebSocketState

from tradearena.models import ScoreUpdateMessage, SnapshotMessage
from .competition_store import CompetitionStore

logger = logging.getLogger(__name__)

SEND_TIMEOUT = 5.0
CLOSE_GOING_AWAY = 1001
CLOSE_POLICY_VIOLATION = 1008


class ViewerChannel:
    """
    One connected viewer: its websocket and an ordered outbound queue.

    A dedicated sender task drains the queue, so a slow viewer only
    ever delays itself.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.queue: asyncio.Queue[str] = asyncio.Queue()
        self.sender: Optional[asyncio.Task] = None
        self.closed = False
        # Unsent frames allowed before the viewer counts as slow
        self.limit = 0

    @property
    def is_open(self) -> bool:
        return (
            not self.closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )


class BroadcastHub:
    """
    Holds the open viewer channels and pushes messages to all of them.

    Delivery is at most once: nothing is acknowledged, retried or
    queued for a channel that is not open. A new channel is sent one
    snapshot per competition before it can see any update.
    """

    def __init__(
        self,
        store: CompetitionStore,
        max_pending: int = 256,
        send_timeout: float = SEND_TIMEOUT,
    ):
        self.store = store
        self.max_pending = max_pending
        self.send_timeout = send_timeout
        self._channels: list[ViewerChannel] = []
        self._closing: set[asyncio.Task] = set()

    @property
    def connection_count(self) -> int:
        return len(self._channels)

    async def connect(self, websocket: WebSocket) -> ViewerChannel:
        """
        Accept a viewer and queue the current snapshots for it.

        Snapshots are built and the channel registered without yielding
        to the loop, so no update can slip in ahead of them.
        """
        await websocket.accept()

        channel = ViewerChannel(websocket)
        snapshots = self.store.snapshots()
        for snapshot in snapshots:
            channel.queue.put_nowait(snapshot.model_dump_json())
        channel.limit = self.max_pending + len(snapshots)

        self._channels.append(channel)
        channel.sender = asyncio.create_task(self._drain(channel))
        logger.info(f"Viewer connected ({self.connection_count} open)")
        return channel

    def disconnect(self, channel: ViewerChannel) -> None:
        """Forget a channel whose viewer has gone away."""
        self._discard(channel)
        logger.info(f"Viewer disconnected ({self.connection_count} open)")

    def broadcast(self, message: Union[SnapshotMessage, ScoreUpdateMessage]) -> int:
        """
        Queue ``message`` for every open channel without waiting on any.

        Channels that are no longer open are dropped. A channel with too
        many unsent frames is closed rather than waited on. The snapshots
        queued on connect do not count towards ``max_pending``.

        Returns:
            Number of channels the message was queued for
        """
        frame = message.model_dump_json()
        delivered = 0

        for channel in list(self._channels):
            if not channel.is_open:
                self._discard(channel)
                continue
            if channel.queue.qsize() >= channel.limit:
                logger.warning(
                    f"Viewer has {channel.queue.qsize()} unsent messages, disconnecting slow client"
                )
                self._discard(channel)
                self._close_later(channel, CLOSE_POLICY_VIOLATION)
                continue
            channel.queue.put_nowait(frame)
            delivered += 1

        return delivered

    async def close(self) -> None:
        """Close every channel. Used at shutdown."""
        for channel in list(self._channels):
            self._discard(channel)
            self._close_later(channel, CLOSE_GOING_AWAY)
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    async def _drain(self, channel: ViewerChannel) -> None:
        while True:
            frame = await channel.queue.get()
            try:
                await asyncio.wait_for(
                    channel.websocket.send_text(frame), timeout=self.send_timeout
                )
            except asyncio.TimeoutError:
                logger.warning("WebSocket send timeout, disconnecting slow client")
                self._discard(channel)
                self._close_later(channel, CLOSE_POLICY_VIOLATION)
                return
            except Exception as e:
                logger.debug(f"Send to viewer failed: {e}")
                self._discard(channel)
                return

    def _discard(self, channel: ViewerChannel) -> None:
        """Unregister a channel and stop its sender."""
        channel.closed = True
        if channel in self._channels:
            self._channels.remove(channel)

        sender = channel.sender
        channel.sender = None
        if sender is not None and sender is not asyncio.current_task():
            sender.cancel()

    def _close_later(self, channel: ViewerChannel, code: int) -> None:
        task = asyncio.create_task(self._close_socket(channel, code))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_socket(self, channel: ViewerChannel, code: int) -> None:
        if channel.websocket.application_state != WebSocketState.CONNECTED:
            return
        try:
            await channel.websocket.close(code=code)
        except Exception as e:
            logger.debug(f"Closing viewer socket failed: {e}")
