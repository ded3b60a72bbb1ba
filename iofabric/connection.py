"""
Socket Connection

Owns one persistent WebSocket to an ioFabric endpoint, decodes inbound
binary frames and hands them to a frame handler. A connection is opened
once; reopening means constructing a new SocketConnection.
"""

import asyncio
import enum
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection

from iofabric.codec import decode_inbound, encode_ack, encode_pong
from iofabric.errors import DecodeError, NotConnectedError, TransportError
from iofabric.models import Frame, Opcode

LOG = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[None] | None]
FrameHandler = Callable[[Frame, "SocketConnection"], Awaitable[None] | None]


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"


async def call_handler(handler: Handler, *args: Any) -> None:
    """Call a plain or coroutine handler."""
    result = handler(*args)
    if inspect.isawaitable(result):
        await result


@dataclass
class SocketConnection:
    """
    A single WebSocket to one endpoint.

    ``on_frame(frame, connection)`` receives each decoded frame together with
    the connection it arrived on; replies belong on that connection.

    Usage:
        connection = SocketConnection(url, on_frame=handle, on_error=report)
        await connection.open()
        await connection.send(payload)
    """

    url: str
    on_frame: FrameHandler
    on_error: Handler | None = None
    on_open: Handler | None = None
    open_timeout: float | None = 10.0
    state: ConnectionState = field(default=ConnectionState.CONNECTING, init=False)
    websocket: "ClientConnection | None" = field(default=None, init=False, repr=False)
    reader_task: "asyncio.Task[None] | None" = field(default=None, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    async def open(self) -> "SocketConnection":
        """
        Establish the socket and start delivering frames.

        Connect failures are reported once through ``on_error`` and leave the
        connection ERRORED; nothing is raised and nothing is retried.
        """
        if self.state is not ConnectionState.CONNECTING:
            raise RuntimeError(f"Connection to {self.url} was already opened")

        LOG.debug("Connecting to %s", self.url)
        try:
            # The daemon drives keepalive; pings it sends are answered by websockets.
            self.websocket = await connect(
                self.url,
                open_timeout=self.open_timeout,
                ping_interval=None,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            await self.fail(exc)
            return self

        self.state = ConnectionState.OPEN
        LOG.info("Connected to %s", self.url)
        self.reader_task = asyncio.create_task(self.read_frames(self.websocket))

        if self.on_open:
            try:
                await call_handler(self.on_open)
            except Exception:
                LOG.exception("Open handler failed for %s", self.url)

        return self

    async def send(self, data: bytes) -> None:
        """
        Write ``data`` as one binary message.

        Raises:
            NotConnectedError: If the connection is not open
        """
        if self.state is not ConnectionState.OPEN or self.websocket is None:
            raise NotConnectedError(self.url)

        try:
            await self.websocket.send(data)
        except ConnectionClosed as exc:
            raise NotConnectedError(self.url) from exc

    async def close(self) -> None:
        if self.state is ConnectionState.OPEN:
            self.state = ConnectionState.CLOSED
        if self.websocket is not None:
            await self.websocket.close()
        await self.wait_closed()

    async def wait_closed(self) -> None:
        """Wait until the reader has stopped."""
        task = self.reader_task
        if task is not None and task is not asyncio.current_task():
            await task

    async def read_frames(self, websocket: "ClientConnection") -> None:
        try:
            async for message in websocket:
                await self.handle_message(message)
        except ConnectionClosed as exc:
            if self.state is ConnectionState.OPEN:
                await self.fail(exc)
        else:
            if self.state is ConnectionState.OPEN:
                self.state = ConnectionState.CLOSED
            LOG.info("Connection to %s closed", self.url)

    async def handle_message(self, message: bytes | str) -> None:
        if isinstance(message, str) or not message:
            LOG.debug("Dropping non-binary or empty message on %s", self.url)
            return

        try:
            frame = decode_inbound(message)
        except DecodeError:
            LOG.debug("Dropping malformed frame on %s", self.url, exc_info=True)
            return

        if frame is None:
            LOG.debug("Dropping frame with unknown opcode 0x%02x on %s", message[0], self.url)
            return

        try:
            if frame.opcode == Opcode.PING:
                await self.send(encode_pong(frame.payload))
            else:
                await call_handler(self.on_frame, frame, self)
        except Exception:
            LOG.exception("Error handling %s frame on %s", frame.opcode.name, self.url)

    async def fail(self, exc: BaseException) -> None:
        """Move to ERRORED and report the failure exactly once."""
        if self.state is ConnectionState.ERRORED:
            return
        self.state = ConnectionState.ERRORED

        error = TransportError(self.url, exc)
        LOG.warning("%s", error)
        if self.on_error:
            try:
                await call_handler(self.on_error, error)
            except Exception:
                LOG.exception("Error handler failed for %s", self.url)


async def send_ack(connection: SocketConnection) -> None:
    """Acknowledge the frame just processed on ``connection``."""
    await connection.send(encode_ack())
