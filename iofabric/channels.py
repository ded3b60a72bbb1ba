"""
Control and message channels.

Each channel opens its own SocketConnection, interprets the frames relevant
to its role, notifies the application and acknowledges every frame it
handled. Frames outside the role's set are ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from iofabric.codec import encode_message_frame
from iofabric.config import FabricConfig
from iofabric.connection import Handler, SocketConnection, call_handler, send_ack
from iofabric.entities import BytesCodec, EntityCodec
from iofabric.errors import NotConnectedError
from iofabric.models import Frame, Opcode

LOG = logging.getLogger(__name__)


@dataclass
class ControlChannel:
    """
    Listens for configuration-changed signals.

    Usage:
        channel = ControlChannel(config, on_new_config_signal=refetch)
        await channel.open()
    """

    config: FabricConfig
    on_new_config_signal: Handler
    on_error: Handler | None = field(default=None, kw_only=True)
    connection: SocketConnection | None = field(default=None, init=False)

    async def open(self) -> SocketConnection:
        """Open a new socket, closing the one this channel held before."""
        await self.close()
        self.connection = SocketConnection(
            self.config.control_url,
            on_frame=self.handle_frame,
            on_error=self.on_error,
            open_timeout=self.config.open_timeout_seconds,
        )
        return await self.connection.open()

    async def handle_frame(self, frame: Frame, connection: SocketConnection) -> None:
        if frame.opcode != Opcode.CONTROL_SIGNAL:
            return

        LOG.debug("Control signal received")
        await call_handler(self.on_new_config_signal)
        await send_ack(connection)

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()


@dataclass
class MessageChannel:
    """
    Receives messages and receipts, and publishes messages.

    ``on_ready`` is called once the socket is open; ``send_message`` is safe
    to call from then on.
    """

    config: FabricConfig
    codec: EntityCodec[Any] = field(default_factory=BytesCodec)
    on_ready: Handler | None = field(default=None, kw_only=True)
    on_messages: Handler | None = field(default=None, kw_only=True)
    on_message_receipt: Handler | None = field(default=None, kw_only=True)
    on_error: Handler | None = field(default=None, kw_only=True)
    connection: SocketConnection | None = field(default=None, init=False)

    async def open(self) -> SocketConnection:
        """Open a new socket, closing the one this channel held before."""
        await self.close()
        self.connection = SocketConnection(
            self.config.message_url,
            on_frame=self.handle_frame,
            on_error=self.on_error,
            on_open=self.on_ready,
            open_timeout=self.config.open_timeout_seconds,
        )
        return await self.connection.open()

    async def handle_frame(self, frame: Frame, connection: SocketConnection) -> None:
        if frame.opcode == Opcode.MESSAGE:
            entity = self.codec.decode(frame.payload)
            LOG.debug("Message received (%d bytes)", len(frame.payload))
            if self.on_messages:
                await call_handler(self.on_messages, [entity])
            await send_ack(connection)

        elif frame.opcode == Opcode.RECEIPT and frame.receipt is not None:
            receipt = frame.receipt
            LOG.debug("Receipt for message %s at %d", receipt.id, receipt.timestamp)
            if self.on_message_receipt:
                await call_handler(self.on_message_receipt, receipt.id, receipt.timestamp)
            await send_ack(connection)

    async def send_message(self, entity: Any) -> None:
        """
        Publish ``entity`` over the message socket.

        Raises:
            NotConnectedError: If the channel is not open
            EncodingError: If the encoded entity does not fit in a frame
        """
        if self.connection is None or not self.connection.is_open:
            raise NotConnectedError(self.config.message_url)

        await self.connection.send(encode_message_frame(self.codec.encode(entity)))

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()
