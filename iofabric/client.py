"""
iofabric Client

Bundles the control channel, the message channel and the local API for one
element. Several clients with different configs can live in one process.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from iofabric.api import LocalApi, PostJson, http_post_json
from iofabric.channels import ControlChannel, MessageChannel
from iofabric.config import FabricConfig
from iofabric.connection import Handler, SocketConnection
from iofabric.entities import BytesCodec, EntityCodec
from iofabric.errors import NotConnectedError

LOG = logging.getLogger(__name__)


@dataclass
class FabricClient:
    """
    Client for one element talking to the local ioFabric daemon.

    Usage:
        client = FabricClient(FabricConfig.resolve(element_id="sensor-1"))
        await client.open_control_channel(on_new_config_signal=reload)
        await client.open_message_channel(on_ready, on_messages=handle)
        await client.send_message(b"payload")
    """

    config: FabricConfig = field(default_factory=FabricConfig)
    codec: EntityCodec[Any] = field(default_factory=BytesCodec)
    control: ControlChannel | None = field(default=None, init=False)
    messages: MessageChannel | None = field(default=None, init=False)

    async def open_control_channel(
        self,
        on_new_config_signal: Handler,
        *,
        on_error: Handler | None = None,
    ) -> SocketConnection:
        if self.control is not None:
            await self.control.close()
        self.control = ControlChannel(
            self.config,
            on_new_config_signal,
            on_error=on_error,
        )
        return await self.control.open()

    async def open_message_channel(
        self,
        on_ready: Handler | None = None,
        *,
        on_messages: Handler | None = None,
        on_message_receipt: Handler | None = None,
        on_error: Handler | None = None,
    ) -> SocketConnection:
        if self.messages is not None:
            await self.messages.close()
        self.messages = MessageChannel(
            self.config,
            self.codec,
            on_ready=on_ready,
            on_messages=on_messages,
            on_message_receipt=on_message_receipt,
            on_error=on_error,
        )
        return await self.messages.open()

    async def send_message(self, entity: Any) -> None:
        """
        Publish ``entity`` over the message channel.

        Raises:
            NotConnectedError: If the message channel is not open
        """
        if self.messages is None:
            raise NotConnectedError(self.config.message_url)
        await self.messages.send_message(entity)

    def api(self, post_json: PostJson = http_post_json) -> LocalApi:
        return LocalApi(self.config, post_json, self.codec)

    async def close(self) -> None:
        for channel in (self.control, self.messages):
            if channel is not None:
                await channel.close()
        LOG.debug("Closed client for %s", self.config.element_id)
