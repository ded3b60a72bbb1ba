"""
iofabric - ioFabric client SDK

Exchanges messages with a local ioFabric daemon over two WebSocket channels
(control and message) that carry a one-byte-opcode binary protocol.
"""

from iofabric.api import LocalApi, http_post_json
from iofabric.channels import ControlChannel, MessageChannel
from iofabric.client import FabricClient
from iofabric.codec import (
    decode_inbound,
    decode_receipt,
    encode_ack,
    encode_message_frame,
    encode_pong,
)
from iofabric.config import FabricConfig
from iofabric.connection import ConnectionState, SocketConnection, send_ack
from iofabric.entities import BytesCodec, EntityCodec, ModelCodec, decode_entities
from iofabric.errors import (
    BadRequest,
    DecodeError,
    EncodingError,
    IOFabricError,
    NotConnectedError,
    TransportError,
)
from iofabric.models import Frame, Opcode, Receipt

__all__ = [
    # Client
    "FabricClient",
    "FabricConfig",
    "LocalApi",
    "http_post_json",
    # Channels
    "ControlChannel",
    "MessageChannel",
    "SocketConnection",
    "ConnectionState",
    "send_ack",
    # Codec
    "decode_inbound",
    "decode_receipt",
    "encode_ack",
    "encode_message_frame",
    "encode_pong",
    "Frame",
    "Opcode",
    "Receipt",
    # Entities
    "BytesCodec",
    "EntityCodec",
    "ModelCodec",
    "decode_entities",
    # Errors
    "IOFabricError",
    "BadRequest",
    "DecodeError",
    "EncodingError",
    "NotConnectedError",
    "TransportError",
]

__version__ = "0.1.0"
