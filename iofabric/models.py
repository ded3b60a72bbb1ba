"""Pydantic models exchanged with the ioFabric daemon."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Opcode(IntEnum):
    PING = 0x9
    PONG = 0xA
    ACK = 0xB
    CONTROL_SIGNAL = 0xC
    MESSAGE = 0xD
    RECEIPT = 0xE


class Receipt(BaseModel):
    """Daemon confirmation that a published message was accepted."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    timestamp: int = 0


class Frame(BaseModel):
    """A decoded inbound frame. ``receipt`` is only set for RECEIPT frames."""

    model_config = ConfigDict(frozen=True)

    opcode: Opcode
    payload: bytes = b""
    receipt: Receipt | None = None


class ElementRequest(BaseModel):
    id: str


class MessageQueryRequest(BaseModel):
    id: str
    timeframestart: int
    timeframeend: int
    publishers: list[str]


class MessageQueryResult(BaseModel):
    timeframestart: int
    timeframeend: int
    messages: list[Any] = Field(default_factory=list)
