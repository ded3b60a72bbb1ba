"""
Entity codecs.

The socket protocol treats messages as opaque bytes. An EntityCodec turns
application entities into those bytes and into the JSON form used by the
request/response API.
"""

import base64
from collections.abc import Iterable
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class EntityCodec(Protocol[T]):
    def encode(self, entity: T) -> bytes: ...

    def decode(self, data: bytes) -> T: ...

    def dump(self, entity: T) -> dict[str, Any]: ...

    def load(self, data: dict[str, Any]) -> T: ...


class BytesCodec:
    """Entities are raw bytes; their JSON form carries them base64-encoded."""

    def encode(self, entity: bytes) -> bytes:
        return bytes(entity)

    def decode(self, data: bytes) -> bytes:
        return bytes(data)

    def dump(self, entity: bytes) -> dict[str, Any]:
        return {"contentdata": base64.b64encode(entity).decode("ascii")}

    def load(self, data: dict[str, Any]) -> bytes:
        return base64.b64decode(data.get("contentdata", ""))


class ModelCodec(Generic[M]):
    """Entities are pydantic models serialized as JSON."""

    def __init__(self, model: type[M]) -> None:
        self.model = model

    def encode(self, entity: M) -> bytes:
        return entity.model_dump_json().encode("utf-8")

    def decode(self, data: bytes) -> M:
        return self.model.model_validate_json(data)

    def dump(self, entity: M) -> dict[str, Any]:
        return entity.model_dump(mode="json")

    def load(self, data: dict[str, Any]) -> M:
        return self.model.model_validate(data)


def decode_entities(codec: EntityCodec[T], items: Iterable[dict[str, Any]]) -> list[T]:
    return [codec.load(item) for item in items]
