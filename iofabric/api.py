"""
Local API client

JSON request/response calls to the ioFabric daemon. The HTTP transport is
``post_json(url, body)``, which returns the decoded response body or raises
(BadRequest for HTTP 400). ``http_post_json`` is the default transport.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from iofabric.config import FabricConfig
from iofabric.entities import BytesCodec, EntityCodec, decode_entities
from iofabric.errors import BadRequest, TransportError
from iofabric.models import ElementRequest, MessageQueryRequest, MessageQueryResult, Receipt

LOG = logging.getLogger(__name__)

PostJson = Callable[[str, dict[str, Any]], Awaitable[dict[str, Any]]]

DEFAULT_TIMEOUT_SECONDS = 30.0


async def http_post_json(url: str, body: dict[str, Any]) -> dict[str, Any]:
    """
    POST ``body`` as JSON and return the decoded JSON response.

    Raises:
        BadRequest: If the daemon answers HTTP 400
        TransportError: If the request fails or any other error status is returned
    """
    try:
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS) as http:
            response = await http.post(url, json=body)

        if response.status_code == 400:
            raise BadRequest(url, response_body(response))

        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        raise TransportError(url, exc) from exc


def response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


@dataclass
class LocalApi:
    """
    Request/response calls against the daemon's local API.

    Usage:
        api = LocalApi(config)
        messages = await api.get_next_messages()
    """

    config: FabricConfig
    post_json: PostJson = http_post_json
    codec: EntityCodec[Any] = field(default_factory=BytesCodec)

    async def send_new_message(self, entity: Any) -> Receipt | None:
        """Publish ``entity``; returns the daemon's receipt when it sends one."""
        body = await self.post("/v2/messages/new", self.codec.dump(entity))
        if body.get("id") and body.get("timestamp"):
            return Receipt(id=body["id"], timestamp=body["timestamp"])
        return None

    async def get_next_messages(self) -> list[Any]:
        """Fetch all unread messages addressed to this element."""
        body = await self.post("/v2/messages/next", ElementRequest(id=self.config.element_id).model_dump())
        return decode_entities(self.codec, body.get("messages") or [])

    async def get_messages_by_query(
        self,
        start: int,
        end: int,
        publishers: list[str],
    ) -> MessageQueryResult | None:
        """
        Fetch messages from ``publishers`` published within [start, end].

        Raises:
            TypeError: If publishers is not a list
        """
        if not isinstance(publishers, list):
            raise TypeError("publishers must be a list")

        request = MessageQueryRequest(
            id=self.config.element_id,
            timeframestart=start,
            timeframeend=end,
            publishers=publishers,
        )
        body = await self.post("/v2/messages/query", request.model_dump())
        if "messages" not in body:
            return None

        return MessageQueryResult(
            timeframestart=body.get("timeframestart", start),
            timeframeend=body.get("timeframeend", end),
            messages=decode_entities(self.codec, body["messages"]),
        )

    async def get_config(self) -> dict[str, Any] | None:
        """Fetch this element's current configuration."""
        body = await self.post("/v2/config/get", ElementRequest(id=self.config.element_id).model_dump())
        config = body.get("config")
        if not config:
            return None
        return json.loads(config)

    async def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = self.config.http_url(path)
        LOG.debug("POST %s", url)
        return await self.post_json(url, payload) or {}
