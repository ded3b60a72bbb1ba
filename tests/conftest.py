import asyncio
import json
from dataclasses import dataclass, field

import pytest
from websockets.asyncio.server import ServerConnection, serve

from iofabric import FabricConfig


@dataclass
class FakeDaemon:
    """A local WebSocket endpoint that plays scripted frames to each client."""

    port: int = 0
    script: list[bytes] = field(default_factory=list)
    ping_payload: bytes | None = None
    fail_after_script: bool = False
    close_after_script: bool = False
    paths: list[str] = field(default_factory=list)
    received: asyncio.Queue = field(default_factory=asyncio.Queue)
    pong_received: asyncio.Event = field(default_factory=asyncio.Event)

    def config(self, element_id: str = "element-1") -> FabricConfig:
        return FabricConfig(host="127.0.0.1", port=self.port, element_id=element_id)

    async def handle(self, websocket: ServerConnection) -> None:
        self.paths.append(websocket.request.path)
        for frame in self.script:
            await websocket.send(frame)

        if self.ping_payload is not None:
            pong_waiter = await websocket.ping(self.ping_payload)
            await asyncio.wait_for(pong_waiter, 5)
            self.pong_received.set()

        if self.fail_after_script:
            raise RuntimeError("daemon crashed")
        if self.close_after_script:
            return

        async for message in websocket:
            await self.received.put(message)

    async def next_received(self, timeout: float = 5.0) -> bytes:
        return await asyncio.wait_for(self.received.get(), timeout)


@pytest.fixture
async def daemon():
    daemon = FakeDaemon()
    async with serve(daemon.handle, "127.0.0.1", 0) as server:
        daemon.port = server.sockets[0].getsockname()[1]
        yield daemon


@dataclass
class FakeLocalApi:
    """A minimal HTTP/1.1 endpoint answering every POST with one canned response."""

    port: int = 0
    status: int = 200
    body: bytes = b"{}"
    requests: list[tuple[str, object]] = field(default_factory=list)

    def config(self) -> FabricConfig:
        return FabricConfig(host="127.0.0.1", port=self.port, element_id="element-1")

    async def handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        head = await reader.readuntil(b"\r\n\r\n")
        request_line, *header_lines = head.decode("latin-1").split("\r\n")
        headers = {}
        for line in header_lines:
            name, sep, value = line.partition(":")
            if sep:
                headers[name.strip().lower()] = value.strip()

        content = await reader.readexactly(int(headers.get("content-length", "0")))
        path = request_line.split(" ")[1]
        self.requests.append((path, json.loads(content) if content else None))

        response_head = (
            f"HTTP/1.1 {self.status} Status\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(self.body)}\r\n"
            "Connection: close\r\n"
            "\r\n"
        )
        writer.write(response_head.encode("latin-1") + self.body)
        await writer.drain()
        writer.close()
        await writer.wait_closed()


@pytest.fixture
async def local_api():
    local_api = FakeLocalApi()
    server = await asyncio.start_server(local_api.handle, "127.0.0.1", 0)
    local_api.port = server.sockets[0].getsockname()[1]
    async with server:
        yield local_api
