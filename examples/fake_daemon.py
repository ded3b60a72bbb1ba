"""Serve a stand-in ioFabric daemon that signals, delivers and prints ACKs."""

import argparse
import asyncio

from websockets.asyncio.server import ServerConnection, serve

from iofabric import Opcode, encode_message_frame


async def handle(websocket: ServerConnection) -> None:
    path = websocket.request.path
    print(f"connected: {path}")

    if path.startswith("/v2/control/"):
        await websocket.send(bytes([Opcode.CONTROL_SIGNAL]))
    else:
        await websocket.send(encode_message_frame(b"hello from the daemon"))

    async for message in websocket:
        if isinstance(message, str):
            message = message.encode("utf-8")
        print(f"{path}: {message.hex()}")


async def run(host: str, port: int) -> None:
    async with serve(handle, host, port) as server:
        await server.serve_forever()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=54321)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    asyncio.run(run(args.host, args.port))


if __name__ == "__main__":
    main()
