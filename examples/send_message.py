"""Open the message channel, publish one message and print receipts."""

import argparse
import asyncio
import logging

from iofabric import FabricClient, FabricConfig


async def run(config: FabricConfig, payload: bytes) -> None:
    client = FabricClient(config)
    done = asyncio.Event()

    async def on_ready() -> None:
        await client.send_message(payload)

    def on_message_receipt(message_id: str, timestamp: int) -> None:
        print(f"receipt: {message_id} at {timestamp}")
        done.set()

    def on_error(error: Exception) -> None:
        print(f"error: {error}")
        done.set()

    await client.open_message_channel(
        on_ready,
        on_message_receipt=on_message_receipt,
        on_error=on_error,
    )
    await done.wait()
    await client.close()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--id", required=True)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=54321)
    parser.add_argument("--payload", default="hello")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    config = FabricConfig.resolve(host=args.host, port=args.port, element_id=args.id)
    asyncio.run(run(config, args.payload.encode("utf-8")))


if __name__ == "__main__":
    main()
