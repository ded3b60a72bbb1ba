"""Listen on the control channel and print each configuration signal."""

import argparse
import asyncio
import logging

from iofabric import FabricClient
from iofabric.startup import init


async def run(host: str, element_id: str) -> None:
    config = await init(host=host, element_id=element_id)
    client = FabricClient(config)

    def on_new_config_signal() -> None:
        print("configuration changed")

    def on_error(error: Exception) -> None:
        print(f"error: {error}")

    connection = await client.open_control_channel(on_new_config_signal, on_error=on_error)
    await connection.wait_closed()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--id", required=True)
    parser.add_argument("--host", default="iofabric")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    asyncio.run(run(args.host, args.id))


if __name__ == "__main__":
    main()
