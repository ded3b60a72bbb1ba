"""Process startup helpers: config resolution and host reachability."""

import asyncio
import logging
import sys
from collections.abc import Sequence

from iofabric.config import FabricConfig

LOG = logging.getLogger(__name__)

FALLBACK_HOST = "127.0.0.1"


async def probe_host(host: str, count: int = 3) -> str:
    """
    Return ``host`` if it answers ``ping``, otherwise the loopback address.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            "ping",
            "-c",
            str(count),
            host,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
    except OSError:
        LOG.warning("Could not run ping for host %s", host, exc_info=True)
        reachable = False
    else:
        reachable = process.returncode == 0 and not stderr

    if reachable:
        return host

    LOG.warning("Host %s is not reachable. Changing to '%s'", host, FALLBACK_HOST)
    return FALLBACK_HOST


async def init(
    host: str | None = None,
    port: int | None = None,
    element_id: str | None = None,
    argv: Sequence[str] | None = None,
) -> FabricConfig:
    """Resolve the client config and fall back to loopback for an unreachable host."""
    if argv is None:
        argv = sys.argv[1:]

    config = FabricConfig.resolve(host=host, port=port, element_id=element_id, argv=argv)
    reachable_host = await probe_host(config.host)
    if reachable_host != config.host:
        config = config.model_copy(update={"host": reachable_host})

    LOG.info("Using ioFabric at %s:%d as %s", config.host, config.port, config.element_id)
    return config
