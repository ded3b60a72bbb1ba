"""Configuration for iofabric clients."""

import os
from collections.abc import Sequence

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_ELEMENT_ID = "NOT_DEFINED"


class FabricConfig(BaseSettings):
    host: str = "iofabric"
    port: int = 54321
    ssl: bool = False
    element_id: str = DEFAULT_ELEMENT_ID

    control_path: str = "/v2/control/socket/id/"
    message_path: str = "/v2/message/socket/id/"

    open_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_prefix="iofabric_", frozen=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # IOFABRIC_* environment variables override constructor arguments.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def resolve(
        cls,
        host: str | None = None,
        port: int | None = None,
        element_id: str | None = None,
        argv: Sequence[str] | None = None,
    ) -> "FabricConfig":
        """
        Build a config from explicit overrides and the process environment.

        Blank hosts, non-positive ports and blank ids are treated as absent.
        IOFABRIC_* environment variables win over every argument. Otherwise
        the element id is taken from the SELFNAME environment variable, then
        the explicit argument, then an ``--id=`` process argument. Any value
        of the SSL environment variable turns TLS on.
        """
        overrides: dict[str, object] = {}
        if host and host.strip():
            overrides["host"] = host
        if port and port > 0:
            overrides["port"] = port

        options = parse_options(argv or [])
        resolved_id = os.environ.get("SELFNAME")
        if not resolved_id and element_id and element_id.strip():
            resolved_id = element_id
        if not resolved_id:
            resolved_id = options.get("--id")
        if resolved_id:
            overrides["element_id"] = resolved_id

        if "SSL" in os.environ:
            overrides["ssl"] = True

        return cls(**overrides)

    def ws_url(self, path: str) -> str:
        return self.endpoint_url("wss" if self.ssl else "ws", path)

    def http_url(self, path: str) -> str:
        return self.endpoint_url("https" if self.ssl else "http", path)

    def endpoint_url(self, scheme: str, path: str) -> str:
        return f"{scheme}://{self.host}:{self.port}{path}"

    @property
    def control_url(self) -> str:
        return self.ws_url(self.control_path + self.element_id)

    @property
    def message_url(self) -> str:
        return self.ws_url(self.message_path + self.element_id)


def parse_options(argv: Sequence[str]) -> dict[str, str]:
    """Collect ``key=value`` process arguments into a dict."""
    options = {}
    for arg in argv:
        key, sep, value = arg.partition("=")
        if sep and key:
            options[key] = value
    return options
