"""Exceptions raised by the iofabric SDK."""


class IOFabricError(Exception):
    """Base class for all iofabric errors."""


class TransportError(IOFabricError):
    """The socket could not be opened or was reset while open."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        self.url = url
        self.cause = cause
        message = f"Transport failure on {url}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotConnectedError(IOFabricError):
    """A send was attempted on a connection that is not open."""

    def __init__(self, url: str | None = None) -> None:
        self.url = url
        super().__init__(f"WebSocket is not connected: {url or '<never opened>'}")


class DecodeError(IOFabricError):
    """An inbound frame does not match its opcode's layout."""


class EncodingError(IOFabricError):
    """An outbound payload cannot be framed."""


class BadRequest(IOFabricError):
    """The local API rejected a request with HTTP 400."""

    def __init__(self, url: str, body: object = None) -> None:
        self.url = url
        self.body = body
        super().__init__(f"Bad request to {url}: {body!r}")
