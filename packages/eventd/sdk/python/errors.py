"""Exceptions raised by the eventd SDK."""


class EventdError(Exception):
    """Base class for all eventd SDK errors."""


class EventdOptionsError(EventdError):
    """The eventd configuration section could not be parsed."""


class EventdNkeyError(EventdError):
    """The configured nkey value or nkey seed file is unusable."""


class EventdConnectError(EventdError):
    """The initial dial to the eventd server failed."""


class EventdClientNotInitializedError(EventdError, RuntimeError):
    """Publish or subscribe was called before a connected client was set."""

    def __init__(self, message: str = "eventd client is not initialized, call set_global_client() and connect() first"):
        super().__init__(message)


class EventdSerializationError(EventdError, ValueError):
    """A published value could not be encoded as JSON."""
