"""Exception hierarchy shared by every backend.

Argument and credential errors are recovered into tool-level error results.
Backend and serialization errors propagate to the transport.
"""


class MCPServerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(MCPServerError):
    """A backend cannot be configured from its environment."""


class ArgumentError(MCPServerError):
    """A required tool argument is missing or empty."""


class MissingCredentialError(MCPServerError):
    """A token or identity required at the point of use is absent."""


class IdentityError(MCPServerError):
    """A signed identity assertion could not be verified."""


class BackendError(MCPServerError):
    """Talking to the wrapped system failed."""


class APIError(BackendError):
    """The wrapped system answered with an error response."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(f"{status_code} {code}: {message}" if code else f"{status_code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


class ProviderError(MCPServerError):
    """A Provider operation failed; raised to the transport."""


class SerializationError(MCPServerError):
    """A tool result could not be encoded."""
