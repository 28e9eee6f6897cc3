"""Error types raised by the plugin.

Both errors carry a stable `code` string so callers can tell failure
kinds apart without matching on messages.
"""

CONFIGURATION_ERROR = "configuration_error"
NONZERO_EXIT = "nonzero_exit"
EXECUTION_ERROR = "execution_error"


class ConfigurationError(Exception):
    """Raised when a required configuration value is missing."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        code: str = CONFIGURATION_ERROR,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.code = code


class ProcessError(Exception):
    """Raised when the external tool fails to launch or exits non-zero."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = NONZERO_EXIT,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code


__all__ = [
    "CONFIGURATION_ERROR",
    "EXECUTION_ERROR",
    "NONZERO_EXIT",
    "ConfigurationError",
    "ProcessError",
]
