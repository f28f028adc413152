"""
Exception hierarchy shared by every layer of *orthanc_cli*.

All failures surfaced to the operator carry the same three fields so that the
CLI boundary can render them uniformly:

* ``error``   – short category (``"Command error"``, ``"API error: 404 Not Found"`` …)
* ``message`` – optional human-readable explanation
* ``details`` – optional extra context (server-side details, expected format …)

Errors detected locally (bad option combinations, unknown columns, malformed
``TagName=TagValue`` tokens) never reach the server.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "CliError",
    "CommandError",
    "InvalidColumnError",
    "MalformedPairError",
    "ConflictingOptionsError",
    "InsufficientOptionsError",
    "ApiError",
    "NotFoundError",
    "ConfigFileError",
]

COMMAND_ERROR = "Command error"


class CliError(Exception):
    """Base class carrying the ``error`` / ``message`` / ``details`` triple."""

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(error if message is None else f"{error}: {message}")
        self.error = error
        self.message = message
        self.details = details

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CliError):
            return NotImplemented
        return (self.error, self.message, self.details) == (
            other.error,
            other.message,
            other.details,
        )

    def __hash__(self) -> int:
        return hash((self.error, self.message, self.details))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error={self.error!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


# --------------------------------------------------------------------------- #
# Locally detected command errors                                             #
# --------------------------------------------------------------------------- #
class CommandError(CliError):
    """Bad option value or combination detected before any network call."""

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None) -> None:
        super().__init__(COMMAND_ERROR, message, details)


class InvalidColumnError(CommandError):
    """A requested column is not part of the default column set."""

    def __init__(self, column: str, available: list[str] | tuple[str, ...]) -> None:
        super().__init__(
            f"Invalid column name: {column}. Available columns: {', '.join(available)}"
        )
        self.column = column


class MalformedPairError(CommandError):
    """A ``TagName=TagValue`` token could not be split in two."""

    def __init__(self, token: str) -> None:
        super().__init__(
            f"Wrong option value '{token}'",
            "Must be of format 'TagName=TagValue'",
        )
        self.token = token


class ConflictingOptionsError(CommandError):
    """Inline tag options were combined with a config file."""

    def __init__(self) -> None:
        super().__init__("Conflicting options")


class InsufficientOptionsError(CommandError):
    """Neither inline tag options nor a config file were supplied."""

    def __init__(self) -> None:
        super().__init__("Not enough options")


# --------------------------------------------------------------------------- #
# Server and file errors                                                      #
# --------------------------------------------------------------------------- #
class ApiError(CliError):
    """The server rejected the request or could not be reached."""

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(error, message, details)
        self.status_code = status_code


class NotFoundError(ApiError):
    """The requested entity or modality does not exist."""


class ConfigFileError(CliError):
    """A tag-configuration file could not be read or parsed."""
