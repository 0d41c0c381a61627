"""Error hierarchy for nestgen.

Every failure the scaffolding core can surface is a ``ScaffoldError`` tagged
with an ``ErrorKind``.  Errors carry the file path and the name that was
expected so the CLI can explain a structural mismatch to the user.  None of
them are retried: they describe a mismatch between expectation and the real
files, which a retry cannot fix.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Classification of scaffolding failures."""
    UNPARSABLE_TARGET = "UnparsableTarget"
    TARGET_CONSTRUCT_NOT_FOUND = "TargetConstructNotFound"
    MARKER_NOT_FOUND = "MarkerNotFound"
    INVALID_MARKER_SHAPE = "InvalidMarkerShape"
    PROPERTY_NOT_ARRAY = "PropertyNotArray"
    IO_FAILURE = "IOFailure"
    TEMPLATE_NOT_FOUND = "TemplateNotFound"


class ScaffoldError(Exception):
    """Base class for every error raised by the scaffolding core."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        *,
        path: str | Path | None = None,
        expected: str | None = None,
    ) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        self.expected = expected
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.kind.value}: {self.message}"
        if self.path is not None:
            text += f" ({self.path})"
        return text


class UnparsableTargetError(ScaffoldError):
    """The file to augment could not be scanned into a structured document."""
    kind = ErrorKind.UNPARSABLE_TARGET


class TargetConstructNotFoundError(ScaffoldError):
    """No class with the expected name exists in the file."""
    kind = ErrorKind.TARGET_CONSTRUCT_NOT_FOUND


class MarkerNotFoundError(ScaffoldError):
    """The class exists but is not decorated with the expected marker."""
    kind = ErrorKind.MARKER_NOT_FOUND


class InvalidMarkerShapeError(ScaffoldError):
    """The marker's first argument is missing or not an object literal."""
    kind = ErrorKind.INVALID_MARKER_SHAPE


class PropertyNotArrayError(ScaffoldError):
    """The configuration property is missing or not an array literal."""
    kind = ErrorKind.PROPERTY_NOT_ARRAY


class IOFailureError(ScaffoldError):
    """A filesystem operation failed."""
    kind = ErrorKind.IO_FAILURE


class TemplateNotFoundError(ScaffoldError):
    """A template file or template directory could not be located."""
    kind = ErrorKind.TEMPLATE_NOT_FOUND
