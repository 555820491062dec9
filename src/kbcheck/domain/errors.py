"""Exceptions raised by the domain layer.

``ParseError`` is fatal to a single document and is converted into an
``UNPARSEABLE_DOCUMENT`` finding at the document boundary.
``ConfigurationError`` is fatal to the whole run. ``ScanCancelled`` stops
a superseded watch-mode scan.
"""

from __future__ import annotations


class KbcheckError(Exception):
    """Base class for kbcheck errors."""


class ParseError(KbcheckError):
    """A document's front-matter block could not be parsed."""

    def __init__(self, path: str, line: int, reason: str) -> None:
        self.path = path
        self.line = line
        self.reason = reason
        super().__init__(f"{path}:{line}: {reason}")


class ConfigurationError(KbcheckError):
    """Schema or scan configuration is malformed."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class ScanCancelled(KbcheckError):
    """A scan was superseded before it finished; it produces no report."""
