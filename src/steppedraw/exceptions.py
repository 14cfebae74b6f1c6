"""
Exception hierarchy for steppedraw.

This module defines the exception hierarchy for all error conditions that can
occur while locating, decoding and querying SPICE raw files.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class SteppedRawError(Exception):
    """Base exception for all steppedraw errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize SteppedRawError.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}


# Configuration exceptions
class ConfigurationError(SteppedRawError):
    """Base class for configuration-related errors."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid."""


# File format exceptions
class RawFileError(SteppedRawError):
    """Base class for errors raised while decoding a raw file."""


class InvalidSourceError(RawFileError):
    """Raised when the source path is missing, not a file or has the wrong extension."""

    def __init__(
        self,
        filepath: Union[str, Path],
        reason: str,
        allowed_extensions: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize InvalidSourceError.

        Args:
            filepath: The rejected path
            reason: Why the path was rejected
            allowed_extensions: Extensions accepted by the reader
        """
        message = f"Invalid raw file source {filepath}: {reason}"
        details = {
            "filepath": str(filepath),
            "reason": reason,
            "allowed_extensions": allowed_extensions,
        }
        super().__init__(message, details)


class UndecodableHeaderError(RawFileError):
    """Raised when no candidate encoding exposes the header markers."""

    def __init__(self, tried_encodings: List[str], markers: List[str]) -> None:
        """
        Initialize UndecodableHeaderError.

        Args:
            tried_encodings: Codecs that were attempted, in order
            markers: Marker substrings that were searched for
        """
        message = (
            f"Could not decode raw header: none of {', '.join(markers)} found "
            f"using {', '.join(tried_encodings)}"
        )
        details = {"tried_encodings": tried_encodings, "markers": markers}
        super().__init__(message, details)


class MissingBoundaryMarkerError(RawFileError):
    """Raised when the header/payload separator is absent."""

    def __init__(self, marker: str, encoding: str) -> None:
        """
        Initialize MissingBoundaryMarkerError.

        Args:
            marker: The separator that was searched for
            encoding: Encoding the header was decoded with
        """
        message = f"Separator {marker!r} not found in {encoding} header"
        details = {"marker": marker, "encoding": encoding}
        super().__init__(message, details)


class MalformedNumericFieldError(RawFileError):
    """Raised when a numeric header field is not an unsigned integer."""

    def __init__(self, field_name: str, value: str) -> None:
        """
        Initialize MalformedNumericFieldError.

        Args:
            field_name: Header field name
            value: The raw text that failed to parse
        """
        message = f"Header field '{field_name}' is not an unsigned integer: {value!r}"
        details = {"field": field_name, "value": value}
        super().__init__(message, details)


class LayoutMismatchError(RawFileError):
    """Raised when the payload does not match the layout implied by the header."""

    def __init__(
        self, message: str, expected: Optional[int] = None, actual: Optional[int] = None
    ) -> None:
        """
        Initialize LayoutMismatchError.

        Args:
            message: Error message
            expected: Expected size (bytes or variables)
            actual: Observed size
        """
        details = {"expected": expected, "actual": actual}
        super().__init__(message, details)
