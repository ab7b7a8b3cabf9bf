"""Error kinds raised by a load operation.

Every failure reaches the caller as exactly one of these, with the original
exception chained as ``__cause__``.
"""

from __future__ import annotations

from typing import List, Optional


class ConfigLoadError(Exception):
    """Base class for every load failure."""

    pass


class ReadError(ConfigLoadError):
    """Raised when the source bytes cannot be obtained."""

    pass


class EncodingConversionError(ConfigLoadError):
    """Raised when charset sniffing or transcoding fails.

    ``stage`` names the step that failed: ``"sniff"`` when no charset could be
    guessed, ``"decode"`` when the chosen codec rejected the input.
    """

    def __init__(self, message: str, stage: str = "decode"):
        super().__init__(message)
        self.stage = stage


class StagingError(ConfigLoadError):
    """Raised when the temporary artifact cannot be created, written or closed."""

    pass


class ParseError(ConfigLoadError):
    """Raised when the format parser rejects the normalized content."""

    pass


class BindError(ConfigLoadError):
    """Raised when the parsed tree cannot be bound onto the target type."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []
