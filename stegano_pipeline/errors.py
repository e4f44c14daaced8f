from __future__ import annotations

from typing import Any, Dict, Optional


class SteganoPipelineError(ValueError):
    """Base class for every failure raised by the pipeline stages."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidKeyMatrix(SteganoPipelineError):
    """Key matrix determinant has no inverse mod 26."""


class InvalidKeyLength(SteganoPipelineError):
    """S-DES key is not exactly 10 binary digits."""


class InvalidBlockLength(SteganoPipelineError):
    """S-DES block is not exactly 8 binary digits."""


class CapacityExceeded(SteganoPipelineError):
    """Payload plus delimiter does not fit in the carrier's RGB channels."""


class DelimiterNotFound(SteganoPipelineError):
    """Carrier exhausted without finding the end-of-payload marker."""


class ImageDecodeFailure(SteganoPipelineError):
    """Carrier image could not be decoded."""


class DelimiterCollision(SteganoPipelineError):
    """Payload already contains the end-of-payload marker and would be cut short."""
