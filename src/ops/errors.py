"""
Error types raised by the detection pipeline.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for pipeline errors."""


class InputError(RelayError):
    """Input data is malformed (zero-sized frame, bad tensor data)."""


class DecodeError(RelayError):
    """Model output shape does not match any supported layout."""


class TransportError(RelayError):
    """Upload could not be performed."""
