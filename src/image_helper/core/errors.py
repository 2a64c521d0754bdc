"""
Fault types reported by the image pipeline.

Lookup misses are returned as ``NotFound`` instances rather than raised, so
callers can branch on ``isinstance`` the same way they inspect per-key load
and derivation faults in a ``BatchReport``.
"""

from typing import Optional


class ImageHelperError(Exception):
    """Base class for every pipeline fault."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class NotFound(ImageHelperError):
    """No encoded image or nine-slice data is cached under the key."""


class UnsupportedSource(ImageHelperError):
    """A loaded asset's pixel source cannot be rasterized."""


class StalledLoad(ImageHelperError):
    """A load did not signal completion before the batch deadline."""


class LoadCancelled(ImageHelperError):
    """A pending load was cancelled together with its batch."""


class InvalidGeometry(ImageHelperError, ValueError):
    """A grid, slice, rect or nine-slice measurement cannot describe a region."""
