"""
Host engine integrations.

The pipeline talks to the rendering engine only through ``HostEngine``;
``PillowHostEngine`` is the bundled in-memory implementation.
"""

from .base import HostEngine
from .engines import NineSliceNode, PillowHostEngine, RenderTarget

__all__ = [
    "HostEngine",
    "PillowHostEngine",
    "NineSliceNode",
    "RenderTarget",
]
