"""
Image Helper

Loads bitmap assets into a host rendering engine and derives grid-slice
crops, nine-slice fragments and portable data-URL encodings from them.
"""

__version__ = "0.1.0"

from .config import PipelineConfig
from .api import HostEngine, PillowHostEngine
from .core import (
    ArtifactCache,
    BatchReport,
    ImageDescriptor,
    ImagePipeline,
    InvalidGeometry,
    LoadCancelled,
    NineSliceData,
    NineSliceSpec,
    NotFound,
    ParseDescriptor,
    PillowRasterizer,
    Rect,
    SliceSpec,
    StalledLoad,
    UnsupportedSource,
    load_manifest,
    slice_to_rect,
)


def main():
    """Entry point for the image-helper command."""
    from .cli import main as cli_main
    cli_main()


__all__ = [
    "PipelineConfig",
    "HostEngine",
    "PillowHostEngine",
    "ArtifactCache",
    "BatchReport",
    "ImageDescriptor",
    "ImagePipeline",
    "InvalidGeometry",
    "LoadCancelled",
    "NineSliceData",
    "NineSliceSpec",
    "NotFound",
    "ParseDescriptor",
    "PillowRasterizer",
    "Rect",
    "SliceSpec",
    "StalledLoad",
    "UnsupportedSource",
    "load_manifest",
    "slice_to_rect",
]
