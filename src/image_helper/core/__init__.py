"""
Core functionality for loading image batches and deriving their artifacts.
"""

from .errors import (
    ImageHelperError,
    InvalidGeometry,
    LoadCancelled,
    NotFound,
    StalledLoad,
    UnsupportedSource,
)
from .geometry import normalize_pos, resolve_grid, slice_to_rect
from .image_cache import ArtifactCache
from .image_encoder import PillowRasterizer, Rasterizer, decode_data_url
from .loader import AssetLoader, LoadReport, LoadRequest, build_requests
from .models import (
    EXTRUDED_SUFFIX,
    NORMAL_SUFFIX,
    ImageDescriptor,
    NineSliceData,
    NineSliceSpec,
    ParseDescriptor,
    Rect,
    SliceSpec,
    load_manifest,
    variant_key,
)
from .nine_slice import SLICE_NAMES, compose_nine_slice, nine_slice_rects
from .pipeline import BatchReport, ImagePipeline
from .readiness import GateState, ReadinessGate

__all__ = [
    "ImageHelperError",
    "InvalidGeometry",
    "LoadCancelled",
    "NotFound",
    "StalledLoad",
    "UnsupportedSource",
    "normalize_pos",
    "resolve_grid",
    "slice_to_rect",
    "ArtifactCache",
    "PillowRasterizer",
    "Rasterizer",
    "decode_data_url",
    "AssetLoader",
    "LoadReport",
    "LoadRequest",
    "build_requests",
    "EXTRUDED_SUFFIX",
    "NORMAL_SUFFIX",
    "ImageDescriptor",
    "NineSliceData",
    "NineSliceSpec",
    "ParseDescriptor",
    "Rect",
    "SliceSpec",
    "load_manifest",
    "variant_key",
    "SLICE_NAMES",
    "compose_nine_slice",
    "nine_slice_rects",
    "BatchReport",
    "ImagePipeline",
    "GateState",
    "ReadinessGate",
]
