"""
Nine-slice decomposition of an image region.

Starting at an offset, the region is carved into a 3x3 grid whose column
widths are (left, center, right) and row heights are (top, center, bottom):

    TL | TC | TR
    ---+----+---
    ML | MC | MR
    ---+----+---
    BL | BC | BR

Fragments are always produced in this row-major order.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from .errors import InvalidGeometry
from .image_encoder import Rasterizer
from .models import NineSliceData, NineSliceSpec, Rect

# Canonical names for the nine fragments, row-major order.
SLICE_NAMES: List[str] = [
    "corner_tl", "edge_top",    "corner_tr",
    "edge_left", "center",      "edge_right",
    "corner_bl", "edge_bottom", "corner_br",
]


def validate_spec(
    spec: NineSliceSpec,
    offset: Tuple[int, int] = (0, 0),
    bounds: Optional[Tuple[int, int]] = None,
) -> None:
    """Raise InvalidGeometry if the measurements cannot describe a region.

    With ``bounds`` (width, height), the composed region must also fit
    inside the source.
    """
    measurements = (
        spec.top_height, spec.center_height, spec.bottom_height,
        spec.left_width, spec.center_width, spec.right_width,
    )
    if any(m < 0 for m in measurements):
        raise InvalidGeometry(f"Nine-slice measurements must be non-negative: {spec}")
    if bounds is not None:
        region = Rect(offset[0], offset[1], spec.width, spec.height)
        if not region.fits_within(*bounds):
            raise InvalidGeometry(
                f"Nine-slice region {spec.width}x{spec.height} at {offset} "
                f"exceeds source {bounds[0]}x{bounds[1]}"
            )


def nine_slice_rects(spec: NineSliceSpec, offset: Tuple[int, int] = (0, 0)) -> List[Rect]:
    """Return the 9 fragment rects in row-major order."""
    validate_spec(spec)
    ox, oy = offset
    widths = (spec.left_width, spec.center_width, spec.right_width)
    heights = (spec.top_height, spec.center_height, spec.bottom_height)
    # Column and row boundaries
    cx = [ox, ox + widths[0], ox + widths[0] + widths[1]]
    cy = [oy, oy + heights[0], oy + heights[0] + heights[1]]

    rects: List[Rect] = []
    for row in range(3):
        for col in range(3):
            rects.append(Rect(cx[col], cy[row], widths[col], heights[row]))
    return rects


def compose_nine_slice(
    source: Any,
    spec: NineSliceSpec,
    rasterizer: Rasterizer,
    offset: Tuple[int, int] = (0, 0),
) -> List[str]:
    """Encode the 9 fragments of ``source`` described by ``spec``."""
    return [
        rasterizer.encode(source, r.width, r.height, r.x, r.y)
        for r in nine_slice_rects(spec, offset)
    ]


def build_nine_slice_data(
    source: Any,
    spec: NineSliceSpec,
    rasterizer: Rasterizer,
    offset: Tuple[int, int] = (0, 0),
) -> NineSliceData:
    return NineSliceData(spec=spec, src=tuple(compose_nine_slice(source, spec, rasterizer, offset)))
