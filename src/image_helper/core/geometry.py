"""
geometry.py: Grid-cell addressing for sub-image crops.

A grid overlays the source image with uniform cells numbered row-major from
the top-left. A slice names one cell, or the top-left and bottom-right cells
of a rectangular block:

    cell 0 | cell 1 | cell 2        pos=1       -> cell 1
    -------+--------+-------        pos=(0, 4)  -> cells 0, 1, 3, 4
    cell 3 | cell 4 | cell 5
"""

from typing import Optional, Tuple

from .errors import InvalidGeometry
from .models import Grid, ImageDescriptor, Rect, SliceSpec
from ..config import DEFAULT_GRID


def normalize_pos(pos) -> Tuple[int, int]:
    """Return the (start, end) cell pair named by a slice position.

    A scalar or one-element position uses the same cell for start and end;
    a missing second element defaults to the first.
    """
    if isinstance(pos, (list, tuple)):
        if not pos:
            raise InvalidGeometry("Slice position must name at least one cell")
        start = pos[0]
        end = pos[1] if len(pos) > 1 and pos[1] is not None else start
        return int(start), int(end)
    return int(pos), int(pos)


def resolve_grid(
    slice_spec: Optional[SliceSpec],
    descriptor: Optional[ImageDescriptor] = None,
    default: Grid = DEFAULT_GRID,
) -> Grid:
    """Pick the grid a slice is measured against: its own, the descriptor's, or the default."""
    if slice_spec is not None and slice_spec.grid:
        return slice_spec.grid
    if descriptor is not None and descriptor.grid:
        return descriptor.grid
    return default


def full_rect(width: int, height: int) -> Rect:
    return Rect(0, 0, width, height)


def slice_to_rect(
    source_width: int,
    slice_spec: SliceSpec,
    grid_size: Grid,
    source_height: Optional[int] = None,
) -> Rect:
    """Convert a grid slice into a pixel rectangle.

    Args:
        source_width: Width of the source image in pixels; fixes the number
            of grid columns.
        slice_spec: Cell (or cell block) to convert.
        grid_size: (cell_width, cell_height) in pixels.
        source_height: When given, reject blocks that extend below the
            source. Without it, out-of-range rows yield a rect past the
            image, which crops as transparent pixels.

    Returns:
        The rect covering every cell from the start cell to the end cell.

    Raises:
        InvalidGeometry: For non-positive grid dimensions, a grid wider than
            the source, negative cells, or an end cell left of or above the
            start cell.

    Example:
        >>> slice_to_rect(32, SliceSpec(pos=1), (16, 16))
        Rect(x=16, y=0, width=16, height=16)
    """
    cell_w, cell_h = grid_size
    if cell_w <= 0 or cell_h <= 0:
        raise InvalidGeometry(f"Grid cells must have positive size, got {cell_w}x{cell_h}")

    total_cols = source_width // cell_w
    if total_cols <= 0:
        raise InvalidGeometry(
            f"Grid cell width {cell_w} exceeds source width {source_width}"
        )

    start_cell, end_cell = normalize_pos(slice_spec.pos)
    if start_cell < 0 or end_cell < 0:
        raise InvalidGeometry(f"Cell indices must not be negative, got {slice_spec.pos!r}")

    start_row, start_col = divmod(start_cell, total_cols)
    end_row, end_col = divmod(end_cell, total_cols)
    if end_col < start_col or end_row < start_row:
        raise InvalidGeometry(
            f"End cell {end_cell} lies before start cell {start_cell} "
            f"on a {total_cols}-column grid"
        )

    start_x = start_col * cell_w
    start_y = start_row * cell_h
    end_x = (end_col + 1) * cell_w
    end_y = (end_row + 1) * cell_h
    rect = Rect(start_x, start_y, end_x - start_x, end_y - start_y)

    if source_height is not None and rect.bottom > source_height:
        total_rows = source_height // cell_h
        raise InvalidGeometry(
            f"Cells {start_cell}..{end_cell} exceed the {total_cols}x{total_rows} grid "
            f"of a {source_width}x{source_height} source"
        )
    return rect
