"""Unit tests for grid-slice to rect conversion."""

import pytest

from image_helper.core.errors import InvalidGeometry
from image_helper.core.geometry import full_rect, normalize_pos, resolve_grid, slice_to_rect
from image_helper.core.models import ImageDescriptor, Rect, SliceSpec


# ---------------------------------------------------------------------------
# Position normalization
# ---------------------------------------------------------------------------
class TestNormalizePos:
    def test_scalar(self):
        assert normalize_pos(5) == (5, 5)

    def test_single_element(self):
        assert normalize_pos((3,)) == (3, 3)

    def test_pair(self):
        assert normalize_pos([2, 7]) == (2, 7)

    def test_missing_second_element(self):
        assert normalize_pos([4, None]) == (4, 4)

    def test_empty(self):
        with pytest.raises(InvalidGeometry):
            normalize_pos([])


# ---------------------------------------------------------------------------
# Single cells
# ---------------------------------------------------------------------------
class TestSingleCell:
    def test_first_cell_of_tile_sheet(self):
        assert slice_to_rect(32, SliceSpec(pos=0), (16, 16)) == Rect(0, 0, 16, 16)

    def test_second_cell(self):
        assert slice_to_rect(32, SliceSpec(pos=1), (16, 16)) == Rect(16, 0, 16, 16)

    def test_wraps_to_next_row(self):
        assert slice_to_rect(32, SliceSpec(pos=2), (16, 16)) == Rect(0, 16, 16, 16)

    @pytest.mark.parametrize("grid", [(16, 16), (8, 4), (32, 16), (5, 7)])
    @pytest.mark.parametrize("cell", [0, 1, 3, 7, 12, 25])
    def test_cell_is_one_grid_unit(self, grid, cell):
        gw, gh = grid
        source_width = 64
        cols = source_width // gw
        rect = slice_to_rect(source_width, SliceSpec(pos=cell), grid)
        assert rect == Rect((cell % cols) * gw, (cell // cols) * gh, gw, gh)

    def test_partial_column_is_ignored(self):
        # 40 px wide with 16 px cells -> 2 full columns
        assert slice_to_rect(40, SliceSpec(pos=2), (16, 16)) == Rect(0, 16, 16, 16)


# ---------------------------------------------------------------------------
# Cell blocks
# ---------------------------------------------------------------------------
class TestCellBlock:
    @pytest.mark.parametrize("start,end", [(0, 0), (0, 1), (1, 3), (4, 7), (8, 11)])
    def test_same_row_width(self, start, end):
        rect = slice_to_rect(64, SliceSpec(pos=(start, end)), (16, 8))
        assert rect.width == (end % 4 - start % 4 + 1) * 16
        assert rect.height == 8

    def test_rectangular_block(self):
        # 3 columns; cells 0..4 cover columns 0-1 of rows 0-1
        assert slice_to_rect(48, SliceSpec(pos=(0, 4)), (16, 16)) == Rect(0, 0, 32, 32)

    def test_vertical_block(self):
        assert slice_to_rect(48, SliceSpec(pos=(1, 7)), (16, 16)) == Rect(16, 0, 16, 48)

    def test_single_element_tuple(self):
        assert slice_to_rect(32, SliceSpec(pos=(1,)), (16, 16)) == Rect(16, 0, 16, 16)


# ---------------------------------------------------------------------------
# Invalid geometry
# ---------------------------------------------------------------------------
class TestInvalidGeometry:
    def test_zero_grid(self):
        with pytest.raises(InvalidGeometry, match="positive"):
            slice_to_rect(32, SliceSpec(pos=0), (0, 16))

    def test_grid_wider_than_source(self):
        with pytest.raises(InvalidGeometry, match="exceeds source width"):
            slice_to_rect(8, SliceSpec(pos=0), (16, 16))

    def test_negative_cell(self):
        with pytest.raises(InvalidGeometry, match="negative"):
            slice_to_rect(32, SliceSpec(pos=-1), (16, 16))

    def test_end_before_start(self):
        with pytest.raises(InvalidGeometry, match="before start"):
            slice_to_rect(48, SliceSpec(pos=(4, 0)), (16, 16))

    def test_end_column_left_of_start(self):
        # 3 columns: cell 2 is (row 0, col 2), cell 3 is (row 1, col 0)
        with pytest.raises(InvalidGeometry):
            slice_to_rect(48, SliceSpec(pos=(2, 3)), (16, 16))

    def test_out_of_range_row_is_tolerated_without_height(self):
        assert slice_to_rect(32, SliceSpec(pos=10), (16, 16)) == Rect(0, 80, 16, 16)

    def test_out_of_range_row_rejected_with_height(self):
        with pytest.raises(InvalidGeometry, match="exceed"):
            slice_to_rect(32, SliceSpec(pos=10), (16, 16), source_height=16)

    def test_in_range_row_accepted_with_height(self):
        assert slice_to_rect(32, SliceSpec(pos=3), (16, 16), source_height=32) == Rect(16, 16, 16, 16)


# ---------------------------------------------------------------------------
# Grid resolution
# ---------------------------------------------------------------------------
class TestResolveGrid:
    def test_slice_grid_wins(self):
        descriptor = ImageDescriptor(key="a", url="u", grid=(8, 8))
        assert resolve_grid(SliceSpec(pos=0, grid=(4, 4)), descriptor) == (4, 4)

    def test_descriptor_grid(self):
        descriptor = ImageDescriptor(key="a", url="u", grid=(8, 8))
        assert resolve_grid(SliceSpec(pos=0), descriptor) == (8, 8)

    def test_default_grid(self):
        assert resolve_grid(SliceSpec(pos=0), ImageDescriptor(key="a", url="u")) == (16, 16)

    def test_custom_default(self):
        assert resolve_grid(None, None, default=(24, 12)) == (24, 12)

    def test_full_rect(self):
        assert full_rect(20, 10) == Rect(0, 0, 20, 10)
