"""Test module for the crop of grids to an extent or an index window."""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pytest

import geogrid as gg
from geogrid.exceptions import IndexOutOfBoundsError, NoOverlapError


class TestCrop:

    def test_crop(self, world_grid: gg.RasterGrid) -> None:
        """Test that a crop covers the target, snapped outward to the cell edges, without resampling."""

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            cropped = world_grid.crop((-141, -51, 17, 59))

        assert cropped.extent == gg.Extent(-180, 0, 0, 90)
        assert cropped.shape == (2, 2)
        assert cropped.res == (90, 45)
        assert np.array_equal(cropped.data, [[0, 1], [4, 5]])
        assert cropped.crs == world_grid.crs

        # The output covers the requested rectangle
        assert cropped.extent.contains(-141, 17)
        assert cropped.extent.contains(-51, 59)

    @pytest.mark.parametrize(
        "target",
        [
            (-141, -51, 17, 59),
            (-100, -99, 10, 11),
            (0, 180, -90, 0),
            (-179.5, 179.5, -89.5, 89.5),
            (-90, 90, -45, 45),
        ],
    )  # type: ignore
    def test_crop__properties(self, world_grid: gg.RasterGrid, target: tuple[float, float, float, float]) -> None:
        """Test that the crop output contains the target, keeps the resolution and matches the source values."""

        cropped = world_grid.crop(target)

        assert cropped.res == world_grid.res
        assert cropped.extent.intersect(gg.Extent(*target)) == gg.Extent(*target)
        assert cropped.shape == (
            round(cropped.extent.height / world_grid.res[1]),
            round(cropped.extent.width / world_grid.res[0]),
        )

        # Every cell of the output has the value of the source cell at the same location
        for row in range(cropped.rows):
            for col in range(cropped.cols):
                x, y = cropped.cell_center(row, col)
                assert cropped.value_at(row, col) == world_grid.value_at(*world_grid.cell_index_for(x, y))

    @pytest.mark.parametrize("target", [(200, 300, 0, 10), (180, 200, 0, 10), (-10, 10, 90, 100)])  # type: ignore
    def test_crop__no_overlap(self, world_grid: gg.RasterGrid, target: tuple[float, float, float, float]) -> None:
        """Test that targets disjoint from the grid, or only touching its edges, fail."""

        with pytest.raises(NoOverlapError):
            world_grid.crop(target)

    def test_crop__identity(self, world_grid: gg.RasterGrid) -> None:

        cropped = world_grid.crop(world_grid.extent)

        assert cropped.raster_equal(world_grid)

    def test_crop__containing(self, world_grid: gg.RasterGrid) -> None:
        """Test that a target containing the grid returns an equal grid, with a warning."""

        with pytest.warns(UserWarning, match="extends beyond the grid extent"):
            cropped = world_grid.crop((-200, 200, -100, 100))

        assert cropped.raster_equal(world_grid)

    def test_crop__partial(self, world_grid: gg.RasterGrid, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a target partially outside of the grid is cropped to the intersection."""

        with pytest.warns(UserWarning, match="extends beyond the grid extent"):
            cropped = world_grid.crop((100, 250, -10, 10))

        assert cropped.extent == gg.Extent(90, 180, -45, 45)
        assert cropped.shape == (2, 1)
        assert np.array_equal(cropped.data, [[7], [11]])

        # The warning can be silenced through the configuration
        monkeypatch.setitem(gg.config, "warn_partial_crop", False)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            world_grid.crop((100, 250, -10, 10))

    def test_crop__sliver(self, world_grid: gg.RasterGrid) -> None:
        """Test that a target smaller than a cell returns the cell containing it."""

        cropped = world_grid.crop((-100, -99, 10, 11))

        assert cropped.shape == (1, 1)
        assert cropped.extent == gg.Extent(-180, -90, 0, 45)
        assert cropped.value_at(0, 0) == 4

    @pytest.mark.parametrize(
        "target",
        [(-150, -89.99999, 50, 60), (-90.00001, -50, 50, 60), (-150, -100, 44.99999, 60), (-150, -100, 10, 45.00001)],
    )  # type: ignore
    def test_crop__near_edges(self, world_grid: gg.RasterGrid, target: tuple[float, float, float, float]) -> None:
        """Test that a target extending slightly past a cell edge includes the next cell."""

        cropped = world_grid.crop(target)

        assert cropped.extent.intersect(target) == gg.Extent(*target)

    def test_crop__near_edges_extent(self, world_grid: gg.RasterGrid) -> None:

        cropped = world_grid.crop(gg.Extent(-150, -89.99999, 50, 60))

        assert cropped.extent == gg.Extent(-180, 0, 45, 90)
        assert cropped.shape == (1, 2)

    def test_crop__numpy(self, world_grid: gg.RasterGrid) -> None:

        cropped = world_grid.crop(np.array([-141, -51, 17, 59]))

        assert cropped.extent == gg.Extent(-180, 0, 0, 90)

    def test_crop__aligned(self) -> None:
        """Test that targets on cell edges are not extended by floating point noise."""

        grid = gg.RasterGrid(np.arange(600).reshape(30, 20), extent=(0, 2, 0, 3))
        cropped = grid.crop((0.3, 0.7, 1.2, 2.5))

        assert cropped.shape == (13, 4)
        assert tuple(cropped.extent) == pytest.approx((0.3, 0.7, 1.2, 2.5))
        assert cropped.res == grid.res
        assert cropped.value_at(0, 0) == grid.value_at(5, 3)

    def test_crop__resolution_preserved(self) -> None:
        """Test that the resolution of successive crops is exactly that of the source."""

        grid = gg.RasterGrid.from_transform(np.ones((100, 100)), (500000.0, 0.1, 0, 4100010.0, 0, -0.1))
        cropped = grid.crop((500001.23, 500004.56, 4100001.01, 4100007.77))
        cropped_twice = cropped.crop((500002, 500003, 4100002, 4100003))

        assert cropped.res == (0.1, 0.1)
        assert cropped_twice.res == (0.1, 0.1)

    def test_crop__match_reference(self, world_grid: gg.RasterGrid) -> None:
        """Test that a grid or a vector layer can be used as crop target."""

        reference = gg.RasterGrid(np.zeros((1, 1)), extent=(-141, -51, 17, 59))
        assert world_grid.crop(reference).extent == gg.Extent(-180, 0, 0, 90)

        layer = gg.VectorLayer(gg.Extent(-141, -51, 17, 59).to_polygon())
        assert world_grid.crop(layer).extent == gg.Extent(-180, 0, 0, 90)

    def test_crop__nodata(self) -> None:
        """Test that nodata cells and the nodata value are kept."""

        data = np.array([[1, 2, 3], [4, -9999, 6]], dtype=np.int32)
        grid = gg.RasterGrid(data, extent=(0, 3, 0, 2), nodata=-9999)
        cropped = grid.crop((0.5, 2.5, 0, 0.5))

        assert cropped.nodata == -9999
        assert cropped.shape == (1, 3)
        assert cropped.value_at(0, 1) is None
        assert cropped.value_at(0, 2) == 6

    def test_crop__independent(self, world_grid: gg.RasterGrid) -> None:
        """Test that the source is not modified and that the output does not share memory with it."""

        before = world_grid.data.copy()
        cropped = world_grid.crop((-141, -51, 17, 59))

        assert np.array_equal(world_grid.data, before)
        assert world_grid.extent == gg.Extent(-180, 180, -90, 90)
        assert not np.shares_memory(cropped.data.data, world_grid.data.data)
        assert not cropped.data.flags.writeable


class TestIndexCrop:

    def test_icrop(self, world_grid: gg.RasterGrid) -> None:

        cropped = world_grid.icrop((1, 1, 3, 3))

        assert cropped.extent == gg.Extent(-90, 90, -45, 45)
        assert cropped.res == world_grid.res
        assert np.array_equal(cropped.data, [[5, 6], [9, 10]])

        assert world_grid.icrop((0, 0, 4, 4)).raster_equal(world_grid)

    @pytest.mark.parametrize(
        "bbox", [(0, 0, 0, 1), (-1, 0, 2, 2), (0, 0, 5, 2), (2, 2, 1, 3), (0, 3, 1, 2)]
    )  # type: ignore
    def test_icrop__invalid(self, world_grid: gg.RasterGrid, bbox: tuple[int, int, int, int]) -> None:

        with pytest.raises(IndexOutOfBoundsError):
            world_grid.icrop(bbox)

    def test_icrop__length(self, world_grid: gg.RasterGrid) -> None:

        with pytest.raises(ValueError, match="four indexes"):
            world_grid.icrop((0, 0, 2))


class TestIntersection:

    def test_intersection(self, world_grid: gg.RasterGrid) -> None:

        # Snapped to the cells of the grid by default
        assert world_grid.intersection((-141, -51, 17, 59)) == gg.Extent(-180, 0, 0, 90)
        assert world_grid.intersection((-141, -51, 17, 59), match_ref=False) == gg.Extent(-141, -51, 17, 59)

        other = gg.RasterGrid(np.zeros((2, 2)), extent=(0, 400, 0, 100))
        assert world_grid.intersection(other) == gg.Extent(0, 180, 0, 90)

    def test_intersection__void(self, world_grid: gg.RasterGrid) -> None:

        assert world_grid.intersection((200, 300, 0, 10)) is None


def test_crop__logging(world_grid: gg.RasterGrid, caplog: pytest.LogCaptureFixture) -> None:
    """Check that the snapped window is logged at debug level."""

    with caplog.at_level(logging.DEBUG):
        world_grid.crop((-141, -51, 17, 59))

    assert "snapped to rows 0-2 and columns 0-2" in caplog.text
