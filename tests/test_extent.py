"""Test module for the Extent class."""

from __future__ import annotations

import math

import numpy as np
import pytest
import rasterio as rio

import geogrid as gg
from geogrid.exceptions import InvalidExtentError
from geogrid.raster.extent import as_extent


class TestExtent:

    extents = [
        (-180, 180, -90, 90),
        (0.0, 0.1, 0.0, 0.3),
        (-74.3, -73.7, 40.5, 40.9),
        (500000.0, 510000.0, 4100000.0, 4120000.0),
    ]

    def test_init(self) -> None:
        """Test that bounds are stored in (xmin, xmax, ymin, ymax) order as floats."""

        ext = gg.Extent(-180, 180, -90, 90)

        assert ext == (-180.0, 180.0, -90.0, 90.0)
        assert ext.xmin == -180 and ext.xmax == 180 and ext.ymin == -90 and ext.ymax == 90
        assert all(isinstance(b, float) for b in ext)
        assert ext.width == 360
        assert ext.height == 180

    @pytest.mark.parametrize(
        "bounds",
        [
            (10, 10, 0, 1),
            (11, 10, 0, 1),
            (0, 1, 5, 5),
            (0, 1, 6, 5),
            (np.nan, 1, 0, 1),
            (0, np.inf, 0, 1),
            ("a", 1, 0, 1),
            (None, 1, 0, 1),
        ],
    )  # type: ignore
    def test_init__invalid(self, bounds: tuple[float, float, float, float]) -> None:
        """Test that degenerate, inverted or non-numerical extents are refused."""

        with pytest.raises(InvalidExtentError):
            gg.Extent(*bounds)

    def test_immutable(self) -> None:
        """Test that an extent cannot be modified, and that derived extents are validated."""

        ext = gg.Extent(0, 1, 0, 1)
        with pytest.raises(AttributeError):
            ext.xmin = 0.5  # type: ignore

        assert ext._replace(xmax=2) == gg.Extent(0, 2, 0, 1)
        with pytest.raises(InvalidExtentError):
            ext._replace(xmax=-1)

        assert gg.Extent._make([0, 1, 0, 1]) == ext
        with pytest.raises(InvalidExtentError):
            gg.Extent._make([1, 0, 0, 1])

    @pytest.mark.parametrize("bounds", extents)  # type: ignore
    def test_intersect__self(self, bounds: tuple[float, float, float, float]) -> None:
        """Test that the intersection of an extent with itself is the extent."""

        ext = gg.Extent(*bounds)
        assert ext.intersect(ext) == ext

    def test_intersect(self) -> None:
        """Test intersection of overlapping, nested and disjoint extents."""

        a = gg.Extent(0, 10, 0, 10)

        # Partial overlap, in both orders
        b = gg.Extent(5, 15, -5, 5)
        assert a.intersect(b) == gg.Extent(5, 10, 0, 5)
        assert b.intersect(a) == gg.Extent(5, 10, 0, 5)

        # Nested
        c = gg.Extent(2, 3, 4, 6)
        assert a.intersect(c) == c
        assert c.intersect(a) == c

        # Input as a sequence (xmin, xmax, ymin, ymax)
        assert a.intersect([5, 15, -5, 5]) == gg.Extent(5, 10, 0, 5)

        # Disjoint on X, on Y, and sharing only an edge or a corner
        assert a.intersect(gg.Extent(11, 12, 0, 10)) is None
        assert a.intersect(gg.Extent(0, 10, 20, 30)) is None
        assert a.intersect(gg.Extent(10, 20, 0, 10)) is None
        assert a.intersect(gg.Extent(10, 20, 10, 20)) is None
        assert not a.overlaps(gg.Extent(10, 20, 0, 10))
        assert a.overlaps(b)

    def test_contains(self) -> None:
        """Test that containment is closed on all edges."""

        ext = gg.Extent(-180, 180, -90, 90)

        # Corners and edges are inside
        for x, y in [(-180, -90), (-180, 90), (180, -90), (180, 90), (0, 90), (-180, 0)]:
            assert ext.contains(x, y)

        assert ext.contains(0, 0)
        assert not ext.contains(180.0001, 0)
        assert not ext.contains(0, -90.0001)
        assert not ext.contains(200, 100)

    def test_union(self) -> None:

        a = gg.Extent(0, 10, 0, 10)
        assert a.union(gg.Extent(20, 30, -10, 5)) == gg.Extent(0, 30, -10, 10)
        assert a.union(a) == a

    def test_bounds(self) -> None:
        """Test conversions from and to the Rasterio (left, bottom, right, top) order."""

        ext = gg.Extent(1, 2, 3, 4)

        assert ext.bounds == rio.coords.BoundingBox(left=1, bottom=3, right=2, top=4)
        assert gg.Extent.from_bounds(ext.bounds) == ext
        assert gg.Extent.from_bounds(1, 3, 2, 4) == ext
        assert gg.Extent.from_bounds([1, 3, 2, 4]) == ext
        with pytest.raises(TypeError):
            gg.Extent.from_bounds(1, 3)

    def test_to_polygon(self) -> None:

        poly = gg.Extent(0, 2, 0, 3).to_polygon()

        assert math.isclose(poly.area, 6)
        assert poly.bounds == (0, 0, 2, 3)

    def test_as_extent(self, world_grid: gg.RasterGrid) -> None:
        """Test conversion of extent-type inputs."""

        ext = gg.Extent(0, 1, 0, 1)

        assert as_extent(ext) is ext
        assert as_extent([0, 1, 0, 1]) == ext
        assert as_extent((0, 1, 0, 1)) == ext
        assert as_extent(rio.coords.BoundingBox(0, 0, 1, 1)) == ext
        assert as_extent(world_grid) == world_grid.extent
        assert as_extent(np.array([0, 1, 0, 1])) == ext
        assert isinstance(as_extent(np.array([0.0, 1.0, 0.0, 1.0])).xmin, float)

        with pytest.raises(InvalidExtentError):
            as_extent("abcd")
        with pytest.raises(InvalidExtentError):
            as_extent([0, 1, 0])
        with pytest.raises(InvalidExtentError):
            as_extent(np.zeros((2, 2)))
