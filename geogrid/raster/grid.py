# Copyright (c) 2025 GeoGrid developers
#
# This file is part of the GeoGrid project.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Module for the RasterGrid class.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Literal, NamedTuple, TypeVar, overload

import affine
import numpy as np
from pyproj import CRS

import geogrid as gg
from geogrid._typing import ArrayLike, MArrayNum, NDArrayNum, Number
from geogrid.exceptions import EmptyGridError, InvalidGridError
from geogrid.raster.extent import Extent, as_extent
from geogrid.raster.georeferencing import (
    _check_index,
    _coords,
    _extent_from_transform,
    _ij2xy,
    _res,
    _res_consistent,
    _transform,
    _window_extent,
    _xy2ij,
)
from geogrid.raster.geotransformations import _crop, _icrop, _snap_window

# This is a generic RasterGrid-type (if subclasses are made, this will change appropriately)
RasterGridType = TypeVar("RasterGridType", bound="RasterGrid")


class GridSummary(NamedTuple):
    """Structured summary of a grid, returned by RasterGrid.describe()."""

    rows: int
    cols: int
    res: tuple[float, float]
    extent: Extent
    nodata: int | float | None
    crs: CRS | None
    valid_count: int
    value_range: tuple[float, float] | None


class RasterGrid:
    """
    The georeferenced grid of cells.

     Main attributes:
        data: :class:`np.ma.MaskedArray`
            Read-only masked array of cell values, of shape (rows, cols). Masked cells are nodata.
        extent: :class:`geogrid.Extent`
            Coordinate bounds (xmin, xmax, ymin, ymax) covered by the grid.
        res: tuple
            Cell size (X, Y), positive on both axes.

    Cell (row, col) covers [xmin + col * xres, xmin + (col + 1) * xres] along X and
    [ymax - (row + 1) * yres, ymax - row * yres] along Y: row 0 is the northernmost row.
    A grid is never modified after construction, operations return new grids.
    """

    def __init__(
        self,
        data: NDArrayNum | MArrayNum | ArrayLike,
        extent: Extent | tuple[float, float, float, float] | list[float],
        nodata: int | float | None = None,
        crs: CRS | int | str | None = None,
        res: tuple[float, float] | None = None,
    ):
        """
        Instantiate a grid from an array of cell values and the extent it covers.

        :param data: 2D array of cell values, ordered row-major with row 0 to the north. Masked values and
            non-finite values are considered nodata.
        :param extent: Extent (xmin, xmax, ymin, ymax) covered by the grid.
        :param nodata: Nodata sentinel value. Cells equal to it are masked.
        :param crs: Coordinate reference system, only used to check consistency of overlays.
        :param res: Resolution (X, Y) to store instead of deriving it from extent and shape. Must be consistent with
            them up to floating point precision. Used to preserve the exact resolution of derived grids.
        """

        extent = as_extent(extent)

        values = np.ma.asarray(data)
        if values.ndim != 2:
            raise InvalidGridError(f"Grid data must be a 2D array, got {values.ndim} dimension(s).")
        if values.size == 0:
            raise InvalidGridError(f"Grid data must have at least one row and one column, got shape {values.shape}.")
        if not (np.issubdtype(values.dtype, np.number) or values.dtype == bool):
            raise InvalidGridError(f"Grid data must be numerical, got dtype {values.dtype}.")

        shape = (int(values.shape[0]), int(values.shape[1]))

        if res is None:
            res = _res(extent, shape)
        else:
            res = (float(res[0]), float(res[1]))
            if not _res_consistent(res, extent, shape):
                raise InvalidGridError(
                    f"Resolution {res} is not consistent with extent {tuple(extent)} and shape {shape}."
                )

        # Mask nodata sentinel and non-finite values
        mask = np.ma.getmaskarray(values).copy()
        if np.issubdtype(values.dtype, np.floating):
            mask |= ~np.isfinite(values.data)
        representable = True
        if nodata is not None:
            if not np.issubdtype(values.dtype, np.floating) and not float(nodata).is_integer():
                representable = False
                warnings.warn(
                    f"Nodata value {nodata} cannot be represented in dtype {values.dtype}, no cell is masked by it.",
                    category=UserWarning,
                )
            else:
                mask |= values.data == nodata

        # Cells are read-only for the lifetime of the grid and of all grids derived from it
        cells = np.array(values.data, copy=True)
        cells.flags.writeable = False
        mask.flags.writeable = False

        array = np.ma.masked_array(data=cells, mask=mask)
        if nodata is not None and representable:
            array.fill_value = nodata

        self._data: MArrayNum = array
        self._extent: Extent = extent
        self._res: tuple[float, float] = res
        self._nodata: int | float | None = nodata
        self._crs: CRS | None = CRS.from_user_input(crs) if crs is not None else None

    @classmethod
    def from_array(
        cls: type[RasterGridType],
        data: NDArrayNum | MArrayNum | ArrayLike,
        extent: Extent | tuple[float, float, float, float] | list[float],
        nodata: int | float | None = None,
        crs: CRS | int | str | None = None,
    ) -> RasterGridType:
        """
        Create a grid from a numpy array and the extent it covers.

        :param data: 2D array of cell values.
        :param extent: Extent (xmin, xmax, ymin, ymax) covered by the array.
        :param nodata: Nodata sentinel value.
        :param crs: Coordinate reference system.

        :returns: Grid.
        """
        return cls(data, extent=extent, nodata=nodata, crs=crs)

    @classmethod
    def from_transform(
        cls: type[RasterGridType],
        data: NDArrayNum | MArrayNum | ArrayLike,
        transform: affine.Affine | tuple[float, ...],
        nodata: int | float | None = None,
        crs: CRS | int | str | None = None,
    ) -> RasterGridType:
        """
        Create a grid from a numpy array and a north-up affine geotransform, preserving the exact resolution.

        :param data: 2D array of cell values.
        :param transform: Affine geotransform, or 6-tuple in GDAL order.
        :param nodata: Nodata sentinel value.
        :param crs: Coordinate reference system.

        :returns: Grid.
        """
        if not isinstance(transform, affine.Affine):
            transform = affine.Affine.from_gdal(*transform)

        shape = np.shape(data)
        if len(shape) != 2:
            raise InvalidGridError(f"Grid data must be a 2D array, got {len(shape)} dimension(s).")

        extent = _extent_from_transform(transform, shape=(shape[0], shape[1]))

        return cls(data, extent=extent, nodata=nodata, crs=crs, res=(transform.a, -transform.e))

    @property
    def data(self) -> MArrayNum:
        """Read-only masked array of cell values."""
        return self._data

    @property
    def extent(self) -> Extent:
        """Extent (xmin, xmax, ymin, ymax) covered by the grid."""
        return self._extent

    @property
    def res(self) -> tuple[float, float]:
        """Resolution (X, Y) of the grid in georeferenced units."""
        return self._res

    @property
    def resolution(self) -> tuple[float, float]:
        """Resolution (X, Y) of the grid in georeferenced units (duplicate of .res attribute)."""
        return self._res

    @property
    def nodata(self) -> int | float | None:
        """Nodata sentinel value of the grid, if defined."""
        return self._nodata

    @property
    def crs(self) -> CRS | None:
        """Coordinate reference system of the grid, if defined."""
        return self._crs

    @property
    def rows(self) -> int:
        """Number of rows of the grid."""
        return int(self._data.shape[0])

    @property
    def cols(self) -> int:
        """Number of columns of the grid."""
        return int(self._data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        """Shape (i.e., rows, cols) of the grid in cells."""
        return self.rows, self.cols

    @property
    def dtype(self) -> str:
        """Data type of the grid (string representation)."""
        return str(self._data.dtype)

    @property
    def transform(self) -> affine.Affine:
        """
        Geotransform of the grid.

        :returns: Affine matrix geotransform.
        """
        return _transform(self.extent, self.res)

    @property
    def bounds(self) -> Any:
        """Bounding coordinates of the grid as a Rasterio bounding box (left, bottom, right, top)."""
        return self.extent.bounds

    def __repr__(self) -> str:
        """Convert grid to string representation."""

        return (
            f"{self.__class__.__name__}(\n"
            f"  shape={self.shape}\n"
            f"  extent={tuple(self.extent)}\n"
            f"  res={self.res}\n"
            f"  nodata={self.nodata}\n"
            f"  crs={self.crs.to_string() if self.crs is not None else None})"
        )

    def raster_equal(self, other: RasterGrid) -> bool:
        """
        Check if two grids are equal: same values and mask, same extent, resolution, nodata and CRS.
        """

        if not isinstance(other, RasterGrid):
            raise NotImplementedError("Equality with other object than RasterGrid not supported by raster_equal.")

        return all(
            [
                self.shape == other.shape,
                np.array_equal(self.data.mask, other.data.mask),
                np.array_equal(self.data.filled(0), other.data.filled(0)),
                self.extent == other.extent,
                self.res == other.res,
                self.nodata == other.nodata,
                self.crs == other.crs,
            ]
        )

    def cell_index_for(self, x: ArrayLike, y: ArrayLike) -> tuple[Any, Any]:
        """
        Get the index (row, col) of the cell containing a coordinate.

        Cells include their left and lower edges, and exclude their right and upper edges, so that a coordinate on a
        cell boundary belongs to one cell only. The right and upper edges of the grid extent, which are inside the
        extent, belong to the last column and first row.

        :param x: X coordinate(s).
        :param y: Y coordinate(s).

        :raises CoordinateOutOfRangeError: If a coordinate lies outside of the grid extent.

        :returns: Row and column index(es), as integers for scalar inputs or integer arrays.
        """
        i, j = _xy2ij(x, y, extent=self.extent, res=self.res, shape=self.shape)

        if np.ndim(i) == 0:
            return int(i), int(j)
        return i, j

    def cell_center(self, row: int, col: int) -> tuple[float, float]:
        """
        Get the coordinates (x, y) of the center of a cell.

        :raises IndexOutOfBoundsError: If the cell index is outside of the grid.
        """
        _check_index(row, col, self.shape)
        x, y = _ij2xy(row, col, extent=self.extent, res=self.res)

        return float(x), float(y)

    def cell_extent(self, row: int, col: int) -> Extent:
        """
        Get the extent covered by a cell.

        :raises IndexOutOfBoundsError: If the cell index is outside of the grid.
        """
        _check_index(row, col, self.shape)

        return _window_extent((row, row + 1, col, col + 1), extent=self.extent, res=self.res, shape=self.shape)

    def coords(self) -> tuple[NDArrayNum, NDArrayNum]:
        """
        Get coordinates of the cell centers: X of each column (west to east), Y of each row (north to south).

        :returns: X and Y coordinate arrays.
        """
        return _coords(self.extent, self.res, self.shape)

    def value_at(self, row: int, col: int) -> float | None:
        """
        Get the value of a cell.

        Negative indexes are out of bounds, there is no wrap-around.

        :param row: Row index, from 0 (north) to rows - 1.
        :param col: Column index, from 0 (west) to cols - 1.

        :raises IndexOutOfBoundsError: If the cell index is outside of the grid.

        :returns: Cell value, or None if the cell is nodata.
        """
        _check_index(row, col, self.shape)

        if self._data.mask[row, col]:
            return None
        return float(self._data.data[row, col])

    def statistics(self) -> dict[str, float]:
        """
        Calculate statistics of the valid (not nodata) cells: minimum, maximum and mean.

        :raises EmptyGridError: If all cells are nodata.

        :returns: Dictionary with keys "min", "max" and "mean".
        """
        valid = self._data.compressed()
        if valid.size == 0:
            raise EmptyGridError("Statistics are undefined for a grid with only nodata cells.")

        return {
            "min": float(np.min(valid)),
            "max": float(np.max(valid)),
            "mean": float(np.mean(valid, dtype=np.float64)),
        }

    def describe(self) -> GridSummary:
        """
        Summarize the grid: dimensions, resolution, extent, nodata, CRS, count and range of valid values.

        :returns: Structured summary.
        """
        valid_count = int(self._data.count())
        if valid_count > 0:
            stats = self.statistics()
            value_range: tuple[float, float] | None = (stats["min"], stats["max"])
        else:
            value_range = None

        return GridSummary(
            rows=self.rows,
            cols=self.cols,
            res=self.res,
            extent=self.extent,
            nodata=self.nodata,
            crs=self.crs,
            valid_count=valid_count,
            value_range=value_range,
        )

    @overload
    def info(self, *, verbose: Literal[True] = ...) -> None: ...

    @overload
    def info(self, *, verbose: Literal[False]) -> str: ...

    def info(self, verbose: bool = True) -> None | str:
        """
        Print summary information about the grid.

        :param verbose: If set to True (default) will directly print to screen and return None

        :returns: Summary string or None.
        """
        summary = self.describe()
        as_str = [
            f"Grid size:            {summary.cols}, {summary.rows}\n",
            f"Data types:           {self.dtype}\n",
            f"Coordinate system:    {[summary.crs.to_string() if summary.crs is not None else None]}\n",
            f"Nodata value:         {summary.nodata}\n",
            "Pixel size:           {}, {}\n".format(*summary.res),
            "Extent:               {}, {}, {}, {}\n".format(*summary.extent),
            f"Valid cells:          {summary.valid_count}\n",
        ]
        if summary.value_range is not None:
            as_str.append("Value range:          {}, {}\n".format(*summary.value_range))
        else:
            as_str.append("Value range:          None\n")

        if verbose:
            print("".join(as_str))
            return None
        else:
            return "".join(as_str)

    def crop(self: RasterGridType, bbox: Extent | RasterGrid | Any) -> RasterGridType:
        """
        Crop the grid to a given extent.

        The intersection of the grid extent and ``bbox`` is snapped outward to the cell edges of the grid, and the
        corresponding block of cells is copied into a new grid. No resampling is done: the resolution of the
        output is exactly that of the input. If ``bbox`` contains the grid extent, the output is equal to the input.

        **Match-reference:** a reference grid or vector layer can be passed to crop to its extent.

        :param bbox: Extent to crop the grid to, either an Extent, a sequence of four coordinates ordered as
            (xmin, xmax, ymin, ymax), or a grid or vector layer whose extent is used.

        :raises NoOverlapError: If ``bbox`` does not overlap the grid extent.

        :returns: A new grid.
        """
        crop_img, new_extent = _crop(source_grid=self, target=bbox)

        return self.__class__(crop_img, extent=new_extent, nodata=self.nodata, crs=self.crs, res=self.res)

    def icrop(self: RasterGridType, bbox: list[int] | tuple[int, ...]) -> RasterGridType:
        """
        Crop grid based on cell indices (bbox), converting them into georeferenced coordinates.

        :param bbox: Bounding box based on indices of the grid array (colmin, rowmin, colmax, rowmax), with
            maximum indexes excluded.

        :raises IndexOutOfBoundsError: If the index window is empty or outside of the grid.

        :returns: A new grid.
        """
        crop_img, new_extent = _icrop(source_grid=self, bbox=bbox)

        return self.__class__(crop_img, extent=new_extent, nodata=self.nodata, crs=self.crs, res=self.res)

    def intersection(self, other: RasterGrid | Extent | Any, match_ref: bool = True) -> Extent | None:
        """
        Returns the extent of intersection between this grid and another grid or extent.

        :param other: Grid, vector layer, or extent.
        :param match_ref: If set to True, returns the smallest intersection that aligns with the cells of self.

        :returns: Extent of the intersection, or None if it is void.
        """
        intersection = self.extent.intersect(as_extent(other))
        if intersection is None:
            logging.info("Intersection of grid extent %s and %s is void.", tuple(self.extent), tuple(as_extent(other)))
            return None

        if match_ref:
            window = _snap_window(intersection, extent=self.extent, res=self.res, shape=self.shape)
            intersection = _window_extent(window, extent=self.extent, res=self.res, shape=self.shape)

        return intersection

    def plot(
        self,
        cmap: str | None = None,
        vmin: Number | None = None,
        vmax: Number | None = None,
        ax: Any = None,
        **kwargs: Any,
    ) -> Any:
        r"""
        Plot the grid alone, with axes in its coordinate space.

        This method builds a single-layer render plan and draws it with :func:`geogrid.plot_plan`. Any \*\*kwargs
        are passed to it.

        :param cmap: The figure's colormap. Default is geogrid.config["default_cmap"].
        :param vmin: Colorbar minimum value. Default is data min.
        :param vmax: Colorbar maximum value. Default is data max.
        :param ax: A figure ax to be used for plotting. If None, will plot on current axes.

        :returns: The axes.
        """
        plan = gg.OverlayContext(self).render(cmap=cmap, vmin=vmin, vmax=vmax)

        return gg.plot_plan(plan, ax=ax, **kwargs)
