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
Functions for geotransformations of grids: crop to an extent and crop to an index window.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Any

from geogrid._config import config
from geogrid._typing import MArrayNum
from geogrid.exceptions import IndexOutOfBoundsError, NoOverlapError
from geogrid.raster.extent import Extent, as_extent
from geogrid.raster.georeferencing import _snap, _window_extent

if TYPE_CHECKING:
    from geogrid.raster.grid import RasterGrid


def _snap_window(
    effective: Extent,
    extent: Extent,
    res: tuple[float, float],
    shape: tuple[int, int],
) -> tuple[int, int, int, int]:
    """
    Window of cells (row_min, row_max, col_min, col_max) enclosing an extent, snapped outward to the cell edges.

    The effective extent must lie within the grid extent. Index ranges are half-open.
    """

    def snap(offset: float, coord: float, origin: float, cell_size: float, op: str) -> int:
        return int(_snap(offset, op=op, scale=(abs(coord) + abs(origin)) / cell_size))

    col_min = snap((effective.xmin - extent.xmin) / res[0], effective.xmin, extent.xmin, res[0], op="floor")
    col_max = snap((effective.xmax - extent.xmin) / res[0], effective.xmax, extent.xmin, res[0], op="ceil")
    row_min = snap((extent.ymax - effective.ymax) / res[1], effective.ymax, extent.ymax, res[1], op="floor")
    row_max = snap((extent.ymax - effective.ymin) / res[1], effective.ymin, extent.ymax, res[1], op="ceil")

    # Clip to the grid, and keep at least one cell for slivers thinner than the snapping tolerance
    col_min = min(max(col_min, 0), shape[1] - 1)
    row_min = min(max(row_min, 0), shape[0] - 1)
    col_max = max(min(col_max, shape[1]), col_min + 1)
    row_max = max(min(row_max, shape[0]), row_min + 1)

    return row_min, row_max, col_min, col_max


def _crop(source_grid: RasterGrid, target: Extent | Any) -> tuple[MArrayNum, Extent]:
    """Crop grid. See details in RasterGrid.crop()."""

    target = as_extent(target)

    effective = source_grid.extent.intersect(target)
    if effective is None:
        raise NoOverlapError(
            f"Crop extent {tuple(target)} does not overlap the grid extent {tuple(source_grid.extent)}."
        )

    if effective != target and config["warn_partial_crop"]:
        warnings.warn(
            message=f"Crop extent {tuple(target)} extends beyond the grid extent {tuple(source_grid.extent)}, "
            f"cropping to their intersection. To silence this warning, set "
            f'geogrid.config["warn_partial_crop"]=False.',
            category=UserWarning,
        )

    window = _snap_window(effective, extent=source_grid.extent, res=source_grid.res, shape=source_grid.shape)
    new_extent = _window_extent(window, extent=source_grid.extent, res=source_grid.res, shape=source_grid.shape)

    row_min, row_max, col_min, col_max = window
    logging.debug(
        "Crop: extent %s snapped to rows %d-%d and columns %d-%d, covering %s.",
        tuple(effective),
        row_min,
        row_max,
        col_min,
        col_max,
        tuple(new_extent),
    )

    crop_img = source_grid.data[row_min:row_max, col_min:col_max]

    return crop_img, new_extent


def _icrop(source_grid: RasterGrid, bbox: list[int] | tuple[int, ...]) -> tuple[MArrayNum, Extent]:
    """Crop grid by index window. See details in RasterGrid.icrop()."""

    if len(bbox) != 4:
        raise ValueError("bbox must be a sequence of four indexes (colmin, rowmin, colmax, rowmax).")
    col_min, row_min, col_max, row_max = (int(b) for b in bbox)

    rows, cols = source_grid.shape
    if not (0 <= row_min < row_max <= rows and 0 <= col_min < col_max <= cols):
        raise IndexOutOfBoundsError(
            f"Index window (colmin={col_min}, rowmin={row_min}, colmax={col_max}, rowmax={row_max}) is empty or "
            f"out of bounds for a grid of shape {source_grid.shape}."
        )

    window = (row_min, row_max, col_min, col_max)
    new_extent = _window_extent(window, extent=source_grid.extent, res=source_grid.res, shape=source_grid.shape)

    return source_grid.data[row_min:row_max, col_min:col_max], new_extent
