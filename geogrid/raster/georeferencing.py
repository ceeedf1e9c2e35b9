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
Functions for the georeferencing of grid cells: resolution, geotransform and index/coordinate mappings.
"""

from __future__ import annotations

import math

import affine
import numpy as np
import rasterio as rio

from geogrid._config import config
from geogrid._typing import ArrayLike, NDArrayNum
from geogrid.exceptions import (
    CoordinateOutOfRangeError,
    IndexOutOfBoundsError,
    InvalidGridError,
)
from geogrid.raster.extent import Extent


def _res(extent: Extent, shape: tuple[int, int]) -> tuple[float, float]:
    """Resolution (X, Y) of a grid of given shape covering the extent."""

    return extent.width / shape[1], extent.height / shape[0]


def _transform(extent: Extent, res: tuple[float, float]) -> affine.Affine:
    """North-up geotransform with origin at the upper-left corner of the extent."""

    return rio.transform.from_origin(extent.xmin, extent.ymax, res[0], res[1])


def _extent_from_transform(transform: affine.Affine, shape: tuple[int, int]) -> Extent:
    """Extent covered by a north-up geotransform for a given shape."""

    if transform.b != 0 or transform.d != 0:
        raise InvalidGridError("Rotated geotransforms are not supported.")
    if transform.a <= 0 or transform.e >= 0:
        raise InvalidGridError(
            f"Only north-up geotransforms with positive X and negative Y pixel size are supported, got "
            f"({transform.a}, {transform.e})."
        )

    return Extent.from_bounds(rio.transform.array_bounds(height=shape[0], width=shape[1], transform=transform))


def _snap(values: ArrayLike, op: str, scale: ArrayLike, ulps: int | None = None) -> NDArrayNum:
    """
    Floor or ceil fractional cell offsets, after snapping to the nearest integer the offsets lying within a few
    floating point units of it, to absorb the rounding of coordinates falling on cell edges.

    :param values: Fractional cell offsets.
    :param op: Either "floor" or "ceil".
    :param scale: Magnitude of the coordinates the offsets are computed from, in cell units.
    :param ulps: Tolerance in units in the last place of the scale. Default is geogrid.config["snap_ulps"].
    """

    if ulps is None:
        ulps = config["snap_ulps"]

    values = np.asarray(values, dtype=np.float64)
    nearest = np.round(values)
    scale = np.maximum(np.abs(np.asarray(scale, dtype=np.float64)), np.abs(values))
    tolerance = ulps * np.finfo(np.float64).eps * scale
    snapped = np.where(np.abs(values - nearest) <= tolerance, nearest, values)

    if op == "floor":
        return np.floor(snapped).astype(int)
    elif op == "ceil":
        return np.ceil(snapped).astype(int)
    else:
        raise ValueError("op must be one of 'floor', 'ceil'.")


def _xy2ij(
    x: ArrayLike,
    y: ArrayLike,
    extent: Extent,
    res: tuple[float, float],
    shape: tuple[int, int],
) -> tuple[NDArrayNum, NDArrayNum]:
    """See description of RasterGrid.cell_index_for."""

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    # The extent is closed on all edges
    inside = (x >= extent.xmin) & (x <= extent.xmax) & (y >= extent.ymin) & (y <= extent.ymax)
    if not np.all(inside):
        raise CoordinateOutOfRangeError(f"Coordinates ({x}, {y}) are outside of the grid extent {tuple(extent)}.")

    # Cells are closed on their left and lower edges: floor from the lower-left corner of the extent
    j = _snap((x - extent.xmin) / res[0], op="floor", scale=(np.abs(x) + abs(extent.xmin)) / res[0])
    k = _snap((y - extent.ymin) / res[1], op="floor", scale=(np.abs(y) + abs(extent.ymin)) / res[1])

    # The outer right and upper edges of the extent belong to the last column and first row
    j = np.clip(j, 0, shape[1] - 1)
    k = np.clip(k, 0, shape[0] - 1)

    # Row 0 is the northernmost row
    i = shape[0] - 1 - k

    return i, j


def _check_index(row: int, col: int, shape: tuple[int, int]) -> None:
    """Raise if a cell index is outside of the grid, without wrap-around of negative indexes."""

    if isinstance(row, (bool, np.bool_)) or isinstance(col, (bool, np.bool_)):
        raise TypeError("Cell indexes must be integers.")
    if not isinstance(row, (int, np.integer)) or not isinstance(col, (int, np.integer)):
        raise TypeError(f"Cell indexes must be integers, got ({row!r}, {col!r}).")
    if not 0 <= row < shape[0] or not 0 <= col < shape[1]:
        raise IndexOutOfBoundsError(f"Cell index ({row}, {col}) is out of bounds for a grid of shape {shape}.")


def _window_extent(
    window: tuple[int, int, int, int],
    extent: Extent,
    res: tuple[float, float],
    shape: tuple[int, int],
) -> Extent:
    """
    Extent covered by a window of cells (row_min, row_max, col_min, col_max), with half-open index ranges.

    The outer edges of the grid are taken from its extent directly, so that a window spanning the full grid
    covers exactly the same extent.
    """

    row_min, row_max, col_min, col_max = window

    xmin = extent.xmin + col_min * res[0]
    xmax = extent.xmax if col_max == shape[1] else extent.xmin + col_max * res[0]
    ymax = extent.ymax - row_min * res[1]
    ymin = extent.ymin if row_max == shape[0] else extent.ymax - row_max * res[1]

    return Extent(xmin, xmax, ymin, ymax)


def _ij2xy(
    i: ArrayLike,
    j: ArrayLike,
    extent: Extent,
    res: tuple[float, float],
) -> tuple[NDArrayNum, NDArrayNum]:
    """Coordinates of the center of cells (i, j)."""

    x = extent.xmin + (np.asarray(j) + 0.5) * res[0]
    y = extent.ymax - (np.asarray(i) + 0.5) * res[1]

    return x, y


def _coords(extent: Extent, res: tuple[float, float], shape: tuple[int, int]) -> tuple[NDArrayNum, NDArrayNum]:
    """See description of RasterGrid.coords."""

    xx, _ = _ij2xy(0, np.arange(shape[1]), extent=extent, res=res)
    _, yy = _ij2xy(np.arange(shape[0]), 0, extent=extent, res=res)

    return np.asarray(xx), np.asarray(yy)


def _res_consistent(res: tuple[float, float], extent: Extent, shape: tuple[int, int]) -> bool:
    """Whether a resolution is consistent with an extent and shape, up to floating point precision."""

    derived = _res(extent, shape)

    return all(math.isclose(r, d, rel_tol=1e-9) for r, d in zip(res, derived))
