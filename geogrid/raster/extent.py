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
Module for the Extent class, the rectangular coordinate bounds of grids and crop targets.
"""

from __future__ import annotations

import math
from collections import namedtuple
from typing import Any, Iterable

import numpy as np
import rasterio as rio
from shapely.geometry import Polygon, box

from geogrid.exceptions import InvalidExtentError


class Extent(namedtuple("Extent", ["xmin", "xmax", "ymin", "ymax"])):
    """
    Immutable rectangle (xmin, xmax, ymin, ymax) of a 2D coordinate space.

    The order of the bounds is the one used by extent literals (x first, then y). For interoperability with
    Rasterio which orders bounds as (left, bottom, right, top), see :attr:`Extent.bounds` and
    :meth:`Extent.from_bounds`.
    """

    __slots__ = ()

    def __new__(cls, xmin: float, xmax: float, ymin: float, ymax: float) -> Extent:
        try:
            bounds = [float(b) for b in (xmin, xmax, ymin, ymax)]
        except (TypeError, ValueError):
            raise InvalidExtentError(f"Extent bounds must be numbers, got {(xmin, xmax, ymin, ymax)}.")

        if not all(math.isfinite(b) for b in bounds):
            raise InvalidExtentError(f"Extent bounds must be finite, got {tuple(bounds)}.")
        if bounds[0] >= bounds[1]:
            raise InvalidExtentError(f"Extent xmin must be smaller than xmax, got xmin={bounds[0]}, xmax={bounds[1]}.")
        if bounds[2] >= bounds[3]:
            raise InvalidExtentError(f"Extent ymin must be smaller than ymax, got ymin={bounds[2]}, ymax={bounds[3]}.")

        return super().__new__(cls, *bounds)

    @classmethod
    def _make(cls, iterable: Iterable[float]) -> Extent:
        # Go through the constructor to keep the bounds validated
        return cls(*iterable)

    def _replace(self, **kwargs: float) -> Extent:
        # Go through the constructor to keep the bounds validated
        return type(self)(**{**self._asdict(), **kwargs})

    @classmethod
    def from_bounds(cls, bounds: Any, *args: float) -> Extent:
        """
        Create an extent from bounds ordered as (left, bottom, right, top), the Rasterio convention.

        :param bounds: Either the left bound followed by the three others as arguments, a sequence of four numbers,
            a :class:`rasterio.coords.BoundingBox` or any object with a ``bounds`` attribute.

        :returns: Extent.
        """
        if len(args) == 3:
            left, bottom, right, top = bounds, *args
        elif len(args) == 0:
            if hasattr(bounds, "bounds") and not isinstance(bounds, rio.coords.BoundingBox):
                bounds = bounds.bounds
            left, bottom, right, top = bounds
        else:
            raise TypeError("Bounds must be passed as one sequence or four numbers (left, bottom, right, top).")

        return cls(left, right, bottom, top)

    @property
    def width(self) -> float:
        """Size of the extent along X."""
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        """Size of the extent along Y."""
        return self.ymax - self.ymin

    @property
    def bounds(self) -> rio.coords.BoundingBox:
        """Bounds as a Rasterio bounding box (left, bottom, right, top)."""
        return rio.coords.BoundingBox(left=self.xmin, bottom=self.ymin, right=self.xmax, top=self.ymax)

    def contains(self, x: float, y: float) -> bool:
        """
        Whether a coordinate lies within the extent, edges included on both axes.

        :param x: X coordinate.
        :param y: Y coordinate.
        """
        return bool(self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax)

    def overlaps(self, other: Extent | Iterable[float]) -> bool:
        """Whether the intersection with another extent has a non-zero area."""
        return self.intersect(other) is not None

    def intersect(self, other: Extent | Iterable[float]) -> Extent | None:
        """
        Intersection with another extent.

        Extents sharing only an edge or a corner do not overlap.

        :param other: Extent, or sequence (xmin, xmax, ymin, ymax).

        :returns: The overlapping extent, or None if there is no overlap.
        """
        other = as_extent(other)

        xmin = max(self.xmin, other.xmin)
        xmax = min(self.xmax, other.xmax)
        ymin = max(self.ymin, other.ymin)
        ymax = min(self.ymax, other.ymax)

        if xmin >= xmax or ymin >= ymax:
            return None

        return Extent(xmin, xmax, ymin, ymax)

    def union(self, other: Extent | Iterable[float]) -> Extent:
        """Smallest extent containing both extents."""
        other = as_extent(other)

        return Extent(
            min(self.xmin, other.xmin),
            max(self.xmax, other.xmax),
            min(self.ymin, other.ymin),
            max(self.ymax, other.ymax),
        )

    def to_polygon(self) -> Polygon:
        """Rectangle of the extent as a Shapely polygon."""
        return box(self.xmin, self.ymin, self.xmax, self.ymax)


def as_extent(obj: Any) -> Extent:
    """
    Convert extent-type input into an Extent.

    :param obj: Extent, Rasterio bounding box, object with an ``extent`` attribute (e.g., a grid or vector layer), or
        sequence or 1D array of four numbers ordered as (xmin, xmax, ymin, ymax).

    :returns: Extent.
    """
    if isinstance(obj, Extent):
        return obj
    elif isinstance(obj, rio.coords.BoundingBox):
        return Extent.from_bounds(obj)
    elif hasattr(obj, "extent"):
        return as_extent(obj.extent)
    elif (isinstance(obj, (list, tuple)) and len(obj) == 4) or (isinstance(obj, np.ndarray) and obj.shape == (4,)):
        return Extent(*obj)
    else:
        raise InvalidExtentError(
            f"Cannot interpret {obj!r} as an extent, expected an Extent or a sequence (xmin, xmax, ymin, ymax)."
        )
