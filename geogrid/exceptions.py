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

"""Errors raised by grid, extent, crop and overlay operations."""

from __future__ import annotations


class InvalidExtentError(ValueError):
    """Raised when extent bounds are malformed (xmin >= xmax, ymin >= ymax or non-finite)."""


class NoOverlapError(ValueError):
    """Raised when a crop target does not overlap the extent of the source grid."""


class IndexOutOfBoundsError(IndexError):
    """Raised when a cell lookup falls outside the grid rows or columns."""


class EmptyGridError(ValueError):
    """Raised when statistics are requested on a grid with only nodata cells."""


class CoordinateOutOfRangeError(ValueError):
    """Raised when a coordinate lies outside the extent of the grid."""


class InvalidGridError(ValueError):
    """Raised when grid-type input (array shape, resolution, transform) is not recognized."""


class CRSMismatchError(ValueError):
    """Raised when layers composed in one overlay declare different coordinate reference systems."""
