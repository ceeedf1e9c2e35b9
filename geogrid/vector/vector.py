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
Module for VectorLayer class.
"""

from __future__ import annotations

import pathlib
from typing import Any, Iterable, Literal, TypeVar, overload

import geopandas as gpd
import pandas as pd
from geopandas.testing import assert_geodataframe_equal
from pyproj import CRS
from shapely.geometry.base import BaseGeometry

from geogrid.raster.extent import Extent, as_extent

# This is a generic VectorLayer-type (if subclasses are made, this will change appropriately)
VectorLayerType = TypeVar("VectorLayerType", bound="VectorLayer")


class VectorLayer:
    """
    A layer of named geometries (points, lines or polygons) with attributes, drawn over grids.

     Main attributes:
        ds: :class:`geopandas.GeoDataFrame`
            Geodataframe of the layer.
        crs: :class:`pyproj.crs.CRS`
            Coordinate reference system of the layer.
        extent: :class:`geogrid.Extent`
            Coordinate bounds of all geometries.

    Vector layers are only consumed for rendering, they never enter grid computations.
    """

    def __init__(
        self,
        filename_or_dataset: str | pathlib.Path | gpd.GeoDataFrame | gpd.GeoSeries | BaseGeometry | VectorLayer,
        name: str | None = None,
    ):
        """
        Instantiate a layer from either a filename, a GeoPandas dataframe or series, or a Shapely geometry.

        :param filename_or_dataset: Path to file, or GeoPandas dataframe or series, or Shapely geometry.
        :param name: Name of the layer. Defaults to the file name, if read from disk.
        """

        self._name: str | None = None
        self._ds: gpd.GeoDataFrame | None = None

        # If VectorLayer is passed, simply point back to VectorLayer
        if isinstance(filename_or_dataset, VectorLayer):
            self._ds = filename_or_dataset.ds
            self._name = name if name is not None else filename_or_dataset.name
            return
        # If filename is passed
        elif isinstance(filename_or_dataset, (str, pathlib.Path)):
            ds = gpd.read_file(filename_or_dataset)
        # If GeoPandas or Shapely object is passed
        elif isinstance(filename_or_dataset, gpd.GeoDataFrame):
            ds = filename_or_dataset
        elif isinstance(filename_or_dataset, gpd.GeoSeries):
            ds = gpd.GeoDataFrame(geometry=filename_or_dataset)
        elif isinstance(filename_or_dataset, BaseGeometry):
            ds = gpd.GeoDataFrame({"geometry": [filename_or_dataset]}, crs=None)
        else:
            raise TypeError("Filename argument should be a string, path, geodataframe or geometry.")

        # Set geodataframe
        self.ds = ds

        # Write name attribute
        if name is not None:
            self._name = name
        elif isinstance(filename_or_dataset, str):
            self._name = pathlib.Path(filename_or_dataset).stem
        elif isinstance(filename_or_dataset, pathlib.Path):
            self._name = filename_or_dataset.stem

    @property
    def crs(self) -> CRS | None:
        """Coordinate reference system of the layer."""
        return self.ds.crs

    @property
    def ds(self) -> gpd.GeoDataFrame:
        """Geodataframe of the layer."""
        return self._ds

    @ds.setter
    def ds(self, new_ds: gpd.GeoDataFrame | gpd.GeoSeries) -> None:
        """Set a new geodataframe."""

        if isinstance(new_ds, gpd.GeoDataFrame):
            self._ds = new_ds
        elif isinstance(new_ds, gpd.GeoSeries):
            self._ds = gpd.GeoDataFrame(geometry=new_ds)
        else:
            raise ValueError("The dataset of a vector layer must be set with a GeoSeries or a GeoDataFrame.")

    @property
    def name(self) -> str | None:
        """Name of the layer, if it exists."""
        return self._name

    @property
    def geometry(self) -> gpd.GeoSeries:
        return self.ds.geometry

    @property
    def columns(self) -> pd.Index:
        return self.ds.columns

    @property
    def is_empty(self) -> bool:
        """Whether the layer holds no geometry."""
        return bool(len(self.ds) == 0 or self.ds.geometry.is_empty.all())

    @property
    def extent(self) -> Extent:
        """
        Total extent (xmin, xmax, ymin, ymax) of the layer.

        Caution: this is equivalent to ``GeoDataFrame.total_bounds`` reordered, and is undefined for empty layers or
        layers with a single point (a degenerate extent).
        """
        if self.is_empty:
            raise ValueError("The extent of an empty vector layer is undefined.")
        return Extent.from_bounds(*self.ds.total_bounds)

    def vector_equal(self, other: VectorLayer, **kwargs: Any) -> bool:
        """
        Check if two vector layers are equal.

        Keyword arguments are passed to geopandas.assert_geodataframe_equal.
        """

        try:
            assert_geodataframe_equal(self.ds, other.ds, **kwargs)
            vector_eq = True
        except AssertionError:
            vector_eq = False

        return vector_eq

    def copy(self: VectorLayerType) -> VectorLayerType:
        """Return a copy of the layer."""
        # Utilise the copy method of GeoPandas
        return self.__class__(self.ds.copy(), name=self.name)

    def __repr__(self) -> str:
        """Convert layer to string representation."""

        str_ds = "\n       ".join(self.ds.__str__().split("\n"))

        return str(
            self.__class__.__name__
            + "(\n"
            + "  name="
            + str(self.name)
            + "\n  ds="
            + str_ds
            + "\n  crs="
            + str(self.crs)
            + ")"
        )

    @overload
    def info(self, verbose: Literal[True] = ...) -> None: ...

    @overload
    def info(self, verbose: Literal[False]) -> str: ...

    def info(self, verbose: bool = True) -> str | None:
        """
        Summarize information about the layer.

        :param verbose: If set to True (default) will directly print to screen and return None

        :returns: Information about layer attributes.
        """
        as_str = [
            f"Name:               {self.name} \n",
            f"Coordinate system:  {self.crs.to_string() if self.crs is not None else None}\n",
            f"Extent:             {self.ds.total_bounds.tolist()} \n",
            f"Number of features: {len(self.ds)} \n",
            f"Attributes:         {self.ds.columns.tolist()}",
        ]

        if verbose:
            print("".join(as_str))
            return None
        else:
            return "".join(as_str)

    def crop(self: VectorLayerType, bbox: Extent | Iterable[float] | Any, clip: bool = True) -> VectorLayerType:
        """
        Crop the layer to a given extent.

        :param bbox: Extent, sequence of four coordinates ordered as (xmin, xmax, ymin, ymax), or a grid or layer
            whose extent is used.
        :param clip: Whether to clip the geometries to the extent. If False, only keeps the geometries intersecting
            the extent, unchanged.

        :returns: A new vector layer.
        """
        extent = as_extent(bbox)

        if clip:
            clipped = self.ds.clip_by_rect(extent.xmin, extent.ymin, extent.xmax, extent.ymax)
            new_ds = self.ds.copy()
            new_ds[new_ds.geometry.name] = clipped
            new_ds = new_ds[~new_ds.geometry.is_empty]
        else:
            new_ds = self.ds[self.ds.intersects(extent.to_polygon())]

        return self.__class__(new_ds, name=self.name)
