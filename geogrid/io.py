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
Loaders of grids and vector layers from files on disk, through Rasterio and GeoPandas.
"""

from __future__ import annotations

import logging
import os
import pathlib

import rasterio as rio
from pyproj import CRS

from geogrid.raster.grid import RasterGrid
from geogrid.vector.vector import VectorLayer


def load_raster(
    filename: str | pathlib.Path,
    band: int = 1,
    crs: CRS | int | str | None = None,
) -> RasterGrid:
    """
    Load one band of a raster file supported by GDAL into a grid.

    :param filename: Path to the raster file.
    :param band: Index of the band to load, from 1 to the number of bands.
    :param crs: Coordinate reference system overriding the one of the file, if any.

    :raises IndexError: If the band index is not in the range of bands of the file.
    :raises InvalidGridError: If the file geotransform is rotated or not north-up.

    :returns: Grid, with cells equal to the nodata value of the file (or masked in the file) as nodata.
    """
    os.environ["CPL_ZIP_ENCODING"] = "UTF-8"

    with rio.open(filename) as ds:
        if not isinstance(band, int) or not 1 <= band <= ds.count:
            raise IndexError(f"Band index must be in range 1-{ds.count:d}, got {band}.")

        data = ds.read(band, masked=True)
        transform = ds.transform
        nodata = ds.nodata
        if crs is None and ds.crs is not None:
            crs = CRS.from_user_input(ds.crs)

    logging.info("Loaded band %d of raster %s, of shape %s.", band, filename, data.shape)

    return RasterGrid.from_transform(data, transform=transform, nodata=nodata, crs=crs)


def load_vector_layer(filename: str | pathlib.Path, name: str | None = None) -> VectorLayer:
    """
    Load a vector file supported by GeoPandas (e.g., shapefile, GeoPackage, GeoJSON) into a vector layer.

    :param filename: Path to the vector file.
    :param name: Name of the layer. Defaults to the file name without extension.

    :returns: Vector layer.
    """
    layer = VectorLayer(filename, name=name)

    logging.info("Loaded vector layer %s with %d feature(s).", filename, len(layer.ds))

    return layer
