"""Configuration file for Pytest."""

from __future__ import annotations

import pathlib

import geopandas as gpd
import matplotlib
import numpy as np
import pytest
import rasterio as rio
from shapely.geometry import LineString, Point, box

import geogrid as gg

# Plots are drawn without display
matplotlib.use("Agg")


@pytest.fixture
def world_grid() -> gg.RasterGrid:
    """A 4x4 grid covering the whole globe, with values 0 to 15 ordered row-major from the north-west."""
    return gg.RasterGrid.from_array(
        np.arange(16, dtype=np.float32).reshape(4, 4), extent=(-180, 180, -90, 90), crs="EPSG:4326"
    )


@pytest.fixture
def raster_file(tmp_path: pathlib.Path) -> str:
    """A 2-band GeoTIFF of 5 rows and 6 columns with 10-unit cells and nodata -9999 in the upper-left cell."""

    data = np.arange(2 * 5 * 6, dtype=np.int16).reshape(2, 5, 6)
    data[:, 0, 0] = -9999

    filename = str(tmp_path / "grid.tif")
    with rio.open(
        filename,
        "w",
        driver="GTiff",
        height=5,
        width=6,
        count=2,
        dtype="int16",
        crs="EPSG:4326",
        transform=rio.transform.from_origin(0, 50, 10, 10),
        nodata=-9999,
    ) as dst:
        dst.write(data)

    return filename


@pytest.fixture
def boundaries() -> gpd.GeoDataFrame:
    """Vector boundaries in the same coordinate space as the raster file: two polygons, a line and a point."""
    return gpd.GeoDataFrame(
        {"name": ["west", "east", "river", "city"]},
        geometry=[box(0, 0, 30, 50), box(30, 0, 80, 50), LineString([(0, 25), (60, 25)]), Point(15, 15)],
        crs="EPSG:4326",
    )


@pytest.fixture
def vector_file(tmp_path: pathlib.Path, boundaries: gpd.GeoDataFrame) -> str:
    """The boundaries written to a GeoJSON file."""

    filename = str(tmp_path / "boundaries.geojson")
    boundaries.to_file(filename, driver="GeoJSON")

    return filename
