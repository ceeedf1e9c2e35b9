from geogrid.raster.extent import Extent, as_extent  # noqa isort:skip
from geogrid.raster.grid import GridSummary, RasterGrid, RasterGridType  # noqa isort:skip

__all__ = ["Extent", "GridSummary", "RasterGrid", "RasterGridType"]
