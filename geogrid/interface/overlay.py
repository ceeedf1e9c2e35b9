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
Functions and classes for the overlay of a grid and vector layers in one coordinate space, and their rendering.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, NamedTuple, Sequence, Union

import geopandas as gpd
import matplotlib
import matplotlib.pyplot as plt
from mpl_toolkits.axes_grid1 import make_axes_locatable
from pyproj import CRS
from rasterio.plot import show as rshow
from shapely.geometry.base import BaseGeometry

from geogrid._config import config, validate_cmap
from geogrid._typing import Number
from geogrid.exceptions import CRSMismatchError
from geogrid.raster.extent import Extent
from geogrid.raster.grid import RasterGrid
from geogrid.vector.vector import VectorLayer

# Default style of vector layers: outlines only, so that the grid stays visible below
_DEFAULT_VECTOR_STYLE = {"facecolor": "none", "edgecolor": "black", "linewidth": 1.0}


class RasterLayer(NamedTuple):
    """Grid drawn in the coordinate space of its extent, with a value to color mapping."""

    grid: RasterGrid
    cmap: str | matplotlib.colors.Colormap
    vmin: float | None
    vmax: float | None
    alpha: float | None
    zorder: int


class VectorLayerSpec(NamedTuple):
    """Vector layer drawn in the same coordinate space as the grid, with a drawing style."""

    layer: VectorLayer
    style: dict[str, Any]
    zorder: int


Layer = Union[RasterLayer, VectorLayerSpec]


class RenderPlan(NamedTuple):
    """
    Ordered composition of layers sharing one coordinate space.

    Layers are painted in order: later layers occlude earlier ones where they overlap. The first layer is always the
    raster layer.
    """

    extent: Extent
    crs: CRS | None
    layers: tuple[Layer, ...]

    @property
    def raster_layer(self) -> RasterLayer:
        """Raster layer of the plan, painted first."""
        return self.layers[0]  # type: ignore

    @property
    def vector_layers(self) -> tuple[VectorLayerSpec, ...]:
        """Vector layers of the plan, in painting order."""
        return self.layers[1:]  # type: ignore

    def add_vector_layer(self, layer: VectorLayer | gpd.GeoDataFrame, **style: Any) -> RenderPlan:
        """
        Compose a new plan with a vector layer painted on top of all existing layers.

        :param layer: Vector layer to add.
        :param style: Drawing style, passed to GeoDataFrame.plot. Defaults to black outlines.

        :returns: A new render plan.
        """
        layer = _as_vector_layer(layer)
        _check_crs(self.crs, layer)

        spec = VectorLayerSpec(
            layer=layer, style={**_DEFAULT_VECTOR_STYLE, **style}, zorder=self.layers[-1].zorder + 1
        )

        return self._replace(layers=self.layers + (spec,))


def _as_vector_layer(layer: VectorLayer | gpd.GeoDataFrame | gpd.GeoSeries | BaseGeometry) -> VectorLayer:
    """Convert vector-type input into a VectorLayer."""

    if isinstance(layer, VectorLayer):
        return layer
    elif isinstance(layer, (gpd.GeoDataFrame, gpd.GeoSeries, BaseGeometry)):
        return VectorLayer(layer)
    else:
        raise TypeError(f"Vector layers must be VectorLayer, GeoDataFrame, GeoSeries or geometry, got {type(layer)}.")


def _check_crs(crs: CRS | None, layer: VectorLayer) -> None:
    """Raise if a vector layer declares a CRS different from the one of the grid. Undefined CRSs are not checked."""

    if crs is None or layer.crs is None:
        return
    if not crs.equals(layer.crs, ignore_axis_order=True):
        raise CRSMismatchError(
            f"Vector layer '{layer.name}' has CRS {layer.crs.to_string()}, different from the grid CRS "
            f"{crs.to_string()}. Reproject it before composing the overlay."
        )


class OverlayContext:
    """
    Shared coordinate space of a grid and vector layers, used to compose a render plan.

    The context only references the grid and layers, it does not own or modify them, and performs no coordinate
    transformation: all inputs must already share one coordinate reference system.
    """

    def __init__(
        self,
        grid: RasterGrid,
        vector_layers: Iterable[VectorLayer | gpd.GeoDataFrame | gpd.GeoSeries | BaseGeometry] = (),
        clip_vectors: bool = False,
    ):
        """
        Instantiate an overlay context.

        :param grid: Grid drawn below all vector layers.
        :param vector_layers: Vector layers, in painting order.
        :param clip_vectors: Whether to clip vector layers to the grid extent when rendering.

        :raises CRSMismatchError: If a vector layer and the grid declare different CRSs.
        """
        if not isinstance(grid, RasterGrid):
            raise TypeError(f"Grid must be a RasterGrid, got {type(grid)}.")

        layers = [_as_vector_layer(layer) for layer in vector_layers]
        for layer in layers:
            _check_crs(grid.crs, layer)

        self._grid = grid
        self._vector_layers = tuple(layers)
        self.clip_vectors = clip_vectors

    @property
    def grid(self) -> RasterGrid:
        return self._grid

    @property
    def vector_layers(self) -> tuple[VectorLayer, ...]:
        return self._vector_layers

    @property
    def extent(self) -> Extent:
        """Extent of the coordinate space, that of the grid."""
        return self._grid.extent

    def render(
        self,
        cmap: str | matplotlib.colors.Colormap | None = None,
        vmin: Number | None = None,
        vmax: Number | None = None,
        alpha: Number | None = None,
        vector_styles: dict[str, Any] | Sequence[dict[str, Any]] | None = None,
    ) -> RenderPlan:
        """
        Compose the render plan: the grid first, then each vector layer in order.

        :param cmap: Colormap of the grid. Default is geogrid.config["default_cmap"].
        :param vmin: Colorbar minimum value. Default is the minimum of valid cells.
        :param vmax: Colorbar maximum value. Default is the maximum of valid cells.
        :param alpha: Transparency of the grid.
        :param vector_styles: Drawing style of vector layers, passed to GeoDataFrame.plot. Either one style for all
            layers, or one per layer. Defaults to black outlines.

        :returns: Render plan.
        """
        if cmap is None:
            cmap = config["default_cmap"]
        elif not isinstance(cmap, matplotlib.colors.Colormap):
            cmap = validate_cmap(cmap)

        # Default color range is that of valid cells, undefined if there are none
        value_range = self._grid.describe().value_range
        if vmin is None and value_range is not None:
            vmin = value_range[0]
        if vmax is None and value_range is not None:
            vmax = value_range[1]

        raster_layer = RasterLayer(
            grid=self._grid,
            cmap=cmap,
            vmin=float(vmin) if vmin is not None else None,
            vmax=float(vmax) if vmax is not None else None,
            alpha=float(alpha) if alpha is not None else None,
            zorder=1,
        )

        if vector_styles is None:
            styles: list[dict[str, Any]] = [{}] * len(self._vector_layers)
        elif isinstance(vector_styles, dict):
            styles = [vector_styles] * len(self._vector_layers)
        else:
            styles = list(vector_styles)
            if len(styles) != len(self._vector_layers):
                raise ValueError(
                    f"Got {len(styles)} vector styles for {len(self._vector_layers)} vector layers, "
                    f"pass one style per layer or a single style."
                )

        plan = RenderPlan(extent=self._grid.extent, crs=self._grid.crs, layers=(raster_layer,))
        for layer, style in zip(self._vector_layers, styles):
            if self.clip_vectors:
                layer = layer.crop(self._grid.extent)
            plan = plan.add_vector_layer(layer, **style)

        logging.debug("Render plan composed with %d layer(s) over extent %s.", len(plan.layers), tuple(plan.extent))

        return plan


def render(
    grid: RasterGrid,
    vector_layers: Iterable[VectorLayer | gpd.GeoDataFrame | gpd.GeoSeries | BaseGeometry] = (),
    **kwargs: Any,
) -> RenderPlan:
    """
    Compose the render plan of a grid overlaid with vector layers. See OverlayContext.render for keyword arguments.

    :param grid: Grid drawn below all vector layers.
    :param vector_layers: Vector layers, in painting order.

    :returns: Render plan.
    """
    clip_vectors = kwargs.pop("clip_vectors", False)

    return OverlayContext(grid, vector_layers, clip_vectors=clip_vectors).render(**kwargs)


def plot_plan(
    plan: RenderPlan,
    ax: matplotlib.axes.Axes | Literal["new"] | None = None,
    add_cbar: bool = True,
    cbar_title: str | None = None,
    title: str | None = None,
    **kwargs: Any,
) -> matplotlib.axes.Axes:
    r"""
    Draw a render plan with Matplotlib, painting layers in plan order.

    The grid is drawn with rasterio.plot.show and vector layers with geopandas.GeoDataFrame.plot. Any \*\*kwargs
    are passed to the underlying imshow of the grid.

    :param plan: Render plan.
    :param ax: A figure ax to be used for plotting. If None, will plot on current axes. If "new", will create a
        new axis.
    :param add_cbar: Set to True to display a colorbar. Default is True.
    :param cbar_title: Colorbar label. Default is None.
    :param title: Axes title. Default is None.

    :returns: The axes.
    """

    # Create axes
    if ax is None:
        ax0 = plt.gca()
    elif isinstance(ax, str) and ax.lower() == "new":
        _, ax0 = plt.subplots()
    elif isinstance(ax, matplotlib.axes.Axes):
        ax0 = ax
    else:
        raise ValueError("ax must be a matplotlib.axes.Axes instance, 'new' or None.")

    # Set matplotlib interpolation to None by default, to avoid spreading gaps in plots
    if "interpolation" not in kwargs.keys():
        kwargs.update({"interpolation": None})

    raster_layer = plan.raster_layer
    cmap = plt.get_cmap(raster_layer.cmap)

    # Use data array directly, masked cells are transparent
    rshow(
        raster_layer.grid.data,
        transform=raster_layer.grid.transform,
        ax=ax0,
        cmap=cmap,
        vmin=raster_layer.vmin,
        vmax=raster_layer.vmax,
        alpha=raster_layer.alpha,
        zorder=raster_layer.zorder,
        **kwargs,
    )

    # Add colorbar
    if add_cbar and raster_layer.vmin is not None and raster_layer.vmax is not None:
        divider = make_axes_locatable(ax0)
        cax = divider.append_axes("right", size="5%", pad="2%")
        norm = matplotlib.colors.Normalize(vmin=raster_layer.vmin, vmax=raster_layer.vmax)
        cbar = matplotlib.colorbar.Colorbar(cax, cmap=cmap, norm=norm)
        if raster_layer.alpha is not None:
            cbar.solids.set_alpha(raster_layer.alpha)

        if cbar_title is not None:
            cbar.set_label(cbar_title)

    # Vector layers are painted after the grid, in order
    for spec in plan.vector_layers:
        if spec.layer.is_empty:
            logging.info("Vector layer '%s' is empty, skipping it.", spec.layer.name)
            continue
        spec.layer.ds.plot(ax=ax0, zorder=spec.zorder, **spec.style)

    # Keep the view on the extent of the plan
    ax0.set_xlim(plan.extent.xmin, plan.extent.xmax)
    ax0.set_ylim(plan.extent.ymin, plan.extent.ymax)

    if title is not None:
        ax0.set_title(title)

    plt.sca(ax0)

    return ax0
