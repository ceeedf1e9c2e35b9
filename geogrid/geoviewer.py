#!/usr/bin/env python
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
geogrid.geoviewer provides a command line tool for plotting a raster, optionally cropped, with vector layers overlaid
"""
from __future__ import annotations

import argparse
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np

from geogrid._config import config
from geogrid.interface.overlay import plot_plan, render
from geogrid.io import load_raster, load_vector_layer
from geogrid.raster.grid import RasterGrid


def getparser() -> argparse.ArgumentParser:

    # Set up description
    parser = argparse.ArgumentParser(
        description="Visualisation tool for any raster supported by GDAL, with optional crop and vector overlays."
    )

    # Positional arguments
    parser.add_argument("filename", type=str, help="str, path to the raster")

    # optional arguments
    parser.add_argument(
        "-band",
        dest="band",
        type=int,
        default=1,
        help="int, which band to display (start at 1) for multiband rasters (Default is 1).",
    )
    parser.add_argument(
        "-extent",
        dest="extent",
        type=float,
        nargs=4,
        default=None,
        metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
        help="float, extent to crop the raster to, snapped outward to the raster cells (Default is no crop).",
    )
    parser.add_argument(
        "-vector",
        dest="vectors",
        type=str,
        action="append",
        default=[],
        help="str, path to a vector file to overlay, can be repeated; painted in order after the raster.",
    )
    parser.add_argument(
        "-clip",
        dest="clip",
        default=False,
        action="store_true",
        help="If set, vector layers are clipped to the raster extent (Default is to draw them entirely).",
    )
    parser.add_argument(
        "-cmap",
        dest="cmap",
        type=str,
        default="default",
        help="str, a matplotlib colormap string (default is from geogrid.config).",
    )
    parser.add_argument(
        "-vmin",
        dest="vmin",
        type=str,
        default=None,
        help=(
            "float, the minimum value for colorscale, or can be expressed as a "
            "percentile e.g. 5%% (default is calculated min value)."
        ),
    )
    parser.add_argument(
        "-vmax",
        dest="vmax",
        type=str,
        default=None,
        help=(
            "float, the maximum value for colorscale, or can be expressed as a "
            "percentile e.g. 95%% (default is calculated max value)."
        ),
    )
    parser.add_argument(
        "-nocb",
        dest="nocb",
        help="If set, will not display a colorbar (Default is to display the colorbar).",
        action="store_false",
    )
    parser.add_argument(
        "-clabel", dest="clabel", type=str, default="", help="str, the label for the colorscale (Default is empty)."
    )
    parser.add_argument("-title", dest="title", type=str, default="", help="str, figure title (Default is empty).")
    parser.add_argument(
        "-figsize",
        dest="figsize",
        type=str,
        default="default",
        help="str, figure size, two numbers separated by comma, no space (Default is from rcParams).",
    )
    parser.add_argument(
        "-save",
        dest="save",
        type=str,
        default="",
        help="str, filename to the output filename to save to disk (Default is displayed on screen).",
    )
    parser.add_argument(
        "-dpi",
        dest="dpi",
        type=str,
        default="default",
        help="int, dpi value to use when saving figure (Default is from rcParams).",
    )
    parser.add_argument(
        "-nodata",
        dest="nodata",
        type=str,
        default="default",
        help="float, no data value (Default is read from file metadata).",
    )

    return parser


def _parse_color_limit(value: str | None, grid: RasterGrid, name: str) -> float | None:
    """Parse a colorscale limit given as a number or as a percentile of valid cells, e.g. 5%."""

    if value is None:
        return None

    try:
        return float(value)
    except ValueError:  # Case is not a number
        perc, _, rest = value.partition("%")
        if rest != "" or not value.endswith("%"):
            raise ValueError(f"{name} must be a float or percentage, currently set to {value}")
        valid = grid.data.compressed()
        if valid.size == 0:
            raise ValueError(
                f"{name} cannot be a percentage for a raster with only nodata cells, currently set to {value}"
            )
        try:
            return float(np.percentile(valid, float(perc)))
        except ValueError:  # Case no number before % sign
            raise ValueError(f"{name} must be a float or percentage, currently set to {value}")


def main(argv: Sequence[str] | None = None) -> None:

    # Parse arguments
    args = getparser().parse_args(argv)

    # Read raster #
    grid = load_raster(args.filename, band=args.band)

    # Set no data value
    if args.nodata != "default":
        try:
            nodata = float(args.nodata)
        except ValueError:
            raise ValueError("ERROR: nodata must be a float, currently set to %s" % args.nodata)

        # Nodata must fit in the data type of the raster
        if np.issubdtype(grid.data.dtype, np.integer):
            dtype_info = np.iinfo(grid.data.dtype)
        else:
            dtype_info = np.finfo(grid.data.dtype)
        if not dtype_info.min <= nodata <= dtype_info.max:
            raise ValueError(f"ERROR: nodata {nodata} is out of the range of data type {grid.data.dtype}")

        grid = RasterGrid(grid.data, extent=grid.extent, nodata=nodata, crs=grid.crs, res=grid.res)

    # Crop #
    if args.extent is not None:
        grid = grid.crop(args.extent)

    # Vector layers #
    vectors = [load_vector_layer(filename) for filename in args.vectors]

    # Set default parameters #
    vmin = _parse_color_limit(args.vmin, grid, "vmin")
    vmax = _parse_color_limit(args.vmax, grid, "vmax")

    # color map
    cmap = config["default_cmap"] if args.cmap == "default" else args.cmap

    # Figsize
    if args.figsize == "default":
        figsize = plt.rcParams["figure.figsize"]
    else:
        try:
            xfigsize, yfigsize = (float(arg) for arg in args.figsize.split(","))
            figsize = (xfigsize, yfigsize)
        except ValueError:
            raise ValueError("ERROR: figsize must be a tuple of size 2, currently set to %s" % args.figsize)

    # dpi
    if args.dpi == "default":
        dpi = plt.rcParams["figure.dpi"]
    else:
        try:
            dpi = int(args.dpi)
        except ValueError:
            raise ValueError("ERROR: dpi must be an integer, currently set to %s" % args.dpi)

    # Plot data #
    plan = render(grid, vectors, clip_vectors=args.clip, cmap=cmap, vmin=vmin, vmax=vmax)

    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111)

    plot_plan(
        plan,
        ax=ax,
        add_cbar=args.nocb,
        cbar_title=args.clabel,
        title=args.title,
        interpolation="nearest",
    )

    plt.tight_layout()

    # Save
    if args.save != "":
        plt.savefig(args.save, dpi=dpi)
        print("Figure saved to file %s." % args.save)
    else:
        plt.show()


if __name__ == "__main__":
    main()
