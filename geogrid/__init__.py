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
GeoGrid is a Python package for raster grids: extents, cell indexing, cropping and overlay with vector layers.
"""

from geogrid import exceptions  # noqa
from geogrid._config import config  # noqa

from geogrid.raster import Extent, GridSummary, RasterGrid  # noqa isort:skip
from geogrid.vector import VectorLayer  # noqa isort:skip
from geogrid.interface.overlay import OverlayContext, RenderPlan, plot_plan, render  # noqa isort:skip
from geogrid.io import load_raster, load_vector_layer  # noqa isort:skip

try:
    from geogrid._version import __version__ as __version__  # noqa
except ImportError:  # pragma: no cover
    raise ImportError(
        "geogrid is not properly installed. If you are "
        "running from the source directory, please instead "
        "create a new virtual environment (using conda or "
        "virtualenv) and then install it in-place by running: "
        "pip install -e ."
    )
