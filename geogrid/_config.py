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

"""Setup of runtime configuration of GeoGrid."""

from __future__ import annotations

import configparser
import os
from typing import Any

import matplotlib

# The setup is inspired by that of Matplotlib and Geowombat
# https://github.com/matplotlib/matplotlib/blob/main/lib/matplotlib/rcsetup.py
# https://github.com/jgrss/geowombat/blob/main/src/geowombat/config.py

_config_ini_file = os.path.abspath(os.path.join(os.path.dirname(__file__), "config.ini"))

# Validators: to check the format of user inputs


def validate_bool(b: bool | str | int) -> bool:
    """Convert b to ``bool`` or raise."""
    if isinstance(b, str):
        b = b.lower()
    if b in ("t", "y", "yes", "on", "true", "1", 1, True):
        return True
    elif b in ("f", "n", "no", "off", "false", "0", 0, False):
        return False
    else:
        raise ValueError(f"Cannot convert {b!r} to bool")


def validate_non_negative_int(i: int | str) -> int:
    """Convert i to a non-negative ``int`` or raise."""
    if isinstance(i, bool):
        raise ValueError(f"Cannot convert {i!r} to a non-negative int")
    try:
        value = int(i)
    except (TypeError, ValueError):
        raise ValueError(f"Cannot convert {i!r} to a non-negative int")
    if value < 0 or (not isinstance(i, str) and value != i):
        raise ValueError(f"Cannot convert {i!r} to a non-negative int")
    return value


def validate_cmap(name: str) -> str:
    """Check that name is a colormap registered in Matplotlib."""
    if not isinstance(name, str) or name not in matplotlib.colormaps:
        raise ValueError(f"Colormap {name!r} is not registered in Matplotlib")
    return name


# Map the parameter names with a validating function to check user input
_validators = {
    "warn_partial_crop": validate_bool,
    "snap_ulps": validate_non_negative_int,
    "default_cmap": validate_cmap,
}


class GeoGridConfigDict(dict):  # type: ignore
    """Class for a GeoGrid config dictionary"""

    def __setitem__(self, k: str, v: Any) -> None:
        """We override setitem to check user input."""

        validate_func = _validators[k]
        new_value = validate_func(v)
        super().__setitem__(k, new_value)

    def _set_defaults(self, path_init_file: str) -> None:
        """Read default values from an INI file, section names are only used for grouping."""

        config_parser = configparser.ConfigParser()
        config_parser.read(path_init_file)

        for section in config_parser.sections():
            for k, v in config_parser[section].items():
                self.__setitem__(k, v)


# Generate default config dictionary
config = GeoGridConfigDict()
config._set_defaults(path_init_file=_config_ini_file)
