from os import path
from typing import Optional

from setuptools import setup

FULLVERSION = "0.1.0"
VERSION = FULLVERSION

write_version = True


def write_version_py(filename: Optional[str] = None) -> None:
    cnt = """\
__version__ = '%s'
short_version = '%s'
"""
    if filename is None:
        filename = path.join(path.dirname(path.abspath(__file__)), "geogrid", "_version.py")

    a = open(filename, "w")
    try:
        a.write(cnt % (FULLVERSION, VERSION))
    finally:
        a.close()


if write_version:
    write_version_py()


with open(path.join(path.dirname(path.abspath(__file__)), "README.md"), encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="geogrid",
    version=FULLVERSION,
    description="Raster grids with extent and resolution semantics, cropping and vector overlays",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="The GeoGrid developers",
    license="Apache-2.0",
    packages=["geogrid", "geogrid.raster", "geogrid.vector", "geogrid.interface"],
    package_data={"geogrid": ["config.ini"]},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pandas",
        "rasterio",
        "affine < 3",
        "geopandas >= 0.10.0",
        "shapely",
        "pyproj",
        "matplotlib",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["geoviewer = geogrid.geoviewer:main"]},
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: Apache Software License",
    ],
)
