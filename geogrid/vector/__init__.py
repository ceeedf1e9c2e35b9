from geogrid.vector.vector import VectorLayer, VectorLayerType  # noqa

__all__ = ["VectorLayer", "VectorLayerType"]
