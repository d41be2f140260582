"""
Terrain: the sampled field between ball and hole, and the height sources it is built from.
"""
from .field import TerrainField, TerrainSample
from .providers import HeightProvider, NoDataProvider, SurfaceFitHeightProvider, SyntheticGreen
from .scan import BucketHeightProvider, ScanSampleBuffer

__all__ = [
    "TerrainField",
    "TerrainSample",
    "HeightProvider",
    "NoDataProvider",
    "SyntheticGreen",
    "SurfaceFitHeightProvider",
    "ScanSampleBuffer",
    "BucketHeightProvider",
]
