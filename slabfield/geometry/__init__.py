"""
Geometric evaluation of curved features.

Submodules
----------
_path          : Surface trace resampling (Path, interpolation modes)
_bounding_box  : Cheap reject test (BoundingBox, PathExtent)
_distance      : Distance from/along a curved plane (DistanceResult)
_interpolation : Bilinear thickness/truncation blending and membership
"""

from slabfield.geometry._path import (
    Path,
    INTERPOLATION_TYPES,
    NONE,
    LINEAR,
    MONOTONE_SPLINE,
    CONTINUOUS_MONOTONE_SPLINE,
)
from slabfield.geometry._bounding_box import BoundingBox, PathExtent, point_inside
from slabfield.geometry._distance import (
    DistanceResult,
    distance_from_curved_planes,
    section_of,
)
from slabfield.geometry._interpolation import (
    LocalProperties,
    bilinear,
    interpolate_properties,
    is_inside_slab,
    is_inside_fault,
)

__all__ = [
    'Path', 'INTERPOLATION_TYPES',
    'NONE', 'LINEAR', 'MONOTONE_SPLINE', 'CONTINUOUS_MONOTONE_SPLINE',
    'BoundingBox', 'PathExtent', 'point_inside',
    'DistanceResult', 'distance_from_curved_planes', 'section_of',
    'LocalProperties', 'bilinear', 'interpolate_properties',
    'is_inside_slab', 'is_inside_fault',
]
