"""
Temperature, composition and grain fields of curved subduction features.

A feature (subducting plate or fault) is a surface trace with a stack of
dipping segments below each trace coordinate. For a query point the feature
measures its distance from and along the curved plane, decides whether the
point lies inside, and lets pluggable submodels set the field value.

Submodules
----------
_coordinates : Cartesian and spherical coordinate systems, tagged points
_rotations   : Quaternion conversion, slerp, Euler z-x-z matrices
geometry     : Path, bounding box, distance engine, property interpolation
models       : Submodel registries and the temperature/composition/grains catalogue
features     : Segments, submodel dispatch, SubductingPlate and Fault
config       : WorldParams and the dictionary feature builder
"""

from slabfield._exceptions import ConfigurationError, FieldEvaluationError
from slabfield._coordinates import (
    CARTESIAN,
    SPHERICAL,
    Point,
    NaturalCoordinate,
    CoordinateSystem,
    CartesianCoordinateSystem,
    SphericalCoordinateSystem,
    coordinate_system_from_name,
)
from slabfield._rotations import (
    rotation_matrix_to_quaternion,
    quaternion_to_rotation_matrix,
    euler_angles_to_rotation_matrix,
    slerp_rotation_matrices,
)
from slabfield.geometry import Path, BoundingBox, DistanceResult
from slabfield.models import Grains
from slabfield.features import Segment, ModelArena, SubductingPlate, Fault
from slabfield.config import WorldParams, build_feature, build_world

__all__ = [
    'ConfigurationError', 'FieldEvaluationError',
    'CARTESIAN', 'SPHERICAL', 'Point', 'NaturalCoordinate',
    'CoordinateSystem', 'CartesianCoordinateSystem', 'SphericalCoordinateSystem',
    'coordinate_system_from_name',
    'rotation_matrix_to_quaternion', 'quaternion_to_rotation_matrix',
    'euler_angles_to_rotation_matrix', 'slerp_rotation_matrices',
    'Path', 'BoundingBox', 'DistanceResult', 'Grains',
    'Segment', 'ModelArena', 'SubductingPlate', 'Fault',
    'WorldParams', 'build_feature', 'build_world',
]
