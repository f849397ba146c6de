"""
Curved-plane features: subducting plates and faults.

A feature is assembled once from a trace, a dip point, a default segment
list with optional per-section overrides, and the submodels its segments
refer to. After construction it is never mutated, so ``temperature``,
``composition`` and ``grains`` may be called concurrently.

Query pipeline
--------------
1. Reject points outside the depth window or the surface bounding box.
2. Measure distance from and along the plane.
3. Interpolate local thickness/truncation and test membership.
4. Apply and blend the submodels of the bracketing segment.

Usage
-----
    from slabfield.features import SubductingPlate, Segment, ModelArena
    from slabfield.geometry import Path

    arena = ModelArena()
    comp = arena.add("composition", UniformComposition([2], [0.8]))
    segment = Segment(length=200e3, thickness=100e3, angle=np.radians(30),
                      composition_models=(comp,))
    slab = SubductingPlate("slab", CartesianCoordinateSystem(),
                           Path([[0, 0], [0, 500e3]]), dip_point=[1e6, 0],
                           default_segments=[segment], models=arena)
    value = slab.composition(position, natural, depth, 2, 0.0)
"""

import logging
import math
from abc import ABC, abstractmethod

import numpy as np

from slabfield._coordinates import Point, _as_xyz
from slabfield._exceptions import ConfigurationError, FieldEvaluationError
from slabfield.features._dispatch import dispatch
from slabfield.features._segments import KINDS, ModelArena, SegmentTable, assemble_sections
from slabfield.geometry._bounding_box import PathExtent
from slabfield.geometry._distance import distance_from_curved_planes
from slabfield.geometry._interpolation import (
    interpolate_properties,
    is_inside_fault,
    is_inside_slab,
)
from slabfield.models._base import AdditionalParameters, ModelQuery
from slabfield.models._registry import ModelRegistry

logger = logging.getLogger(__name__)

# Registry
feature_types = ModelRegistry("feature")


class CurvedPlaneFeature(ABC):
    """Feature described by a surface trace and a stack of dipping segments.

    Parameters
    ----------
    name : str
        User-given name.
    coordinate_system : CoordinateSystem
    path : Path
        Surface trace; one section per original coordinate.
    dip_point : Point or array_like
        Surface point toward which the plane dips.
    default_segments : sequence of Segment
        Segment list used by every section that is not overridden.
    models : ModelArena
        Owner of the submodels the segments refer to.
    section_segments : dict[int, sequence of Segment] or None
        Per-coordinate replacement segment lists.
    min_depth, max_depth : float
        Depth window in which the feature exists [m].
    """

    model = ""

    def __init__(self, name, coordinate_system, path, dip_point, default_segments,
                 models=None, section_segments=None, min_depth=0.0, max_depth=math.inf):
        if max_depth < min_depth:
            raise ConfigurationError(
                f"{self.model} {name!r}: max depth ({max_depth}) is smaller than "
                f"min depth ({min_depth})"
            )
        if path.system != coordinate_system.natural_system:
            raise ConfigurationError(
                f"Path is {path.system} but the coordinate system is "
                f"{coordinate_system.natural_system}"
            )
        self.name = name
        self.coordinate_system = coordinate_system
        self.path = path
        self.dip_point = (dip_point.as_array() if isinstance(dip_point, Point)
                          else np.asarray(dip_point, dtype=float).reshape(2))
        self.min_depth = float(min_depth)
        self.max_depth = float(max_depth)
        self.models = models if models is not None else ModelArena()

        sections = assemble_sections(path.n_original, default_segments, section_segments)
        self.segments = SegmentTable(sections)
        self._section_models = {
            kind: [[self.models.resolve(kind, seg.models(kind)) for seg in section]
                   for section in self.segments.sections]
            for kind in KINDS
        }
        self._extent = PathExtent(
            path.coordinates,
            self.segments.max_thickness + self.segments.max_total_length,
            coordinate_system.natural_system,
        )
        logger.info("Built %s %r: %d sections x %d segments, max thickness %g, "
                    "max length %g", self.model, name, self.segments.n_sections,
                    self.segments.n_segments, self.segments.max_thickness,
                    self.segments.max_total_length)

    @property
    def maximum_slab_thickness(self) -> float:
        return self.segments.max_thickness

    @property
    def maximum_total_slab_length(self) -> float:
        return self.segments.max_total_length

    def starting_radius(self, natural, depth: float) -> float:
        """Depth coordinate of the top of the feature above the query point."""
        return natural.depth_coordinate + depth - self.min_depth

    def get_bounding_box(self, natural, depth: float):
        """Surface box outside of which the feature cannot influence a query."""
        return self._extent.bounding_box(self.starting_radius(natural, depth))

    def _in_depth_window(self, depth: float) -> bool:
        return (self.min_depth <= depth <= self.max_depth
                and depth <= self.segments.max_total_length + self.segments.max_thickness)

    def distance(self, position, natural, depth: float):
        """DistanceResult of a query point relative to this feature's plane."""
        return distance_from_curved_planes(
            position, natural, self.dip_point, self.path,
            self.segments.lengths, self.segments.angles,
            self.starting_radius(natural, depth), self.coordinate_system,
        )

    def _locate(self, position, natural, depth: float):
        if not self._in_depth_window(depth):
            return None
        radius = self.starting_radius(natural, depth)
        if not radius > 0.0:
            raise FieldEvaluationError(
                f"Starting radius of {self.model} {self.name!r} is {radius}; "
                f"it must be positive"
            )
        if not self._extent.bounding_box(radius).point_inside(natural.surface):
            return None
        distance = self.distance(position, natural, depth)
        if not distance.found:
            return None
        properties = interpolate_properties(
            distance, self.segments.thickness, self.segments.top_truncation,
            self.segments.total_length,
        )
        if not self._contains(properties, distance):
            return None
        return distance, properties

    @abstractmethod
    def _contains(self, properties, distance) -> bool:
        """Membership test on interpolated properties."""

    @abstractmethod
    def _reference_distance(self, distance) -> float:
        """Distance handed to submodels as ``ModelQuery.reference_distance``."""

    def _evaluate(self, kind, position, natural, depth, value, **query_kwargs):
        located = self._locate(position, natural, depth)
        if located is None:
            return value
        distance, properties = located
        query = ModelQuery(
            position=_as_xyz(position),
            depth=float(depth),
            distance=distance,
            reference_distance=self._reference_distance(distance),
            feature_min_depth=self.min_depth,
            feature_max_depth=self.max_depth,
            extra=AdditionalParameters(properties.max_slab_length, properties.thickness),
            **query_kwargs,
        )
        models = self._section_models[kind]
        return dispatch(kind,
                        models[distance.section][distance.segment],
                        models[distance.section + 1][distance.segment],
                        query, value, distance.section_fraction)

    def temperature(self, position, natural, depth: float, gravity_norm: float,
                    temperature: float) -> float:
        """Temperature at a point given the temperature computed so far."""
        return self._evaluate("temperature", position, natural, depth, temperature,
                              gravity_norm=gravity_norm)

    def composition(self, position, natural, depth: float, composition_index: int,
                    composition: float) -> float:
        """Fraction of ``composition_index`` at a point given its current value."""
        return self._evaluate("composition", position, natural, depth, composition,
                              composition_index=composition_index)

    def grains(self, position, natural, depth: float, composition_index: int, grains):
        """Grain fabric of ``composition_index`` at a point given the current fabric."""
        return self._evaluate("grains", position, natural, depth, grains,
                              composition_index=composition_index)

    def __repr__(self):
        return (f"{type(self).__name__}(name={self.name!r}, "
                f"sections={self.segments.n_sections}, segments={self.segments.n_segments})")


class SubductingPlate(CurvedPlaneFeature):
    """Slab whose thickness is measured downward from its top surface."""

    model = "subducting plate"

    def _contains(self, properties, distance) -> bool:
        return is_inside_slab(properties, distance)

    def _reference_distance(self, distance) -> float:
        return distance.distance_from_plane


class Fault(CurvedPlaneFeature):
    """Fault zone extending half its thickness to either side of its plane."""

    model = "fault"

    def _contains(self, properties, distance) -> bool:
        return is_inside_fault(properties, distance)

    def _reference_distance(self, distance) -> float:
        return abs(distance.distance_from_plane)


feature_types.register("subducting plate", SubductingPlate)
feature_types.register("fault", Fault)
