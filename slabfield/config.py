"""
Typed world parameters and the dictionary builder for features.

Features are described declaratively with the same keys a world file uses,
then built once. Every validation problem is reported as a
``ConfigurationError`` before any query runs; keys the builder does not know
are logged and ignored.

Usage
-----
    from slabfield.config import WorldParams, build_feature

    world = WorldParams(coordinate_system="cartesian")
    slab = build_feature({
        "model": "subducting plate",
        "name": "slab",
        "coordinates": [[0, 0], [0, 500e3]],
        "dip point": [1e6, 0],
        "segments": [{"length": 200e3, "thickness": [100e3], "angle": [30]}],
        "composition models": [{"model": "uniform", "compositions": [2],
                                "fractions": [0.8]}],
    }, world)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from slabfield._coordinates import CARTESIAN, SPHERICAL, coordinate_system_from_name
from slabfield._exceptions import ConfigurationError
from slabfield.features._feature import feature_types
from slabfield.features._segments import KINDS, ModelArena, Segment
from slabfield.geometry._path import CONTINUOUS_MONOTONE_SPLINE, INTERPOLATION_TYPES, Path
from slabfield.models.composition import composition_models
from slabfield.models.grains import grains_models
from slabfield.models.temperature import temperature_models

logger = logging.getLogger(__name__)

GLOBAL = "global"

_REGISTRIES = {
    "temperature": temperature_models,
    "composition": composition_models,
    "grains": grains_models,
}

# world-file key -> constructor keyword
_SUBMODEL_KEYS = {
    "min distance slab top": "min_distance",
    "max distance slab top": "max_distance",
    "min distance fault center": "min_distance",
    "max distance fault center": "max_distance",
    "operation": "operation",
    "temperature": "temperature",
    "top temperature": "top_temperature",
    "bottom temperature": "bottom_temperature",
    "compositions": "compositions",
    "fractions": "fractions",
    "rotation matrices": "rotation_matrices",
    "Euler angles z-x-z": "euler_angles",
    "grain sizes": "grain_sizes",
    "orientation operation": "orientation_operation",
}

_MODEL_LIST_KEYS = tuple(f"{kind} models" for kind in KINDS)
_FEATURE_KEYS = {"model", "name", "coordinates", "interpolation", "dip point",
                 "min depth", "max depth", "segments", "sections", *_MODEL_LIST_KEYS}
_SEGMENT_KEYS = {"length", "thickness", "top truncation", "angle", *_MODEL_LIST_KEYS}
_SECTION_KEYS = {"coordinate", "segments", *_MODEL_LIST_KEYS}


@dataclass
class WorldParams:
    """Settings shared by every feature of a world.

    Parameters
    ----------
    coordinate_system : str
        ``"cartesian"`` or ``"spherical"``.
    interpolation : str
        Path interpolation used by features that ask for ``"global"``.
    maximum_distance_between_coordinates : float
        Resampling spacing for the monotone spline mode; meters for
        Cartesian worlds, degrees for spherical ones. Zero disables it.
    """
    coordinate_system: str = CARTESIAN
    interpolation: str = CONTINUOUS_MONOTONE_SPLINE
    maximum_distance_between_coordinates: float = 0.0

    def __post_init__(self):
        if self.coordinate_system not in (CARTESIAN, SPHERICAL):
            raise ConfigurationError(
                f"Unknown coordinate system: {self.coordinate_system!r}. "
                f"Available: {[CARTESIAN, SPHERICAL]}"
            )
        if self.interpolation not in INTERPOLATION_TYPES:
            raise ConfigurationError(
                f"Unknown interpolation: {self.interpolation!r}. "
                f"Available: {list(INTERPOLATION_TYPES)}"
            )

    @property
    def spherical(self) -> bool:
        return self.coordinate_system == SPHERICAL

    @property
    def maximum_spacing(self) -> float:
        """Resampling spacing in surface-coordinate units."""
        if self.spherical:
            return math.radians(self.maximum_distance_between_coordinates)
        return float(self.maximum_distance_between_coordinates)


def _warn_unknown(entry: dict, known, where: str) -> None:
    for key in entry:
        if key not in known:
            logger.warning("Ignoring unknown key %r in %s", key, where)


def _require(entry: dict, key: str, where: str):
    if key not in entry:
        raise ConfigurationError(f"Missing required entry {key!r} in {where}")
    return entry[key]


def build_submodel(kind: str, entry: dict, where: str = ""):
    """Build one temperature, composition or grains submodel from its dict."""
    where = f"{kind} model of {where}" if where else f"{kind} model"
    name = _require(entry, "model", where)
    registry = _REGISTRIES[kind]
    if name not in registry:
        raise ConfigurationError(
            f"Unknown {kind} model {name!r} in {where}. Available: {registry.available()}"
        )
    params = {}
    for key, value in entry.items():
        if key == "model":
            continue
        target = _SUBMODEL_KEYS.get(key)
        if target is None:
            logger.warning("Ignoring unknown key %r in %s %r", key, where, name)
            continue
        params[target] = value
    try:
        return registry.create(name, **params)
    except TypeError as e:
        raise ConfigurationError(f"Invalid parameters for {where} {name!r}: {e}") from e


def _build_model_lists(entry: dict, arena: ModelArena, defaults: dict, where: str) -> dict:
    """Handles per kind: the entry's own lists where present, else ``defaults``."""
    handles = dict(defaults)
    for kind in KINDS:
        models = entry.get(f"{kind} models")
        if models is not None:
            handles[kind] = arena.add_all(
                kind, [build_submodel(kind, m, where) for m in models]
            )
    return handles


def _build_segments(entries, arena: ModelArena, defaults: dict, where: str) -> list:
    if not entries:
        raise ConfigurationError(f"{where} needs at least one segment")
    segments = []
    for i, entry in enumerate(entries):
        seg_where = f"segment {i} of {where}"
        _warn_unknown(entry, _SEGMENT_KEYS, seg_where)
        handles = _build_model_lists(entry, arena, defaults, seg_where)
        segments.append(Segment(
            length=_require(entry, "length", seg_where),
            thickness=_require(entry, "thickness", seg_where),
            top_truncation=entry.get("top truncation", [0.0, 0.0]),
            angle=np.radians(np.atleast_1d(
                np.asarray(_require(entry, "angle", seg_where), dtype=float))),
            temperature_models=handles["temperature"],
            composition_models=handles["composition"],
            grains_models=handles["grains"],
        ))
    return segments


def _surface_coordinates(values, world: WorldParams, where: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ConfigurationError(f"{where} must be a list of 2D points, got shape {arr.shape}")
    return np.radians(arr) if world.spherical else arr


def build_feature(entry: dict, world: WorldParams = None):
    """Build a SubductingPlate or Fault from a world-file style dictionary.

    Parameters
    ----------
    entry : dict
        Feature description; see the module docstring for an example.
    world : WorldParams, optional
        Shared world settings (Cartesian with defaults if omitted).

    Returns
    -------
    CurvedPlaneFeature
    """
    world = world if world is not None else WorldParams()
    model = _require(entry, "model", "feature")
    name = entry.get("name", model)
    where = f"{model} {name!r}"
    if model not in feature_types:
        raise ConfigurationError(
            f"Unknown feature model {model!r}. Available: {feature_types.available()}"
        )
    _warn_unknown(entry, _FEATURE_KEYS, where)

    coordinates = _surface_coordinates(_require(entry, "coordinates", where), world,
                                       f"coordinates of {where}")
    dip_point = _surface_coordinates([_require(entry, "dip point", where)], world,
                                     f"dip point of {where}")[0]
    interpolation = entry.get("interpolation", GLOBAL)
    if interpolation == GLOBAL:
        interpolation = world.interpolation
    coordinate_system = coordinate_system_from_name(world.coordinate_system)
    path = Path(coordinates, interpolation=interpolation,
                maximum_spacing=world.maximum_spacing,
                system=coordinate_system.natural_system)

    arena = ModelArena()
    feature_defaults = _build_model_lists(entry, arena, {kind: () for kind in KINDS}, where)
    segment_entries = _require(entry, "segments", where)
    default_segments = _build_segments(segment_entries, arena, feature_defaults, where)

    section_segments = {}
    for section in entry.get("sections", []):
        coordinate = int(_require(section, "coordinate", f"section of {where}"))
        section_where = f"section {coordinate} of {where}"
        _warn_unknown(section, _SECTION_KEYS, section_where)
        if coordinate in section_segments:
            raise ConfigurationError(f"{section_where} is defined more than once")
        overridden_models = any(key in section for key in _MODEL_LIST_KEYS)
        if "segments" not in section and not overridden_models:
            logger.warning("%s only repeats the default segments", section_where)
        section_defaults = _build_model_lists(section, arena, feature_defaults, section_where)
        section_segments[coordinate] = _build_segments(
            section.get("segments", segment_entries), arena, section_defaults, section_where
        )

    return feature_types.create(
        model,
        name=name,
        coordinate_system=coordinate_system,
        path=path,
        dip_point=dip_point,
        default_segments=default_segments,
        models=arena,
        section_segments=section_segments,
        min_depth=float(entry.get("min depth", 0.0)),
        max_depth=float(entry.get("max depth", math.inf)),
    )


def build_world(entries, world: WorldParams = None) -> list:
    """Build every feature of a world, in order."""
    world = world if world is not None else WorldParams()
    features = [build_feature(entry, world) for entry in entries]
    logger.info("Built %d features in a %s world", len(features), world.coordinate_system)
    return features
