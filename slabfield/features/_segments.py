"""
Segments, sections and the per-feature submodel arena.

A *segment* is one depth interval below a trace coordinate; a *section* is
the ordered stack of segments below one coordinate. Sections default to a
shared segment list and may be overridden per coordinate, but every section
must have the same number of segments.

Submodels are owned by a ``ModelArena`` (one per feature); segments refer to
them by index so the same instance can be shared by the default list and
any number of sections.
"""

import math
from dataclasses import dataclass

import numpy as np

from slabfield._exceptions import ConfigurationError

KINDS = ("temperature", "composition", "grains")


def _pair(value, name: str):
    if value is None:
        raise ConfigurationError(f"Segment {name} is not set")
    values = [float(v) for v in np.atleast_1d(value)]
    if len(values) == 1:
        values = values * 2
    if len(values) != 2 or not all(math.isfinite(v) for v in values):
        raise ConfigurationError(f"Segment {name} must be one or two finite values, got {value!r}")
    return tuple(values)


@dataclass(frozen=True)
class Segment:
    """One depth interval of a feature.

    Attributes
    ----------
    length : float
        Length along the dip direction [m], >= 0.
    thickness : (float, float)
        Thickness at the top and bottom of the segment [m].
    top_truncation : (float, float)
        Part of the thickness cut off at the top, at top and bottom [m].
    angle : (float, float)
        Dip angle at the top and bottom of the segment [rad].
    temperature_models, composition_models, grains_models : tuple of int
        Indices into the feature's ModelArena, applied in order.
    """
    length: float
    thickness: tuple
    top_truncation: tuple = (0.0, 0.0)
    angle: tuple = (0.0, 0.0)
    temperature_models: tuple = ()
    composition_models: tuple = ()
    grains_models: tuple = ()

    def __post_init__(self):
        length = float(self.length)
        if not length >= 0.0:
            raise ConfigurationError(f"Segment length must be >= 0, got {self.length!r}")
        object.__setattr__(self, "length", length)
        object.__setattr__(self, "thickness", _pair(self.thickness, "thickness"))
        object.__setattr__(self, "top_truncation", _pair(self.top_truncation, "top truncation"))
        object.__setattr__(self, "angle", _pair(self.angle, "angle"))
        for kind in KINDS:
            attr = f"{kind}_models"
            object.__setattr__(self, attr, tuple(int(i) for i in getattr(self, attr)))

    def models(self, kind: str) -> tuple:
        return getattr(self, f"{kind}_models")


class ModelArena:
    """Owning collection of a feature's submodel instances."""

    def __init__(self):
        self._models = {kind: [] for kind in KINDS}

    def add(self, kind: str, model) -> int:
        """Store ``model`` and return its handle."""
        self._models[kind].append(model)
        return len(self._models[kind]) - 1

    def add_all(self, kind: str, models) -> tuple:
        return tuple(self.add(kind, m) for m in models)

    def resolve(self, kind: str, handles) -> tuple:
        models = self._models[kind]
        try:
            return tuple(models[h] for h in handles)
        except IndexError:
            raise ConfigurationError(
                f"Segment refers to {kind} model {max(handles)} but only "
                f"{len(models)} are registered"
            ) from None

    def __len__(self):
        return sum(len(v) for v in self._models.values())


def assemble_sections(n_sections: int, default_segments, overrides=None) -> list:
    """Section list initialised to the default segments, selectively replaced.

    Parameters
    ----------
    n_sections : int
        Number of original trace coordinates.
    default_segments : sequence of Segment
    overrides : dict[int, sequence of Segment] or None
        Replacement segment lists keyed by coordinate index.
    """
    default = tuple(default_segments)
    if not default:
        raise ConfigurationError("A feature needs at least one segment")
    sections = [default] * n_sections
    for coordinate, segments in (overrides or {}).items():
        if not 0 <= coordinate < n_sections:
            raise ConfigurationError(
                f"Trying to change the section of coordinate {coordinate} "
                f"while only {n_sections} coordinates are defined."
            )
        segments = tuple(segments)
        if len(segments) != len(default):
            raise ConfigurationError(
                f"There are not the same amount of segments in section with coordinate "
                f"{coordinate} ({len(segments)} segments) as in the default segment "
                f"({len(default)} segments). This is not allowed."
            )
        sections[coordinate] = segments
    return sections


class SegmentTable:
    """Dense arrays of segment geometry for fast per-query interpolation.

    Attributes
    ----------
    lengths : ndarray (n_sections, n_segments)
    thickness, top_truncation, angles : ndarray (n_sections, n_segments, 2)
    total_length : ndarray (n_sections,)
    max_total_length : float
    max_thickness : float
    """

    def __init__(self, sections):
        n_segments = {len(s) for s in sections}
        if len(n_segments) != 1:
            raise ConfigurationError(
                f"All sections must have the same number of segments, got {sorted(n_segments)}"
            )
        self.sections = [tuple(s) for s in sections]
        self.lengths = np.array([[seg.length for seg in s] for s in sections])
        self.thickness = np.array([[seg.thickness for seg in s] for s in sections])
        self.top_truncation = np.array([[seg.top_truncation for seg in s] for s in sections])
        self.angles = np.array([[seg.angle for seg in s] for s in sections])
        self.total_length = self.lengths.sum(axis=1)
        self.max_total_length = float(self.total_length.max())
        self.max_thickness = max(float(self.thickness.max()), 0.0)

    @property
    def n_sections(self) -> int:
        return self.lengths.shape[0]

    @property
    def n_segments(self) -> int:
        return self.lengths.shape[1]

    def segment(self, section: int, segment: int) -> Segment:
        return self.sections[section][segment]
