"""
Capability interface shared by temperature, composition and grains submodels.

A submodel receives a ``ModelQuery`` describing where the query point sits
relative to the feature, plus the running field value, and returns the new
value. It either passes the value through unchanged or overwrites it, and it
must not keep any state between calls.

Usage
-----
    class MyTemperature(TemperatureModel):
        def evaluate(self, query, value):
            if not self.in_range(query):
                return value
            return 1600.0 - query.reference_distance * 1e-3
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

import numpy as np

from slabfield._exceptions import ConfigurationError

OPERATIONS = ("replace", "add", "subtract")


class AdditionalParameters(NamedTuple):
    """Interpolated feature geometry handed to submodels."""
    max_slab_length: float
    thickness: float


@dataclass(frozen=True)
class ModelQuery:
    """Everything a submodel may depend on for one query point.

    Attributes
    ----------
    position : ndarray (3,)
        Cartesian position.
    depth : float
        Depth below the model surface.
    distance : DistanceResult
        Location relative to the feature plane.
    reference_distance : float
        Distance the feature measures its submodel windows in: signed
        distance from the slab top for subducting plates, absolute distance
        from the centre plane for faults.
    feature_min_depth, feature_max_depth : float
    extra : AdditionalParameters
    gravity_norm : float or None
        Only set for temperature queries.
    composition_index : int or None
        Only set for composition and grains queries.
    """
    position: np.ndarray
    depth: float
    distance: object
    reference_distance: float
    feature_min_depth: float
    feature_max_depth: float
    extra: AdditionalParameters
    gravity_norm: Optional[float] = None
    composition_index: Optional[int] = None


@dataclass
class Grains:
    """Grain fabric of one composition: a size and orientation per crystal.

    Attributes
    ----------
    sizes : ndarray (n,)
    rotation_matrices : ndarray (n, 3, 3)
    """
    sizes: np.ndarray
    rotation_matrices: np.ndarray = field(repr=False)

    def __post_init__(self):
        self.sizes = np.asarray(self.sizes, dtype=float).reshape(-1)
        self.rotation_matrices = np.asarray(self.rotation_matrices, dtype=float)
        n = self.sizes.size
        if self.rotation_matrices.shape != (n, 3, 3):
            raise ValueError(
                f"Expected rotation_matrices of shape ({n}, 3, 3), "
                f"got {self.rotation_matrices.shape}"
            )

    @classmethod
    def identity(cls, n: int) -> "Grains":
        """n crystals of equal size with the identity orientation."""
        return cls(np.full(n, 1.0 / n), np.tile(np.eye(3), (n, 1, 1)))

    def __len__(self):
        return self.sizes.size

    def copy(self) -> "Grains":
        return Grains(self.sizes.copy(), self.rotation_matrices.copy())

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.sizes))
                    and np.all(np.isfinite(self.rotation_matrices)))


def apply_operation(operation: str, current: float, value: float) -> float:
    if operation == "replace":
        return value
    if operation == "add":
        return current + value
    if operation == "subtract":
        return current - value
    raise ValueError(f"Unknown operation: {operation!r}")


def check_operation(operation: str, allowed=OPERATIONS) -> str:
    if operation not in allowed:
        raise ConfigurationError(
            f"Unknown operation: {operation!r}. Available: {list(allowed)}"
        )
    return operation


class SubModel(ABC):
    """Base for all submodels.

    Parameters
    ----------
    min_distance, max_distance : float
        Window of ``ModelQuery.reference_distance`` in which the model acts.
    """

    kind = ""
    name = ""

    def __init__(self, min_distance: float = 0.0, max_distance: float = math.inf):
        if max_distance < min_distance:
            raise ConfigurationError(
                f"{self.kind} model {self.name!r}: max distance ({max_distance}) "
                f"is smaller than min distance ({min_distance})"
            )
        self.min_distance = float(min_distance)
        self.max_distance = float(max_distance)

    def in_range(self, query: ModelQuery) -> bool:
        return self.min_distance <= query.reference_distance <= self.max_distance

    @abstractmethod
    def evaluate(self, query: ModelQuery, value):
        """Return the new field value at ``query`` given the running ``value``."""

    def __repr__(self):
        return (f"{type(self).__name__}(min_distance={self.min_distance}, "
                f"max_distance={self.max_distance})")


class TemperatureModel(SubModel):
    """Submodel acting on a temperature [K]."""
    kind = "temperature"


class CompositionModel(SubModel):
    """Submodel acting on a compositional fraction in [0, 1]."""
    kind = "composition"


class GrainsModel(SubModel):
    """Submodel acting on a ``Grains`` fabric."""
    kind = "grains"
