"""
Grains submodels.
"""

import math

import numpy as np

from slabfield._exceptions import ConfigurationError
from slabfield._rotations import euler_angles_to_rotation_matrix
from slabfield.models._base import Grains, GrainsModel, check_operation
from slabfield.models._registry import ModelRegistry

# Registry
grains_models = ModelRegistry("grains")


class UniformGrains(GrainsModel):
    """Give every crystal of a listed composition one orientation and size.

    Exactly one of ``rotation_matrices`` and ``euler_angles`` must be given.

    Parameters
    ----------
    compositions : sequence of int
    rotation_matrices : array_like of shape (n, 3, 3), optional
    euler_angles : array_like of shape (n, 3), optional
        Bunge z-x-z angles in degrees.
    grain_sizes : sequence of float, optional
        One size per composition; a negative size means ``1 / n_grains``.
        Defaults to -1 for every composition.
    orientation_operation : str
        Only ``"replace"`` is supported.
    min_distance, max_distance : float
        Reference-distance window [m].
    """

    name = "uniform"

    def __init__(self, compositions, rotation_matrices=None, euler_angles=None,
                 grain_sizes=None, orientation_operation: str = "replace",
                 min_distance: float = 0.0, max_distance: float = math.inf):
        super().__init__(min_distance, max_distance)
        self.compositions = [int(c) for c in compositions]
        n = len(self.compositions)

        if rotation_matrices is not None and euler_angles is not None:
            raise ConfigurationError(
                "Only Euler angles or rotation matrices may be set, but both are set."
            )
        if rotation_matrices is None and euler_angles is None:
            raise ConfigurationError(
                "Euler angles or rotation matrices have to be set, but neither are set."
            )
        if euler_angles is not None:
            angles = np.asarray(euler_angles, dtype=float).reshape(-1, 3)
            matrices = np.array([euler_angles_to_rotation_matrix(*a) for a in angles])
        else:
            matrices = np.asarray(rotation_matrices, dtype=float).reshape(-1, 3, 3)
        if len(matrices) != n:
            raise ConfigurationError(
                f"There are not the same amount of compositions ({n}) "
                f"and rotation matrices ({len(matrices)})."
            )
        self.rotation_matrices = matrices

        if grain_sizes is None:
            grain_sizes = [-1.0] * n
        self.grain_sizes = [float(s) for s in grain_sizes]
        if len(self.grain_sizes) != n:
            raise ConfigurationError(
                f"There are not the same amount of compositions ({n}) "
                f"and grain sizes ({len(self.grain_sizes)})."
            )
        self.orientation_operation = check_operation(orientation_operation, ("replace",))

    def evaluate(self, query, value: Grains) -> Grains:
        if not self.in_range(query) or len(value) == 0:
            return value
        for i, composition in enumerate(self.compositions):
            if composition == query.composition_index:
                n = len(value)
                size = 1.0 / n if self.grain_sizes[i] < 0 else self.grain_sizes[i]
                return Grains(np.full(n, size),
                              np.tile(self.rotation_matrices[i], (n, 1, 1)))
        return value


grains_models.register("uniform", UniformGrains)
