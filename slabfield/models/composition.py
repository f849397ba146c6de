"""
Composition submodels.
"""

import math

from slabfield._exceptions import ConfigurationError
from slabfield.models._base import CompositionModel, check_operation
from slabfield.models._registry import ModelRegistry

# Registry
composition_models = ModelRegistry("composition")


class UniformComposition(CompositionModel):
    """Constant compositional fractions inside the distance window.

    Inside the window a listed composition gets its fraction; with
    ``operation == "replace"`` every composition that is not listed is set
    to zero. Outside the window the value passes through.

    Parameters
    ----------
    compositions : sequence of int
        Composition indices.
    fractions : sequence of float
        One fraction per composition (default 1.0 for each).
    operation : str
        Only ``"replace"`` is supported.
    min_distance, max_distance : float
        Reference-distance window [m].
    """

    name = "uniform"

    def __init__(self, compositions, fractions=None, operation: str = "replace",
                 min_distance: float = 0.0, max_distance: float = math.inf):
        super().__init__(min_distance, max_distance)
        self.compositions = [int(c) for c in compositions]
        if fractions is None:
            fractions = [1.0] * len(self.compositions)
        self.fractions = [float(f) for f in fractions]
        if len(self.compositions) != len(self.fractions):
            raise ConfigurationError(
                f"There are not the same amount of compositions ({len(self.compositions)}) "
                f"and fractions ({len(self.fractions)})."
            )
        self.operation = check_operation(operation, ("replace",))

    def evaluate(self, query, value):
        if not self.in_range(query):
            return value
        for composition, fraction in zip(self.compositions, self.fractions):
            if composition == query.composition_index:
                return fraction
        if self.operation == "replace":
            return 0.0
        return value


composition_models.register("uniform", UniformComposition)
