"""
Temperature submodels.

uniform : constant temperature inside the distance window
linear  : temperature linear in reference distance across the window
"""

import math

from slabfield._exceptions import ConfigurationError
from slabfield.models._base import TemperatureModel, apply_operation, check_operation
from slabfield.models._registry import ModelRegistry

# Registry
temperature_models = ModelRegistry("temperature")


class UniformTemperature(TemperatureModel):
    """Set, add or subtract a constant temperature.

    Parameters
    ----------
    temperature : float
        Temperature [K].
    operation : str
        ``"replace"``, ``"add"`` or ``"subtract"``.
    min_distance, max_distance : float
        Reference-distance window [m].
    """

    name = "uniform"

    def __init__(self, temperature: float, operation: str = "replace",
                 min_distance: float = 0.0, max_distance: float = math.inf):
        super().__init__(min_distance, max_distance)
        self.temperature = float(temperature)
        self.operation = check_operation(operation)

    def evaluate(self, query, value):
        if not self.in_range(query):
            return value
        return apply_operation(self.operation, value, self.temperature)


class LinearTemperature(TemperatureModel):
    """Temperature varying linearly from the top to the bottom of the window.

    Parameters
    ----------
    top_temperature : float
        Temperature at ``min_distance`` [K].
    bottom_temperature : float
        Temperature at ``max_distance`` [K].
    operation : str
    min_distance, max_distance : float
        ``max_distance`` must be finite.
    """

    name = "linear"

    def __init__(self, top_temperature: float, bottom_temperature: float,
                 max_distance: float, min_distance: float = 0.0,
                 operation: str = "replace"):
        if not math.isfinite(max_distance):
            raise ConfigurationError("linear temperature model needs a finite max distance")
        super().__init__(min_distance, max_distance)
        self.top_temperature = float(top_temperature)
        self.bottom_temperature = float(bottom_temperature)
        self.operation = check_operation(operation)

    def evaluate(self, query, value):
        if not self.in_range(query):
            return value
        width = self.max_distance - self.min_distance
        fraction = 0.0 if width == 0.0 else (query.reference_distance - self.min_distance) / width
        temperature = self.top_temperature + fraction * (self.bottom_temperature - self.top_temperature)
        return apply_operation(self.operation, value, temperature)


temperature_models.register("uniform", UniformTemperature)
temperature_models.register("linear", LinearTemperature)
