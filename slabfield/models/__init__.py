"""
Pluggable submodels that turn a feature location into field values.

Submodules
----------
_registry   : ModelRegistry (name -> factory, frozen after first use)
_base       : SubModel interface, ModelQuery, Grains
temperature : UniformTemperature, LinearTemperature
composition : UniformComposition
grains      : UniformGrains
"""

from slabfield.models._registry import ModelRegistry
from slabfield.models._base import (
    AdditionalParameters,
    ModelQuery,
    Grains,
    SubModel,
    TemperatureModel,
    CompositionModel,
    GrainsModel,
)
from slabfield.models.temperature import (
    temperature_models,
    UniformTemperature,
    LinearTemperature,
)
from slabfield.models.composition import composition_models, UniformComposition
from slabfield.models.grains import grains_models, UniformGrains

__all__ = [
    'ModelRegistry',
    'AdditionalParameters', 'ModelQuery', 'Grains',
    'SubModel', 'TemperatureModel', 'CompositionModel', 'GrainsModel',
    'temperature_models', 'UniformTemperature', 'LinearTemperature',
    'composition_models', 'UniformComposition',
    'grains_models', 'UniformGrains',
]
