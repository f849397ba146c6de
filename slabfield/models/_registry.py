"""
Name -> factory registry for pluggable submodels and features.

Lifecycle
---------
A registry is populated once, at import time of the modules that define
plugins, and is frozen the first time ``create`` is called. After that it is
read-only, so concurrent lookups need no locking. Registering a new name
after freezing raises ``RuntimeError``.

Usage
-----
    temperature_models = ModelRegistry("temperature")
    temperature_models.register("uniform", UniformTemperature)
    model = temperature_models.create("uniform", temperature=600.0)
    temperature_models.available()  # ["uniform"]
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Registry of factories keyed by lower-case plugin name.

    Parameters
    ----------
    name : str
        Human-readable name for error messages (e.g., "temperature").
    """

    def __init__(self, name: str):
        self.name = name
        self._factories: dict[str, Callable] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, key: str, factory: Callable) -> None:
        """Register a factory under the given key."""
        if self._frozen:
            raise RuntimeError(
                f"The {self.name} registry is frozen; register plugins before "
                f"building any feature"
            )
        self._factories[key.lower()] = factory

    def freeze(self) -> None:
        """Make the registry read-only."""
        if not self._frozen:
            logger.debug("Freezing %s registry with %d entries",
                         self.name, len(self._factories))
        self._frozen = True

    def __getitem__(self, key: str) -> Callable:
        factory = self._factories.get(key.lower())
        if factory is None:
            raise KeyError(
                f"Unknown {self.name} model: {key!r}. "
                f"Available: {list(self._factories.keys())}"
            )
        return factory

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._factories

    def create(self, key: str, **params):
        """Freeze the registry and build a plugin instance."""
        self.freeze()
        return self[key](**params)

    def available(self) -> list[str]:
        """Return list of registered names."""
        return list(self._factories.keys())
