"""
Exceptions raised by slabfield.

Two tiers are distinguished:

- ``ConfigurationError`` is raised while features and submodels are being
  assembled, before any field query runs.
- ``FieldEvaluationError`` is raised during a single field query when an
  internal invariant is broken (non-finite submodel output, degenerate
  starting radius, indices out of range). It aborts that query only.
"""


class ConfigurationError(ValueError):
    """Invalid or inconsistent feature/submodel configuration."""


class FieldEvaluationError(RuntimeError):
    """A field query hit an internal invariant violation."""
