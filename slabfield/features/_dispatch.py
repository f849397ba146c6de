"""
Apply a segment's submodels and blend the results of two sections.

For one query the submodels of the current section's segment are applied in
order to an accumulator seeded with the incoming value; the same is done for
the next section's segment with a second accumulator. The two results are
blended with the section fraction: scalars linearly, grain sizes linearly,
grain orientations by quaternion slerp.
"""

import math

import numpy as np

from slabfield._exceptions import FieldEvaluationError
from slabfield._rotations import is_rotation_matrix, slerp_rotation_matrices
from slabfield.models._base import Grains


def _check_scalar(value, model, kind: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise FieldEvaluationError(
            f"{kind.capitalize()} is not finite ({value}), based on a {kind} "
            f"model with the name {model.name!r}"
        )
    return value


def _check_grains(value, model, kind: str) -> Grains:
    if not isinstance(value, Grains) or not value.is_finite():
        raise FieldEvaluationError(
            f"Grains are not finite, based on a {kind} model with the name {model.name!r}"
        )
    return value


def apply_models(models, query, value, kind: str):
    """Run ``models`` in order on ``value``; non-finite output is fatal."""
    check = _check_grains if kind == "grains" else _check_scalar
    for model in models:
        value = check(model.evaluate(query, value), model, kind)
    return value


def blend(current: float, next_: float, fraction: float) -> float:
    """Linear blend that reproduces both end values exactly."""
    return (1.0 - fraction) * current + fraction * next_


def blend_grains(current: Grains, next_: Grains, fraction: float) -> Grains:
    """Blend two fabrics: sizes linearly, orientations by slerp.

    Orientations that are identical in both fabrics are kept as they are.
    Orientations that are not proper rotations (e.g. an unset all-zero
    matrix) cannot be slerped and are blended linearly.
    """
    if len(current) != len(next_):
        raise FieldEvaluationError(
            f"Cannot blend {len(current)} grains with {len(next_)} grains"
        )
    sizes = blend(current.sizes, next_.sizes, fraction)
    matrices = current.rotation_matrices.copy()
    a, b = current.rotation_matrices, next_.rotation_matrices

    differs = ~np.all(a == b, axis=(1, 2))
    rotations = np.array([is_rotation_matrix(m_a) and is_rotation_matrix(m_b)
                          for m_a, m_b in zip(a, b)], dtype=bool)
    slerped = differs & rotations
    linear = differs & ~rotations
    if np.any(slerped):
        matrices[slerped] = slerp_rotation_matrices(a[slerped], b[slerped], fraction)
    if np.any(linear):
        matrices[linear] = blend(a[linear], b[linear], fraction)
    return Grains(sizes, matrices)


def dispatch(kind: str, current_models, next_models, query, value, fraction: float):
    """Evaluate both sections' submodels and blend the results.

    Parameters
    ----------
    kind : str
        ``"temperature"``, ``"composition"`` or ``"grains"``.
    current_models, next_models : sequence of SubModel
        Submodels of the bracketing segment in the current and next section.
    query : ModelQuery
    value : float or Grains
        Incoming field value; seeds both accumulators.
    fraction : float
        Section fraction.
    """
    if kind == "grains":
        current = apply_models(current_models, query, value.copy(), kind)
        following = apply_models(next_models, query, value.copy(), kind)
        return blend_grains(current, following, fraction)
    current = apply_models(current_models, query, value, kind)
    following = apply_models(next_models, query, value, kind)
    return blend(current, following, fraction)
