"""
Bilinear interpolation of segment properties and plane membership.

Thickness and top truncation are given per (section, segment) as a
(top, bottom) pair. At a query they are blended with the section fraction
between the current and next section, then with the segment fraction
between the top and bottom of the bracketing segment. The maximum plane
length only varies between sections.
"""

from dataclasses import dataclass

import numpy as np

from slabfield._exceptions import FieldEvaluationError

EPSILON = float(np.finfo(float).eps)


@dataclass(frozen=True)
class LocalProperties:
    """Interpolated geometry at a query location."""
    thickness: float
    top_truncation: float
    max_slab_length: float


def _check_indices(distance, n_sections: int, n_segments: int) -> None:
    if not 0 <= distance.section < n_sections - 1:
        raise FieldEvaluationError(
            f"Section index {distance.section} out of range for {n_sections} sections"
        )
    if not 0 <= distance.segment < n_segments:
        raise FieldEvaluationError(
            f"Segment index {distance.segment} out of range for {n_segments} segments"
        )


def bilinear(values, section: int, section_fraction: float,
             segment: int, segment_fraction: float) -> float:
    """Blend a (n_sections, n_segments, 2) table at one query location."""
    f = section_fraction
    top = (1.0 - f) * values[section, segment, 0] + f * values[section + 1, segment, 0]
    bottom = (1.0 - f) * values[section, segment, 1] + f * values[section + 1, segment, 1]
    return float((1.0 - segment_fraction) * top + segment_fraction * bottom)


def interpolate_properties(distance, thickness, top_truncation,
                           total_length) -> LocalProperties:
    """Local thickness, top truncation and plane length for a DistanceResult.

    Parameters
    ----------
    distance : DistanceResult
    thickness, top_truncation : ndarray of shape (n_sections, n_segments, 2)
    total_length : ndarray of shape (n_sections,)
    """
    n_sections, n_segments = thickness.shape[:2]
    _check_indices(distance, n_sections, n_segments)
    s, f = distance.section, distance.section_fraction
    g, fg = distance.segment, distance.segment_fraction
    max_length = (1.0 - f) * total_length[s] + f * total_length[s + 1]
    return LocalProperties(
        thickness=bilinear(thickness, s, f, g, fg),
        top_truncation=bilinear(top_truncation, s, f, g, fg),
        max_slab_length=float(max_length),
    )


def is_inside_slab(properties: LocalProperties, distance) -> bool:
    """Membership of a subducting plate, measured from the slab top."""
    if abs(properties.thickness) < 2.0 * EPSILON:
        return False
    if properties.thickness < properties.top_truncation:
        return False
    return (properties.top_truncation <= distance.distance_from_plane <= properties.thickness
            and 0.0 <= distance.distance_along_plane <= properties.max_slab_length)


def is_inside_fault(properties: LocalProperties, distance) -> bool:
    """Membership of a fault, measured symmetrically from its centre plane."""
    if abs(properties.thickness) < 2.0 * EPSILON:
        return False
    return (abs(distance.distance_from_plane) <= 0.5 * properties.thickness
            and 0.0 <= distance.distance_along_plane <= properties.max_slab_length)
