"""
Distance of a point to a curved, multi-section, multi-segment plane.

The plane hangs from a surface trace (``Path``) and dips toward a reference
("dip") point. Below every trace coordinate (a *section*) the plane is
described by a stack of *segments*, each with a length and a dip angle at its
top and bottom. A segment whose top and bottom angles differ is a circular
arc along which the dip changes linearly with arc length.

Algorithm
---------
1. Find the trace chord nearest to the query's surface coordinates and the
   closest point on it (refined on the spline for continuous traces). Its arc
   parameter gives the section index and the section fraction.
2. Build a vertical 2D profile through that closest point: the horizontal
   axis points from the trace toward the query (positive on the dip-point
   side), the vertical axis points up, the origin lies at the starting radius.
   Beyond the first and last trace coordinates the horizontal axis keeps
   only the offset perpendicular to the end of the trace, so the end
   profile is extruded along strike.
3. Walk the segments of the section (lengths and angles blended between the
   section and the next one) from the surface downward. For each segment
   whose along-dip extent contains the projection of the query, record the
   perpendicular distance. The segment with the smallest absolute distance
   wins.

Distances are positive below (inside) the top of the plane. When no segment
contains the projection of the query, both distances are ``inf``.

Usage
-----
    from slabfield.geometry import distance_from_curved_planes

    result = distance_from_curved_planes(
        position, natural, dip_point, path, lengths, angles,
        starting_radius, coordinate_system)
    if result.found:
        ...
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy.optimize import minimize_scalar

from slabfield._coordinates import SPHERICAL, Point, _as_xyz
from slabfield._exceptions import FieldEvaluationError

# Below this length a segment is treated as absent.
ZERO_LENGTH = 1e-14
# Below this top/bottom angle difference [rad] a segment is straight.
STRAIGHT_ANGLE = 1e-10


@dataclass(frozen=True)
class DistanceResult:
    """Position of a query point relative to a curved plane.

    Attributes
    ----------
    distance_from_plane : float
        Signed perpendicular distance to the plane, positive below its top.
    distance_along_plane : float
        Arc length from the surface down to the projection of the point.
    section : int
        Index of the original trace coordinate before the point.
    section_fraction : float
        Position between ``section`` and ``section + 1`` in [0, 1].
    segment : int
        Index of the segment containing the projection.
    segment_fraction : float
        Position within that segment, 0 at its top and 1 at its bottom.
    """
    distance_from_plane: float
    distance_along_plane: float
    section: int
    section_fraction: float
    segment: int
    segment_fraction: float

    @property
    def found(self) -> bool:
        """False when the point could not be associated with any segment."""
        return (math.isfinite(self.distance_from_plane)
                and math.isfinite(self.distance_along_plane))


def _closest_point_on_path(path, surface):
    """Arc parameter, position and direction of the trace closest to ``surface``."""
    pts = path.coordinates
    p1 = pts[:-1]
    chords = pts[1:] - p1
    c2 = np.einsum("ij,ij->i", chords, chords)
    c1 = np.einsum("ij,ij->i", surface - p1, chords)
    with np.errstate(divide="ignore", invalid="ignore"):
        fractions = np.where(c2 > 0.0, c1 / c2, 0.0)
    fractions = np.clip(fractions, 0.0, 1.0)
    candidates = p1 + fractions[:, None] * chords
    d2 = np.einsum("ij,ij->i", surface - candidates, surface - candidates)
    i = int(np.argmin(d2))

    arc = path.arc
    t = float(arc[i] + fractions[i] * (arc[i + 1] - arc[i]))
    closest = candidates[i]
    direction = chords[i]

    if path.continuous:
        lo = float(arc[max(i - 1, 0)])
        hi = float(arc[min(i + 2, len(arc) - 1)])
        res = minimize_scalar(
            lambda s: float(np.sum((path.evaluate(s) - surface) ** 2)),
            bounds=(lo, hi), method="bounded", options={"xatol": 1e-10},
        )
        if res.fun <= d2[i]:
            t = float(res.x)
            closest = path.evaluate(t)
            direction = path.tangent(t)

    if not np.any(direction):
        # Repeated coordinates: fall back to any non-degenerate chord.
        nonzero = np.flatnonzero(c2 > 0.0)
        direction = chords[nonzero[0]] if nonzero.size else np.array([1.0, 0.0])
    return t, closest, direction


def section_of(path, t: float):
    """Original section index and fraction of arc parameter ``t``.

    The index is clamped to ``n_original - 2`` so ``section + 1`` always
    exists; the last trace coordinate is reached with fraction 1.
    """
    last = path.n_original - 2
    section = min(max(int(math.floor(t)), 0), last)
    fraction = min(max(t - section, 0.0), 1.0)
    return section, fraction


def _side(direction, origin, point) -> float:
    d = point - origin
    return float(direction[0] * d[1] - direction[1] * d[0])


def _wrap_angle(angle: float) -> float:
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def _unwrap_longitude(longitude: float, lower: float, upper: float) -> float:
    """Shift ``longitude`` by whole turns onto the branch nearest [lower, upper]."""
    centre = 0.5 * (lower + upper)
    return longitude + 2.0 * math.pi * round((centre - longitude) / (2.0 * math.pi))


def _segment_distance(profile_point, begin, length, angle_top, angle_bottom):
    """Distance from and along one segment in the 2D profile.

    Returns ``(distance_from, distance_along, end_of_segment)``; the along
    distance is ``nan`` when it cannot be determined.
    """
    delta = angle_bottom - angle_top
    if abs(delta) < STRAIGHT_ANGLE:
        direction = np.array([math.cos(angle_top), -math.sin(angle_top)])
        normal = np.array([-math.sin(angle_top), -math.cos(angle_top)])
        rel = profile_point - begin
        return float(rel @ normal), float(rel @ direction), begin + length * direction

    sgn = 1.0 if delta > 0.0 else -1.0
    radius = length / abs(delta)
    normal_top = np.array([-math.sin(angle_top), -math.cos(angle_top)])
    center = begin + sgn * radius * normal_top
    end = center + sgn * radius * np.array([math.sin(angle_bottom), math.cos(angle_bottom)])

    v = profile_point - center
    r = float(np.hypot(v[0], v[1]))
    if r == 0.0:
        return math.inf, math.nan, end
    angle_point = math.atan2(sgn * v[0], sgn * v[1])
    swept = _wrap_angle(angle_point - angle_top)
    along = swept / delta * length
    return sgn * (radius - r), along, end


def distance_from_curved_planes(point, natural_point, reference_point, path,
                                segment_lengths, segment_angles,
                                starting_radius, coordinate_system) -> DistanceResult:
    """Signed distance of ``point`` from, and along, a curved plane.

    Parameters
    ----------
    point : Point or array_like
        Cartesian position of the query.
    natural_point : NaturalCoordinate
        The same position in natural coordinates.
    reference_point : Point or array_like
        Surface point toward which the plane dips.
    path : Path
        Surface trace of the plane.
    segment_lengths : array_like of shape (n_sections, n_segments)
        Segment lengths per original trace coordinate.
    segment_angles : array_like of shape (n_sections, n_segments, 2)
        Top and bottom dip angles in radians.
    starting_radius : float
        Depth coordinate of the top of the plane at the query location.
    coordinate_system : CoordinateSystem

    Returns
    -------
    DistanceResult
    """
    if not starting_radius > 0.0:
        raise FieldEvaluationError(
            f"Starting radius must be positive, got {starting_radius!r}"
        )
    lengths = np.asarray(segment_lengths, dtype=float)
    angles = np.asarray(segment_angles, dtype=float)
    n_sections = path.n_original
    if lengths.ndim != 2 or lengths.shape[0] != n_sections:
        raise ValueError(
            f"segment_lengths must have shape ({n_sections}, n_segments), got {lengths.shape}"
        )
    if angles.shape != lengths.shape + (2,):
        raise ValueError(
            f"segment_angles must have shape {lengths.shape + (2,)}, got {angles.shape}"
        )

    position = _as_xyz(point)
    surface = natural_point.surface.as_array()
    reference = (reference_point.as_array() if isinstance(reference_point, Point)
                 else np.array(reference_point, dtype=float))
    if coordinate_system.natural_system == SPHERICAL:
        lower = float(path.coordinates[:, 0].min())
        upper = float(path.coordinates[:, 0].max())
        surface[0] = _unwrap_longitude(surface[0], lower, upper)
        reference[0] = _unwrap_longitude(reference[0], lower, upper)

    t, closest, direction = _closest_point_on_path(path, surface)
    section, section_fraction = section_of(path, t)

    origin = coordinate_system.surface_to_cartesian(closest, starting_radius)
    up = coordinate_system.up_direction(closest)
    offset = position - origin
    vertical = float(offset @ up)
    across = offset - vertical * up
    if t <= path.arc[0] + 1e-8 or t >= path.arc[-1] - 1e-8:
        strike = coordinate_system.surface_direction(closest, direction)
        norm = np.linalg.norm(strike)
        if norm > 0.0:
            strike = strike / norm
            across = across - (across @ strike) * strike
    horizontal = float(np.linalg.norm(across))
    if _side(direction, closest, surface) * _side(direction, closest, reference) < 0.0:
        horizontal = -horizontal
    profile_point = np.array([horizontal, vertical])

    f = section_fraction
    local_lengths = (1.0 - f) * lengths[section] + f * lengths[section + 1]
    local_angles = (1.0 - f) * angles[section] + f * angles[section + 1]

    best = None
    begin = np.zeros(2)
    total_length = 0.0
    for segment, length in enumerate(local_lengths):
        if length < ZERO_LENGTH:
            continue
        top, bottom = local_angles[segment]
        distance, along, end = _segment_distance(profile_point, begin, length, top, bottom)
        if 0.0 <= along <= length and (best is None or abs(distance) < abs(best[0])):
            best = (distance, total_length + along, segment, along / length)
        total_length += length
        begin = end

    if best is None:
        return DistanceResult(math.inf, math.inf, section, section_fraction, 0, 0.0)
    distance, along, segment, fraction = best
    return DistanceResult(float(distance), float(along), section, float(section_fraction),
                          int(segment), float(fraction))
