"""
Axis-aligned 2D bounding regions used to reject query points cheaply.

A box may be larger than the true feature footprint (that only costs an
extra distance computation) but must never be smaller.
"""

import math
from dataclasses import dataclass

import numpy as np

from slabfield._coordinates import CARTESIAN, SPHERICAL, Point


@dataclass(frozen=True)
class BoundingBox:
    """Lower-left and upper-right corners of a surface region."""
    lower: Point
    upper: Point

    @property
    def system(self) -> str:
        return self.lower.system

    def extend(self, amount: float) -> "BoundingBox":
        """Return a copy grown by ``amount`` on every side."""
        pad = Point([amount, amount], self.system)
        return BoundingBox(self.lower - pad, self.upper + pad)

    def point_inside(self, point: Point) -> bool:
        """Closed containment test of a surface point."""
        if point.system != self.system:
            raise ValueError(
                f"Cannot test a {point.system} point against a {self.system} box"
            )
        if not self.lower[1] <= point[1] <= self.upper[1]:
            return False
        if self.system == SPHERICAL:
            # longitude is periodic
            return any(self.lower[0] <= point[0] + shift <= self.upper[0]
                       for shift in (0.0, -2.0 * math.pi, 2.0 * math.pi))
        return self.lower[0] <= point[0] <= self.upper[0]


def point_inside(box: BoundingBox, surface_point: Point) -> bool:
    return box.point_inside(surface_point)


def _cos_inv(latitude: float) -> float:
    # Clamped so a trace touching a pole still yields a finite box.
    return 1.0 / max(abs(math.cos(latitude)), 1e-12)


class PathExtent:
    """Coordinate extrema of a trace plus the buffer around it.

    Computed once when a feature is assembled; ``bounding_box`` is then a
    few arithmetic operations per query.

    Parameters
    ----------
    coordinates : ndarray of shape (n, 2)
        Trace coordinates (radians for spherical systems).
    buffer : float
        Distance in meters to grow the box by, typically
        ``max_slab_thickness + max_total_slab_length``.
    system : str
        ``"cartesian"`` or ``"spherical"``.
    """

    def __init__(self, coordinates, buffer: float, system: str):
        coords = np.asarray(coordinates, dtype=float)
        self.system = system
        self.buffer = float(buffer)
        self.min_x, self.min_y = (float(v) for v in coords.min(axis=0))
        self.max_x, self.max_y = (float(v) for v in coords.max(axis=0))
        # Longitude lines converge toward the poles, so a fixed arc length
        # spans more longitude at higher latitude.
        self.min_lat_cos_inv = _cos_inv(self.min_y)
        self.max_lat_cos_inv = _cos_inv(self.max_y)

    def bounding_box(self, starting_radius: float) -> BoundingBox:
        """Box for a query whose slab surface lies at ``starting_radius``."""
        if self.system == SPHERICAL:
            buffer = 2.0 * math.pi * self.buffer / starting_radius
            lower = Point([self.min_x - buffer * self.min_lat_cos_inv,
                           self.min_y - buffer], SPHERICAL)
            upper = Point([self.max_x + buffer * self.max_lat_cos_inv,
                           self.max_y + buffer], SPHERICAL)
            return BoundingBox(lower, upper)
        box = BoundingBox(Point([self.min_x, self.min_y], CARTESIAN),
                          Point([self.max_x, self.max_y], CARTESIAN))
        return box.extend(self.buffer)
