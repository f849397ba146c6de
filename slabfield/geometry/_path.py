"""
Surface trace of a feature, optionally smoothed and resampled.

The trace is an ordered list of 2D surface coordinates. Each original
coordinate ``i`` gets the arc parameter ``i``; resampling inserts extra
points with fractional arc parameters so that the sequence stays strictly
increasing.

Interpolation modes
-------------------
none
    Points are used as given.
linear
    Piecewise-linear parameterisation, no resampling.
monotone spline
    A monotone cubic (PCHIP) per axis is used to insert points so that no two
    consecutive points are farther apart than ``maximum_spacing``; straight
    chords are used between the denser points afterwards.
continuous monotone spline
    The monotone cubic is kept and evaluated wherever a position on the trace
    is needed. No points are inserted.

Usage
-----
    from slabfield.geometry import Path

    path = Path([[0, 0], [100e3, 0], [200e3, 50e3]],
                interpolation="monotone spline", maximum_spacing=10e3)
    path.coordinates, path.arc
"""

import logging
import math

import numpy as np
from scipy.interpolate import PchipInterpolator

from slabfield._coordinates import CARTESIAN, Point
from slabfield._exceptions import ConfigurationError

logger = logging.getLogger(__name__)

NONE = "none"
LINEAR = "linear"
MONOTONE_SPLINE = "monotone spline"
CONTINUOUS_MONOTONE_SPLINE = "continuous monotone spline"
INTERPOLATION_TYPES = (NONE, LINEAR, MONOTONE_SPLINE, CONTINUOUS_MONOTONE_SPLINE)


def _as_coordinate_array(coordinates) -> np.ndarray:
    rows = [c.as_array() if isinstance(c, Point) else c for c in coordinates]
    arr = np.asarray(rows, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ConfigurationError(
            f"Path coordinates must have shape (n, 2), got {arr.shape}"
        )
    return arr


class Path:
    """Resampled surface trace with its arc-parameter sequence.

    Parameters
    ----------
    coordinates : sequence of Point or array_like of shape (n, 2)
        Surface coordinates in geometric order, n >= 2. Spherical
        coordinates are (longitude, latitude) in radians.
    interpolation : str
        One of ``INTERPOLATION_TYPES``.
    maximum_spacing : float
        Largest allowed distance between consecutive points for the
        ``monotone spline`` mode (radians for spherical, meters for
        Cartesian). Zero or negative disables resampling.
    system : str
        Coordinate system tag of the surface coordinates.

    Attributes
    ----------
    original_coordinates : ndarray (n, 2)
    coordinates : ndarray (m, 2), m >= n
    arc : ndarray (m,)
        Arc parameter of every point in ``coordinates``.
    """

    def __init__(self, coordinates, interpolation: str = NONE,
                 maximum_spacing: float = 0.0, system: str = CARTESIAN):
        if interpolation not in INTERPOLATION_TYPES:
            raise ConfigurationError(
                f"Unknown interpolation type: {interpolation!r}. "
                f"Available: {list(INTERPOLATION_TYPES)}"
            )
        original = _as_coordinate_array(coordinates)
        if len(original) < 2:
            raise ConfigurationError(
                f"A path needs at least two coordinates, got {len(original)}"
            )

        self.system = system
        self.interpolation = interpolation
        self.maximum_spacing = float(maximum_spacing)
        self.original_coordinates = original
        self._original_arc = np.arange(len(original), dtype=float)

        self._x_spline = None
        self._y_spline = None
        if interpolation in (MONOTONE_SPLINE, CONTINUOUS_MONOTONE_SPLINE):
            self._x_spline = PchipInterpolator(self._original_arc, original[:, 0])
            self._y_spline = PchipInterpolator(self._original_arc, original[:, 1])

        if interpolation == MONOTONE_SPLINE and self.maximum_spacing > 0:
            self.coordinates, self.arc = self._insert_points()
        else:
            self.coordinates = original.copy()
            self.arc = self._original_arc.copy()

        logger.debug("Path (%s): %d original points, %d after resampling",
                     interpolation, len(original), len(self.coordinates))

    @property
    def n_original(self) -> int:
        """Number of original coordinates (= number of sections)."""
        return len(self.original_coordinates)

    @property
    def continuous(self) -> bool:
        """True if positions on the trace come from the spline itself."""
        return self.interpolation == CONTINUOUS_MONOTONE_SPLINE

    def __len__(self):
        return len(self.coordinates)

    def evaluate(self, t) -> np.ndarray:
        """Position(s) on the trace at arc parameter ``t``.

        Returns shape (2,) for scalar ``t`` and (k, 2) for array input.
        """
        t = np.asarray(t, dtype=float)
        if self._x_spline is not None:
            out = np.stack([self._x_spline(t), self._y_spline(t)], axis=-1)
        else:
            out = np.stack([
                np.interp(t, self._original_arc, self.original_coordinates[:, 0]),
                np.interp(t, self._original_arc, self.original_coordinates[:, 1]),
            ], axis=-1)
        return out

    def tangent(self, t: float) -> np.ndarray:
        """Direction d(position)/dt of the trace at arc parameter ``t``."""
        if self._x_spline is not None:
            return np.array([self._x_spline(t, 1), self._y_spline(t, 1)], dtype=float)
        i = int(np.clip(np.floor(t), 0, self.n_original - 2))
        return self.original_coordinates[i + 1] - self.original_coordinates[i]

    def surface_points(self):
        """Resampled coordinates as tagged Points."""
        return [Point(c, self.system) for c in self.coordinates]

    def _insert_points(self):
        spacing = self.maximum_spacing
        coordinates = [self.original_coordinates[0]]
        arc = [0.0]
        for i in range(self.n_original - 1):
            p1 = self.evaluate(float(i))
            p2 = self.evaluate(float(i + 1))
            length = float(np.linalg.norm(p2 - p1))
            parts = max(1, int(math.ceil(length / spacing)))
            # Equal arc-parameter steps do not bound the chord length on a
            # curved spline, so refine until every sub-chord fits.
            while True:
                steps = i + np.arange(parts + 1, dtype=float) / parts
                steps[-1] = float(i + 1)
                points = self.evaluate(steps)
                chords = np.linalg.norm(np.diff(points, axis=0), axis=1)
                if np.all(chords <= spacing * (1.0 + 1e-12)):
                    break
                parts += 1
            for j in range(1, parts):
                arc.append(float(steps[j]))
                coordinates.append(points[j])
            arc.append(float(i + 1))
            coordinates.append(self.original_coordinates[i + 1])
        return np.asarray(coordinates, dtype=float), np.asarray(arc, dtype=float)
