"""
Coordinate systems and tagged points.

A query position is given in Cartesian coordinates and in "natural"
coordinates. Natural coordinates split a position into two surface
coordinates and a depth coordinate:

    cartesian : surface = (x, y),            depth coordinate = z
    spherical : surface = (lon, lat) [rad],  depth coordinate = radius

Usage
-----
    from slabfield import SphericalCoordinateSystem

    cs = SphericalCoordinateSystem()
    natural = cs.to_natural(cartesian_point)
    surface, radius = natural
    back = cs.to_cartesian(natural)
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

import numpy as np

CARTESIAN = "cartesian"
SPHERICAL = "spherical"
_SYSTEMS = (CARTESIAN, SPHERICAL)


class Point:
    """Fixed-dimension coordinate tuple tagged with its coordinate system.

    Arithmetic between two points is only defined when both carry the same
    tag and dimension; scaling by a scalar keeps the tag.

    Parameters
    ----------
    coords : array_like
        Two or three coordinates.
    system : str
        ``"cartesian"`` or ``"spherical"``.
    """

    __slots__ = ("_x", "system")

    def __init__(self, coords, system: str = CARTESIAN):
        x = np.array(coords, dtype=float).reshape(-1)
        if x.size not in (2, 3):
            raise ValueError(f"Point must have 2 or 3 coordinates, got {x.size}")
        if system not in _SYSTEMS:
            raise ValueError(f"Unknown coordinate system: {system!r}")
        self._x = x
        self.system = system

    @property
    def dim(self) -> int:
        return self._x.size

    def as_array(self) -> np.ndarray:
        """Return a copy of the coordinates."""
        return self._x.copy()

    def _check(self, other: "Point") -> None:
        if not isinstance(other, Point):
            raise TypeError(f"Expected Point, got {type(other).__name__}")
        if other.system != self.system:
            raise ValueError(
                f"Cannot combine a {self.system} point with a {other.system} point"
            )
        if other.dim != self.dim:
            raise ValueError(
                f"Cannot combine points of dimension {self.dim} and {other.dim}"
            )

    def __getitem__(self, i):
        return float(self._x[i])

    def __iter__(self):
        return iter(self._x.tolist())

    def __len__(self):
        return self.dim

    def __add__(self, other: "Point") -> "Point":
        self._check(other)
        return Point(self._x + other._x, self.system)

    def __sub__(self, other: "Point") -> "Point":
        self._check(other)
        return Point(self._x - other._x, self.system)

    def __mul__(self, scalar: float) -> "Point":
        return Point(self._x * float(scalar), self.system)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Point":
        return Point(self._x / float(scalar), self.system)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.system == other.system and np.array_equal(self._x, other._x)

    def __hash__(self):
        return hash((self.system, tuple(self._x.tolist())))

    def dot(self, other: "Point") -> float:
        self._check(other)
        return float(np.dot(self._x, other._x))

    def norm(self) -> float:
        return float(np.linalg.norm(self._x))

    def __repr__(self) -> str:
        coords = ", ".join(f"{c:g}" for c in self._x)
        return f"Point([{coords}], {self.system!r})"


class NaturalCoordinate(NamedTuple):
    """Natural representation of a position: surface point + depth coordinate."""
    surface: Point
    depth_coordinate: float


class CoordinateSystem(ABC):
    """Conversion between Cartesian positions and natural coordinates."""

    natural_system: str = CARTESIAN

    @abstractmethod
    def to_natural(self, position) -> NaturalCoordinate:
        """Convert a Cartesian 3-vector (Point or array) to natural coordinates."""

    @abstractmethod
    def to_cartesian(self, natural: NaturalCoordinate) -> Point:
        """Convert natural coordinates back to a Cartesian Point."""

    @abstractmethod
    def surface_to_cartesian(self, surface, depth_coordinate: float) -> np.ndarray:
        """Cartesian position (ndarray) of surface coordinates at a depth coordinate."""

    @abstractmethod
    def up_direction(self, surface) -> np.ndarray:
        """Unit vector pointing away from depth at the given surface coordinates."""

    @abstractmethod
    def surface_direction(self, surface, direction) -> np.ndarray:
        """Cartesian vector of a step ``direction`` in surface coordinates."""


def _as_xyz(position) -> np.ndarray:
    if isinstance(position, Point):
        if position.system != CARTESIAN or position.dim != 3:
            raise ValueError("Expected a 3D cartesian point")
        return position.as_array()
    x = np.asarray(position, dtype=float).reshape(-1)
    if x.size != 3:
        raise ValueError(f"Expected 3 coordinates, got {x.size}")
    return x


class CartesianCoordinateSystem(CoordinateSystem):
    """Identity on x and y; z is the depth coordinate (height above the base)."""

    natural_system = CARTESIAN

    def to_natural(self, position) -> NaturalCoordinate:
        x = _as_xyz(position)
        return NaturalCoordinate(Point(x[:2], CARTESIAN), float(x[2]))

    def to_cartesian(self, natural: NaturalCoordinate) -> Point:
        s = natural.surface
        return Point([s[0], s[1], natural.depth_coordinate], CARTESIAN)

    def surface_to_cartesian(self, surface, depth_coordinate: float) -> np.ndarray:
        return np.array([surface[0], surface[1], depth_coordinate], dtype=float)

    def up_direction(self, surface) -> np.ndarray:
        return np.array([0.0, 0.0, 1.0])

    def surface_direction(self, surface, direction) -> np.ndarray:
        return np.array([direction[0], direction[1], 0.0], dtype=float)


class SphericalCoordinateSystem(CoordinateSystem):
    """Longitude/latitude in radians; the depth coordinate is the radius."""

    natural_system = SPHERICAL

    def to_natural(self, position) -> NaturalCoordinate:
        x = _as_xyz(position)
        r = float(np.linalg.norm(x))
        if r == 0.0:
            return NaturalCoordinate(Point([0.0, 0.0], SPHERICAL), 0.0)
        lon = float(np.arctan2(x[1], x[0]))
        lat = float(np.arcsin(np.clip(x[2] / r, -1.0, 1.0)))
        return NaturalCoordinate(Point([lon, lat], SPHERICAL), r)

    def to_cartesian(self, natural: NaturalCoordinate) -> Point:
        return Point(
            self.surface_to_cartesian(natural.surface, natural.depth_coordinate),
            CARTESIAN,
        )

    def surface_to_cartesian(self, surface, depth_coordinate: float) -> np.ndarray:
        lon, lat = surface[0], surface[1]
        cos_lat = np.cos(lat)
        return depth_coordinate * np.array(
            [cos_lat * np.cos(lon), cos_lat * np.sin(lon), np.sin(lat)]
        )

    def up_direction(self, surface) -> np.ndarray:
        return self.surface_to_cartesian(surface, 1.0)

    def surface_direction(self, surface, direction) -> np.ndarray:
        # Jacobian of the unit sphere applied to (dlon, dlat)
        lon, lat = surface[0], surface[1]
        d_lon = np.array([-np.cos(lat) * np.sin(lon), np.cos(lat) * np.cos(lon), 0.0])
        d_lat = np.array([-np.sin(lat) * np.cos(lon), -np.sin(lat) * np.sin(lon), np.cos(lat)])
        return direction[0] * d_lon + direction[1] * d_lat


def coordinate_system_from_name(name: str) -> CoordinateSystem:
    """Return a coordinate system instance for ``"cartesian"`` or ``"spherical"``."""
    if name == CARTESIAN:
        return CartesianCoordinateSystem()
    if name == SPHERICAL:
        return SphericalCoordinateSystem()
    raise ValueError(f"Unknown coordinate system: {name!r}. Available: {list(_SYSTEMS)}")
