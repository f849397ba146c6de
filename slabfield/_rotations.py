"""
Rotation helpers for crystallographic grain orientations.

Quaternions are unit quaternions in scalar-last order ``(x, y, z, w)``,
matching ``scipy.spatial.transform.Rotation``.

Usage
-----
    from slabfield._rotations import slerp_rotation_matrices

    blended = slerp_rotation_matrices(matrices_a, matrices_b, 0.25)
"""

import numpy as np
from scipy.spatial.transform import Rotation


def rotation_matrix_to_quaternion(matrix) -> np.ndarray:
    """Convert a rotation matrix (3, 3) or stack (n, 3, 3) to unit quaternion(s)."""
    return Rotation.from_matrix(np.asarray(matrix, dtype=float)).as_quat()


def quaternion_to_rotation_matrix(quaternion) -> np.ndarray:
    """Convert scalar-last unit quaternion(s) back to rotation matrices."""
    return Rotation.from_quat(np.asarray(quaternion, dtype=float)).as_matrix()


def euler_angles_to_rotation_matrix(phi1: float, theta: float, phi2: float) -> np.ndarray:
    """Rotation matrix for Bunge z-x-z Euler angles given in degrees.

    The returned matrix maps sample coordinates to crystal coordinates,
    i.e. it is the transpose of the active intrinsic ``Z(phi1) X(theta) Z(phi2)``
    rotation.
    """
    return Rotation.from_euler("ZXZ", [phi1, theta, phi2], degrees=True).as_matrix().T


def is_rotation_matrix(matrix, atol: float = 1e-6) -> bool:
    """True if ``matrix`` is orthonormal with determinant +1."""
    m = np.asarray(matrix, dtype=float)
    if m.shape != (3, 3) or not np.all(np.isfinite(m)):
        return False
    return (np.allclose(m @ m.T, np.eye(3), atol=atol)
            and abs(np.linalg.det(m) - 1.0) < atol)


def slerp_rotation_matrices(matrices_a, matrices_b, fraction: float) -> np.ndarray:
    """Spherical linear interpolation between two stacks of rotation matrices.

    Each pair is converted to quaternions and interpolated along the
    shortest arc, so the result stays orthonormal for every fraction in
    [0, 1]. ``fraction == 0`` and ``fraction == 1`` return copies of the
    inputs.

    Parameters
    ----------
    matrices_a, matrices_b : array_like of shape (n, 3, 3) or (3, 3)
        Orientations at fraction 0 and 1.
    fraction : float
        Interpolation weight.

    Returns
    -------
    ndarray
        Interpolated matrices with the shape of the inputs.
    """
    a = np.asarray(matrices_a, dtype=float)
    b = np.asarray(matrices_b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    if fraction == 0.0:
        return a.copy()
    if fraction == 1.0:
        return b.copy()

    r_a = Rotation.from_matrix(a)
    r_b = Rotation.from_matrix(b)
    # as_rotvec returns angles in [0, pi], which selects the shorter arc.
    delta = (r_a.inv() * r_b).as_rotvec()
    return (r_a * Rotation.from_rotvec(delta * fraction)).as_matrix()
