"""
Geometry utilities for SO(3) operations.

This module contains functions for:
- Skew-symmetric (hat) and vec (vee) maps
- SO(3) exponential map and left Jacobian
- Rotation matrix conversions (roll-pitch-yaw and quaternion <-> rotation matrix)
- Rotation matrix normalization
- Umeyama alignment for trajectory evaluation
"""

import numpy as np


# Identity matrices for common dimensions
Id3 = np.eye(3)

SMALL_ANGLE_EPS = 1e-8
"""Rotation angle below which the Taylor expansions are used."""


def skew_symmetric(v):
    """
    Convert 3D vector to its skew-symmetric matrix representation.

    Args:
        v: 3D vector [v0, v1, v2]

    Returns:
        3x3 skew-symmetric matrix
    """
    return np.array([[0, -v[2], v[1]],
                     [v[2], 0, -v[0]],
                     [-v[1], v[0], 0]], dtype=float)


def vec(M):
    """
    Inverse of ``skew_symmetric`` on skew-symmetric input.

    Args:
        M: 3x3 skew-symmetric matrix

    Returns:
        3D vector
    """
    return np.array([M[2, 1], M[0, 2], M[1, 0]], dtype=float)


def so3_exp(phi, eps=SMALL_ANGLE_EPS):
    """
    SO(3) exponential map: converts rotation vector to rotation matrix.

    Closed-form Rodrigues formula, with a second order Taylor expansion
    below ``eps``.

    Args:
        phi: 3D rotation vector (axis-angle representation)
        eps: Small-angle threshold (radians)

    Returns:
        3x3 rotation matrix
    """
    phi = np.asarray(phi, dtype=float)
    angle = np.linalg.norm(phi)

    # Near phi==0, use second order Taylor expansion
    if angle < eps:
        skew_phi = skew_symmetric(phi)
        return Id3 + skew_phi + 0.5 * skew_phi.dot(skew_phi)

    axis = phi / angle
    skew_axis = skew_symmetric(axis)
    s = np.sin(angle)
    c = np.cos(angle)

    return c * Id3 + (1 - c) * np.outer(axis, axis) + s * skew_axis


def so3_left_jacobian(phi, eps=SMALL_ANGLE_EPS):
    """
    Left Jacobian of SO(3) for use in Lie algebra operations.

    Args:
        phi: 3D rotation vector
        eps: Small-angle threshold (radians)

    Returns:
        3x3 left Jacobian matrix
    """
    phi = np.asarray(phi, dtype=float)
    angle = np.linalg.norm(phi)

    # Near |phi|==0, use first order Taylor expansion
    if angle < eps:
        skew_phi = skew_symmetric(phi)
        return Id3 + 0.5 * skew_phi

    axis = phi / angle
    skew_axis = skew_symmetric(axis)
    s = np.sin(angle)
    c = np.cos(angle)

    return (s / angle) * Id3 \
           + (1 - s / angle) * np.outer(axis, axis) \
           + ((1 - c) / angle) * skew_axis


def normalize_rot(Rot):
    """
    Normalize a rotation matrix using SVD to correct numerical drift.

    Ensures the matrix remains in SO(3) by projecting onto the nearest
    proper orthogonal matrix.

    Args:
        Rot: 3x3 rotation matrix (possibly with numerical errors)

    Returns:
        3x3 normalized rotation matrix
    """
    # The SVD is commonly written as a = U S V.H.
    # The v returned by this function is V.H and u = U.
    U, _, V = np.linalg.svd(Rot, full_matrices=False)

    S = np.eye(3)
    S[2, 2] = np.linalg.det(U) * np.linalg.det(V)
    return U.dot(S).dot(V)


def is_rotation(Rot, atol=1e-9):
    """Return True if ``Rot`` is orthonormal with determinant +1."""
    Rot = np.asarray(Rot, dtype=float)
    if Rot.shape != (3, 3):
        return False
    return bool(np.allclose(Rot.T.dot(Rot), Id3, atol=atol)
                and np.isclose(np.linalg.det(Rot), 1.0, atol=atol))


def from_rpy(roll, pitch, yaw):
    """
    Convert roll-pitch-yaw angles to rotation matrix.

    Uses ZYX Euler angle convention (yaw -> pitch -> roll).

    Args:
        roll: Rotation around x-axis (radians)
        pitch: Rotation around y-axis (radians)
        yaw: Rotation around z-axis (radians)

    Returns:
        3x3 rotation matrix
    """
    return rotz(yaw).dot(roty(pitch).dot(rotx(roll)))


def rotx(t):
    """Elementary rotation matrix around x-axis."""
    c = np.cos(t)
    s = np.sin(t)
    return np.array([[1,  0,  0],
                     [0,  c, -s],
                     [0,  s,  c]])


def roty(t):
    """Elementary rotation matrix around y-axis."""
    c = np.cos(t)
    s = np.sin(t)
    return np.array([[c,  0,  s],
                     [0,  1,  0],
                     [-s, 0,  c]])


def rotz(t):
    """Elementary rotation matrix around z-axis."""
    c = np.cos(t)
    s = np.sin(t)
    return np.array([[c, -s,  0],
                     [s,  c,  0],
                     [0,  0,  1]])


def get_euler_angles(Rot):
    """
    Convert rotation matrix to roll-pitch-yaw angles.

    Uses ZYX Euler angle convention. The gimbal-lock neighbourhood
    (pitch near +-90 deg) is left to the domain of atan2, there is no
    special-case branch.

    Args:
        Rot: 3x3 rotation matrix

    Returns:
        Array [roll, pitch, yaw] in radians
    """
    roll = np.arctan2(Rot[2, 1], Rot[2, 2])
    pitch = np.arctan2(-Rot[2, 0], np.sqrt(Rot[2, 1]**2 + Rot[2, 2]**2))
    yaw = np.arctan2(Rot[1, 0], Rot[0, 0])
    return np.array([roll, pitch, yaw])


def to_rpy(Rot):
    """
    Convert rotation matrix to roll-pitch-yaw angles.

    Returns:
        Tuple of (roll, pitch, yaw) in radians
    """
    roll, pitch, yaw = get_euler_angles(Rot)
    return roll, pitch, yaw


def to_quaternion(Rot):
    """
    Convert rotation matrix to a unit quaternion [w, x, y, z].

    Branches on the largest diagonal term so the square root never sees a
    small argument. The sign is fixed to w >= 0.

    Args:
        Rot: 3x3 rotation matrix

    Returns:
        Quaternion [w, x, y, z] (scalar first)
    """
    trace = Rot[0, 0] + Rot[1, 1] + Rot[2, 2]

    if trace > 0:
        s = 2.0 * np.sqrt(1.0 + trace)
        q = np.array([0.25 * s,
                      (Rot[2, 1] - Rot[1, 2]) / s,
                      (Rot[0, 2] - Rot[2, 0]) / s,
                      (Rot[1, 0] - Rot[0, 1]) / s])
    elif Rot[0, 0] > Rot[1, 1] and Rot[0, 0] > Rot[2, 2]:
        s = 2.0 * np.sqrt(1.0 + Rot[0, 0] - Rot[1, 1] - Rot[2, 2])
        q = np.array([(Rot[2, 1] - Rot[1, 2]) / s,
                      0.25 * s,
                      (Rot[0, 1] + Rot[1, 0]) / s,
                      (Rot[0, 2] + Rot[2, 0]) / s])
    elif Rot[1, 1] > Rot[2, 2]:
        s = 2.0 * np.sqrt(1.0 + Rot[1, 1] - Rot[0, 0] - Rot[2, 2])
        q = np.array([(Rot[0, 2] - Rot[2, 0]) / s,
                      (Rot[0, 1] + Rot[1, 0]) / s,
                      0.25 * s,
                      (Rot[1, 2] + Rot[2, 1]) / s])
    else:
        s = 2.0 * np.sqrt(1.0 + Rot[2, 2] - Rot[0, 0] - Rot[1, 1])
        q = np.array([(Rot[1, 0] - Rot[0, 1]) / s,
                      (Rot[0, 2] + Rot[2, 0]) / s,
                      (Rot[1, 2] + Rot[2, 1]) / s,
                      0.25 * s])

    if q[0] < 0:
        q = -q
    return q / np.linalg.norm(q)


def from_quaternion(q):
    """Rotation matrix of a quaternion [w, x, y, z] (normalized first)."""
    w, x, y, z = np.asarray(q, dtype=float) / np.linalg.norm(q)
    return np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y)],
        [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x)],
        [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y)],
    ])


def umeyama_alignment(x, y):
    """
    Least-squares rigid transformation aligning point set x onto y.

    Umeyama, Shinji: "Least-squares estimation of transformation parameters
    between two point patterns." IEEE PAMI, 1991 (without scale).

    Args:
        x: mxn matrix of points (m = dimension, n = number of points)
        y: mxn matrix of points

    Returns:
        Tuple of (r, t) such that y ~= r x + t
    """
    m, n = x.shape
    mean_x = x.mean(axis=1)
    mean_y = y.mean(axis=1)

    cov_xy = (y - mean_y[:, None]).dot((x - mean_x[:, None]).T) / n
    u, _, v = np.linalg.svd(cov_xy)

    # Keep a right-handed frame
    s = np.eye(m)
    if np.linalg.det(u) * np.linalg.det(v) < 0.0:
        s[m - 1, m - 1] = -1

    r = u.dot(s).dot(v)
    t = mean_y - r.dot(mean_x)
    return r, t
