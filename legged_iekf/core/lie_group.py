"""
Matrix Lie group maps for the extended pose X (rotation, velocity,
position and two foot anchors).

Provides the closed-form exponential of the 15D tangent vector, the group
inverse and the 21x21 adjoint (including the identity bias block) used to
transport noise between the local error frame and the world frame.
"""

import numpy as np

from legged_iekf.core.state import X_dim, P_dim
from legged_iekf.utils.geometry import (
    so3_exp, so3_left_jacobian, skew_symmetric, SMALL_ANGLE_EPS
)


N_TRANSLATIONS = X_dim - 3
"""Translational columns of X (velocity, position, right foot, left foot)"""


def sek3_exp(xi, eps=SMALL_ANGLE_EPS):
    """
    Exponential map of the extended pose group.

    Args:
        xi: 15D vector [phi, nu_v, nu_p, nu_dR, nu_dL] where phi is the
            rotation part and each nu is a translational part
        eps: Small-angle threshold forwarded to the SO(3) maps

    Returns:
        7x7 group element
    """
    xi = np.asarray(xi, dtype=float).reshape(-1)
    if xi.shape != (3 + 3 * N_TRANSLATIONS,):
        raise ValueError(f"xi must be 15D, got shape {xi.shape}")

    phi = xi[:3]
    J = so3_left_jacobian(phi, eps)

    X = np.eye(X_dim)
    X[:3, :3] = so3_exp(phi, eps)
    # Apply Jacobian to every translational part
    X[:3, 3:] = J.dot(xi[3:].reshape(N_TRANSLATIONS, 3).T)
    return X


def group_inverse(X):
    """
    Inverse of a group element.

    For X = [[R, x], [0, I]] the inverse is [[R^T, -R^T x], [0, I]].
    """
    Rot_T = X[:3, :3].T
    X_inv = np.eye(X_dim)
    X_inv[:3, :3] = Rot_T
    X_inv[:3, 3:] = -Rot_T.dot(X[:3, 3:])
    return X_inv


def adjoint(X):
    """
    Adjoint of the group element, augmented with the bias block.

    Rotation error maps through R; each translational error x maps through
    R with a skew(x) R coupling from the rotation error. The 6x6 bias block
    is the identity.

    Args:
        X: 7x7 group element

    Returns:
        21x21 adjoint matrix
    """
    Rot = X[:3, :3]
    Adj = np.eye(P_dim)
    Adj[:3, :3] = Rot
    for k in range(N_TRANSLATIONS):
        rows = slice(3 + 3 * k, 6 + 3 * k)
        Adj[rows, rows] = Rot
        Adj[rows, :3] = skew_symmetric(X[:3, 3 + k]).dot(Rot)
    return Adj
