"""
State container for the contact-aided IEKF.

The group element X is a 7x7 matrix embedding the body rotation,
velocity, position and the two foot contact anchors:

    X = [[R, v, p, dR, dL],
         [0,    I_4      ]]

Biases are kept separately in the 6D vector theta = [b_omega, b_acc].
The error state lives in a 21D tangent space ordered as
[rotation, velocity, position, right foot, left foot, b_omega, b_acc].
"""

from enum import Enum

import numpy as np


X_dim = 7
"""Size of the square group element"""

P_dim = 21
"""Error-state (covariance) dimension"""

# Tangent-space slices
ROT = slice(0, 3)
VEL = slice(3, 6)
POS = slice(6, 9)
FOOT_R = slice(9, 12)
FOOT_L = slice(12, 15)
B_OMEGA = slice(15, 18)
B_ACC = slice(18, 21)

# Columns of X holding the translational quantities
COL_VEL = 3
COL_POS = 4
COL_FOOT_R = 5
COL_FOOT_L = 6

FEET = ("right", "left")

FOOT_SLICE = {"right": FOOT_R, "left": FOOT_L}
FOOT_COL = {"right": COL_FOOT_R, "left": COL_FOOT_L}


class ContactMode(Enum):
    """Which feet currently report ground contact."""

    NONE = 0
    RIGHT = 1
    LEFT = 2
    DOUBLE = 3

    @classmethod
    def from_flags(cls, contact_R, contact_L):
        """Build the mode from the per-foot contact flags (bool or int)."""
        contact_R = bool(contact_R)
        contact_L = bool(contact_L)
        if contact_R and contact_L:
            return cls.DOUBLE
        if contact_R:
            return cls.RIGHT
        if contact_L:
            return cls.LEFT
        return cls.NONE

    @property
    def feet(self):
        """Names of the feet in contact for this mode."""
        return {
            ContactMode.NONE: (),
            ContactMode.RIGHT: ("right",),
            ContactMode.LEFT: ("left",),
            ContactMode.DOUBLE: ("right", "left"),
        }[self]


def check_foot(foot):
    """Validate a foot name ('right' or 'left')."""
    if foot not in FOOT_SLICE:
        raise ValueError(f"Unknown foot '{foot}'. Expected one of {FEET}")
    return foot


def as_vec3(x, name):
    x = np.asarray(x, dtype=float).reshape(-1)
    if x.shape != (3,):
        raise ValueError(f"{name} must be a 3D vector, got shape {x.shape}")
    return x


def construct_state(Rot, v, p, dR, dL, b_omega, b_acc):
    """
    Pack the physical quantities into the group element and bias vector.

    Args:
        Rot: Body-to-world rotation (3, 3)
        v: Body velocity in world frame (3,)
        p: Body position in world frame (3,)
        dR: Right foot anchor in world frame (3,)
        dL: Left foot anchor in world frame (3,)
        b_omega: Gyroscope bias (3,)
        b_acc: Accelerometer bias (3,)

    Returns:
        Tuple of (X, theta): group element (7, 7) and biases (6,)
    """
    Rot = np.asarray(Rot, dtype=float)
    if Rot.shape != (3, 3):
        raise ValueError(f"Rot must be 3x3, got shape {Rot.shape}")

    X = np.eye(X_dim)
    X[:3, :3] = Rot
    X[:3, COL_VEL] = as_vec3(v, "v")
    X[:3, COL_POS] = as_vec3(p, "p")
    X[:3, COL_FOOT_R] = as_vec3(dR, "dR")
    X[:3, COL_FOOT_L] = as_vec3(dL, "dL")

    theta = np.zeros(6)
    theta[:3] = as_vec3(b_omega, "b_omega")
    theta[3:] = as_vec3(b_acc, "b_acc")
    return X, theta


def separate_state(X, theta):
    """
    Unpack the group element and bias vector into physical quantities.

    Inverse of ``construct_state``; returned arrays are copies.

    Returns:
        Tuple of (Rot, v, p, dR, dL, b_omega, b_acc)
    """
    Rot = X[:3, :3].copy()
    v = X[:3, COL_VEL].copy()
    p = X[:3, COL_POS].copy()
    dR = X[:3, COL_FOOT_R].copy()
    dL = X[:3, COL_FOOT_L].copy()
    b_omega = theta[:3].copy()
    b_acc = theta[3:].copy()
    return Rot, v, p, dR, dL, b_omega, b_acc


def foot_anchor(X, foot):
    """World-frame anchor of ``foot`` held in X."""
    return X[:3, FOOT_COL[check_foot(foot)]].copy()


def set_foot_anchor(X, foot, d):
    """Return a copy of X with the anchor of ``foot`` replaced by ``d``."""
    X = X.copy()
    X[:3, FOOT_COL[check_foot(foot)]] = as_vec3(d, "d")
    return X
