"""
Synthetic biped sequences with ground truth.

A body moves at constant velocity and height while the feet alternate
between double support and single support:

    phase [0.00, 0.25): double support
    phase [0.25, 0.50): left foot swing (right stance)
    phase [0.50, 0.75): double support
    phase [0.75, 1.00): right foot swing (left stance)

The IMU and kinematic streams are noise free; see
``legged_iekf.data.transforms`` for noise injection.
"""

import numpy as np

from legged_iekf.utils.geometry import rotz


GRAVITY = np.array([0, 0, -9.80665])


def _foot_local(phase, k, step, swing_start, clearance):
    """Forward offset and height of a foot in walking-direction coordinates."""
    if phase < swing_start:
        return k * step, 0.0, True
    if phase < swing_start + 0.25:
        tau = (phase - swing_start) / 0.25
        return (k + tau) * step, clearance * np.sin(np.pi * tau), False
    return (k + 1) * step, 0.0, True


def biped_sequence(N=1000, dt=0.01, speed=0.0, height=0.5, hip_width=0.2,
                   step_period=None, clearance=0.05, yaw=0.0, cov_kin=1e-6,
                   g=GRAVITY):
    """
    Generate a biped walking (or standing) sequence.

    Args:
        N: Number of samples
        dt: Sampling time (s)
        speed: Forward body speed (m/s)
        height: Body height above the ground (m)
        hip_width: Lateral distance between the feet (m)
        step_period: Gait cycle duration (s); None keeps both feet planted
        clearance: Swing foot apex height (m)
        yaw: Constant heading (rad)
        cov_kin: Variance of the reported relative foot positions (m^2)
        g: Gravity vector

    Returns:
        Dict with keys ``t``, ``omega``, ``acc``, ``s_R``, ``s_L``,
        ``cov_R``, ``cov_L``, ``contact_R``, ``contact_L`` (sensor streams)
        and ``Rot_gt``, ``v_gt``, ``p_gt``, ``dR_gt``, ``dL_gt`` (ground truth).
    """
    Rot = rotz(yaw)
    t = np.arange(N) * dt

    p_gt = np.zeros((N, 3))
    v_gt = np.zeros((N, 3))
    dR_gt = np.zeros((N, 3))
    dL_gt = np.zeros((N, 3))
    contact_R = np.ones(N, dtype=int)
    contact_L = np.ones(N, dtype=int)

    step = speed * step_period if step_period else 0.0
    for i in range(N):
        p_gt[i] = Rot.dot([speed * t[i], 0.0, height])
        v_gt[i] = Rot.dot([speed, 0.0, 0.0])

        if step_period is None:
            x_R = x_L = 0.0
            z_R = z_L = 0.0
        else:
            k, phase = divmod(t[i] / step_period, 1.0)
            x_L, z_L, contact_L[i] = _foot_local(phase, k, step, 0.25, clearance)
            x_R, z_R, contact_R[i] = _foot_local(phase, k, step, 0.75, clearance)

        dR_gt[i] = Rot.dot([x_R, -0.5 * hip_width, z_R])
        dL_gt[i] = Rot.dot([x_L, 0.5 * hip_width, z_L])

    # Constant velocity and heading: the IMU only senses gravity
    omega = np.zeros((N, 3))
    acc = np.tile(Rot.T.dot(-np.asarray(g, dtype=float)), (N, 1))

    s_R = (dR_gt - p_gt).dot(Rot)
    s_L = (dL_gt - p_gt).dot(Rot)
    cov = np.tile(cov_kin * np.eye(3), (N, 1, 1))

    return {
        't': t,
        'omega': omega,
        'acc': acc,
        's_R': s_R,
        's_L': s_L,
        'cov_R': cov.copy(),
        'cov_L': cov.copy(),
        'contact_R': contact_R,
        'contact_L': contact_L,
        'Rot_gt': np.tile(Rot, (N, 1, 1)),
        'v_gt': v_gt,
        'p_gt': p_gt,
        'dR_gt': dR_gt,
        'dL_gt': dL_gt,
    }


def standing_sequence(N=1000, dt=0.01, height=0.5, hip_width=0.2, **kwargs):
    """Robot standing still on both feet."""
    return biped_sequence(N=N, dt=dt, speed=0.0, height=height,
                          hip_width=hip_width, step_period=None, **kwargs)


def walking_sequence(N=1000, dt=0.01, speed=0.3, step_period=1.0, **kwargs):
    """Robot walking forward with alternating single / double support."""
    return biped_sequence(N=N, dt=dt, speed=speed, step_period=step_period,
                          **kwargs)
