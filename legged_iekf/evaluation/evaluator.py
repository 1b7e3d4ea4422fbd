"""
Shared evaluation logic for running the filter on a sequence and
computing metrics against ground truth, with an IMU-only baseline.
"""

import numpy as np

from legged_iekf.evaluation.metrics import (
    compute_ate,
    compute_velocity_error,
    compute_orientation_error,
)
from legged_iekf.utils.geometry import so3_exp


def imu_dead_reckoning(t, omega, acc, Rot0, v0, p0,
                       g=np.array([0.0, 0.0, -9.80665])):
    """
    Pure IMU forward integration (no kinematic corrections).

    Args:
        t:     Timestamps (N,).
        omega: Gyro measurements (N, 3).
        acc:   Accelerometer measurements (N, 3).
        Rot0:  Initial rotation (3, 3).
        v0:    Initial velocity (3,).
        p0:    Initial position (3,).
        g:     Gravity vector in the world frame.

    Returns:
        Rot_imu: Rotation matrices (N, 3, 3).
        p_imu:   Positions   (N, 3).
        v_imu:   Velocities  (N, 3).
    """
    N = len(t)
    Rot = np.zeros((N, 3, 3))
    p = np.zeros((N, 3))
    v = np.zeros((N, 3))

    Rot[0] = Rot0
    v[0] = v0
    p[0] = p0

    for i in range(1, N):
        dt = float(t[i] - t[i - 1])

        acc_world = Rot[i - 1].dot(acc[i]) + g
        Rot[i] = Rot[i - 1].dot(so3_exp(omega[i] * dt))
        v[i] = v[i - 1] + acc_world * dt
        p[i] = p[i - 1] + v[i - 1] * dt + 0.5 * acc_world * dt**2

    return Rot, p, v


def evaluate_sequence(iekf, data, name="sequence"):
    """
    Run the filter on a sequence dict and return predictions + metrics.

    The filter is initialized with the ground-truth pose and velocity of
    the first sample.

    Args:
        iekf: ``ContactIEKF`` instance.
        data: Sequence dict (see ``legged_iekf.data.synthetic``).
        name: Sequence identifier string.

    Returns:
        Dict with keys ``metrics``, ``metrics_imu``, ``Rot``, ``v``, ``p``,
        ``b_omega``, ``b_acc``, ``dR``, ``dL``, ``p_imu``, ``name``.
    """
    t = data['t']
    Rot0, v0, p0 = data['Rot_gt'][0], data['v_gt'][0], data['p_gt'][0]

    Rot, v, p, b_omega, b_acc, dR, dL = iekf.run(
        t, data['omega'], data['acc'], data['s_R'], data['s_L'],
        data['cov_R'], data['cov_L'], data['contact_R'], data['contact_L'],
        Rot0=Rot0, v0=v0, p0=p0,
    )

    Rot_imu, p_imu, v_imu = imu_dead_reckoning(
        t, data['omega'], data['acc'], Rot0, v0, p0, g=iekf.g)

    return {
        "metrics": {
            "ate": compute_ate(p, data['p_gt']),
            "velocity_error": compute_velocity_error(v, data['v_gt']),
            "orientation_error": compute_orientation_error(Rot, data['Rot_gt']),
        },
        "metrics_imu": {
            "ate": compute_ate(p_imu, data['p_gt']),
            "velocity_error": compute_velocity_error(v_imu, data['v_gt']),
            "orientation_error": compute_orientation_error(
                Rot_imu, data['Rot_gt']),
        },
        "Rot": Rot,
        "v": v,
        "p": p,
        "b_omega": b_omega,
        "b_acc": b_acc,
        "dR": dR,
        "dL": dL,
        "p_imu": p_imu,
        "name": name,
    }


def format_metrics(results, dataset_name):
    """Return a human-readable string summarising the evaluation metrics."""
    lines = [
        f"{'='*60}",
        f"Results for: {dataset_name}",
        f"{'='*60}",
    ]
    for label, key in (("Contact IEKF", "metrics"),
                       ("IMU integration", "metrics_imu")):
        if key not in results:
            continue
        m = results[key]
        ate, vel, orient = m["ate"], m["velocity_error"], m["orientation_error"]
        lines += [
            f"  {label}:",
            f"    ATE:   mean={ate['mean']:.3f}m  rmse={ate['rmse']:.3f}m  max={ate['max']:.3f}m",
            f"    vel:   rmse={vel['rmse']:.3f}m/s  max={vel['max']:.3f}m/s",
            f"    rot:   rmse={orient['rmse_deg']:.3f}deg  max={orient['max_deg']:.3f}deg",
        ]

    return "\n".join(lines)
