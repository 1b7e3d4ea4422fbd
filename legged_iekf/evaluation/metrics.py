"""
Evaluation metrics for body state estimation.

Provides ATE (Absolute Trajectory Error), velocity error and orientation
error between estimated and ground-truth trajectories.
"""

import numpy as np

from legged_iekf.utils.geometry import umeyama_alignment


def _error_stats(errors):
    return {
        "mean": float(np.mean(errors)),
        "std": float(np.std(errors)),
        "rmse": float(np.sqrt(np.mean(errors**2))),
        "median": float(np.median(errors)),
        "max": float(np.max(errors)),
    }


def compute_ate(p_pred, p_gt, align=False):
    """
    Compute Absolute Trajectory Error.

    Args:
        p_pred: Predicted positions (N, 3) numpy array.
        p_gt: Ground truth positions (N, 3) numpy array.
        align: Whether to apply Umeyama alignment first.

    Returns:
        Dict with keys: 'mean', 'std', 'rmse', 'median', 'max'.
    """
    if align:
        R_align, t_align = umeyama_alignment(p_pred.T, p_gt.T)
        p_aligned = p_pred.dot(R_align.T) + t_align
    else:
        p_aligned = p_pred

    errors = np.linalg.norm(p_gt - p_aligned, axis=1)
    return _error_stats(errors)


def compute_velocity_error(v_pred, v_gt):
    """
    Compute velocity error norms.

    Returns:
        Dict with keys: 'mean', 'std', 'rmse', 'median', 'max'.
    """
    errors = np.linalg.norm(v_gt - v_pred, axis=1)
    return _error_stats(errors)


def compute_orientation_error(Rot_pred, Rot_gt):
    """
    Compute orientation error between predicted and ground truth rotations.

    Error is measured as the angle of the rotation difference R_err = R_gt^T @ R_pred.

    Args:
        Rot_pred: Predicted rotations (N, 3, 3) numpy array.
        Rot_gt: Ground truth rotations (N, 3, 3) numpy array.

    Returns:
        Dict with keys: 'mean_deg', 'std_deg', 'rmse_deg', 'max_deg'.
    """
    R_err = np.einsum('nji,njk->nik', Rot_gt, Rot_pred)
    # Rotation angle from trace: cos(theta) = (trace(R) - 1) / 2
    trace = np.trace(R_err, axis1=1, axis2=2)
    angles = np.degrees(np.arccos(np.clip((trace - 1.0) / 2.0, -1.0, 1.0)))

    return {
        "mean_deg": float(np.mean(angles)),
        "std_deg": float(np.std(angles)),
        "rmse_deg": float(np.sqrt(np.mean(angles**2))),
        "max_deg": float(np.max(angles)),
    }
