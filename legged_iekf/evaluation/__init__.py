"""
Evaluation metrics for body state estimation.

Usage:
    from legged_iekf.evaluation.metrics import compute_ate, compute_orientation_error
    from legged_iekf.evaluation.evaluator import evaluate_sequence, format_metrics
"""
