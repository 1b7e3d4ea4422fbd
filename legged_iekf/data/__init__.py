"""
Synthetic biped data for running and testing the filter.

Usage:
    from legged_iekf.data import walking_sequence, standing_sequence
    from legged_iekf.data.transforms import AddIMUNoise, Compose
"""

from legged_iekf.data.synthetic import (
    biped_sequence, standing_sequence, walking_sequence
)
