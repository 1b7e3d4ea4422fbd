"""
Base filter abstraction for legged-robot IEKF implementations.

This module defines the interface that the contact-aided filter follows:
IMU-driven prediction, kinematic correction and parameter handling.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple
import numpy as np


class BaseFilter(ABC):
    """
    Abstract base class for IMU + leg kinematics filters.

    The filter owns its state (X, theta, P). Prediction is driven by IMU
    samples, correction by leg kinematics with per-foot contact flags.
    """

    def __init__(self, parameter_class=None):
        """
        Initialize the filter.

        Args:
            parameter_class: Class containing filter parameters (optional)
        """
        self.filter_parameters = None

    @abstractmethod
    def predict(self, omega: np.ndarray, acc: np.ndarray,
                s_R: np.ndarray, s_L: np.ndarray,
                contact_R: int, contact_L: int) -> bool:
        """
        Propagate the state with one IMU sample (prediction step).

        Args:
            omega: Angular velocity, body frame (3,)
            acc: Linear acceleration, body frame (3,)
            s_R: Right foot position relative to the body, body frame (3,)
            s_L: Left foot position relative to the body, body frame (3,)
            contact_R: Right foot contact flag
            contact_L: Left foot contact flag

        Returns:
            True if the state was propagated
        """
        pass

    @abstractmethod
    def update_kinematics(self, s_R: np.ndarray, s_L: np.ndarray,
                          cov_R: np.ndarray, cov_L: np.ndarray,
                          contact_R: int, contact_L: int):
        """
        Correct the state with leg kinematics (correction step).

        Args:
            s_R: Right foot position relative to the body, body frame (3,)
            s_L: Left foot position relative to the body, body frame (3,)
            cov_R: Right foot position covariance J Qe J^T (3, 3)
            cov_L: Left foot position covariance J Qe J^T (3, 3)
            contact_R: Right foot contact flag
            contact_L: Left foot contact flag
        """
        pass

    @abstractmethod
    def propagate(self, X: np.ndarray, theta: np.ndarray, P: np.ndarray,
                  omega: np.ndarray, acc: np.ndarray,
                  s_R: np.ndarray, s_L: np.ndarray,
                  contact_R: int, contact_L: int, dt: float) -> Tuple:
        """
        Pure propagation of a state triple.

        Returns:
            Tuple of propagated (X, theta, P)
        """
        pass

    @abstractmethod
    def init_covariance(self) -> np.ndarray:
        """
        Initialize the state covariance matrix.

        Returns:
            Initial covariance matrix P0 (21, 21)
        """
        pass

    def set_param_attr(self):
        """
        Set filter attributes from parameter class.

        This method copies all non-callable attributes from filter_parameters
        to the filter instance.
        """
        if self.filter_parameters is None:
            return

        # Get list of non-callable attributes
        attr_list = [a for a in dir(self.filter_parameters)
                     if not a.startswith('__')
                     and not callable(getattr(self.filter_parameters, a))]

        # Copy attributes to filter instance
        for attr in attr_list:
            setattr(self, attr, getattr(self.filter_parameters, attr))

    def get_state_dict(self) -> Dict[str, Any]:
        """
        Get filter state as a dictionary (for checkpointing).

        Returns:
            Dictionary containing filter state and parameters
        """
        return {
            'filter_parameters': self.filter_parameters,
        }

    def load_state_dict(self, state_dict: Dict[str, Any]):
        """
        Load filter state from a dictionary.

        Args:
            state_dict: Dictionary containing filter state and parameters
        """
        self.filter_parameters = state_dict.get('filter_parameters', None)
        if self.filter_parameters is not None:
            self.set_param_attr()
