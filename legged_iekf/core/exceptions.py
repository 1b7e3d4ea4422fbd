"""
Numerical failures surfaced by the filter.
"""

import numpy as np


class InnovationCovarianceError(np.linalg.LinAlgError):
    """The innovation covariance of a kinematic update is not positive definite.

    This points at the noise configuration (or an already corrupted
    covariance) and is not recovered inside the filter.
    """


class FilterDivergenceError(FloatingPointError):
    """A NaN or Inf appeared in the state or covariance."""
