"""
Contact-aided invariant EKF for legged robot base state estimation.

Usage:
    from legged_iekf import ContactIEKF, ContactMode
"""

from legged_iekf.core.contact_iekf import ContactIEKF
from legged_iekf.core.state import ContactMode

__version__ = "0.1.0"
