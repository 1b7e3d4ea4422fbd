"""
Filter core: group maps, state container and the contact-aided IEKF.

Usage:
    from legged_iekf.core.contact_iekf import ContactIEKF
    from legged_iekf.core.lie_group import sek3_exp, adjoint
    from legged_iekf.core.state import construct_state, separate_state
"""
