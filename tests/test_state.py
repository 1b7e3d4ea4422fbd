"""
Unit tests for the state container and contact modes.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from legged_iekf.core.state import (
    ContactMode, construct_state, separate_state, foot_anchor,
    set_foot_anchor, check_foot, COL_FOOT_R, COL_FOOT_L
)
from legged_iekf.utils.geometry import from_rpy


def make_quantities():
    return (
        from_rpy(0.1, -0.3, 2.0),
        np.array([0.5, -0.1, 0.02]),
        np.array([1.0, 2.0, 0.8]),
        np.array([1.1, 1.9, 0.0]),
        np.array([0.9, 2.1, 0.05]),
        np.array([1e-3, -2e-3, 5e-4]),
        np.array([0.05, 0.0, -0.02]),
    )


class TestConstructSeparate:

    def test_roundtrip(self):
        quantities = make_quantities()
        X, theta = construct_state(*quantities)
        for got, expected in zip(separate_state(X, theta), quantities):
            np.testing.assert_array_equal(got, expected)

    def test_group_structure(self):
        X, theta = construct_state(*make_quantities())
        assert X.shape == (7, 7)
        assert theta.shape == (6,)
        np.testing.assert_array_equal(X[3:, :3], np.zeros((4, 3)))
        np.testing.assert_array_equal(X[3:, 3:], np.eye(4))

    def test_separate_returns_copies(self):
        X, theta = construct_state(*make_quantities())
        Rot, v, *_ = separate_state(X, theta)
        v[:] = 100.0
        Rot[:] = 0.0
        np.testing.assert_array_equal(X[:3, 3], make_quantities()[1])
        assert X[0, 0] != 0.0

    def test_accepts_lists(self):
        X, theta = construct_state(np.eye(3), [1, 2, 3], [0, 0, 1],
                                   [0, 0, 0], [0, 0, 0], [0, 0, 0], [0, 0, 0])
        np.testing.assert_array_equal(X[:3, 3], [1, 2, 3])

    def test_bad_shapes(self):
        quantities = list(make_quantities())
        quantities[2] = np.zeros(4)
        with pytest.raises(ValueError):
            construct_state(*quantities)
        quantities = list(make_quantities())
        quantities[0] = np.eye(4)
        with pytest.raises(ValueError):
            construct_state(*quantities)


class TestFootAnchors:

    def test_foot_anchor(self):
        quantities = make_quantities()
        X, _ = construct_state(*quantities)
        np.testing.assert_array_equal(foot_anchor(X, "right"), quantities[3])
        np.testing.assert_array_equal(foot_anchor(X, "left"), quantities[4])

    def test_set_foot_anchor_copies(self):
        X, _ = construct_state(*make_quantities())
        X_new = set_foot_anchor(X, "left", [0, 0, -1])
        np.testing.assert_array_equal(X_new[:3, COL_FOOT_L], [0, 0, -1])
        np.testing.assert_array_equal(X_new[:3, COL_FOOT_R], X[:3, COL_FOOT_R])
        assert X[2, COL_FOOT_L] == 0.05

    def test_unknown_foot(self):
        with pytest.raises(ValueError):
            check_foot("middle")


class TestContactMode:

    @pytest.mark.parametrize("contact_R, contact_L, mode", [
        (0, 0, ContactMode.NONE),
        (1, 0, ContactMode.RIGHT),
        (0, 1, ContactMode.LEFT),
        (1, 1, ContactMode.DOUBLE),
        (True, False, ContactMode.RIGHT),
    ])
    def test_from_flags(self, contact_R, contact_L, mode):
        assert ContactMode.from_flags(contact_R, contact_L) is mode

    def test_feet(self):
        assert ContactMode.NONE.feet == ()
        assert ContactMode.RIGHT.feet == ("right",)
        assert ContactMode.LEFT.feet == ("left",)
        assert ContactMode.DOUBLE.feet == ("right", "left")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
