"""
Unit tests for the extended pose group maps.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from legged_iekf.core.lie_group import sek3_exp, group_inverse, adjoint
from legged_iekf.utils.geometry import so3_exp, skew_symmetric, is_rotation


def hat(xi):
    """15D tangent vector to its 7x7 Lie algebra matrix."""
    M = np.zeros((7, 7))
    M[:3, :3] = skew_symmetric(xi[:3])
    M[:3, 3:] = xi[3:].reshape(4, 3).T
    return M


def vee(M):
    return np.concatenate([[M[2, 1], M[0, 2], M[1, 0]], M[:3, 3:].T.reshape(-1)])


def random_element(rng, scale=1.0):
    return sek3_exp(scale * rng.normal(size=15))


class TestExtendedExp:

    def test_exp_identity(self):
        np.testing.assert_array_equal(sek3_exp(np.zeros(15)), np.eye(7))

    def test_exp_rotation_only(self):
        xi = np.zeros(15)
        xi[:3] = [0.1, 0.2, 0.3]
        X = sek3_exp(xi)

        assert is_rotation(X[:3, :3], atol=1e-10)
        np.testing.assert_allclose(X[:3, :3], so3_exp(xi[:3]), atol=1e-14)
        np.testing.assert_array_equal(X[:3, 3:], np.zeros((3, 4)))

    def test_exp_translation_only(self):
        """With zero rotation the translational parts are copied as is"""
        xi = np.concatenate([np.zeros(3), np.arange(12, dtype=float)])
        X = sek3_exp(xi)
        np.testing.assert_array_equal(X[:3, :3], np.eye(3))
        for k in range(4):
            np.testing.assert_allclose(X[:3, 3 + k], xi[3 + 3 * k:6 + 3 * k])

    def test_exp_structure(self):
        X = random_element(np.random.default_rng(0))
        np.testing.assert_array_equal(X[3:, :3], np.zeros((4, 3)))
        np.testing.assert_array_equal(X[3:, 3:], np.eye(4))

    def test_exp_small_angle(self):
        xi = np.concatenate([[1e-10, -2e-10, 5e-11], np.ones(12)])
        X = sek3_exp(xi)
        assert is_rotation(X[:3, :3], atol=1e-9)
        np.testing.assert_allclose(X[:3, 3:], np.ones((3, 4)), atol=1e-9)

    def test_exp_negative_is_inverse(self):
        xi = np.random.default_rng(1).normal(size=15)
        np.testing.assert_allclose(sek3_exp(-xi), group_inverse(sek3_exp(xi)),
                                   atol=1e-10)

    def test_exp_matches_series(self):
        """Closed form equals the matrix exponential series of hat(xi)"""
        xi = 0.5 * np.random.default_rng(2).normal(size=15)
        A = hat(xi)
        expm = np.eye(7)
        term = np.eye(7)
        for k in range(1, 30):
            term = term @ A / k
            expm = expm + term
        np.testing.assert_allclose(sek3_exp(xi), expm, atol=1e-12)

    def test_exp_bad_shape(self):
        with pytest.raises(ValueError):
            sek3_exp(np.zeros(9))


class TestGroupInverse:

    def test_inverse(self):
        X = random_element(np.random.default_rng(3))
        np.testing.assert_allclose(X @ group_inverse(X), np.eye(7), atol=1e-12)
        np.testing.assert_allclose(group_inverse(X) @ X, np.eye(7), atol=1e-12)


class TestAdjoint:

    def test_adjoint_identity(self):
        np.testing.assert_array_equal(adjoint(np.eye(7)), np.eye(21))

    def test_adjoint_bias_block(self):
        Adj = adjoint(random_element(np.random.default_rng(4)))
        np.testing.assert_array_equal(Adj[15:, 15:], np.eye(6))
        np.testing.assert_array_equal(Adj[15:, :15], np.zeros((6, 15)))
        np.testing.assert_array_equal(Adj[:15, 15:], np.zeros((15, 6)))

    def test_adjoint_conjugation(self):
        """Adj_X xi = vee(X hat(xi) X^-1)"""
        rng = np.random.default_rng(5)
        X = random_element(rng)
        xi = rng.normal(size=15)
        expected = vee(X @ hat(xi) @ group_inverse(X))
        np.testing.assert_allclose(adjoint(X)[:15, :15] @ xi, expected,
                                   atol=1e-12)

    def test_adjoint_homomorphism(self):
        rng = np.random.default_rng(6)
        X1, X2 = random_element(rng), random_element(rng)
        np.testing.assert_allclose(adjoint(X1 @ X2), adjoint(X1) @ adjoint(X2),
                                   atol=1e-10)

    def test_adjoint_inverse(self):
        X = random_element(np.random.default_rng(7))
        np.testing.assert_allclose(adjoint(group_inverse(X)) @ adjoint(X),
                                   np.eye(21), atol=1e-10)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
