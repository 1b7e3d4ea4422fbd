"""
Unit tests for synthetic sequences and noise transforms.
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from legged_iekf.data.synthetic import (
    biped_sequence, standing_sequence, walking_sequence, GRAVITY
)
from legged_iekf.data.transforms import (
    Compose, AddIMUNoise, AddKinematicsNoise, build_noise
)


SENSOR_KEYS = ('t', 'omega', 'acc', 's_R', 's_L', 'cov_R', 'cov_L',
               'contact_R', 'contact_L')
GT_KEYS = ('Rot_gt', 'v_gt', 'p_gt', 'dR_gt', 'dL_gt')


class TestSyntheticSequences:

    def test_keys_and_shapes(self):
        data = walking_sequence(N=200)
        for key in SENSOR_KEYS + GT_KEYS:
            assert key in data
        assert data['t'].shape == (200,)
        assert data['omega'].shape == (200, 3)
        assert data['cov_R'].shape == (200, 3, 3)
        assert data['Rot_gt'].shape == (200, 3, 3)
        assert data['contact_R'].dtype.kind == 'i'

    def test_standing(self):
        data = standing_sequence(N=100, height=0.6, hip_width=0.3)
        assert np.all(data['contact_R'] == 1)
        assert np.all(data['contact_L'] == 1)
        np.testing.assert_allclose(data['s_R'], np.tile([0, -0.15, -0.6], (100, 1)))
        np.testing.assert_allclose(data['s_L'], np.tile([0, 0.15, -0.6], (100, 1)))
        np.testing.assert_allclose(data['acc'], np.tile(-GRAVITY, (100, 1)))

    def test_kinematics_consistent_with_ground_truth(self):
        data = biped_sequence(N=300, speed=0.4, step_period=0.8, yaw=0.7)
        for i in range(0, 300, 17):
            Rot, p = data['Rot_gt'][i], data['p_gt'][i]
            np.testing.assert_allclose(p + Rot @ data['s_R'][i],
                                       data['dR_gt'][i], atol=1e-12)
            np.testing.assert_allclose(p + Rot @ data['s_L'][i],
                                       data['dL_gt'][i], atol=1e-12)

    def test_gait_phases(self):
        data = walking_sequence(N=100, step_period=1.0)
        c_R, c_L = data['contact_R'], data['contact_L']
        # Never both feet in the air
        assert np.all(c_R + c_L >= 1)
        np.testing.assert_array_equal(c_L[26:49], 0)
        np.testing.assert_array_equal(c_R[26:49], 1)
        np.testing.assert_array_equal(c_R[76:99], 0)
        np.testing.assert_array_equal(c_L[76:99], 1)

    def test_stance_foot_fixed(self):
        data = walking_sequence(N=300)
        stance = data['contact_R'].astype(bool)
        dR = data['dR_gt']
        for i in range(1, 300):
            if stance[i] and stance[i - 1]:
                np.testing.assert_allclose(dR[i], dR[i - 1], atol=1e-12)
        # Feet on the ground while in contact
        np.testing.assert_allclose(dR[stance, 2], 0.0, atol=1e-12)

    def test_swing_foot_lifts(self):
        data = walking_sequence(N=100, clearance=0.05)
        assert data['dL_gt'][25:50, 2].max() > 0.04


class TestTransforms:

    def setup_method(self):
        self.data = standing_sequence(N=500)

    def test_imu_noise_bias(self):
        noise = AddIMUNoise(sigma_gyro=0.0, sigma_acc=0.0,
                            b_gyro=[0.01, 0, 0], b_acc=[0, 0.1, 0],
                            rng=np.random.default_rng(0))
        noisy = noise(self.data)
        np.testing.assert_allclose(noisy['omega'] - self.data['omega'],
                                   np.tile([0.01, 0, 0], (500, 1)))
        np.testing.assert_allclose(noisy['acc'] - self.data['acc'],
                                   np.tile([0, 0.1, 0], (500, 1)))

    def test_imu_noise_statistics(self):
        noise = AddIMUNoise(sigma_gyro=0.1, sigma_acc=0.2,
                            rng=np.random.default_rng(1))
        noisy = noise(self.data)
        assert np.std(noisy['omega'] - self.data['omega']) == pytest.approx(0.1, rel=0.1)
        assert np.std(noisy['acc'] - self.data['acc']) == pytest.approx(0.2, rel=0.1)

    def test_input_untouched(self):
        acc = self.data['acc'].copy()
        s_R = self.data['s_R'].copy()
        Compose([AddIMUNoise(rng=np.random.default_rng(2)),
                 AddKinematicsNoise(rng=np.random.default_rng(3))])(self.data)
        np.testing.assert_array_equal(self.data['acc'], acc)
        np.testing.assert_array_equal(self.data['s_R'], s_R)

    def test_kinematics_noise_covariance(self):
        noisy = AddKinematicsNoise(sigma_kin=0.01,
                                   rng=np.random.default_rng(4))(self.data)
        np.testing.assert_allclose(noisy['cov_R'][0],
                                   self.data['cov_R'][0] + 1e-4 * np.eye(3))
        assert not np.allclose(noisy['s_L'], self.data['s_L'])
        np.testing.assert_array_equal(noisy['p_gt'], self.data['p_gt'])

    def test_build_noise(self):
        assert build_noise({}) is None
        assert build_noise(None) is None

        noise = build_noise({"sigma_gyro": 0.0, "sigma_acc": 0.0,
                             "b_acc": [0.1, 0, 0], "sigma_kin": 0.0}, seed=0)
        assert isinstance(noise, Compose)
        noisy = noise(self.data)
        np.testing.assert_allclose(noisy['acc'][:, 0], self.data['acc'][:, 0] + 0.1)
        np.testing.assert_allclose(noisy['s_R'], self.data['s_R'])

    def test_build_noise_seeded(self):
        cfg = {"sigma_gyro": 1e-3}
        a = build_noise(cfg, seed=5)(self.data)
        b = build_noise(cfg, seed=5)(self.data)
        np.testing.assert_array_equal(a['omega'], b['omega'])
        np.testing.assert_array_equal(a['s_L'], b['s_L'])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
