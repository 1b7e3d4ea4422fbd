"""
Composable noise transforms for synthetic sequences.

Each transform takes the sequence dict produced by
``legged_iekf.data.synthetic`` and returns a noisy copy of its sensor
streams; ground-truth entries are left untouched.
"""

import numpy as np


class Compose:
    """Compose multiple transforms sequentially."""

    def __init__(self, transforms):
        self.transforms = transforms

    def __call__(self, data):
        for t in self.transforms:
            data = t(data)
        return data


class AddIMUNoise:
    """
    Add white noise and a constant bias to the IMU streams.

    Args:
        sigma_gyro: Gyroscope noise standard deviation.
        sigma_acc: Accelerometer noise standard deviation.
        b_gyro: Constant gyroscope bias (3,).
        b_acc: Constant accelerometer bias (3,).
        rng: ``numpy.random.Generator`` (default: unseeded).
    """

    def __init__(self, sigma_gyro=1e-3, sigma_acc=1e-2,
                 b_gyro=None, b_acc=None, rng=None):
        self.sigma_gyro = sigma_gyro
        self.sigma_acc = sigma_acc
        self.b_gyro = np.zeros(3) if b_gyro is None else np.asarray(b_gyro)
        self.b_acc = np.zeros(3) if b_acc is None else np.asarray(b_acc)
        self.rng = rng if rng is not None else np.random.default_rng()

    def __call__(self, data):
        data = dict(data)
        omega = data['omega']
        acc = data['acc']
        data['omega'] = omega + self.b_gyro \
            + self.sigma_gyro * self.rng.standard_normal(omega.shape)
        data['acc'] = acc + self.b_acc \
            + self.sigma_acc * self.rng.standard_normal(acc.shape)
        return data


class AddKinematicsNoise:
    """
    Perturb the relative foot positions and report the matching covariance.

    Args:
        sigma_kin: Standard deviation of the relative foot positions (m).
        rng: ``numpy.random.Generator`` (default: unseeded).
    """

    def __init__(self, sigma_kin=5e-3, rng=None):
        self.sigma_kin = sigma_kin
        self.rng = rng if rng is not None else np.random.default_rng()

    def __call__(self, data):
        data = dict(data)
        for foot in ('R', 'L'):
            s = data[f's_{foot}']
            data[f's_{foot}'] = s + self.sigma_kin \
                * self.rng.standard_normal(s.shape)
            data[f'cov_{foot}'] = data[f'cov_{foot}'] \
                + self.sigma_kin**2 * np.eye(3)
        return data


def build_noise(cfg, seed=None):
    """
    Build the noise pipeline from a config mapping.

    Recognized keys: ``sigma_gyro``, ``sigma_acc``, ``b_gyro``, ``b_acc``,
    ``sigma_kin``. Returns None when ``cfg`` is empty.
    """
    if not cfg:
        return None
    rng = np.random.default_rng(seed)
    return Compose([
        AddIMUNoise(
            sigma_gyro=cfg.get("sigma_gyro", 1e-3),
            sigma_acc=cfg.get("sigma_acc", 1e-2),
            b_gyro=cfg.get("b_gyro"),
            b_acc=cfg.get("b_acc"),
            rng=rng,
        ),
        AddKinematicsNoise(sigma_kin=cfg.get("sigma_kin", 5e-3), rng=rng),
    ])
