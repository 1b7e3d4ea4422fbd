"""
Contact-aided Invariant Extended Kalman Filter for legged robots.

This module fuses IMU samples (prediction) with leg kinematics of the feet
in ground contact (correction). The mean state is an element of the
extended pose group (rotation, velocity, position, right and left foot
anchors) plus gyro / accelerometer biases; the error is right-invariant,
which makes the kinematic observation matrices state-independent.
"""

import logging

import numpy as np

from legged_iekf.core.base_filter import BaseFilter
from legged_iekf.core.exceptions import (
    InnovationCovarianceError, FilterDivergenceError
)
from legged_iekf.core.lie_group import sek3_exp, adjoint
from legged_iekf.core.state import (
    ContactMode, FEET, FOOT_COL, FOOT_SLICE, X_dim,
    COL_VEL, COL_POS, COL_FOOT_R, COL_FOOT_L,
    ROT, VEL, POS, FOOT_R, FOOT_L, B_OMEGA, B_ACC,
    as_vec3, check_foot, construct_state, separate_state, set_foot_anchor,
)
from legged_iekf.utils.geometry import (
    so3_exp, skew_symmetric, normalize_rot, get_euler_angles, is_rotation,
    to_quaternion,
)

logger = logging.getLogger(__name__)

STATE_FIELDS = ("Rot", "v", "p", "dR", "dL", "b_omega", "b_acc")


def symmetrize(M):
    """Remove the skew-symmetric part accumulated by round-off."""
    return 0.5 * (M + M.T)


class ContactIEKF(BaseFilter):
    """
    Invariant EKF fusing IMU and leg kinematics.

    State: X (7x7) = [[Rot, v, p, dR, dL], [0, I4]] and theta = [b_omega, b_acc]
    - Rot: body to world rotation
    - v: body velocity (world frame)
    - p: body position (world frame)
    - dR, dL: right / left foot contact anchors (world frame)
    - b_omega, b_acc: gyroscope / accelerometer biases (body frame)

    Covariance is 21-dimensional, ordered
    [rotation, velocity, position, right foot, left foot, b_omega, b_acc].

    The filter is single-threaded; callers must serialize ``predict`` and
    ``update_kinematics`` in time order.
    """

    # Identity matrices
    Id3 = np.eye(3)
    IdP = np.eye(21)

    class Parameters:
        """Default filter parameters."""

        g = np.array([0, 0, -9.80665])
        """Gravity vector (m/s^2)"""

        P_dim = 21
        """Covariance dimension"""

        dt = 0.01
        """Default sampling time (s)"""
        max_dt = 0.1
        """Largest timestep accepted by predict (s)"""

        # Process noise standard deviations (per axis)
        std_gyro = [0.01, 0.01, 0.01]
        """Gyro noise (rad/s)"""
        std_acc = [0.04, 0.04, 0.04]
        """Accelerometer noise (m/s^2)"""
        std_gyro_bias = [1e-4, 1e-4, 1e-4]
        """Gyro bias random walk"""
        std_acc_bias = [1e-3, 1e-3, 1e-3]
        """Accelerometer bias random walk"""
        std_foot_contact = [0.01, 0.01, 0.01]
        """Foot slip while in contact (m/s)"""

        # Measurement noise standard deviations
        std_foot_kin = [0.01, 0.01, 0.01]
        """Foot kinematics noise added to J Qe J^T (m)"""

        swing_foot_noise_scale = 1e4
        """Contact noise multiplier for a foot that is not in contact"""

        # Initial state covariances
        cov_Rot0 = 1e-3
        """Initial orientation covariance"""
        cov_v0 = 1e-2
        """Initial velocity covariance"""
        cov_p0 = 1e-6
        """Initial position covariance"""
        cov_foot0 = 1e-4
        """Initial foot anchor covariance"""
        cov_b_omega0 = 1e-4
        """Initial gyro bias covariance"""
        cov_b_acc0 = 1e-3
        """Initial accelerometer bias covariance"""

        # Numerical parameters
        eps = 1e-8
        """Small-angle threshold of the exponential maps"""
        n_phi_terms = 3
        """Taylor terms of exp(Af dt); 3 is exact since Af^4 = 0"""
        n_normalize_rot = 100
        """Propagations before normalizing orientation"""

        verbose = False
        """Enable verbose logging"""

        def __init__(self, **kwargs):
            self.set(**kwargs)

        def set(self, **kwargs):
            for key, value in kwargs.items():
                setattr(self, key, value)

    def __init__(self, parameter_class=None):
        """
        Initialize the filter.

        Args:
            parameter_class: Parameter class or instance
                (default: ContactIEKF.Parameters)
        """
        super().__init__(parameter_class)

        if parameter_class is None:
            self.filter_parameters = ContactIEKF.Parameters()
        elif isinstance(parameter_class, type):
            self.filter_parameters = parameter_class()
        else:
            self.filter_parameters = parameter_class

        # Copy parameters to instance attributes
        self.set_param_attr()
        self._check_params()

        # Build continuous process noise covariance
        self._build_Qc()

        self.init()

    @classmethod
    def build_from_cfg(cls, cfg):
        """Build a filter from a plain mapping of parameter overrides."""
        params = cls.Parameters(**dict(cfg or {}))
        return cls(params)

    def _check_params(self):
        self.g = np.asarray(self.g, dtype=float)
        if self.g.shape != (3,):
            raise ValueError(f"g must be a 3D vector, got shape {self.g.shape}")
        if self.n_phi_terms not in (1, 2, 3):
            raise ValueError(
                f"n_phi_terms must be 1, 2 or 3, got {self.n_phi_terms}")
        for name in ("std_gyro", "std_acc", "std_gyro_bias", "std_acc_bias",
                     "std_foot_contact", "std_foot_kin"):
            setattr(self, name, as_vec3(getattr(self, name), name))

    def _build_Qc(self):
        """Build continuous process noise covariance matrix from parameters."""
        self.Qc = np.diag(np.concatenate([
            self.std_gyro**2,
            self.std_acc**2,
            np.zeros(3),
            self.std_foot_contact**2,
            self.std_foot_contact**2,
            self.std_gyro_bias**2,
            self.std_acc_bias**2,
        ]))

    # ------------------------------------------------------------------
    # Initialization and setters
    # ------------------------------------------------------------------

    def init(self):
        """Reset mean, biases and covariance to their initial values."""
        self.firstrun = True
        self.X, self.theta = construct_state(
            self.Id3, np.zeros(3), np.zeros(3), np.zeros(3), np.zeros(3),
            np.zeros(3), np.zeros(3))
        self.P = self.init_covariance()
        self.in_contact = {foot: False for foot in FEET}
        self.n_propagations = 0
        self.gyro = np.zeros(3)
        self.acc = np.zeros(3)
        self.update_vars()

    def init_covariance(self):
        """
        Initialize state covariance matrix.

        Returns:
            Initial covariance P0 (21, 21)
        """
        P = np.zeros((self.P_dim, self.P_dim))
        P[ROT, ROT] = self.cov_Rot0 * self.Id3
        P[VEL, VEL] = self.cov_v0 * self.Id3
        P[POS, POS] = self.cov_p0 * self.Id3
        P[FOOT_R, FOOT_R] = self.cov_foot0 * self.Id3
        P[FOOT_L, FOOT_L] = self.cov_foot0 * self.Id3
        P[B_OMEGA, B_OMEGA] = self.cov_b_omega0 * self.Id3
        P[B_ACC, B_ACC] = self.cov_b_acc0 * self.Id3
        return P

    def reset_covariance(self, P=None):
        """Reset P to P0, or to the given matrix."""
        if P is None:
            self.P = self.init_covariance()
            return
        P = np.asarray(P, dtype=float)
        if P.shape != (self.P_dim, self.P_dim):
            raise ValueError(f"P must be {self.P_dim}x{self.P_dim}")
        self.P = symmetrize(P)

    def set_dt(self, dt):
        self.dt = float(dt)

    def _override(self, caller, **fields):
        # Direct writes bypass the covariance bookkeeping
        if not self.firstrun:
            logger.warning(
                "%s called after the filter started; covariance is not "
                "reset, call reset_covariance() if needed", caller)
        state = dict(zip(STATE_FIELDS, separate_state(self.X, self.theta)))
        state.update(fields)
        self.X, self.theta = construct_state(**state)
        self.update_vars()

    def set_gyro_bias(self, b_omega):
        self._override("set_gyro_bias", b_omega=b_omega)

    def set_acc_bias(self, b_acc):
        self._override("set_acc_bias", b_acc=b_acc)

    def set_body_pos(self, p):
        """Initialize the body position."""
        self._override("set_body_pos", p=p)

    def set_body_orientation(self, Rot):
        """Initialize the body rotation matrix."""
        if not is_rotation(Rot, atol=1e-6):
            raise ValueError("Rot is not a rotation matrix")
        self._override("set_body_orientation", Rot=normalize_rot(Rot))

    def set_body_vel(self, v):
        self._override("set_body_vel", v=v)

    def set_foot_pos(self, foot, d):
        """
        Plant a foot anchor at world position ``d``.

        The foot is considered in contact from now on, so the next kinematic
        update uses the anchor as is instead of re-initializing it.
        """
        name = "dR" if check_foot(foot) == "right" else "dL"
        self._override("set_foot_pos", **{name: d})
        self.in_contact[foot] = True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def update_vars(self):
        """Refresh the convenience fields from X and theta."""
        (self.Rwb, self.vwb, self.pwb, self.dR, self.dL,
         self.bgyr, self.bacc) = separate_state(self.X, self.theta)
        self.angle = get_euler_angles(self.Rwb)

        # Body pose as a homogeneous transform and a [w, x, y, z] quaternion
        self.Tib = np.eye(4)
        self.Tib[:3, :3] = self.Rwb
        self.Tib[:3, 3] = self.pwb
        self.qib = to_quaternion(self.Rwb)

        self.rX, self.rY, self.rZ = self.pwb
        self.velX, self.velY, self.velZ = self.vwb
        self.angleX, self.angleY, self.angleZ = self.angle
        self.bias_gx, self.bias_gy, self.bias_gz = self.bgyr
        self.bias_ax, self.bias_ay, self.bias_az = self.bacc
        self.gyroX, self.gyroY, self.gyroZ = self.gyro
        self.accX, self.accY, self.accZ = self.acc

    def get_state(self):
        """Return copies of (Rot, v, p, dR, dL, b_omega, b_acc)."""
        return separate_state(self.X, self.theta)

    def get_covariance(self):
        return self.P.copy()

    def get_foot_positions(self):
        """World-frame foot anchors, keyed by foot name."""
        return {"right": self.dR.copy(), "left": self.dL.copy()}

    @property
    def contact_mode(self):
        """Contact mode seen by the last kinematic update."""
        return ContactMode.from_flags(self.in_contact["right"],
                                      self.in_contact["left"])

    def get_state_dict(self):
        state_dict = super().get_state_dict()
        state_dict.update({
            'X': self.X.copy(),
            'theta': self.theta.copy(),
            'P': self.P.copy(),
            'firstrun': self.firstrun,
            'in_contact': dict(self.in_contact),
            'dt': self.dt,
            'n_propagations': self.n_propagations,
        })
        return state_dict

    def load_state_dict(self, state_dict):
        super().load_state_dict(state_dict)
        self._check_params()
        self._build_Qc()
        if 'X' in state_dict:
            self.X = np.array(state_dict['X'], dtype=float)
            self.theta = np.array(state_dict['theta'], dtype=float)
            self.P = np.array(state_dict['P'], dtype=float)
            self.firstrun = state_dict.get('firstrun', False)
            self.in_contact = dict(state_dict.get(
                'in_contact', {foot: False for foot in FEET}))
            self.dt = state_dict.get('dt', self.dt)
            self.n_propagations = state_dict.get('n_propagations', 0)
            self.update_vars()

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def valid_dt(self, dt):
        return bool(np.isfinite(dt) and 0.0 < dt <= self.max_dt)

    def predict(self, omega, acc, s_R, s_L, contact_R, contact_L):
        """
        Propagate mean and covariance with one IMU sample.

        On the first call the anchors are initialized from the measured foot
        offsets and nothing is propagated. A timestep outside
        (0, max_dt] leaves the state untouched.

        Returns:
            True if the state was propagated
        """
        omega = as_vec3(omega, "omega")
        acc = as_vec3(acc, "acc")
        s_R = as_vec3(s_R, "s_R")
        s_L = as_vec3(s_L, "s_L")

        if self.firstrun:
            self._initialize_anchors(s_R, s_L, contact_R, contact_L)
            self.firstrun = False
            return False

        if not self.valid_dt(self.dt):
            logger.warning("Skipping prediction, invalid timestep dt=%s",
                           self.dt)
            return False

        X, theta, P = self.propagate(self.X, self.theta, self.P, omega, acc,
                                     s_R, s_L, contact_R, contact_L, self.dt)

        # Correct numerical drift periodically
        self.n_propagations += 1
        if self.n_propagations % self.n_normalize_rot == 0:
            X[:3, :3] = normalize_rot(X[:3, :3])

        self.gyro = omega - theta[:3]
        self.acc = acc - theta[3:]
        self._commit(X, theta, P)
        return True

    def _initialize_anchors(self, s_R, s_L, contact_R, contact_L):
        X = self.X
        Rot, p = X[:3, :3], X[:3, COL_POS]
        for foot, s, contact in (("right", s_R, contact_R),
                                 ("left", s_L, contact_L)):
            # Anchors planted with set_foot_pos are kept
            if not self.in_contact[foot]:
                X = set_foot_anchor(X, foot, p + Rot.dot(s))
            self.in_contact[foot] = bool(contact)
        self._commit(X, self.theta, self.P)
        if self.verbose:
            logger.info("Filter initialized, contact mode %s",
                        self.contact_mode.name)

    def propagate(self, X, theta, P, omega, acc, s_R, s_L,
                  contact_R, contact_L, dt):
        """
        Propagate a state triple forward (prediction step).

        Pure function of its arguments: nothing on the filter is modified.

        Returns:
            Tuple of propagated (X, theta, P)
        """
        Rot, v, p, dR, dL, b_omega, b_acc = separate_state(X, theta)

        # Bias-corrected IMU
        w = omega - b_omega
        a = acc - b_acc

        P = self.propagate_cov(P, X, contact_R, contact_L, dt)

        # Strapdown integration
        acc_world = Rot.dot(a) + self.g
        Rot_up = Rot.dot(so3_exp(w * dt, self.eps))
        v_up = v + acc_world * dt
        p_up = p + v * dt + 0.5 * acc_world * dt**2

        # Swing feet follow the kinematics so a new contact starts fresh
        if not contact_R:
            dR = p_up + Rot_up.dot(s_R)
        if not contact_L:
            dL = p_up + Rot_up.dot(s_L)

        X_up, theta_up = construct_state(Rot_up, v_up, p_up, dR, dL,
                                         b_omega, b_acc)
        return X_up, theta_up, P

    def process_jacobian(self, X):
        """
        Continuous-time error dynamics Af (21x21) at X.

        Right-invariant error: only gravity and the bias terms make Af
        depend on anything but constants.
        """
        Rot = X[:3, :3]
        Af = np.zeros((self.P_dim, self.P_dim))
        Af[VEL, ROT] = skew_symmetric(self.g)
        Af[POS, VEL] = self.Id3
        Af[ROT, B_OMEGA] = -Rot
        Af[VEL, B_OMEGA] = -skew_symmetric(X[:3, COL_VEL]).dot(Rot)
        Af[VEL, B_ACC] = -Rot
        Af[POS, B_OMEGA] = -skew_symmetric(X[:3, COL_POS]).dot(Rot)
        Af[FOOT_R, B_OMEGA] = -skew_symmetric(X[:3, COL_FOOT_R]).dot(Rot)
        Af[FOOT_L, B_OMEGA] = -skew_symmetric(X[:3, COL_FOOT_L]).dot(Rot)
        return Af

    def transition_matrix(self, Af, dt):
        """
        Phi = exp(Af dt) as a Taylor series of ``n_phi_terms`` terms.

        Af^4 = 0, so three terms give the exact exponential.
        """
        F = Af * dt
        Phi = self.IdP + F
        term = F
        for k in range(2, self.n_phi_terms + 1):
            term = term.dot(F) / k
            Phi = Phi + term
        return Phi

    def process_noise(self, contact_R, contact_L):
        """Continuous noise Qc with swing-foot anchors left free."""
        Qc = self.Qc.copy()
        if not contact_R:
            Qc[FOOT_R, FOOT_R] *= self.swing_foot_noise_scale
        if not contact_L:
            Qc[FOOT_L, FOOT_L] *= self.swing_foot_noise_scale
        return Qc

    def propagate_cov(self, P_prev, X_prev, contact_R, contact_L, dt):
        """Propagate covariance matrix."""
        Af = self.process_jacobian(X_prev)
        Phi = self.transition_matrix(Af, dt)

        # Noise enters in the local frame, covariance is kept in the world one
        Adj = adjoint(X_prev)
        Qd = Adj.dot(self.process_noise(contact_R, contact_L)).dot(Adj.T) * dt

        P = Phi.dot(P_prev + Qd).dot(Phi.T)
        return symmetrize(P)

    # ------------------------------------------------------------------
    # Correction
    # ------------------------------------------------------------------

    def update_kinematics(self, s_R, s_L, cov_R, cov_L, contact_R, contact_L):
        """
        Correct the state with the relative foot positions of the feet
        in contact.

        A foot touching down has its anchor planted from its measurement,
        which is then spent: only feet already in contact are corrected.
        With no foot in contact this is a no-op.
        """
        meas = {
            "right": (as_vec3(s_R, "s_R"), self._as_cov(cov_R, "cov_R")),
            "left": (as_vec3(s_L, "s_L"), self._as_cov(cov_L, "cov_L")),
        }
        mode = ContactMode.from_flags(contact_R, contact_L)

        X, theta, P = self.X, self.theta, self.P
        planted = []
        for foot in mode.feet:
            if self.in_contact[foot]:
                planted.append(foot)
                continue
            if self.verbose:
                logger.info("Touchdown of %s foot, resetting anchor", foot)
            X, P = self.reset_anchor(X, P, foot, *meas[foot])

        update_mode = ContactMode.from_flags("right" in planted,
                                             "left" in planted)
        if update_mode in (ContactMode.RIGHT, ContactMode.LEFT):
            foot = update_mode.feet[0]
            Y, b, H, N, PI = self.single_contact_model(X, foot, *meas[foot])
            X, theta, P = self.update_state_single_contact(
                X, theta, P, Y, b, H, N, PI)
        elif update_mode is ContactMode.DOUBLE:
            Y, b, H, N, PI = self.double_contact_model(
                X, meas["right"], meas["left"])
            X, theta, P = self.update_state_double_contact(
                X, theta, P, Y, b, H, N, PI)

        self._commit(X, theta, P)
        previous = self.contact_mode
        self.in_contact = {"right": bool(contact_R), "left": bool(contact_L)}
        if self.verbose and mode is not previous:
            logger.info("Contact mode %s -> %s", previous.name, mode.name)

    @staticmethod
    def _as_cov(cov, name):
        cov = np.asarray(cov, dtype=float)
        if cov.shape != (3, 3):
            raise ValueError(f"{name} must be 3x3, got shape {cov.shape}")
        return cov

    def measurement_noise(self, Rot, cov):
        """Kinematic noise J Qe J^T (body frame) rotated to the world frame."""
        N = cov + np.diag(self.std_foot_kin**2)
        return Rot.dot(N).dot(Rot.T)

    def reset_anchor(self, X, P, foot, s, cov):
        """
        Re-initialize the anchor of ``foot`` at p + Rot s.

        The anchor error equals the position error plus the kinematic noise,
        so its covariance rows and columns are copied from the position block.

        Returns:
            Tuple of (X, P)
        """
        Rot, p = X[:3, :3], X[:3, COL_POS]
        X = set_foot_anchor(X, foot, p + Rot.dot(s))

        idx = FOOT_SLICE[foot]
        P = P.copy()
        P[idx, :] = P[POS, :]
        P[:, idx] = P[:, POS]
        P[idx, idx] += self.measurement_noise(Rot, cov)
        return X, symmetrize(P)

    def single_contact_model(self, X, foot, s, cov):
        """
        Right-invariant observation of one foot.

        Returns:
            Tuple of (Y, b, H, N, PI) with shapes (7,), (7,), (3, 21),
            (3, 3) and (3, 7)
        """
        col = FOOT_COL[foot]

        Y = np.zeros(X_dim)
        Y[:3] = s
        Y[COL_POS] = 1
        Y[col] = -1

        b = np.zeros(X_dim)
        b[COL_POS] = 1
        b[col] = -1

        H = np.zeros((3, self.P_dim))
        H[:, POS] = -self.Id3
        H[:, FOOT_SLICE[foot]] = self.Id3

        N = self.measurement_noise(X[:3, :3], cov)

        PI = np.zeros((3, X_dim))
        PI[:, :3] = self.Id3
        return Y, b, H, N, PI

    def double_contact_model(self, X, meas_R, meas_L):
        """
        Stacked observation of both feet.

        Returns:
            Tuple of (Y, b, H, N, PI) with shapes (14,), (14,), (6, 21),
            (6, 6) and (6, 14)
        """
        Y_R, b_R, H_R, N_R, PI_R = self.single_contact_model(X, "right", *meas_R)
        Y_L, b_L, H_L, N_L, PI_L = self.single_contact_model(X, "left", *meas_L)

        Y = np.concatenate([Y_R, Y_L])
        b = np.concatenate([b_R, b_L])
        H = np.vstack([H_R, H_L])

        N = np.zeros((6, 6))
        N[:3, :3] = N_R
        N[3:, 3:] = N_L

        PI = np.zeros((6, 2 * X_dim))
        PI[:3, :X_dim] = PI_R
        PI[3:, X_dim:] = PI_L
        return Y, b, H, N, PI

    def update_state_single_contact(self, X, theta, P, Y, b, H, N, PI):
        """Kalman update with one foot: z = PI (X Y - b)."""
        z = PI.dot(X.dot(Y) - b)
        return self.state_and_cov_update(X, theta, P, H, z, N, self.eps)

    def update_state_double_contact(self, X, theta, P, Y, b, H, N, PI):
        """Kalman update with both feet: z = PI (diag(X, X) Y - b)."""
        BigX = np.kron(np.eye(2), X)
        z = PI.dot(BigX.dot(Y) - b)
        return self.state_and_cov_update(X, theta, P, H, z, N, self.eps)

    @staticmethod
    def state_and_cov_update(X, theta, P, H, z, N, eps=1e-8):
        """
        Perform Kalman update on state and covariance.

        The correction is retracted onto the group by left composition
        (right-invariant error); biases are corrected additively.

        Raises:
            InnovationCovarianceError: if S = H P H^T + N is not positive
                definite
        """
        S = symmetrize(H.dot(P).dot(H.T) + N)
        try:
            np.linalg.cholesky(S)
        except np.linalg.LinAlgError as exc:
            raise InnovationCovarianceError(
                "Innovation covariance is not positive definite, "
                "check the kinematic noise configuration") from exc

        # Kalman gain
        K = (np.linalg.solve(S, P.dot(H.T).T)).T

        # Compute state correction
        dx = K.dot(z)

        X_up = sek3_exp(dx[:15], eps).dot(X)
        theta_up = theta + dx[15:]

        # Update covariance (Joseph form for numerical stability)
        I_KH = ContactIEKF.IdP - K.dot(H)
        P_up = I_KH.dot(P).dot(I_KH.T) + K.dot(N).dot(K.T)
        P_up = symmetrize(P_up)

        return X_up, theta_up, P_up

    def _commit(self, X, theta, P):
        if not (np.all(np.isfinite(X)) and np.all(np.isfinite(theta))
                and np.all(np.isfinite(P))):
            raise FilterDivergenceError("Non-finite value in filter state")
        self.X, self.theta, self.P = X, theta, P
        self.update_vars()

    # ------------------------------------------------------------------
    # Batch driver
    # ------------------------------------------------------------------

    def run(self, t, omega, acc, s_R, s_L, cov_R, cov_L, contact_R, contact_L,
            N=None, Rot0=None, v0=None, p0=None):
        """
        Run the filter on a recorded sequence.

        Args:
            t: Timestamps (N,)
            omega: Gyro measurements (N, 3)
            acc: Accelerometer measurements (N, 3)
            s_R, s_L: Relative foot positions, body frame (N, 3)
            cov_R, cov_L: Relative foot position covariances (N, 3, 3)
            contact_R, contact_L: Contact flags (N,)
            N: Number of timesteps (None = all)
            Rot0, v0, p0: Initial rotation, velocity and position

        Returns:
            Tuple of (Rot, v, p, b_omega, b_acc, dR, dL) trajectories
        """
        if N is None:
            N = len(t)

        self.init()
        if Rot0 is not None:
            self.set_body_orientation(Rot0)
        if v0 is not None:
            self.set_body_vel(v0)
        if p0 is not None:
            self.set_body_pos(p0)

        Rot = np.zeros((N, 3, 3))
        v = np.zeros((N, 3))
        p = np.zeros((N, 3))
        b_omega = np.zeros((N, 3))
        b_acc = np.zeros((N, 3))
        dR = np.zeros((N, 3))
        dL = np.zeros((N, 3))

        for i in range(N):
            if i > 0:
                self.set_dt(t[i] - t[i-1])
            self.predict(omega[i], acc[i], s_R[i], s_L[i],
                         contact_R[i], contact_L[i])
            self.update_kinematics(s_R[i], s_L[i], cov_R[i], cov_L[i],
                                   contact_R[i], contact_L[i])

            Rot[i], v[i], p[i], dR[i], dL[i], b_omega[i], b_acc[i] = \
                self.get_state()

        return Rot, v, p, b_omega, b_acc, dR, dL
