import logging
import math
import warnings
from functools import partial

import jax.numpy as jnp
from jax import jit, lax
import numpy as np

from .orbital_elements import OrbitalElements, normalize_angle_deg, validate_elements
from .state_vector import StateVector
from .config import DEFAULT_KEPLER_TOL, DEFAULT_KEPLER_MAX_ITER
from .exceptions import DegenerateOrbitWarning, NumericDivergenceWarning
from .constants import (
    EARTH_SEMI_MAJOR_AXIS, EARTH_ECCENTRICITY, EARTH_INCLINATION,
    EARTH_ASCENDING_NODE, EARTH_ARG_PERIAPSIS, EARTH_MEAN_ANOMALY,
    EARTH_MEAN_MOTION, J2000,
)

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
FLAT_DERIVATIVE = 1e-12  # |f'(E)| below this aborts the Newton iteration
DIVERGENCE_BOUND = 100.0  # |E| beyond this (radians) means the iteration ran away

EARTH_ELEMENTS = OrbitalElements(
    a=EARTH_SEMI_MAJOR_AXIS,
    e=EARTH_ECCENTRICITY,
    i=EARTH_INCLINATION,
    Omega=EARTH_ASCENDING_NODE,
    omega=EARTH_ARG_PERIAPSIS,
    M0=EARTH_MEAN_ANOMALY,
    n=EARTH_MEAN_MOTION,
    epoch=J2000,
)


def _signal(category, msg, *args):
    logger.warning(msg, *args)
    warnings.warn(msg % args, category, stacklevel=3)


def _starting_guess(e, M):
    # Near periapsis of very eccentric orbits M alone converges slowly. The
    # refined guess is only trusted inside [M - e, M + e], where the root lies.
    if e <= 0.8:
        return M
    denom = 1.0 - e * math.cos(M)
    if denom > 0.0:
        E0 = M + e * math.sin(M) / denom
        if math.isfinite(E0) and M - e <= E0 <= M + e:
            return E0
    return math.pi


def solve_kepler(e: float, M: float, tol: float = DEFAULT_KEPLER_TOL,
                 max_iter: int = DEFAULT_KEPLER_MAX_ITER) -> float:
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly E
    using Newton-Raphson iteration.

    M may lie on any revolution. It is reduced into [0, 2*pi) for the
    iteration and the removed whole revolutions are added back to E.

    The iteration is bounded by ``max_iter``. Whenever a usable answer cannot
    be produced (eccentricity outside [0, 1), a vanishing derivative, a
    runaway iterate or no convergence) the mean anomaly is returned unchanged
    and a DegenerateOrbitWarning or NumericDivergenceWarning is emitted.

    Parameters
    ----------
    e : float
        Eccentricity.
    M : float
        Mean anomaly (radians).
    tol : float, optional
        Convergence tolerance on the Newton step.
    max_iter : int, optional
        Maximum number of iterations.

    Returns
    -------
    E : float
        Eccentric anomaly (radians).
    """
    if not (math.isfinite(e) and math.isfinite(M)) or not 0.0 <= e < 1.0:
        _signal(DegenerateOrbitWarning,
                "Kepler solve: invalid input (e=%r, M=%r), returning mean anomaly", e, M)
        return M

    revolutions = TWO_PI * math.floor(M / TWO_PI)
    M_w = M - revolutions
    E = _starting_guess(e, M_w)

    for _ in range(max_iter):
        f = E - e * math.sin(E) - M_w
        fp = 1.0 - e * math.cos(E)
        if abs(fp) < FLAT_DERIVATIVE:
            _signal(NumericDivergenceWarning,
                    "Kepler solve: derivative vanished (e=%r, M=%r), returning mean anomaly", e, M)
            return M
        dE = f / fp
        E -= dE
        if abs(E) > DIVERGENCE_BOUND:
            _signal(NumericDivergenceWarning,
                    "Kepler solve: iterate diverged (e=%r, M=%r), returning mean anomaly", e, M)
            return M
        if abs(dE) < tol:
            return E + revolutions

    _signal(NumericDivergenceWarning,
            "Kepler solve: no convergence in %d iterations (e=%r, M=%r), returning mean anomaly",
            max_iter, e, M)
    return M


@partial(jit, static_argnames=("max_iter",))
def _solve_kepler_jax(M, e, tol, max_iter):
    bound = (e >= 0.0) & (e < 1.0)
    e_safe = jnp.where(bound, e, 0.0)
    M_w = jnp.mod(M, 2.0 * jnp.pi)
    guess = M_w + e_safe * jnp.sin(M_w) / (1.0 - e_safe * jnp.cos(M_w))
    trusted = jnp.isfinite(guess) & (guess >= M_w - e_safe) & (guess <= M_w + e_safe)
    E0 = jnp.where(e_safe > 0.8, jnp.where(trusted, guess, jnp.pi), M_w)

    def body_fn(_, carry):
        E, done, failed = carry
        f = E - e_safe * jnp.sin(E) - M_w
        fp = 1.0 - e_safe * jnp.cos(E)
        flat = jnp.abs(fp) < FLAT_DERIVATIVE
        dE = jnp.where(flat, 0.0, f / jnp.where(flat, 1.0, fp))
        # Converged or failed entries are frozen for the remaining iterations
        active = ~(done | failed)
        E_new = jnp.where(active, E - dE, E)
        failed = failed | (active & (flat | (jnp.abs(E_new) > DIVERGENCE_BOUND)))
        done = done | (active & (jnp.abs(dE) < tol))
        return E_new, done, failed

    init = (E0, jnp.zeros(M.shape, dtype=bool), jnp.zeros(M.shape, dtype=bool))
    E, done, failed = lax.fori_loop(0, max_iter, body_fn, init)
    return jnp.where(bound & done & ~failed, E + (M - M_w), M)


def solve_kepler_vec(M, e, tol=DEFAULT_KEPLER_TOL, max_iter=DEFAULT_KEPLER_MAX_ITER):
    """
    Vectorized version of solve_kepler that handles arrays of M and e.

    Same semantics as the scalar solver, element by element, without the
    warnings: entries that cannot be solved fall back to their mean anomaly.

    Parameters
    ----------
    M : array_like
        Array of mean anomalies (radians)
    e : array_like
        Eccentricities, broadcast against M
    tol : float, optional
        Tolerance for convergence
    max_iter : int, optional
        Maximum number of iterations

    Returns
    -------
    E : jnp.ndarray
        Array of eccentric anomalies
    """
    M = jnp.asarray(M, dtype=jnp.float64)
    e = jnp.broadcast_to(jnp.asarray(e, dtype=jnp.float64), M.shape)
    return _solve_kepler_jax(M, e, tol, int(max_iter))


def mean_anomaly_at(elements: OrbitalElements, t: float) -> float:
    """Mean anomaly (radians, wrapped into [0, 2*pi)) at t days past the epoch."""
    M = math.radians(elements.M0 + elements.n * t)
    M = math.fmod(M, TWO_PI)
    if M < 0.0:
        M += TWO_PI
    return M


def _perifocal_basis(i_deg, Omega_deg, omega_deg):
    """
    Unit vectors P (toward periapsis) and Q (90 deg ahead in the direction of
    motion) in the heliocentric ecliptic frame, i.e. the columns of
    R3(-Omega) R1(-i) R3(-omega).
    """
    i = math.radians(normalize_angle_deg(i_deg))
    Omega = math.radians(normalize_angle_deg(Omega_deg))
    omega = math.radians(normalize_angle_deg(omega_deg))

    cos_O, sin_O = math.cos(Omega), math.sin(Omega)
    cos_w, sin_w = math.cos(omega), math.sin(omega)
    cos_i, sin_i = math.cos(i), math.sin(i)

    P = np.array([
        cos_O * cos_w - sin_O * sin_w * cos_i,
        sin_O * cos_w + cos_O * sin_w * cos_i,
        sin_w * sin_i,
    ])
    Q = np.array([
        -cos_O * sin_w - sin_O * cos_w * cos_i,
        -sin_O * sin_w + cos_O * cos_w * cos_i,
        cos_w * sin_i,
    ])
    return P, Q


def state_at(elements: OrbitalElements, t: float) -> StateVector:
    """
    Convert orbital elements to a heliocentric Cartesian state at time t.

    Parameters
    ----------
    elements : OrbitalElements
        The body's osculating elements.
    t : float
        Time past the elements' epoch in days.

    Returns
    -------
    StateVector
        Position in AU and velocity in AU/day, heliocentric ecliptic frame.
        Degenerate elements yield a zero state and a DegenerateOrbitWarning.
    """
    reason = validate_elements(elements)
    if reason is not None:
        _signal(DegenerateOrbitWarning, "Propagation skipped: %s", reason)
        return StateVector(r=np.zeros(3), v=np.zeros(3))

    a, e = elements.a, elements.e
    M = mean_anomaly_at(elements, t)
    E = solve_kepler(e, M)

    cos_E, sin_E = math.cos(E), math.sin(E)
    beta = math.sqrt(1.0 - e * e)

    # Position and velocity in the orbital plane
    x_orb = a * (cos_E - e)
    y_orb = a * beta * sin_E
    E_dot = math.radians(elements.n) / (1.0 - e * cos_E)
    vx_orb = -a * sin_E * E_dot
    vy_orb = a * beta * cos_E * E_dot

    P, Q = _perifocal_basis(elements.i, elements.Omega, elements.omega)
    return StateVector(r=x_orb * P + y_orb * Q, v=vx_orb * P + vy_orb * Q)


def position_at(elements: OrbitalElements, t: float) -> np.ndarray:
    """Heliocentric ecliptic position (AU) at t days past the epoch."""
    return state_at(elements, t).r


def earth_state_at(t: float) -> StateVector:
    return state_at(EARTH_ELEMENTS, t)


@jit
def _positions_jax(a, e, i, Omega, omega, M0, n, times):
    M = jnp.mod(jnp.deg2rad(M0 + n * times), 2.0 * jnp.pi)
    E = _solve_kepler_jax(M, jnp.full(M.shape, e), DEFAULT_KEPLER_TOL, DEFAULT_KEPLER_MAX_ITER)

    x_orb = a * (jnp.cos(E) - e)
    y_orb = a * jnp.sqrt(1.0 - e**2) * jnp.sin(E)

    cos_O, sin_O = jnp.cos(Omega), jnp.sin(Omega)
    cos_w, sin_w = jnp.cos(omega), jnp.sin(omega)
    cos_i, sin_i = jnp.cos(i), jnp.sin(i)

    x = x_orb * (cos_O * cos_w - sin_O * sin_w * cos_i) - y_orb * (cos_O * sin_w + sin_O * cos_w * cos_i)
    y = x_orb * (sin_O * cos_w + cos_O * sin_w * cos_i) + y_orb * (cos_O * cos_w * cos_i - sin_O * sin_w)
    z = x_orb * sin_w * sin_i + y_orb * cos_w * sin_i

    # Stack to (n, 3) shape: each row is [x, y, z] for one time
    return jnp.stack([x, y, z], axis=1)


def positions_at(elements: OrbitalElements, times) -> np.ndarray:
    """
    Batch version of position_at over an array of times.

    Parameters
    ----------
    elements : OrbitalElements
        The body's osculating elements. Must describe a bound orbit.
    times : array_like
        Times past the epoch in days, shape (n,).

    Returns
    -------
    np.ndarray
        Positions in AU, shape (n, 3).
    """
    reason = validate_elements(elements)
    times = np.asarray(times, dtype=float)
    if reason is not None:
        _signal(DegenerateOrbitWarning, "Propagation skipped: %s", reason)
        return np.zeros((times.size, 3))

    el = elements.normalized()
    r = _positions_jax(
        el.a, el.e, np.deg2rad(el.i), np.deg2rad(el.Omega), np.deg2rad(el.omega),
        el.M0, el.n, jnp.asarray(times),
    )
    return np.asarray(r)


def orbital_period(elements: OrbitalElements) -> float:
    """Orbital period in days (360 / mean motion)."""
    return elements.period_days


def vis_viva_speed(r: float, a: float, mu: float = 1.0) -> float:
    """
    Orbital speed from the vis-viva equation v^2 = mu (2/r - 1/a).

    Returns 0.0 where the equation has no real solution.
    """
    v_squared = mu * (2.0 / r - 1.0 / a)
    if not v_squared > 0.0:
        return 0.0
    return math.sqrt(v_squared)
