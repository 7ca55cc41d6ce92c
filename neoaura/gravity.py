"""
Short-range asteroid / Earth / Sun dynamics for the terminal impact phase.

Everything here works in scene units (AU_TO_UNITS per AU) and seconds of
simulation time, with the visual gravitational constants from
neoaura.constants. Those constants are scaled far beyond physical values so
the final approach is visible on screen; results are a visualization, not an
ephemeris.
"""
import math
from typing import NamedTuple, Optional

import numpy as np

from neoaura.config import DEFAULT_INTEGRATOR_CONFIG, IntegratorConfig
from neoaura.constants import AU_TO_UNITS, EARTH_MASS_VISUAL, G_VISUAL, SUN_MASS_VISUAL
from neoaura.orbital_elements import OrbitalElements

# Blend used to build the terminal trajectory. Tuned for the scene, not derived.
IMPULSE_GAIN = 3.0  # impulse speed per unit distance to the target
MAX_IMPULSE_SPEED = 8.0
ORBITAL_VELOCITY_RESIDUAL = 0.001

# Orbital velocity estimate boosts, also scene tuning
ORBITAL_SPEED_MULTIPLIER = 3.0
ECCENTRICITY_BOOST = 0.3
FALLBACK_ORBITAL_SPEED = 0.001

DEFAULT_ASTEROID_MASS = 1e10  # kg


class GravitySimState(NamedTuple):
    """
    State of the integrated body.

    Attributes:
        position: Position [x, y, z] (scene units)
        velocity: Velocity [vx, vy, vz] (scene units/s)
        acceleration: Acceleration at ``position`` (scene units/s^2)
        mass: Body mass (kg); carried along, not used by the dynamics
    """
    position: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray
    mass: float


def gravitational_acceleration(body_pos, attractor_pos, visual_mass,
                               config: IntegratorConfig = DEFAULT_INTEGRATOR_CONFIG) -> np.ndarray:
    """
    Acceleration of a body toward an attractor, a = G M / r^2.

    Zero inside the singularity cutoff; clamped to ``config.max_acceleration``.
    """
    direction = np.asarray(attractor_pos, dtype=float) - np.asarray(body_pos, dtype=float)
    distance = np.linalg.norm(direction)
    if distance < config.singularity_cutoff:
        return np.zeros(3)
    magnitude = min(G_VISUAL * visual_mass / distance**2, config.max_acceleration)
    return direction / distance * magnitude


def _total_acceleration(pos, earth_pos, sun_pos, include_earth, include_sun, config):
    acc = np.zeros(3)
    attractors = ((include_earth, earth_pos, EARTH_MASS_VISUAL),
                  (include_sun, sun_pos, SUN_MASS_VISUAL))
    for enabled, attractor_pos, mass in attractors:
        if enabled and np.linalg.norm(pos - attractor_pos) > config.attractor_cutoff:
            acc += gravitational_acceleration(pos, attractor_pos, mass, config)
    return acc


def step(state: GravitySimState, earth_pos, sun_pos, dt_seconds: float,
         include_earth: bool = True, include_sun: bool = True,
         config: IntegratorConfig = DEFAULT_INTEGRATOR_CONFIG) -> GravitySimState:
    """
    Advance the state by one tick with classic fourth-order Runge-Kutta.

    ``dt_seconds`` is clamped to ``config.max_dt`` in magnitude; its sign is
    kept so a negative step runs time backwards. The resulting speed is
    clamped to ``config.max_velocity``.

    Parameters
    ----------
    state : GravitySimState
        Current state. It is not modified.
    earth_pos, sun_pos : array_like
        Attractor positions (scene units), held fixed over the step.
    dt_seconds : float
        Requested step.
    include_earth, include_sun : bool
        Which attractors contribute.

    Returns
    -------
    GravitySimState
        The new state, with the acceleration evaluated at the new position.
    """
    earth_pos = np.asarray(earth_pos, dtype=float)
    sun_pos = np.asarray(sun_pos, dtype=float)
    h = math.copysign(min(abs(dt_seconds), config.max_dt), dt_seconds) if dt_seconds else 0.0

    def accel(pos):
        return _total_acceleration(pos, earth_pos, sun_pos, include_earth, include_sun, config)

    r0 = np.asarray(state.position, dtype=float)
    v0 = np.asarray(state.velocity, dtype=float)

    k1_r, k1_v = v0, accel(r0)
    k2_r, k2_v = v0 + 0.5 * h * k1_v, accel(r0 + 0.5 * h * k1_r)
    k3_r, k3_v = v0 + 0.5 * h * k2_v, accel(r0 + 0.5 * h * k2_r)
    k4_r, k4_v = v0 + h * k3_v, accel(r0 + h * k3_r)

    position = r0 + h / 6.0 * (k1_r + 2.0 * k2_r + 2.0 * k3_r + k4_r)
    velocity = v0 + h / 6.0 * (k1_v + 2.0 * k2_v + 2.0 * k3_v + k4_v)

    speed = np.linalg.norm(velocity)
    if speed > config.max_velocity:
        velocity = velocity / speed * config.max_velocity

    return GravitySimState(
        position=position,
        velocity=velocity,
        acceleration=accel(position),
        mass=state.mass,
    )


def initialize_impact_trajectory(start_pos, orbital_velocity, earth_pos,
                                 target_offset=None,
                                 mass: float = DEFAULT_ASTEROID_MASS) -> GravitySimState:
    """
    Initial state for a direct terminal approach to Earth.

    The velocity is an impulse toward ``earth_pos + target_offset`` of speed
    min(3 d, 8) plus a 0.001 residual of the orbital velocity, so the body
    heads straight in instead of trailing Earth.
    """
    start_pos = np.asarray(start_pos, dtype=float)
    offset = np.zeros(3) if target_offset is None else np.asarray(target_offset, dtype=float)
    to_target = np.asarray(earth_pos, dtype=float) - start_pos + offset
    distance = np.linalg.norm(to_target)

    impulse = np.zeros(3)
    if distance > 0.0:
        impulse = to_target / distance * min(distance * IMPULSE_GAIN, MAX_IMPULSE_SPEED)
    velocity = np.asarray(orbital_velocity, dtype=float) * ORBITAL_VELOCITY_RESIDUAL + impulse

    return GravitySimState(
        position=start_pos.copy(),
        velocity=velocity,
        acceleration=np.zeros(3),
        mass=mass,
    )


def estimate_time_to_impact(state: GravitySimState, target_pos, target_radius: float) -> float:
    """
    Seconds until the body reaches the target's surface at its current
    closing speed, or ``inf`` when it is not closing.
    """
    to_target = np.asarray(target_pos, dtype=float) - np.asarray(state.position, dtype=float)
    distance = np.linalg.norm(to_target)
    if distance == 0.0:
        return 0.0
    closing_speed = float(np.dot(state.velocity, to_target / distance))
    if closing_speed <= 0.0:
        return math.inf
    return max(0.0, (distance - target_radius) / closing_speed)


def velocity_from_orbital_elements(position, elements: OrbitalElements,
                                   sun_pos: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Boosted orbital velocity estimate in scene units/s.

    Vis-viva speed at the current distance, multiplied for visibility, sped
    up closer to the Sun and for eccentric orbits, directed roughly
    perpendicular to the radius vector.
    """
    sun_pos = np.zeros(3) if sun_pos is None else np.asarray(sun_pos, dtype=float)
    r_vec = np.asarray(position, dtype=float) - sun_pos
    r_au = np.linalg.norm(r_vec) / AU_TO_UNITS

    v_squared = 2.0 / r_au - 1.0 / elements.a if r_au > 0.0 else -1.0
    speed = math.sqrt(v_squared) * AU_TO_UNITS if v_squared > 0.0 else FALLBACK_ORBITAL_SPEED

    speed *= ORBITAL_SPEED_MULTIPLIER
    speed *= 1.0 + 1.0 / max(r_au, 0.1)
    speed *= 1.0 + elements.e * ECCENTRICITY_BOOST

    direction = np.array([-r_vec[1], r_vec[0], 0.1 * r_vec[2]])
    norm = np.linalg.norm(direction)
    if norm == 0.0:
        return np.zeros(3)
    return direction / norm * speed
