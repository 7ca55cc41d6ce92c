"""
Planetary-defence deflection model.

Given the current state of an asteroid on a collision course and one of the
catalogued deflection methods, derive the velocity change the method can
deliver, the resulting orbit, a success draw and a before/after impact
probability proxy.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from enum import Enum
from typing import Iterable, Optional, Union

import numpy as np
import pydantic
from pydantic import ConfigDict, Field, field_validator

from neoaura.astrodynamics import EARTH_ELEMENTS, state_at
from neoaura.constants import (
    ASTEROID_REFERENCE_DENSITY,
    ASTEROID_REFERENCE_RADIUS_KM,
    DAY,
    EARTH_RADIUS_AU,
    EARTH_RADIUS_KM,
    KMPAU,
    MU_EARTH,
)
from neoaura.config import DebugOverrides
from neoaura.exceptions import ConfigurationError
from neoaura.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)

SAFE_MISS_RADII = 10.0  # target miss distance, in Earth radii
DIRECTION_ATTENUATION = 0.1  # raw catalogue angles are scaled down before use
APPLIED_FRACTION = 0.1  # fraction of the required change a single attempt delivers
INCLINATION_GAIN = 0.01  # deg of inclination change per deg of direction change
TIME_HORIZON_DAYS = 365.0

MIN_ECCENTRICITY = 0.1
MAX_ECCENTRICITY = 0.9
MAX_INCLINATION = 180.0
MIN_SEMI_MAJOR_AXIS = 0.5  # AU
MIN_VELOCITY = 0.1  # km/s

Vector3 = tuple[float, float, float]


class DeflectionMethodId(str, Enum):
    KINETIC = "kinetic"
    GRAVITY = "gravity"
    NUCLEAR = "nuclear"


class PhysicsParams(pydantic.BaseModel):
    model_config = ConfigDict(frozen=True)

    # Nominal capability, for display. The applied change is sized from the miss-distance gap.
    velocity_change: float = Field(..., ge=0.0, description="Nominal velocity change of the technique (km/s)")
    direction_change: float = Field(..., description="deg")
    efficiency: float = Field(..., gt=0.0, le=1.0)
    reliability: float = Field(..., ge=0.0, le=1.0)


class DeflectionMethod(pydantic.BaseModel):
    """
    A catalogued deflection technique.

    Attributes:
        id: Catalogue key
        name: Human-readable label
        description: One-line description of the technique
        success_rate: Nominal success rate [0, 1]
        cost: Mission cost (millions)
        time_required: Time to execute (hours)
        physics: Physical parameters used by the deflection model
    """
    model_config = ConfigDict(frozen=True)

    id: DeflectionMethodId
    name: str
    description: str
    success_rate: float = Field(..., ge=0.0, le=1.0)
    cost: float = Field(..., ge=0.0)
    time_required: float = Field(..., ge=0.0, description="hours")
    physics: PhysicsParams


class AsteroidOrbitState(pydantic.BaseModel):
    """
    Snapshot of an asteroid's orbit as seen by the deflection model.

    Position is geocentric in AU, so the target body sits at the origin.
    """
    model_config = ConfigDict(frozen=True)

    eccentricity: float
    inclination: float = Field(..., description="deg")
    semi_major_axis: float = Field(..., description="AU")
    velocity: float = Field(..., ge=0.0, description="km/s")
    position: Vector3 = Field(..., description="AU, geocentric")
    miss_distance: float = Field(..., ge=0.0, description="AU")
    approach_date: Optional[str] = None

    @field_validator('eccentricity', 'inclination', 'semi_major_axis', 'velocity', 'miss_distance')
    @classmethod
    def must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be finite")
        return v

    @field_validator('position')
    @classmethod
    def position_finite(cls, v: Vector3) -> Vector3:
        if not all(math.isfinite(x) for x in v):
            raise ValueError("position components must be finite")
        return v


class DeflectionResult(pydantic.BaseModel):
    """Outcome of one deflection attempt. A retry produces a new result."""
    model_config = ConfigDict(frozen=True)

    success: bool
    original_orbit: AsteroidOrbitState
    new_orbit: AsteroidOrbitState
    impact_probability_reduction: float = Field(..., ge=0.0, le=100.0, description="%")
    time_to_deflection: float = Field(..., description="hours")
    energy_required: float = Field(..., ge=0.0, description="J")
    method: str
    method_id: DeflectionMethodId
    confidence: float = Field(..., ge=0.0, le=1.0)
    success_probability: float = Field(..., ge=0.0, le=1.0)
    delta_v: Vector3 = Field(..., description="km/s")


DEFLECTION_METHODS: dict[DeflectionMethodId, DeflectionMethod] = {
    DeflectionMethodId.KINETIC: DeflectionMethod(
        id=DeflectionMethodId.KINETIC,
        name="Kinetic Impactor",
        description="High-speed collision to alter trajectory",
        success_rate=0.85,
        cost=500,
        time_required=24,
        physics=PhysicsParams(velocity_change=0.01, direction_change=0.5, efficiency=0.8, reliability=0.85),
    ),
    DeflectionMethodId.GRAVITY: DeflectionMethod(
        id=DeflectionMethodId.GRAVITY,
        name="Gravity Tractor",
        description="Use spacecraft mass to gradually pull asteroid",
        success_rate=0.70,
        cost=800,
        time_required=168,
        physics=PhysicsParams(velocity_change=0.005, direction_change=0.2, efficiency=0.6, reliability=0.7),
    ),
    DeflectionMethodId.NUCLEAR: DeflectionMethod(
        id=DeflectionMethodId.NUCLEAR,
        name="Nuclear Deflection",
        description="Nuclear explosion to alter trajectory",
        success_rate=0.95,
        cost=2000,
        time_required=48,
        physics=PhysicsParams(velocity_change=0.02, direction_change=1.0, efficiency=0.9, reliability=0.95),
    ),
}


def get_deflection_method(method: Union[DeflectionMethod, DeflectionMethodId, str]) -> DeflectionMethod:
    """
    Resolve a method given as a catalogue entry, an id or an id string.

    Raises:
        ConfigurationError: if the id is not in the catalogue.
    """
    if isinstance(method, DeflectionMethod):
        return method
    try:
        return DEFLECTION_METHODS[DeflectionMethodId(method)]
    except (ValueError, KeyError):
        known = ", ".join(m.value for m in DeflectionMethodId)
        raise ConfigurationError(f"Unknown deflection method {method!r}. Must be one of: {known}") from None


def required_velocity_change(miss_distance: float, time_to_impact_days: float, efficiency: float) -> float:
    """
    Velocity change (km/s) needed to move the miss distance to the safe
    margin over the available time, scaled up by the method's inefficiency.
    """
    gap_km = abs(miss_distance * KMPAU - SAFE_MISS_RADII * EARTH_RADIUS_KM)
    return gap_km / (time_to_impact_days * DAY) / efficiency


def _deflection_direction(position, direction_change):
    """Unit vector away from the target, rotated in the ecliptic plane."""
    away = np.asarray(position, dtype=float)
    norm = np.linalg.norm(away)
    if norm == 0.0:
        return np.zeros(3)
    away = away / norm

    angle = np.deg2rad(direction_change) * DIRECTION_ATTENUATION
    perpendicular = np.array([-away[1], away[0], 0.0])
    p_norm = np.linalg.norm(perpendicular)
    if p_norm == 0.0:
        # Position along the pole: no in-plane perpendicular to rotate toward
        return away
    direction = away * np.cos(angle) + perpendicular / p_norm * np.sin(angle)
    return direction / np.linalg.norm(direction)


def delta_v_vector(state: AsteroidOrbitState, method: DeflectionMethod, time_to_impact_days: float) -> np.ndarray:
    """Velocity change (km/s) delivered by a single attempt."""
    magnitude = required_velocity_change(state.miss_distance, time_to_impact_days, method.physics.efficiency)
    direction = _deflection_direction(state.position, method.physics.direction_change)
    return direction * magnitude * APPLIED_FRACTION


def _finite_or(value, fallback):
    return value if math.isfinite(value) else fallback


def deflected_orbit(state: AsteroidOrbitState, dv: np.ndarray, method: DeflectionMethod,
                    time_to_impact_days: float) -> AsteroidOrbitState:
    """
    Orbit after applying ``dv``.

    Every derived quantity that comes out non-finite reverts to its
    pre-deflection value, then eccentricity, inclination, semi-major axis
    and speed are clamped to their sane ranges.
    """
    dv_mag = float(np.linalg.norm(dv))
    v_new = state.velocity + dv_mag

    # Vis-viva about the target body
    r = float(np.linalg.norm(state.position)) * KMPAU
    with np.errstate(divide='ignore', invalid='ignore'):
        a_km = float(np.float64(r) / (2.0 - r * v_new**2 / MU_EARTH))
    if not (math.isfinite(a_km) and a_km > 0.0):
        a_km = state.semi_major_axis * KMPAU

    h = r * v_new
    if a_km > 0.0:
        e_new = _finite_or(math.sqrt(max(0.0, 1.0 - h * h / (MU_EARTH * a_km))), state.eccentricity)
    else:
        e_new = state.eccentricity
    i_new = _finite_or(state.inclination + method.physics.direction_change * INCLINATION_GAIN, state.inclination)

    position = np.asarray(state.position, dtype=float) + method.physics.efficiency * dv
    if not np.all(np.isfinite(position)):
        position = np.asarray(state.position, dtype=float)

    # Linear displacement accumulated over the remaining time
    miss = _finite_or(state.miss_distance + dv_mag * time_to_impact_days * DAY / KMPAU, state.miss_distance)

    return AsteroidOrbitState(
        eccentricity=min(MAX_ECCENTRICITY, max(MIN_ECCENTRICITY, e_new)),
        inclination=min(MAX_INCLINATION, max(0.0, i_new)),
        semi_major_axis=max(MIN_SEMI_MAJOR_AXIS, _finite_or(a_km / KMPAU, state.semi_major_axis)),
        velocity=max(MIN_VELOCITY, _finite_or(v_new, state.velocity)),
        position=tuple(float(x) for x in position),
        miss_distance=miss,
        approach_date=state.approach_date,
    )


def success_probability(state: AsteroidOrbitState, method: DeflectionMethod, time_to_impact_days: float) -> float:
    """reliability * time factor * size factor * efficiency, in [0, 1]."""
    time_factor = max(0.1, 1.0 - time_to_impact_days / TIME_HORIZON_DAYS)
    log_term = math.log(state.velocity + 1.0)
    size_factor = max(0.1, 1.0 / log_term) if log_term > 0.0 else 1.0
    p = method.physics.reliability * time_factor * size_factor * method.physics.efficiency
    return min(1.0, max(0.0, p))


def deflection_energy(dv: np.ndarray) -> float:
    """Kinetic energy (J) to impart ``dv`` (km/s) to the reference asteroid."""
    radius_m = ASTEROID_REFERENCE_RADIUS_KM * 1000.0
    mass = ASTEROID_REFERENCE_DENSITY * 4.0 / 3.0 * math.pi * radius_m**3
    dv_ms = float(np.linalg.norm(dv)) * 1000.0
    return 0.5 * mass * dv_ms**2


def impact_probability_proxy(miss_distance: float) -> float:
    return max(0.0, 1.0 - miss_distance / EARTH_RADIUS_AU)


def impact_probability_reduction(original: AsteroidOrbitState, deflected: AsteroidOrbitState) -> float:
    """Relative drop of the impact probability proxy, in percent [0, 100]."""
    p0 = impact_probability_proxy(original.miss_distance)
    p1 = impact_probability_proxy(deflected.miss_distance)
    if p0 == 0.0:
        return 0.0
    return min(100.0, max(0.0, (p0 - p1) / p0 * 100.0))


def compute_deflection(
    state: AsteroidOrbitState,
    method: Union[DeflectionMethod, DeflectionMethodId, str],
    time_to_impact_days: float,
    *,
    rng: Optional[np.random.Generator] = None,
    overrides: Optional[DebugOverrides] = None,
) -> DeflectionResult:
    """
    Attempt to deflect an asteroid with one of the catalogued methods.

    Parameters
    ----------
    state : AsteroidOrbitState
        The asteroid's current orbit, with its position relative to the target.
    method : DeflectionMethod, DeflectionMethodId or str
        The technique to apply.
    time_to_impact_days : float
        Days remaining before the predicted impact. Must be positive.
    rng : numpy.random.Generator, optional
        Source for the success draw. A fresh default generator if omitted.
    overrides : DebugOverrides, optional
        Forced outcome or replaced success rate / energy for tests and demos.

    Returns
    -------
    DeflectionResult

    Raises
    ------
    ConfigurationError
        For an unknown method or a non-positive time to impact.
    """
    method = get_deflection_method(method)
    if not (math.isfinite(time_to_impact_days) and time_to_impact_days > 0.0):
        raise ConfigurationError(f"time_to_impact_days must be positive, got {time_to_impact_days}")
    rng = np.random.default_rng() if rng is None else rng
    overrides = DebugOverrides() if overrides is None else overrides

    dv = delta_v_vector(state, method, time_to_impact_days)
    if not np.all(np.isfinite(dv)):
        logger.warning("Non-finite velocity change for %s, applying none", method.name)
        dv = np.zeros(3)
    new_orbit = deflected_orbit(state, dv, method, time_to_impact_days)

    p = success_probability(state, method, time_to_impact_days)
    if overrides.force_success:
        p, success = 1.0, True
    elif overrides.force_failure:
        p, success = 0.0, False
    else:
        if overrides.success_rate is not None:
            p = overrides.success_rate
        success = bool(rng.random() < p)

    energy = deflection_energy(dv) if overrides.energy_required is None else overrides.energy_required

    result = DeflectionResult(
        success=success,
        original_orbit=state,
        new_orbit=new_orbit,
        impact_probability_reduction=impact_probability_reduction(state, new_orbit),
        time_to_deflection=method.time_required,
        energy_required=energy,
        method=method.name,
        method_id=method.id,
        confidence=method.physics.reliability,
        success_probability=p,
        delta_v=tuple(float(x) for x in dv),
    )
    logger.info("%s %s (p=%.3f): miss %.6f -> %.6f AU, energy %.3e J",
                method.name, "succeeded" if success else "failed", p,
                state.miss_distance, new_orbit.miss_distance, energy)
    return result


class DeflectionStats(pydantic.BaseModel):
    model_config = ConfigDict(frozen=True)

    attempts: int
    successes: int
    success_rate: float
    total_cost: float
    mean_energy: float
    by_method: dict[str, int]


def deflection_stats(results: Iterable[DeflectionResult]) -> DeflectionStats:
    """Aggregate a history of deflection attempts."""
    results = list(results)
    attempts = len(results)
    successes = sum(1 for r in results if r.success)
    total_cost = sum(DEFLECTION_METHODS[r.method_id].cost for r in results)
    mean_energy = sum(r.energy_required for r in results) / attempts if attempts else 0.0
    by_method = Counter(r.method_id.value for r in results)
    return DeflectionStats(
        attempts=attempts,
        successes=successes,
        success_rate=successes / attempts if attempts else 0.0,
        total_cost=total_cost,
        mean_energy=mean_energy,
        by_method=dict(by_method),
    )


def state_from_orbit(elements: OrbitalElements, t: float = 0.0,
                     earth: OrbitalElements = EARTH_ELEMENTS,
                     miss_distance: Optional[float] = None) -> AsteroidOrbitState:
    """
    Build the deflection model's input from propagated orbits.

    Position is taken relative to ``earth`` and speed is the relative speed
    in km/s. When ``miss_distance`` is not given the closest approach of the
    two orbits is searched for, falling back to the current separation.
    """
    from neoaura.approach import closest_approach_scan

    asteroid = state_at(elements, t)
    target = state_at(earth, t)
    relative_r = asteroid.r - target.r
    relative_v = (asteroid.v - target.v) * KMPAU / DAY

    if miss_distance is None:
        event = closest_approach_scan(elements, earth)
        miss_distance = event.distance if event is not None else float(np.linalg.norm(relative_r))

    return AsteroidOrbitState(
        eccentricity=elements.e,
        inclination=elements.i,
        semi_major_axis=elements.a,
        velocity=float(np.linalg.norm(relative_v)),
        position=tuple(float(x) for x in relative_r),
        miss_distance=float(miss_distance),
    )
