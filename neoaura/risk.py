"""
Collision-risk summaries built on the approach search.
"""
import logging
import math
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from neoaura.approach import ApproachEvent, closest_approach_scan, find_all_crossings
from neoaura.astrodynamics import EARTH_ELEMENTS, positions_at
from neoaura.config import DEFAULT_FINE_STEP_DAYS, DEFAULT_HORIZON_DAYS
from neoaura.constants import EARTH_RADIUS_AU, EARTH_SOI_AU, KMPAU
from neoaura.exceptions import ConfigurationError
from neoaura.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)

MILLION_KM_PER_AU = KMPAU / 1e6


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# (upper distance bound in AU, level, collision probability, recommendations)
RISK_BANDS = (
    (1e-4, RiskLevel.CRITICAL, 1.0,
     ("IMMEDIATE DEFLECTION REQUIRED", "Evacuation of impact zone recommended")),
    (1e-3, RiskLevel.HIGH, 0.8,
     ("High probability of impact", "Deflection mission should be planned")),
    (1e-2, RiskLevel.MEDIUM, 0.3,
     ("Monitor closely for orbital changes", "Prepare deflection options")),
    (math.inf, RiskLevel.LOW, 0.05,
     ("Continue monitoring", "No immediate action required")),
)


class RiskAssessment(NamedTuple):
    intersections: list[ApproachEvent]
    risk_level: RiskLevel
    closest_approach: Optional[ApproachEvent]
    collision_probability: float
    recommendations: list[str]


class ImpactPrediction(NamedTuple):
    """
    Closest sampled approach of an asteroid to Earth and what it implies.

    Attributes:
        time: Sample time (days past the epoch)
        distance: Separation at that time (AU)
        earth_position: Earth's heliocentric position (AU)
        asteroid_position: The asteroid's heliocentric position (AU)
        impact_probability: 0 outside Earth's sphere of influence, else min(1, R/d)
        impact_location: (latitude, longitude) in degrees when d <= R, else None
    """
    time: float
    distance: float
    earth_position: np.ndarray
    asteroid_position: np.ndarray
    impact_probability: float
    impact_location: Optional[tuple[float, float]]


def classify_distance(distance: float):
    """Risk band for a closest-approach distance (AU)."""
    for bound, level, probability, recommendations in RISK_BANDS:
        if distance < bound:
            return level, probability, list(recommendations)
    # NaN distance compares false everywhere
    return RiskLevel.LOW, RISK_BANDS[-1][2], list(RISK_BANDS[-1][3])


def analyze_orbital_intersections(asteroid: OrbitalElements,
                                  earth: OrbitalElements = EARTH_ELEMENTS,
                                  horizon_days: float = DEFAULT_HORIZON_DAYS) -> RiskAssessment:
    """
    Assess the collision risk of an asteroid over a horizon.

    The risk band comes from the closest approach of a fine scan; the
    threshold crossings of the approach search are listed alongside and
    summarized in the recommendations.
    """
    intersections = find_all_crossings(asteroid, earth, horizon_days)
    closest = closest_approach_scan(asteroid, earth, horizon_days, step=DEFAULT_FINE_STEP_DAYS)

    distance = closest.distance if closest is not None else math.inf
    level, probability, recommendations = classify_distance(distance)

    if intersections:
        nearest = min(intersections, key=lambda event: event.distance)
        recommendations.append(f"Found {len(intersections)} potential intersection(s)")
        recommendations.append(f"Closest intersection in {nearest.time:.1f} days")
        recommendations.append(f"Distance: {nearest.distance * MILLION_KM_PER_AU:.2f} million km")

    logger.debug("Risk %s, closest approach %.6f AU, %d crossing(s)",
                 level.value, distance, len(intersections))
    return RiskAssessment(
        intersections=intersections,
        risk_level=level,
        closest_approach=closest,
        collision_probability=probability,
        recommendations=recommendations,
    )


def cartesian_to_lat_lon(x: float, y: float, z: float) -> tuple[float, float]:
    """Latitude and longitude (deg) of a body-centred position."""
    r = math.sqrt(x * x + y * y + z * z)
    if r == 0.0:
        return 0.0, 0.0
    return math.degrees(math.asin(z / r)), math.degrees(math.atan2(y, x))


def predict_impact(asteroid: OrbitalElements, start: float = 0.0, end: float = 365.0,
                   step: float = 1.0, earth: OrbitalElements = EARTH_ELEMENTS) -> ImpactPrediction:
    """
    Scan [start, end] for the closest approach to Earth and estimate the
    impact probability and, for a hit, the impact latitude and longitude.
    """
    if not step > 0.0:
        raise ConfigurationError(f"step must be positive, got {step}")
    if end < start:
        raise ConfigurationError(f"end ({end}) must not precede start ({start})")

    count = int(np.floor((end - start) / step + 1e-9)) + 1
    times = start + step * np.arange(count)
    r_earth = positions_at(earth, times)
    r_ast = positions_at(asteroid, times)
    d = np.linalg.norm(r_ast - r_earth, axis=1)
    idx = int(np.argmin(d))
    distance = float(d[idx])

    probability = 0.0
    location = None
    if distance < EARTH_SOI_AU:
        probability = 1.0 if distance == 0.0 else min(1.0, EARTH_RADIUS_AU / distance)
        if distance <= EARTH_RADIUS_AU:
            location = cartesian_to_lat_lon(*(r_ast[idx] - r_earth[idx]))
            probability = 1.0

    return ImpactPrediction(
        time=float(times[idx]),
        distance=distance,
        earth_position=r_earth[idx].copy(),
        asteroid_position=r_ast[idx].copy(),
        impact_probability=probability,
        impact_location=location,
    )
