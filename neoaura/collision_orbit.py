"""
Construction of a demonstration orbit timed to meet Earth.
"""
from typing import NamedTuple

import numpy as np

from neoaura.astrodynamics import EARTH_ELEMENTS, mean_anomaly_at, position_at
from neoaura.constants import EARTH_MEAN_MOTION
from neoaura.exceptions import ConfigurationError
from neoaura.orbital_elements import OrbitalElements, normalize_angle_deg

COLLISION_SEMI_MAJOR_AXIS = 1.0  # AU
COLLISION_ECCENTRICITY = 0.1


class CollisionOrbit(NamedTuple):
    """
    Attributes:
        elements: Elements of the constructed orbit (same epoch as Earth's)
        collision_time: Days past the epoch at which the encounter is timed
        collision_position: Earth's heliocentric position at that time (AU)
    """
    elements: OrbitalElements
    collision_time: float
    collision_position: np.ndarray


def create_intersecting_collision_orbit(time_to_collision: float = 30.0,
                                        earth: OrbitalElements = EARTH_ELEMENTS) -> CollisionOrbit:
    """
    Build an in-plane orbit whose mean anomaly equals Earth's at
    ``time_to_collision`` days.

    The orbit has a = 1 AU, e = 0.1 and zero inclination, node and
    argument of periapsis; its mean motion follows from Kepler's third law
    scaled to Earth's.
    """
    if not time_to_collision >= 0.0:
        raise ConfigurationError(f"time_to_collision must be non-negative, got {time_to_collision}")

    a = COLLISION_SEMI_MAJOR_AXIS
    n = EARTH_MEAN_MOTION / a**1.5  # deg/day
    m_collision = np.rad2deg(mean_anomaly_at(earth, time_to_collision))
    m0 = normalize_angle_deg(m_collision - n * time_to_collision)

    elements = OrbitalElements(
        a=a,
        e=COLLISION_ECCENTRICITY,
        i=0.0,
        Omega=0.0,
        omega=0.0,
        M0=m0,
        n=n,
        epoch=earth.epoch,
    )
    return CollisionOrbit(
        elements=elements,
        collision_time=float(time_to_collision),
        collision_position=position_at(earth, time_to_collision),
    )
