"""
Orbital elements representation for near-Earth objects and Earth.
"""
import math
from typing import NamedTuple, Optional


def normalize_angle_deg(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


class OrbitalElements(NamedTuple):
    """
    Osculating Keplerian elements of a body orbiting the Sun.

    Angular quantities are stored in degrees as supplied by the data source
    and normalized into [0, 360) when read by the propagator. The tuple is
    immutable: a deflection produces a new OrbitalElements, never an edit.

    Attributes:
        a: Semi-major axis (AU)
        e: Eccentricity (dimensionless, 0 <= e < 1 for bound orbits)
        i: Inclination to the ecliptic (deg)
        Omega: Longitude of the ascending node (deg)
        omega: Argument of periapsis (deg)
        M0: Mean anomaly at epoch (deg)
        n: Mean motion (deg/day)
        epoch: Reference epoch (Julian date)
    """
    a: float  # semi-major axis (AU)
    e: float  # eccentricity
    i: float  # inclination (deg)
    Omega: float  # longitude of ascending node (deg)
    omega: float  # argument of periapsis (deg)
    M0: float  # mean anomaly at epoch (deg)
    n: float  # mean motion (deg/day)
    epoch: float = 0.0  # Julian date

    @property
    def period_days(self) -> float:
        return 360.0 / self.n

    def normalized(self) -> "OrbitalElements":
        """Return a copy with every angle wrapped into [0, 360)."""
        return self._replace(
            i=normalize_angle_deg(self.i),
            Omega=normalize_angle_deg(self.Omega),
            omega=normalize_angle_deg(self.omega),
            M0=normalize_angle_deg(self.M0),
        )

    def with_changes(self, **changes) -> "OrbitalElements":
        return self._replace(**changes)

    def is_bound(self) -> bool:
        return validate_elements(self) is None


def validate_elements(elements: OrbitalElements) -> Optional[str]:
    """
    Check that a set of elements describes a usable bound orbit.

    Returns:
        None if the elements can be propagated, otherwise a short reason.
    """
    for name, value in zip(elements._fields, elements):
        if not math.isfinite(value):
            return f"non-finite {name} ({value})"
    if elements.a <= 0.0:
        return f"semi-major axis must be positive (a={elements.a})"
    if elements.n <= 0.0:
        return f"mean motion must be positive (n={elements.n})"
    if not 0.0 <= elements.e < 1.0:
        return f"eccentricity outside [0, 1) (e={elements.e})"
    return None
