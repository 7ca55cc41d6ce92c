"""
Cartesian state representation for orbit snapshots and free bodies.
"""
from typing import NamedTuple, Optional
import numpy as np


class StateVector(NamedTuple):
    """
    Cartesian state of an asteroid or planet.

    The unit is fixed by whoever produced the state and must stay the same
    along a call chain: orbit-derived snapshots are heliocentric ecliptic
    AU and AU/day, gravity-integrated bodies are scene units and
    scene units per second.

    Attributes:
        r: Position vector [x, y, z]
        v: Velocity vector [vx, vy, vz]
        a: Optional acceleration vector [ax, ay, az]
        mass: Optional mass (kg)

    Examples:
        >>> import numpy as np
        >>> state = StateVector(
        ...     r=np.array([1.0, 0.0, 0.0]),        # 1 AU from the Sun
        ...     v=np.array([0.0, 0.0172, 0.0])      # ~30 km/s in AU/day
        ... )
        >>> state.speed
        0.0172
    """
    r: np.ndarray  # position [x, y, z]
    v: np.ndarray  # velocity [vx, vy, vz]
    a: Optional[np.ndarray] = None  # acceleration [ax, ay, az]
    mass: Optional[float] = None  # kg

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.r))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.v))
