"""
Close-approach search between two independently propagated orbits.

Both bodies are sampled on a common time grid (days past each body's epoch)
through the batch propagator, so a whole pass costs two jitted calls rather
than one Kepler solve per sample per body.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np
from scipy.optimize import minimize_scalar

from neoaura.astrodynamics import position_at, positions_at
from neoaura.config import (
    DEFAULT_FINE_STEP_DAYS,
    DEFAULT_HORIZON_DAYS,
    DEFAULT_SEARCH_CONFIG,
    SearchConfig,
)
from neoaura.exceptions import ConfigurationError
from neoaura.orbital_elements import OrbitalElements, validate_elements

logger = logging.getLogger(__name__)


class ApproachKind(Enum):
    CLOSEST_APPROACH = "closest_approach"
    THRESHOLD_CROSSING = "threshold_crossing"
    COLLISION = "collision"


class ApproachEvent(NamedTuple):
    """
    A sampled encounter between two bodies.

    Attributes:
        time: Days past the epoch at which the sample was taken
        position_a: Heliocentric position of the first body (AU)
        position_b: Heliocentric position of the second body (AU)
        distance: Separation |position_a - position_b| (AU)
        kind: What the sample represents
    """
    time: float
    position_a: np.ndarray
    position_b: np.ndarray
    distance: float
    kind: ApproachKind


def _check_horizon(horizon_days, config):
    if not horizon_days > 0.0:
        raise ConfigurationError(f"horizon_days must be positive, got {horizon_days}")
    if horizon_days > config.max_horizon:
        raise ConfigurationError(
            f"horizon_days ({horizon_days}) exceeds the configured maximum ({config.max_horizon})")


def _degenerate(body_a, body_b):
    for label, body in (("first", body_a), ("second", body_b)):
        if not isinstance(body, OrbitalElements):
            raise ConfigurationError(
                f"{label} body must be OrbitalElements, got {type(body).__name__}")
        reason = validate_elements(body)
        if reason is not None:
            logger.warning("Approach search skipped, %s body is degenerate: %s", label, reason)
            return True
    return False


def _grid(start, stop, step):
    """Sample times start, start + step, ... up to and including stop."""
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count)


def _separations(body_a, body_b, times):
    r_a = positions_at(body_a, times)
    r_b = positions_at(body_b, times)
    return r_a, r_b, np.linalg.norm(r_a - r_b, axis=1)


def _event(times, r_a, r_b, d, idx, kind):
    return ApproachEvent(
        time=float(times[idx]),
        position_a=r_a[idx].copy(),
        position_b=r_b[idx].copy(),
        distance=float(d[idx]),
        kind=kind,
    )


def find_closest_approach(
    body_a: OrbitalElements,
    body_b: OrbitalElements,
    horizon_days: float = DEFAULT_HORIZON_DAYS,
    threshold: Optional[float] = None,
    collision_distance: Optional[float] = None,
    config: Optional[SearchConfig] = None,
) -> Optional[ApproachEvent]:
    """
    Find the first notable close approach of two bodies within a horizon.

    The search runs in two passes. The coarse pass steps over
    [0, horizon_days] and returns the first sample closer than
    ``threshold``, remembering the overall minimum as it goes. If nothing
    crossed the threshold but the minimum lies inside the refine band, a
    fine pass re-scans a window around that minimum and returns the first
    sample closer than ``collision_distance`` (a COLLISION) or ``threshold``
    (a THRESHOLD_CROSSING).

    Parameters
    ----------
    body_a, body_b : OrbitalElements
        Elements of the two bodies. Each is propagated from its own epoch.
        Cartesian state snapshots are rejected with ConfigurationError.
    horizon_days : float
        Length of the search in days. Must not exceed ``config.max_horizon``.
    threshold : float, optional
        Notable close-approach distance (AU), ``config.approach_threshold``
        by default.
    collision_distance : float, optional
        Physical collision distance (AU), ``config.collision_distance``
        (Earth's radius) by default.
    config : SearchConfig, optional
        Step sizes, refine window and band, default thresholds.

    Returns
    -------
    ApproachEvent or None
        None when the search is exhausted without a qualifying sample, or
        when either orbit is degenerate.

    Raises
    ------
    ConfigurationError
        If the horizon is not positive or exceeds the configured maximum.
    """
    config = DEFAULT_SEARCH_CONFIG if config is None else config
    threshold = config.approach_threshold if threshold is None else threshold
    collision_distance = config.collision_distance if collision_distance is None else collision_distance
    _check_horizon(horizon_days, config)
    if _degenerate(body_a, body_b):
        return None

    # Pass 1: coarse scan
    times = _grid(0.0, horizon_days, config.coarse_step)
    r_a, r_b, d = _separations(body_a, body_b, times)

    below = np.flatnonzero(d < threshold)
    if below.size:
        idx = int(below[0])
        kind = ApproachKind.COLLISION if d[idx] < collision_distance else ApproachKind.THRESHOLD_CROSSING
        logger.debug("Coarse pass hit at t=%.2f d (%.6f AU)", times[idx], d[idx])
        return _event(times, r_a, r_b, d, idx, kind)

    i_min = int(np.argmin(d))
    t_min, d_min = float(times[i_min]), float(d[i_min])
    logger.debug("Coarse pass minimum %.6f AU at t=%.2f d", d_min, t_min)
    if not d_min < config.refine_band:
        return None

    # Pass 2: fine scan around the coarse minimum
    start = max(0.0, t_min - config.refine_window)
    stop = min(horizon_days, t_min + config.refine_window)
    times = _grid(start, stop, config.fine_step)
    r_a, r_b, d = _separations(body_a, body_b, times)

    for idx in range(times.size):
        if d[idx] < collision_distance:
            return _event(times, r_a, r_b, d, idx, ApproachKind.COLLISION)
        if d[idx] < threshold:
            return _event(times, r_a, r_b, d, idx, ApproachKind.THRESHOLD_CROSSING)

    logger.debug("Fine pass exhausted, closest sample %.6f AU", float(d.min()))
    return None


def find_all_crossings(
    body_a: OrbitalElements,
    body_b: OrbitalElements,
    horizon_days: float = DEFAULT_HORIZON_DAYS,
    threshold: Optional[float] = None,
    step: Optional[float] = None,
    config: Optional[SearchConfig] = None,
) -> list[ApproachEvent]:
    """
    Every sample of a fixed-step scan at which the bodies are closer than
    ``threshold``, in time order. An empty list means nothing was found.

    ``threshold`` and ``step`` default to ``config.crossing_threshold`` and
    ``config.crossing_step``. Both bodies are given as OrbitalElements.
    """
    config = DEFAULT_SEARCH_CONFIG if config is None else config
    threshold = config.crossing_threshold if threshold is None else threshold
    step = config.crossing_step if step is None else step
    _check_horizon(horizon_days, config)
    if not step > 0.0:
        raise ConfigurationError(f"step must be positive, got {step}")
    if _degenerate(body_a, body_b):
        return []

    times = _grid(0.0, horizon_days, step)
    r_a, r_b, d = _separations(body_a, body_b, times)
    crossings = [
        _event(times, r_a, r_b, d, int(idx), ApproachKind.THRESHOLD_CROSSING)
        for idx in np.flatnonzero(d < threshold)
    ]
    logger.debug("Found %d crossing sample(s) below %.4f AU", len(crossings), threshold)
    return crossings


def closest_approach_scan(
    body_a: OrbitalElements,
    body_b: OrbitalElements,
    horizon_days: float = DEFAULT_HORIZON_DAYS,
    step: float = DEFAULT_FINE_STEP_DAYS,
    refine: bool = True,
    config: Optional[SearchConfig] = None,
) -> Optional[ApproachEvent]:
    """
    The minimum separation of the two bodies over the horizon, whatever it is.

    The minimum sample of a fixed-step scan is polished with a bounded
    scalar minimization between its neighbouring samples when ``refine``
    is set.

    Returns
    -------
    ApproachEvent or None
        A CLOSEST_APPROACH event, or None if either orbit is degenerate.
    """
    config = DEFAULT_SEARCH_CONFIG if config is None else config
    _check_horizon(horizon_days, config)
    if not step > 0.0:
        raise ConfigurationError(f"step must be positive, got {step}")
    if _degenerate(body_a, body_b):
        return None

    times = _grid(0.0, horizon_days, step)
    r_a, r_b, d = _separations(body_a, body_b, times)
    idx = int(np.argmin(d))
    event = _event(times, r_a, r_b, d, idx, ApproachKind.CLOSEST_APPROACH)
    if not refine or times.size < 2:
        return event

    lo = float(times[max(idx - 1, 0)])
    hi = float(times[min(idx + 1, times.size - 1)])

    def separation(t):
        return float(np.linalg.norm(position_at(body_a, t) - position_at(body_b, t)))

    res = minimize_scalar(separation, bounds=(lo, hi), method="bounded",
                          options={"xatol": 1e-6})
    if res.success and res.fun < event.distance:
        t = float(res.x)
        return ApproachEvent(
            time=t,
            position_a=position_at(body_a, t),
            position_b=position_at(body_b, t),
            distance=float(res.fun),
            kind=ApproachKind.CLOSEST_APPROACH,
        )
    return event
