from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from neoaura.constants import EARTH_RADIUS_AU
from neoaura.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_HORIZON_DAYS = 365.0 * 5  # search up to 5 years
MAX_HORIZON_DAYS = 365.0 * 5
DEFAULT_COARSE_STEP_DAYS = 1.0
DEFAULT_FINE_STEP_DAYS = 0.1  # 2.4 hours
DEFAULT_REFINE_WINDOW_DAYS = 5.0  # +/- around the coarse minimum
DEFAULT_REFINE_BAND_AU = 0.1  # only refine when the coarse minimum is this close
DEFAULT_APPROACH_THRESHOLD_AU = 0.005  # notable close approach
DEFAULT_COLLISION_DISTANCE_AU = EARTH_RADIUS_AU  # physical collision
DEFAULT_CROSSING_THRESHOLD_AU = 0.01
DEFAULT_CROSSING_STEP_DAYS = 0.5

DEFAULT_KEPLER_TOL = 1e-14
DEFAULT_KEPLER_MAX_ITER = 100

DEFAULT_MAX_DT = 0.016  # s, ~one 60 fps frame
DEFAULT_MAX_ACCELERATION = 15.0  # scene units / s^2
DEFAULT_MAX_VELOCITY = 12.0  # scene units / s
DEFAULT_SINGULARITY_CUTOFF = 0.01  # scene units
DEFAULT_ATTRACTOR_CUTOFF = 0.1  # scene units


@dataclass(frozen=True, slots=True)
class SearchConfig:
    coarse_step: float = DEFAULT_COARSE_STEP_DAYS
    fine_step: float = DEFAULT_FINE_STEP_DAYS
    refine_window: float = DEFAULT_REFINE_WINDOW_DAYS
    refine_band: float = DEFAULT_REFINE_BAND_AU
    max_horizon: float = MAX_HORIZON_DAYS
    approach_threshold: float = DEFAULT_APPROACH_THRESHOLD_AU
    collision_distance: float = DEFAULT_COLLISION_DISTANCE_AU
    crossing_threshold: float = DEFAULT_CROSSING_THRESHOLD_AU
    crossing_step: float = DEFAULT_CROSSING_STEP_DAYS


@dataclass(frozen=True, slots=True)
class IntegratorConfig:
    max_dt: float = DEFAULT_MAX_DT
    max_acceleration: float = DEFAULT_MAX_ACCELERATION
    max_velocity: float = DEFAULT_MAX_VELOCITY
    singularity_cutoff: float = DEFAULT_SINGULARITY_CUTOFF
    attractor_cutoff: float = DEFAULT_ATTRACTOR_CUTOFF


@dataclass(frozen=True, slots=True)
class DebugOverrides:
    """
    Explicit test/debug seam for the deflection model.

    Passed to ``compute_deflection`` by the caller that wants it; there is no
    process-wide switch, so one simulation's overrides never leak into another.
    """
    force_success: bool = False
    force_failure: bool = False
    success_rate: Optional[float] = None  # 0-1, replaces the computed probability
    energy_required: Optional[float] = None  # J, replaces the computed energy

    def __post_init__(self):
        if self.force_success and self.force_failure:
            raise ConfigurationError("force_success and force_failure are mutually exclusive")
        if self.success_rate is not None:
            object.__setattr__(self, "success_rate", min(1.0, max(0.0, float(self.success_rate))))


DEFAULT_SEARCH_CONFIG = SearchConfig()
DEFAULT_INTEGRATOR_CONFIG = IntegratorConfig()


def make_search_config(
    *,
    coarse_step: float = DEFAULT_COARSE_STEP_DAYS,
    fine_step: float = DEFAULT_FINE_STEP_DAYS,
    refine_window: float = DEFAULT_REFINE_WINDOW_DAYS,
    refine_band: float = DEFAULT_REFINE_BAND_AU,
    max_horizon: float = MAX_HORIZON_DAYS,
    approach_threshold: float = DEFAULT_APPROACH_THRESHOLD_AU,
    collision_distance: float = DEFAULT_COLLISION_DISTANCE_AU,
    crossing_threshold: float = DEFAULT_CROSSING_THRESHOLD_AU,
    crossing_step: float = DEFAULT_CROSSING_STEP_DAYS,
) -> SearchConfig:
    """Validate caller-supplied search settings into a SearchConfig."""
    for name, value in (("coarse_step", coarse_step), ("fine_step", fine_step),
                        ("refine_window", refine_window), ("max_horizon", max_horizon),
                        ("approach_threshold", approach_threshold),
                        ("collision_distance", collision_distance),
                        ("crossing_threshold", crossing_threshold),
                        ("crossing_step", crossing_step)):
        if not value > 0.0:
            raise ConfigurationError(f"{name} must be positive, got {value}")
    if fine_step > coarse_step:
        raise ConfigurationError(
            f"fine_step ({fine_step}) must not exceed coarse_step ({coarse_step})")
    return SearchConfig(
        coarse_step=float(coarse_step),
        fine_step=float(fine_step),
        refine_window=float(refine_window),
        refine_band=max(0.0, float(refine_band)),
        max_horizon=float(max_horizon),
        approach_threshold=float(approach_threshold),
        collision_distance=float(collision_distance),
        crossing_threshold=float(crossing_threshold),
        crossing_step=float(crossing_step),
    )
