# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements, normalize_angle_deg, validate_elements
from .state_vector import StateVector

from .constants import (
    # Constants
    KMPAU,
    DAY,
    YEAR_DAYS,
    J2000,
    EARTH_RADIUS_KM,
    EARTH_RADIUS_AU,
    EARTH_SOI_AU,
    MU_EARTH,
    AU_TO_UNITS,
    G_VISUAL,
    EARTH_MASS_VISUAL,
    SUN_MASS_VISUAL,
)

from .exceptions import (
    NeoAuraError,
    ConfigurationError,
    DegenerateOrbitWarning,
    NumericDivergenceWarning,
)

from .config import (
    SearchConfig,
    IntegratorConfig,
    DebugOverrides,
    make_search_config,
)

from .astrodynamics import (
    # Functions
    EARTH_ELEMENTS,
    solve_kepler,
    solve_kepler_vec,
    mean_anomaly_at,
    state_at,
    position_at,
    positions_at,
    earth_state_at,
    orbital_period,
    vis_viva_speed,
)

from .approach import (
    # Approach search
    ApproachKind,
    ApproachEvent,
    find_closest_approach,
    find_all_crossings,
    closest_approach_scan,
)

from .deflection import (
    # Deflection model
    DeflectionMethodId,
    PhysicsParams,
    DeflectionMethod,
    AsteroidOrbitState,
    DeflectionResult,
    DeflectionStats,
    DEFLECTION_METHODS,
    get_deflection_method,
    compute_deflection,
    deflection_stats,
    state_from_orbit,
)

from .gravity import (
    # Gravity integrator
    GravitySimState,
    gravitational_acceleration,
    step,
    initialize_impact_trajectory,
    estimate_time_to_impact,
    velocity_from_orbital_elements,
)

from .risk import (
    RiskLevel,
    RiskAssessment,
    ImpactPrediction,
    analyze_orbital_intersections,
    predict_impact,
)

from .collision_orbit import CollisionOrbit, create_intersecting_collision_orbit

from .impact import (
    ImpactInput,
    ImpactEffects,
    ImpactComparison,
    ImpactRisk,
    calculate_impact_physics,
    compare_impacts,
)

from .bodies import (
    # Body class
    Body,
    parse_orbital_data,
    load_bodies_data,
    bodies_data
)

# Alias for compatibility with existing code
AU = KMPAU

__all__ = [
    # Constants
    "AU",
    "KMPAU",
    "DAY",
    "YEAR_DAYS",
    "J2000",
    "EARTH_RADIUS_KM",
    "EARTH_RADIUS_AU",
    "EARTH_SOI_AU",
    "MU_EARTH",
    "AU_TO_UNITS",
    "G_VISUAL",
    "EARTH_MASS_VISUAL",
    "SUN_MASS_VISUAL",
    "EARTH_ELEMENTS",

    # Errors
    "NeoAuraError",
    "ConfigurationError",
    "DegenerateOrbitWarning",
    "NumericDivergenceWarning",

    # Configuration
    "SearchConfig",
    "IntegratorConfig",
    "DebugOverrides",
    "make_search_config",

    # Named tuples
    "OrbitalElements",
    "StateVector",
    "normalize_angle_deg",
    "validate_elements",

    # Propagation
    "solve_kepler",
    "solve_kepler_vec",
    "mean_anomaly_at",
    "state_at",
    "position_at",
    "positions_at",
    "earth_state_at",
    "orbital_period",
    "vis_viva_speed",

    # Approach search
    "ApproachKind",
    "ApproachEvent",
    "find_closest_approach",
    "find_all_crossings",
    "closest_approach_scan",

    # Deflection
    "DeflectionMethodId",
    "PhysicsParams",
    "DeflectionMethod",
    "AsteroidOrbitState",
    "DeflectionResult",
    "DeflectionStats",
    "DEFLECTION_METHODS",
    "get_deflection_method",
    "compute_deflection",
    "deflection_stats",
    "state_from_orbit",

    # Gravity
    "GravitySimState",
    "gravitational_acceleration",
    "step",
    "initialize_impact_trajectory",
    "estimate_time_to_impact",
    "velocity_from_orbital_elements",

    # Risk
    "RiskLevel",
    "RiskAssessment",
    "ImpactPrediction",
    "analyze_orbital_intersections",
    "predict_impact",
    "CollisionOrbit",
    "create_intersecting_collision_orbit",

    # Impact effects
    "ImpactInput",
    "ImpactEffects",
    "ImpactComparison",
    "ImpactRisk",
    "calculate_impact_physics",
    "compare_impacts",

    # Bodies
    "Body",
    "parse_orbital_data",
    "load_bodies_data",
    "bodies_data"
]
