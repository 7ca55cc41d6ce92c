"""
Surface effects of an asteroid impact from empirical scaling laws.

Energies are in joules and yields in megatons of TNT. The crater, airblast
and thermal relations are order-of-magnitude fits in the yield; treat the
outputs as estimates for comparing scenarios, not as hazard maps.
"""
import math
from enum import Enum
from typing import NamedTuple

import pydantic
from pydantic import ConfigDict, Field

from neoaura.constants import DEFAULT_IMPACTOR_DENSITY, TNT_J_PER_MT

DEFAULT_IMPACT_ANGLE = 45.0  # deg from horizontal
DEFAULT_OCEAN_DEPTH = 4000.0  # m
MAX_TSUNAMI_HEIGHT = 300.0  # m


class ImpactRisk(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CATASTROPHIC = "catastrophic"


class ImpactInput(pydantic.BaseModel):
    model_config = ConfigDict(frozen=True)

    diameter: float = Field(..., ge=0.0, description="m")
    velocity: float = Field(..., ge=0.0, description="km/s")
    density: float = Field(default=DEFAULT_IMPACTOR_DENSITY, gt=0.0, description="kg/m^3")
    angle: float = Field(default=DEFAULT_IMPACT_ANGLE, gt=0.0, le=90.0, description="deg from horizontal")


class ImpactEffects(NamedTuple):
    mass: float  # kg
    kinetic_energy: float  # J
    tnt_equivalent: float  # Mt
    crater_diameter: float  # m
    crater_depth: float  # m
    seismic_magnitude: float  # Richter
    airblast_radius: float  # km, severe damage
    thermal_radius: float  # km, third-degree burns
    tsunami_wave_height: float  # m, ocean impacts only
    ejecta_radius: float  # km
    description: str
    risk_level: ImpactRisk


class ImpactComparison(NamedTuple):
    energy_reduction: float  # %
    crater_reduction: float  # %
    casualty_reduction: float  # %, from the airblast area


def impactor_mass(diameter: float, density: float = DEFAULT_IMPACTOR_DENSITY) -> float:
    """Mass (kg) of a sphere of the given diameter (m) and density."""
    return 4.0 / 3.0 * math.pi * (diameter / 2.0)**3 * density


def kinetic_energy(mass: float, velocity: float) -> float:
    """Kinetic energy (J) for a velocity in km/s."""
    return 0.5 * mass * (velocity * 1000.0)**2


def energy_to_megatons(energy: float) -> float:
    return energy / TNT_J_PER_MT


def crater_size(energy: float, angle: float = DEFAULT_IMPACT_ANGLE) -> tuple[float, float]:
    """
    Crater diameter and depth (m).

    D(km) = 0.4 E^0.33 with E in megatons, depth D/5, both reduced by
    sin(angle)^(1/3) for oblique impacts.
    """
    diameter = 0.4 * energy_to_megatons(energy)**0.33 * 1000.0
    depth = diameter / 5.0
    angle_factor = math.sin(math.radians(angle))**(1.0 / 3.0)
    return diameter * angle_factor, depth * angle_factor


def seismic_magnitude(energy: float) -> float:
    if energy <= 0.0:
        return 0.0
    return max(0.0, 0.67 * math.log10(energy) - 5.87)


def airblast_radius(megatons: float) -> float:
    return 2.2 * megatons**0.33


def thermal_radius(megatons: float) -> float:
    return 1.5 * megatons**0.41


def tsunami_height(energy: float, is_ocean: bool, water_depth: float = DEFAULT_OCEAN_DEPTH) -> float:
    if not is_ocean:
        return 0.0
    height = 0.1 * math.sqrt(energy_to_megatons(energy)) * math.sqrt(water_depth / 1000.0)
    return min(height, MAX_TSUNAMI_HEIGHT)


def ejecta_radius(crater_diameter: float) -> float:
    """Ejecta blanket radius (km), 2.5 crater radii."""
    return crater_diameter / 2.0 * 2.5 / 1000.0


def impact_description(megatons: float) -> str:
    if megatons < 0.001:
        return "Airburst in atmosphere, minimal surface damage"
    elif megatons < 0.01:
        return "Local damage, similar to a small bomb"
    elif megatons < 1:
        return "Regional devastation, city-scale destruction"
    elif megatons < 100:
        return "Major regional catastrophe, country-scale effects"
    elif megatons < 10000:
        return "Continental devastation, global climate effects"
    return "Mass extinction event, global catastrophe"


def impact_risk(megatons: float) -> ImpactRisk:
    if megatons < 0.01:
        return ImpactRisk.LOW
    if megatons < 1:
        return ImpactRisk.MODERATE
    if megatons < 100:
        return ImpactRisk.HIGH
    return ImpactRisk.CATASTROPHIC


def calculate_impact_physics(impact: ImpactInput, is_ocean: bool = False) -> ImpactEffects:
    """
    All impact effects for one scenario.

    Examples:
        >>> effects = calculate_impact_physics(ImpactInput(diameter=50.0, velocity=17.0))
        >>> effects.risk_level
        <ImpactRisk.HIGH: 'high'>
    """
    mass = impactor_mass(impact.diameter, impact.density)
    energy = kinetic_energy(mass, impact.velocity)
    megatons = energy_to_megatons(energy)
    crater_diameter, crater_depth = crater_size(energy, impact.angle)

    return ImpactEffects(
        mass=mass,
        kinetic_energy=energy,
        tnt_equivalent=megatons,
        crater_diameter=crater_diameter,
        crater_depth=crater_depth,
        seismic_magnitude=seismic_magnitude(energy),
        airblast_radius=airblast_radius(megatons),
        thermal_radius=thermal_radius(megatons),
        tsunami_wave_height=tsunami_height(energy, is_ocean),
        ejecta_radius=ejecta_radius(crater_diameter),
        description=impact_description(megatons),
        risk_level=impact_risk(megatons),
    )


def _reduction(before, after):
    if before <= 0.0:
        return 0.0
    return max(0.0, (before - after) / before * 100.0)


def compare_impacts(before: ImpactEffects, after: ImpactEffects) -> ImpactComparison:
    """Percentage reductions going from ``before`` to ``after``, floored at zero."""
    return ImpactComparison(
        energy_reduction=_reduction(before.tnt_equivalent, after.tnt_equivalent),
        crater_reduction=_reduction(before.crater_diameter, after.crater_diameter),
        casualty_reduction=_reduction(math.pi * before.airblast_radius**2,
                                      math.pi * after.airblast_radius**2),
    )
