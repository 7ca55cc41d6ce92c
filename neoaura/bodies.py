import csv
from pathlib import Path
from typing import Any, Mapping, Optional

import pydantic
from pydantic import ConfigDict, Field, field_validator

from neoaura.orbital_elements import OrbitalElements, normalize_angle_deg


class OrbitalDataRecord(pydantic.BaseModel):
    """
    Orbital fields of a near-Earth object record as delivered by the data
    source (numbers encoded as strings, e.g. ``".2090688"``).

    Validating a record parses every field to a float; angles are wrapped
    into [0, 360). Extra keys in the record are ignored.
    """
    model_config = ConfigDict(extra='ignore', frozen=True)

    semi_major_axis: float = Field(..., gt=0.0, description="AU")
    eccentricity: float = Field(..., ge=0.0)
    inclination: float = Field(..., description="deg")
    ascending_node_longitude: float = Field(..., description="deg")
    perihelion_argument: float = Field(..., description="deg")
    mean_anomaly: float = Field(..., description="deg at epoch")
    mean_motion: float = Field(..., gt=0.0, description="deg/day")
    epoch_osculation: float = Field(default=0.0, description="Julian date")

    @field_validator('inclination', 'ascending_node_longitude', 'perihelion_argument', 'mean_anomaly')
    @classmethod
    def wrap_angle(cls, v: float) -> float:
        return normalize_angle_deg(v)

    def to_elements(self) -> OrbitalElements:
        return OrbitalElements(
            a=self.semi_major_axis,
            e=self.eccentricity,
            i=self.inclination,
            Omega=self.ascending_node_longitude,
            omega=self.perihelion_argument,
            M0=self.mean_anomaly,
            n=self.mean_motion,
            epoch=self.epoch_osculation,
        )


def parse_orbital_data(orbital_data: Mapping[str, Any]) -> OrbitalElements:
    """
    Convert a string-valued orbital data record into OrbitalElements.

    Raises:
        pydantic.ValidationError: if a field is missing or not numeric.
    """
    return OrbitalDataRecord.model_validate(orbital_data).to_elements()


class Body(pydantic.BaseModel):
    """
    Represents a tracked near-Earth object.

    Attributes:
        name: Designation of the body (e.g., "(2015 AC246)")
        id: Unique identifier for the body
        diameter: Estimated maximum diameter (m)
        relative_velocity: Relative velocity at the listed close approach (km/s)
        miss_distance: Listed close-approach miss distance (AU)
        hazardous: Potentially hazardous asteroid flag
        elements: Orbital elements of the body
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)  # Allow OrbitalElements (NamedTuple)

    name: str
    id: int
    diameter: float = 0.0
    relative_velocity: float = 0.0
    miss_distance: Optional[float] = None
    hazardous: bool = False
    elements: OrbitalElements

    def get_state(self, t: float, time_units: str = 'day', distance_units: str = 'AU'):
        """
        Get the heliocentric Cartesian state of the body at a given time.

        Args:
            t: Time past the elements' epoch in days
            time_units: Time unit of the returned velocity. Options:
                - 'day' or 'days': distance_units per day (default)
                - 's' or 'seconds': distance_units per second
            distance_units: Units for the output position and velocity. Options:
                - 'AU': position in AU (default)
                - 'km': position in km

        Returns:
            StateVector with position and velocity in the specified units

        Examples:
            >>> state = body.get_state(0.0)  # AU, AU/day
            >>> state = body.get_state(10.0, time_units='s', distance_units='km')  # km, km/s
        """
        from neoaura.astrodynamics import state_at
        from neoaura.constants import DAY, KMPAU

        if time_units in ('day', 'days'):
            time_factor = 1.0
        elif time_units in ('s', 'seconds'):
            time_factor = 1.0 / DAY
        else:
            raise ValueError(f"Invalid time_units '{time_units}'. Must be one of: 'day', 's'")

        if distance_units == 'AU':
            distance_factor = 1.0
        elif distance_units == 'km':
            distance_factor = KMPAU
        else:
            raise ValueError(f"Invalid distance_units '{distance_units}'. Must be one of: 'AU', 'km'")

        state = state_at(self.elements, t)
        return state._replace(r=state.r * distance_factor,
                              v=state.v * distance_factor * time_factor)

    def get_period(self, units: str = 'day') -> float:
        """
        Orbital period of the body from its mean motion (T = 360 / n).

        Args:
            units: 'day' or 'days' (default), 'year' or 'years'
        """
        from neoaura.constants import YEAR_DAYS

        period_days = self.elements.period_days
        units_lower = units.lower()
        if units_lower in ('day', 'days'):
            return period_days
        elif units_lower in ('year', 'years'):
            return period_days / YEAR_DAYS
        else:
            raise ValueError(f"Invalid units '{units}'. Must be one of: 'day', 'year'")

    def __repr__(self) -> str:
        return f"Body(id={self.id}, name='{self.name}')"

    def __str__(self) -> str:
        return f"{self.name} (ID: {self.id})"


def load_bodies_data(filepath: Optional[Path] = None) -> dict[int, Body]:
    """
    Load the tracked near-Earth objects from CSV.

    Args:
        filepath: CSV file to read. Defaults to the catalogue shipped in neoaura/data.

    Returns:
        Dictionary mapping body ID to Body object
    """
    if filepath is None:
        filepath = Path(__file__).parent / 'data' / 'neos.csv'

    bodies = {}
    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            body_id = int(row['id'])
            miss = row.get('miss_distance_au') or None
            body = Body(
                name=row['name'],
                id=body_id,
                diameter=float(row.get('estimated_diameter_max_m') or 0.0),
                relative_velocity=float(row.get('relative_velocity_kms') or 0.0),
                miss_distance=float(miss) if miss is not None else None,
                hazardous=row.get('is_potentially_hazardous_asteroid', '').strip().lower() == 'true',
                elements=parse_orbital_data(row),
            )
            bodies[body_id] = body

    return bodies


bodies_data = load_bodies_data()
