"""
Physical, astronomical and visualization constants for neoaura.

This module contains all constants used throughout the orbital mechanics and
impact physics engine. Distances in the orbit layer are in AU and times in
days unless a name says otherwise.
"""
import numpy as np

# Basic astronomical and time constants
KMPAU = 149597870.7  # km per AU
DAY = 86400.0  # seconds per day
YEAR_DAYS = 365.25  # days per Julian year
J2000 = 2451545.0  # Julian date of the J2000.0 epoch

# Earth
EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_AU = EARTH_RADIUS_KM / KMPAU  # ~4.26e-5 AU
EARTH_SOI_AU = 0.006  # sphere of influence (~900,000 km)
EARTH_MASS = 5.972e24  # kg
G = 6.67430e-11  # m^3 / (kg s^2)
MU_EARTH = G * EARTH_MASS / 1.0e9  # km^3/s^2

# Earth's heliocentric orbital elements (J2000.0)
EARTH_SEMI_MAJOR_AXIS = 1.00000011  # AU
EARTH_ECCENTRICITY = 0.01671022
EARTH_INCLINATION = 0.00005  # deg
EARTH_ASCENDING_NODE = 0.0  # deg
EARTH_ARG_PERIAPSIS = 102.94719  # deg
EARTH_MEAN_ANOMALY = 0.0  # deg at epoch
EARTH_MEAN_MOTION = np.rad2deg(0.01720209895)  # deg/day

# Reference impactor used for deflection energy estimates
ASTEROID_REFERENCE_RADIUS_KM = 0.5
ASTEROID_REFERENCE_DENSITY = 2600.0  # kg/m^3

# Impact physics
TNT_J_PER_MT = 4.184e15  # Joules per megaton of TNT
DEFAULT_IMPACTOR_DENSITY = 3000.0  # kg/m^3, typical stony asteroid

# Visualization scaling.
# These are NOT physical values. The scene compresses space and time so far
# that real gravity produces motion too small to see; the gravity integrator
# therefore runs on these scaled-up constants in scene units.
AU_TO_UNITS = 2.0  # scene units per AU
G_VISUAL = 10.0
EARTH_MASS_VISUAL = 500.0
SUN_MASS_VISUAL = 10.0
