"""
Physical Constants and Thresholds for rfpath

This module contains the fundamental constants and documented thresholds
used by the geodesy, line-of-sight, Fresnel, diffraction and link budget
calculations.
"""

import numpy as np

# Earth parameters
EARTH_RADIUS_KM = 6371.0  # Mean Earth radius in kilometers
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0  # Earth radius in meters

# Speed of light expressed so that wavelength [m] = C / f [MHz]
SPEED_OF_LIGHT_M_MHZ = 299.792458

# Atmospheric refraction (effective Earth radius multiplier)
STANDARD_K_FACTOR = 4.0 / 3.0  # Standard atmosphere
MIN_K_FACTOR = 1.0  # No refraction (true Earth radius)
MAX_K_FACTOR = 5.0  # Practical ducting limit

# Path sampling
DEFAULT_PATH_SAMPLES = 50  # Intervals between endpoints (51 points)

# Line-of-sight obstruction
# Clearance must fall below -tolerance before a sample counts as blocking
LOS_CLEARANCE_TOLERANCE_M = 0.01

# Fresnel zone
FRESNEL_CLEARANCE_THRESHOLD = 60.0  # Percent of first zone radius

# Knife-edge diffraction (ITU-R P.526)
DIFFRACTION_CANDIDATE_MARGIN_M = 5.0  # Terrain within 5 m below LOS is examined
DIFFRACTION_V_CUTOFF = -0.78  # No diffraction loss at or below this v
SECONDARY_OBSTACLE_DECAY = 0.5  # Weight ratio for each further obstacle

# Antenna gain reference
DIPOLE_GAIN_DBI = 2.15  # Half-wave dipole gain over isotropic

# FSPL constant for distance in km and frequency in MHz
FSPL_CONSTANT_KM_MHZ = 32.45

# Link quality bands, lower bound inclusive (fade margin in dB)
LINK_QUALITY_THRESHOLDS = {
    'excellent': 20.0,
    'good': 10.0,
    'marginal': 0.0,
    'poor': -6.0,
}

# Conversion factors
KM_TO_M = 1000.0
DEG_TO_RAD = np.pi / 180.0  # Degrees to radians
RAD_TO_DEG = 180.0 / np.pi  # Radians to degrees
