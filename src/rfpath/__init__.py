"""
rfpath - RF point-to-point path analysis

Great-circle geometry, terrain line of sight with Earth curvature and
refraction, Fresnel zone clearance, knife-edge diffraction, link budgets
and Maidenhead grid locators.
"""

__version__ = "0.1.0"

from .common.exceptions import (
    RFPathError,
    InvalidInputError,
    DegenerateGeometryError,
    ProviderFailure,
)
from .common.geodesy import GeoPoint

__all__ = [
    'RFPathError',
    'InvalidInputError',
    'DegenerateGeometryError',
    'ProviderFailure',
    'GeoPoint',
]
