"""
rfpath Propagation Package

Terrestrial point-to-point propagation for VHF/UHF links.

Core Components:
- line_of_sight: Earth-curvature corrected sightline and obstruction check
- fresnel: First Fresnel zone envelope and clearance
- diffraction: ITU-R P.526 knife-edge diffraction loss
- link_budget: FSPL, ERP, received power, margins and link quality
- atmosphere: K-factor presets for refraction
- path_analysis: Pipeline from two stations to a full path result
"""

# Refraction
from .atmosphere import (
    Climate,
    Condition,
    recommended_k_factor,
    k_factor_description,
    effective_earth_radius_km,
    validate_k_factor,
)

# Line of sight
from .line_of_sight import (
    LosProfile,
    compute_line_of_sight,
)

# Fresnel zone
from .fresnel import (
    FresnelZone,
    wavelength,
    fresnel_radius,
    compute_fresnel_zone,
    clearance_status,
)

# Knife-edge diffraction
from .diffraction import (
    Obstacle,
    DiffractionResult,
    fresnel_parameter,
    diffraction_loss,
    detect_obstacles,
    find_main_obstacle,
    multiple_obstacle_loss,
    clearance_angle,
    analyze_diffraction,
)

# Link budget
from .link_budget import (
    LinkBudgetResult,
    LinkDirection,
    LinkAssessment,
    LinkQuality,
    Modulation,
    ModulationProfile,
    StationConfig,
    watts_to_dbm,
    dbm_to_watts,
    dbd_to_dbi,
    dbi_to_dbd,
    free_space_path_loss,
    effective_radiated_power,
    received_power,
    link_budget,
    link_margin,
    fade_margin,
    classify_link_quality,
    assess_link,
)

# Pipeline
from .path_analysis import (
    Station,
    BasicPathResult,
    RfAnalyzedPathResult,
    SegmentDistance,
    PathAnalyzer,
    analyze_profile,
    evaluate_link,
    segment_distances,
)

__all__ = [
    # Refraction
    'Climate',
    'Condition',
    'recommended_k_factor',
    'k_factor_description',
    'effective_earth_radius_km',
    'validate_k_factor',
    # Line of sight
    'LosProfile',
    'compute_line_of_sight',
    # Fresnel zone
    'FresnelZone',
    'wavelength',
    'fresnel_radius',
    'compute_fresnel_zone',
    'clearance_status',
    # Diffraction
    'Obstacle',
    'DiffractionResult',
    'fresnel_parameter',
    'diffraction_loss',
    'detect_obstacles',
    'find_main_obstacle',
    'multiple_obstacle_loss',
    'clearance_angle',
    'analyze_diffraction',
    # Link budget
    'LinkBudgetResult',
    'LinkDirection',
    'LinkAssessment',
    'LinkQuality',
    'Modulation',
    'ModulationProfile',
    'StationConfig',
    'watts_to_dbm',
    'dbm_to_watts',
    'dbd_to_dbi',
    'dbi_to_dbd',
    'free_space_path_loss',
    'effective_radiated_power',
    'received_power',
    'link_budget',
    'link_margin',
    'fade_margin',
    'classify_link_quality',
    'assess_link',
    # Pipeline
    'Station',
    'BasicPathResult',
    'RfAnalyzedPathResult',
    'SegmentDistance',
    'PathAnalyzer',
    'analyze_profile',
    'evaluate_link',
    'segment_distances',
]
