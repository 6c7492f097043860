"""
Centralized Configuration Management for rfpath

This module provides a unified interface for loading and accessing
analysis configuration from YAML files.
"""

import os
import yaml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field, asdict

from .constants import (
    STANDARD_K_FACTOR,
    MIN_K_FACTOR,
    MAX_K_FACTOR,
    DEFAULT_PATH_SAMPLES,
    FRESNEL_CLEARANCE_THRESHOLD,
)
from .exceptions import InvalidInputError


@dataclass
class AnalysisConfig:
    """Configuration for path analysis"""

    path_samples: int = DEFAULT_PATH_SAMPLES  # intervals, n + 1 points
    k_factor: float = STANDARD_K_FACTOR  # effective Earth radius multiplier
    default_frequency_mhz: Optional[float] = None  # None = geometry only
    fresnel_clearance_threshold: float = FRESNEL_CLEARANCE_THRESHOLD  # percent

    def validate(self) -> None:
        """Raise InvalidInputError for out-of-range settings"""
        samples = self.path_samples
        if isinstance(samples, bool) or not isinstance(samples, int) or samples < 1:
            raise InvalidInputError(f"path_samples must be an integer >= 1, got {samples!r}")
        if not MIN_K_FACTOR <= self.k_factor <= MAX_K_FACTOR:
            raise InvalidInputError(
                f"k_factor must be in [{MIN_K_FACTOR}, {MAX_K_FACTOR}], got {self.k_factor}"
            )
        if self.default_frequency_mhz is not None and self.default_frequency_mhz <= 0:
            raise InvalidInputError(
                f"default_frequency_mhz must be positive, got {self.default_frequency_mhz}"
            )
        if not 0 < self.fresnel_clearance_threshold <= 100:
            raise InvalidInputError(
                f"fresnel_clearance_threshold must be in (0, 100], "
                f"got {self.fresnel_clearance_threshold}"
            )


@dataclass
class ElevationConfig:
    """Configuration for the elevation data provider"""

    api_url: str = "https://api.open-elevation.com/api/v1/lookup"
    timeout_sec: float = 30.0
    batch_size: int = 100  # points per request

    def validate(self) -> None:
        """Raise InvalidInputError for out-of-range settings"""
        if self.timeout_sec <= 0:
            raise InvalidInputError(f"timeout_sec must be positive, got {self.timeout_sec}")
        if self.batch_size < 1:
            raise InvalidInputError(f"batch_size must be >= 1, got {self.batch_size}")


@dataclass
class LoggingConfig:
    """Configuration for logging output"""

    level: str = "INFO"
    json_format: bool = True
    log_file: Optional[str] = None


@dataclass
class RFPathConfig:
    """Master configuration for rfpath"""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    elevation: ElevationConfig = field(default_factory=ElevationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> 'RFPathConfig':
        """Validate every section, returning self"""
        self.analysis.validate()
        self.elevation.validate()
        return self

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'RFPathConfig':
        """Build configuration from a plain dictionary"""
        config_dict = config_dict or {}
        try:
            return cls(
                analysis=AnalysisConfig(**config_dict.get('analysis', {})),
                elevation=ElevationConfig(**config_dict.get('elevation', {})),
                logging=LoggingConfig(**config_dict.get('logging', {})),
            )
        except TypeError as e:
            raise InvalidInputError(f"Unknown configuration key: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'RFPathConfig':
        """Load configuration from YAML file"""
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f)

        return cls.from_dict(config_dict)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary"""
        return asdict(self)

    def to_yaml(self, yaml_path: str) -> None:
        """Save configuration to YAML file"""
        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)


def get_config(config_path: Optional[str] = None) -> RFPathConfig:
    """
    Get system configuration

    Priority:
    1. Provided config_path
    2. RFPATH_CONFIG environment variable
    3. config/rfpath.yml
    4. Default configuration
    """
    if config_path is None:
        config_path = os.getenv('RFPATH_CONFIG')

    if config_path is None:
        # Try default paths
        default_paths = [
            Path(__file__).parent.parent.parent.parent / 'config' / 'rfpath.yml',
            Path('config/rfpath.yml')
        ]

        for path in default_paths:
            if path.exists():
                config_path = str(path)
                break

    if config_path and Path(config_path).exists():
        return RFPathConfig.from_yaml(config_path).validate()

    # Return default configuration
    return RFPathConfig()
