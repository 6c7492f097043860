"""Terrain elevation providers."""

from .elevation import ElevationProvider, OpenElevationClient

__all__ = ['ElevationProvider', 'OpenElevationClient']
