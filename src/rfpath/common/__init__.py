"""Shared constants, geodesy, configuration, logging and error types."""
