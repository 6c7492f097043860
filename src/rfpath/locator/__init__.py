"""Maidenhead grid locator codec."""

from .maidenhead import encode, decode, validate, canonicalize, cell_bounds

__all__ = ['encode', 'decode', 'validate', 'canonicalize', 'cell_bounds']
