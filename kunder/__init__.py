"""Maintenance tooling for the kunder customer database."""

__version__ = '0.3.0'
