"""Parlascope: French parliamentary data and 2027 candidate matching."""

__version__ = "0.1.0"
