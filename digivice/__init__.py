"""Digivice: emotional-simulation core for a virtual pet."""
__version__ = "0.1.0"
