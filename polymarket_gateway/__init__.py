"""
Polymarket gateway package.

A FastAPI application that fronts the Polymarket Gamma, Data and Bridge APIs
with a shared read-through cache and request coalescing.
"""
from .main import app

__version__ = "1.0.0"
__all__ = ["app"]
