"""Tessera package root."""

from tessera.exceptions import NeverThrown
from tessera.invariants import never

__all__ = ["__version__", "NeverThrown", "never"]

__version__ = "0.1.0"
