"""Batchmove - dated file relocation with run reporting."""

__version__ = "0.1.0"
