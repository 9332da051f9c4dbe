"""Numeric helpers: load rounding and directional increments."""
