"""Utility helpers: errors, clocks, checked arithmetic, validation, logging."""
