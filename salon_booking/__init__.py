"""Salon booking engine - slot availability and race-safe reservations."""

__version__ = "1.0.0"
