"""Middleware package for the booking web API."""

from .correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
