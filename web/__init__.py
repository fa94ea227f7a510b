"""HTTP layer for the salon booking engine."""
