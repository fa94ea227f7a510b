"""Utility functions module."""

from .masking import mask_contact, mask_database_url, mask_email, mask_phone

__all__ = [
    "mask_contact",
    "mask_database_url",
    "mask_email",
    "mask_phone",
]
