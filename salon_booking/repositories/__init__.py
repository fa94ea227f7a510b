"""Repository layer for durable scheduling records."""

from .base import BookingStore, ReservationUnitOfWork
from .memory import InMemoryBookingStore
from .postgres import PostgresBookingStore

__all__ = [
    "BookingStore",
    "InMemoryBookingStore",
    "PostgresBookingStore",
    "ReservationUnitOfWork",
]
