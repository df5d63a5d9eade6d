"""Interface definitions for cockroach-prod."""

from cockroach_prod.interfaces.driver import Driver

__all__ = [
    "Driver",
]
