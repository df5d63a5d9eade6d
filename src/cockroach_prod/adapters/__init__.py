"""Driver implementations for docker-machine providers."""

from cockroach_prod.adapters.amazon_driver import AmazonDriver
from cockroach_prod.adapters.factory import create_driver
from cockroach_prod.adapters.google_driver import GoogleDriver

__all__ = [
    "AmazonDriver",
    "GoogleDriver",
    "create_driver",
]
