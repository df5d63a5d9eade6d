"""Driver selection from configuration."""

from collections.abc import Callable

from cockroach_prod.adapters.amazon_driver import AmazonDriver
from cockroach_prod.adapters.google_driver import GoogleDriver
from cockroach_prod.core.config import ProdConfig
from cockroach_prod.core.exceptions import ConfigurationError
from cockroach_prod.interfaces.driver import Driver


def _amazon(config: ProdConfig) -> Driver:
    return AmazonDriver(region=config.location, port=config.port, config=config.aws)


def _google(config: ProdConfig) -> Driver:
    return GoogleDriver(zone=config.location, port=config.port, config=config.google)


DRIVER_FACTORIES: dict[str, Callable[[ProdConfig], Driver]] = {
    "aws": _amazon,
    "gce": _google,
}


def create_driver(config: ProdConfig) -> Driver:
    """Build the driver for the configured region.

    Args:
        config: Loaded configuration; ``region`` selects the provider

    Returns:
        Driver instance

    Raises:
        ConfigurationError: If the region or provider settings are invalid
    """
    factory = DRIVER_FACTORIES.get(config.provider)
    if factory is None:
        raise ConfigurationError(f"no driver for provider {config.provider!r}")
    return factory(config)
