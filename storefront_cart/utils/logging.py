"""
Logging configuration for the cart service and the cart sync client.

All loggers hang off a single "storefront_cart" logger with one stdout handler.
"""
import logging
import sys

from storefront_cart.utils.settings import LOG_LEVEL

logger = logging.getLogger("storefront_cart")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# bez propagacji do root loggera (duplikaty)
logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Zwraca logger z przestrzeni "storefront_cart".

    Args:
        name: nazwa modulu, np. __name__
    """
    if not name:
        return logger
    if name == "storefront_cart" or name.startswith("storefront_cart."):
        return logging.getLogger(name)
    return logging.getLogger(f"storefront_cart.{name}")
