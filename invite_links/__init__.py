"""
WhatsApp invite-link aggregator

Builds the ranked invite-link records read by campaign landing pages.
"""
import logging

__version__ = "1.0.0"

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO", handlers=None) -> None:
    """Root logging setup for entry points (handler, CLI)."""
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    logging.getLogger().setLevel(level)
