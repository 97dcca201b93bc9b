"""Configuration helpers."""

import logging

from .models import PitConfig


def configure_logging(config: PitConfig) -> None:
    """Configure root logging from the ``logging`` section."""
    logging.basicConfig(
        level=getattr(logging, config.logging.level.value),
        format=config.logging.format,
    )
