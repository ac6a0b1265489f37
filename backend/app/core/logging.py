from __future__ import annotations

import logging

from app.core.config import get_settings

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('app').setLevel(level)
    # SQL echo is controlled by the engine, keep the library logger quiet
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
