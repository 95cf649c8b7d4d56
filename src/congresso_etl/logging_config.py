"""
Logging configuration
"""

import logging
import sys

LOGGER_NAME = "congresso_etl"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure process logging and return the root ETL logger."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Request-level noise is logged by the adapter itself at DEBUG
    for noisy in ("httpx", "httpcore", "google", "urllib3", "grpc"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.debug("Logging configurado no nível %s", level.upper())
    return logger
