"""
Logging Configuration

Configures the root logger once at process start.
"""

import logging
import os
import sys


def configure_logging(level: str = None) -> None:
    """
    Configure the root logger for the application.

    Args:
        level: Log level name (default: LOG_LEVEL env var, then INFO)
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
