# Licensed under the Apache License, Version 2.0
import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level_name: Optional[str] = None) -> None:
    """Configure root logging; `level_name` wins over LOGSIFT_LOG_LEVEL (default INFO)."""
    name = (level_name or os.getenv("LOGSIFT_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def set_verbose() -> None:
    logging.getLogger().setLevel(logging.DEBUG)
    logging.getLogger(__name__).debug("Verbose logging enabled")
