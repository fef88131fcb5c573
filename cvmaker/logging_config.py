"""
Logging setup for CV Maker.

All modules log through loguru's shared ``logger``; this module only decides
where the records go.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure loguru sinks.

    Replaces the default sink with a stderr sink and optionally adds a
    rotating file sink that always records DEBUG and above.

    Args:
        level: Console log level. Defaults to CVMAKER_LOG_LEVEL or INFO.
        log_file: Optional log file path. Defaults to CVMAKER_LOG_FILE.
    """
    level = (level or os.getenv("CVMAKER_LOG_LEVEL", "INFO")).upper()
    log_file = log_file or os.getenv("CVMAKER_LOG_FILE")

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level="DEBUG",
            rotation="5 MB",
            retention=3,
            encoding="utf-8",
        )
