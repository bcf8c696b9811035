"""
Logging configuration for TFS processes.

Every launcher (master, web gateway, admin tool) calls setup_logging() once at
startup; library modules only ever use logging.getLogger(__name__).
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Per-request access logs from the HTTP servers; raised to WARNING unless DEBUG is on
ACCESS_LOGGERS = ("werkzeug", "uvicorn.access")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    component_name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure root logging for one TFS process.

    Args:
        component_name: Component identifier shown in every line (e.g., 'master', 'web')
        level: Level number or name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to mirror output into; defaults to $TFS_LOG_FILE
        format_string: Custom format string (default: [time] [COMPONENT] LEVEL - message)

    Returns:
        The component's logger
    """
    level = _resolve_level(level)
    log_file = log_file or os.getenv("TFS_LOG_FILE") or None
    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s'
    formatter = logging.Formatter(format_string, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    access_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in ACCESS_LOGGERS:
        logging.getLogger(name).setLevel(access_level)

    logger = logging.getLogger(component_name)
    logger.info(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)})")
    if log_file:
        logger.info(f"Mirroring log output to {log_file}")
    return logger
