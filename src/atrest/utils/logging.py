"""
Logging configuration using loguru.

Library modules only call ``logger``; the CLI decides where records go.
Secrets and file contents are never passed to the logger, so a log file
is safe to keep next to encrypted data.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(verbose: bool = False, log_file: str | Path | None = None) -> None:
    """
    Route atrest logs to stderr and, optionally, a rotating file.

    Args:
        verbose: Show per-operation DEBUG records on stderr instead of warnings only.
        log_file: Also append DEBUG and above to this file, rotated at 10 MB
            and kept for 7 days. Parent directories are created.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format=CONSOLE_FORMAT)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_path, level="DEBUG", format=FILE_FORMAT, rotation="10 MB", retention="7 days")
