"""Logging and console setup for a CLI run"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console

import settings
from utils.debug_console import create_debug_console, setup_debug_logger
from utils.storage import ensure_secure_directory

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(
    debug: bool = False,
    log_level: str = "",
    config_dir: Optional[Union[str, Path]] = None,
) -> Console:
    """
    Configure root logging and return the console commands should print to.

    With debug, all records at DEBUG and a copy of console output are appended
    to the debug log in the config directory. Otherwise log_level (LOG_LEVEL)
    selects a stderr handler; when unset, library warnings are left to the
    console output and not logged.

    Args:
        debug: Whether --debug was given
        log_level: Level name such as "info" or "DEBUG"
        config_dir: Directory holding the debug log (defaults to settings.CONFIG_DIR)

    Returns:
        Console instance (either regular or debug-capturing)
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if debug:
        log_dir = ensure_secure_directory(Path(config_dir or settings.CONFIG_DIR))
        log_file = (log_dir / settings.DEBUG_LOG_FILE).resolve()

        root_logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

        # httpx/httpcore request traces are noisy and may echo headers
        logging.getLogger("httpcore").setLevel(logging.INFO)

        debug_logger = setup_debug_logger(log_file)
        console = create_debug_console(debug_enabled=True, debug_logger=debug_logger)
        debug_logger.debug("[CLI] ===== gchatctl session started =====")
        logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_file}")
        return console

    level_name = (log_level or "").strip().upper()
    level = logging.getLevelName(level_name) if level_name else None
    if isinstance(level, int):
        root_logger.setLevel(level)
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(stream_handler)
    else:
        # User-facing messages go through the console instead
        root_logger.addHandler(logging.NullHandler())

    return Console()
