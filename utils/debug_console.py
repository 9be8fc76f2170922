"""Rich console that mirrors user-facing output into the --debug log.

With --debug, everything gchatctl prints (device codes, authorization
URLs, status tables) is also appended as plain text to the debug log,
next to the library log records, so a failed login can be replayed
from a single file.
"""

import io
import logging
import re
from pathlib import Path
from typing import Optional, Union

from rich.console import Console as RichConsole

CONSOLE_LOGGER_NAME = "gchatctl.console"

_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class DebugCapturingConsole(RichConsole):
    """
    Rich Console that also writes a plain text copy of each print() to a logger.

    Terminal output is unchanged; the captured copy has markup and ANSI codes removed.
    """

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        """
        Args:
            debug_logger: Logger receiving the captured output
            *args, **kwargs: Arguments passed to Rich Console
        """
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self._render_to_plain_text(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def _render_to_plain_text(self, *objects, **kwargs) -> str:
        """Render objects through a throwaway non-terminal console"""
        buffer = io.StringIO()
        temp_console = RichConsole(
            file=buffer,
            force_terminal=False,
            width=self.width,
            legacy_windows=False,
        )
        temp_console.print(*objects, **kwargs)
        return _ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None,
                         **kwargs) -> RichConsole:
    """
    Create the console for a command run.

    Args:
        debug_enabled: Whether --debug was given
        debug_logger: Logger for captured console output
        **kwargs: Extra Rich Console arguments (e.g. stderr=True)

    Returns:
        DebugCapturingConsole if debug enabled, regular Console otherwise
    """
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger=debug_logger, **kwargs)
    return RichConsole(**kwargs)


def setup_debug_logger(log_file: Union[str, Path]) -> logging.Logger:
    """
    Set up the dedicated logger for captured console output.

    Args:
        log_file: Path of the debug log, opened in append mode

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(CONSOLE_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers when called twice in one process
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    logger.addHandler(file_handler)

    # Root logger writes the same file; do not log twice
    logger.propagate = False

    return logger
