"""
Logging utilities for StudioTone
Provides structured logging and render statistics
"""

import logging
import sys
import threading
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

import colorlog

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_HANDLER_NAME = 'studiotone-console'


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class RenderStats:
    """Tracks render outcomes for one enhancement session (thread-safe)"""

    def __init__(self):
        self.start_time = datetime.now()
        self.requested = 0
        self.committed = 0
        self.discarded = 0
        self.failed = 0
        self.render_times: List[float] = []
        self.errors: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def add_request(self):
        with self._lock:
            self.requested += 1

    def add_result(self, committed: bool, render_time: Optional[float] = None):
        """
        Add a finished render

        Args:
            committed: Whether the result became the visible output
            render_time: Time taken by the pipeline in seconds
        """
        with self._lock:
            if committed:
                self.committed += 1
            else:
                self.discarded += 1
            if render_time is not None:
                self.render_times.append(render_time)

    def add_error(self, sequence: int, error: str):
        with self._lock:
            self.failed += 1
            self.errors.append({
                'sequence': sequence,
                'error': error,
                'time': datetime.now(),
            })

    def get_average_render_time(self) -> float:
        with self._lock:
            if not self.render_times:
                return 0.0
            return sum(self.render_times) / len(self.render_times)

    def get_summary(self) -> Dict[str, Any]:
        """Get render summary"""
        average = self.get_average_render_time()
        with self._lock:
            return {
                'requested': self.requested,
                'committed': self.committed,
                'discarded': self.discarded,
                'failed': self.failed,
                'average_render_time': average,
                'elapsed_time': (datetime.now() - self.start_time).total_seconds(),
            }


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: str = DEFAULT_FORMAT):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level name
        color: Whether to use colored output on a terminal
        fmt: Log record format
    """
    console_handler = logging.StreamHandler(sys.stderr)

    if color and sys.stderr.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s' + fmt + '%(reset)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)
    console_handler.set_name(CONSOLE_HANDLER_NAME)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    # Replace a handler from an earlier call instead of stacking duplicates
    for handler in list(root_logger.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
