"""
Progress reporting utilities for pubstatus.

Progress goes to stderr so stdout stays clean for data, and is only
shown when stderr is a terminal unless forced on or off.
"""

import os
import sys
import time
from contextlib import contextmanager
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log levels for progress messages."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


_COLORS = {
    'reset': '\033[0m',
    'dim': '\033[2m',
    'red': '\033[31m',
    'yellow': '\033[33m',
}

_LEVEL_STYLE = {
    LogLevel.ERROR: ('✗ ', 'red'),
    LogLevel.WARNING: ('⚠ ', 'yellow'),
    LogLevel.DEBUG: ('  ', 'dim'),
}


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_colors: Use ANSI colors in output. None = auto-detect
        """
        if enabled is None:
            self.enabled = sys.stderr.isatty()
        else:
            self.enabled = enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

        self.start_time: Optional[float] = None

    def _colorize(self, text: str, color: str) -> str:
        if self.use_colors and color in _COLORS:
            return f"{_COLORS[color]}{text}{_COLORS['reset']}"
        return text

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            force: Force output even if disabled
            level: Log level for the message
        """
        if not (force or self.enabled):
            return
        if level in _LEVEL_STYLE:
            prefix, color = _LEVEL_STYLE[level]
            message = self._colorize(f"{prefix}{message}", color)
        print(message, file=sys.stderr, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        print(self._colorize(f"ERROR: {message}", 'red'), file=sys.stderr, flush=True)

    def warning(self, message: str):
        """Output warnings to stderr if enabled."""
        if self.enabled:
            print(self._colorize(f"WARNING: {message}", 'yellow'), file=sys.stderr, flush=True)

    @contextmanager
    def task(self, description: str, total: Optional[int] = None):
        """
        Context manager for tracking a task with optional item count.

        Example:
            with progress.task("Checking projects", total=12) as update:
                fleet.aggregate(projects, on_complete=lambda done, total, rec: update(done, rec.name))
        """
        self.start_time = time.time()

        if self.enabled:
            suffix = f" ({total} items)" if total else ""
            print(f"{description}{suffix}...", file=sys.stderr, flush=True)

        def update(current: int, item: str = ""):
            """Update progress for current item."""
            if not (self.enabled and total):
                return
            msg = f"  [{current}/{total}] {item}".rstrip()
            if sys.stderr.isatty():
                width = os.get_terminal_size(sys.stderr.fileno()).columns
                print(f"\r{msg[:width]:<{width}}", end="", file=sys.stderr, flush=True)
            else:
                print(msg, file=sys.stderr, flush=True)

        try:
            yield update
        finally:
            if self.enabled:
                if sys.stderr.isatty():
                    print(file=sys.stderr)  # New line after progress
                elapsed = time.time() - self.start_time
                print(f"Completed in {elapsed:.1f}s", file=sys.stderr, flush=True)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


# Environment variable override
if os.environ.get('PUBSTATUS_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('PUBSTATUS_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
