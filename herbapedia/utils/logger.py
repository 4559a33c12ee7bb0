"""
Logging for the Herbapedia CLIs.

Every module logs under the ``herbapedia`` namespace. Console lines go
through ``tqdm.write`` so they do not tear the scraper's progress bars, and
always to stderr so ``verify --json`` keeps stdout machine-readable.

Usage:
    from herbapedia.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Saved %s", path, extra={"slug": slug})

CLI wiring:
    parser = argparse.ArgumentParser()
    add_logging_arguments(parser)
    args = parser.parse_args()
    setup_logging_from_args(args)
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from tqdm import tqdm

NAMESPACE = 'herbapedia'
LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# ANSI palette, shared with the console report
COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
    'RESET': '\033[0m',
    'BOLD': '\033[1m',
    'DIM': '\033[2m',
}

SUPPORTS_COLOR = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()

# LogRecord attributes callers may attach through ``extra=``
CONTEXT_FIELDS = ('url', 'slug', 'language', 'category')

_configured = False


def _short_name(name: str) -> str:
    if name.startswith(NAMESPACE + '.'):
        return name[len(NAMESPACE) + 1:]
    return name


class ConsoleFormatter(logging.Formatter):
    """HH:MM:SS [LEVEL] module: message, coloured on a TTY."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            color = COLORS.get(record.levelname, COLORS['RESET'])
            reset, dim = COLORS['RESET'], COLORS['DIM']
        else:
            color = reset = dim = ""

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = (f"{dim}{timestamp}{reset} {color}[{record.levelname:7}]{reset} "
                f"{_short_name(record.name)}: {record.getMessage()}")
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class ProgressBarHandler(logging.Handler):
    """Writes above any active tqdm bar instead of through it."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


class FileFormatter(logging.Formatter):
    """Plain text with full timestamps for --log-file."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)-7s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


class JSONFormatter(logging.Formatter):
    """One JSON object per line; record context (url, slug, ...) becomes keys."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_json: bool = False,
    quiet: bool = False,
) -> None:
    """
    Configure the ``herbapedia`` logger tree.

    Args:
        level: Console level name
        log_file: Also log to this file, always at DEBUG
        log_json: JSON lines instead of plain text in ``log_file``
        quiet: No console output at all
    """
    global _configured

    root = logging.getLogger(NAMESPACE)
    root.setLevel(logging.DEBUG if log_file else getattr(logging, level.upper()))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if not quiet:
        console = ProgressBarHandler()
        console.setLevel(getattr(logging, level.upper()))
        console.setFormatter(ConsoleFormatter())
        root.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter() if log_json else FileFormatter())
        root.addHandler(file_handler)

    _configured = True


def add_logging_arguments(parser: argparse.ArgumentParser, default_level: str = "INFO") -> None:
    """Add the logging flags shared by every CLI."""
    group = parser.add_argument_group("logging")
    group.add_argument("--log-level", default=default_level, choices=LEVELS,
                       help=f"Console log level (default: {default_level})")
    group.add_argument("--log-file", help="Also write a DEBUG log to this file")
    group.add_argument("--log-json", action="store_true",
                       help="Write the log file as JSON lines")
    group.add_argument("--quiet", action="store_true", help="No log output on the console")


def setup_logging_from_args(args: argparse.Namespace, quiet: bool = False) -> None:
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        log_json=args.log_json,
        quiet=quiet or args.quiet,
    )


def get_logger(name: str) -> logging.Logger:
    """Logger in the herbapedia namespace; ``__main__`` maps to the root."""
    if not _configured:
        setup_logging()
    if name.startswith('__'):
        return logging.getLogger(NAMESPACE)
    if not name.startswith(NAMESPACE):
        name = f'{NAMESPACE}.{name}'
    return logging.getLogger(name)
