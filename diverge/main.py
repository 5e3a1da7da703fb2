"""
Command line entry point for Diverge.

This module handles:
- Command line argument parsing
- Logging configuration
- Running a comparison and printing it grouped by folder
- Applying left-to-right merges and saving them
- Printing the outline of a compared file
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from PyQt6.QtCore import QCoreApplication

from diverge import __version__
from diverge.core.languages import language_for_file
from diverge.core.models import STATUS_STYLES, EffectiveStatus
from diverge.core.outline import OutlineNavigator, parse_structure
from diverge.core.paths import file_name, group_by_folder
from diverge.services.compare_service import CompareServiceError, LocalCompareService
from diverge.services.file_io import LocalFileWriter
from diverge.services.settings import SettingsManager
from diverge.session.facade import DivergeSession


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "diverge"
APP_DISPLAY_NAME = "Diverge"

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: str
    right_path: str
    apply_all: bool = False
    save: bool = False
    outline: Optional[str] = None
    outline_filter: str = ""
    config_file: Optional[str] = None
    log_level: str = "WARNING"
    log_file: Optional[str] = None


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Console output goes to stderr so stdout stays machine-readable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

def resolve_path(path: str) -> str:
    """Expand `~`, make absolute and resolve symlinks where possible."""
    expanded = Path(os.path.expanduser(path))
    if not expanded.is_absolute():
        expanded = Path.cwd() / expanded
    try:
        return str(expanded.resolve())
    except OSError:
        return str(expanded)


def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two directory trees and merge files from left to right",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s old/ new/                         Show differences
  %(prog)s old/ new/ --apply-all --save      Copy every changed file left to right
  %(prog)s old/ new/ --outline config.yaml   Outline a file's right side
        """
    )

    parser.add_argument('left', help='Left directory')
    parser.add_argument('right', help='Right directory')

    parser.add_argument(
        '--apply-all',
        action='store_true',
        help='Apply the left content of every different file to the right side'
    )
    parser.add_argument(
        '--save',
        action='store_true',
        help='Write applied changes to the right directory'
    )
    parser.add_argument(
        '--outline',
        metavar='REL_PATH',
        help='Print the structure outline of a file (right side)'
    )
    parser.add_argument(
        '--filter',
        dest='outline_filter',
        default='',
        metavar='QUERY',
        help='Only show outline symbols containing QUERY'
    )
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Logging level'
    )
    parser.add_argument(
        '--log-file',
        help='Log file path'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parsed = parser.parse_args(args)

    return CommandLineArgs(
        left_path=resolve_path(parsed.left),
        right_path=resolve_path(parsed.right),
        apply_all=parsed.apply_all,
        save=parsed.save,
        outline=parsed.outline,
        outline_filter=parsed.outline_filter,
        config_file=parsed.config,
        log_level=parsed.log_level,
        log_file=parsed.log_file,
    )


# =============================================================================
# Output
# =============================================================================

def print_comparison(session: DivergeSession, out: TextIO) -> None:
    """Print the summary and every file grouped by folder."""
    result = session.result
    if result is None:
        return

    print(f"{session.left_dir} <> {session.right_dir}", file=out)
    print(result.summary, file=out)
    if result.ignored_dirs:
        print(f"Ignored: {', '.join(result.ignored_dirs)}", file=out)

    for folder, records in group_by_folder(result).items():
        print(f"\n{folder}/", file=out)
        for record in records:
            style = STATUS_STYLES[session.effective_status(record)]
            print(f"  {style.icon} {file_name(record.relative_path)}  ({style.label})", file=out)


def print_outline(session: DivergeSession, relative_path: str, query: str, out: TextIO) -> bool:
    """Print the outline of a file's right-side content."""
    result = session.result
    record = result.get(relative_path) if result is not None else None
    if record is None:
        logging.error(f"Not in comparison: {relative_path}")
        return False

    content = session.overlay.content_for(relative_path)
    if content is None:
        content = record.right_content
    nodes = parse_structure(content, language_for_file(relative_path))

    navigator = OutlineNavigator(nodes, query)
    for item in navigator.items:
        print(f"{'  ' * item.depth}{item.key}:{item.line}", file=out)
    if not navigator.items:
        print("No symbols found", file=out)
    return True


def print_saved(count: int, out: TextIO) -> None:
    print(f"Saved {count} file{'s' if count != 1 else ''} to disk", file=out)


def remaining_differences(session: DivergeSession) -> int:
    result = session.result
    if result is None:
        return 0
    return sum(
        1 for record in result
        if session.effective_status(record) not in (
            EffectiveStatus.IDENTICAL, EffectiveStatus.APPLIED
        )
    )


# =============================================================================
# Main
# =============================================================================

def run(args: CommandLineArgs, out: Optional[TextIO] = None) -> int:
    """Run one comparison session and return the exit status."""
    out = out or sys.stdout
    settings_manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    config = settings_manager.settings

    session = DivergeSession(
        LocalCompareService(config.ignore_dirs),
        LocalFileWriter(),
    )
    session.set_directories(args.left_path, args.right_path)

    if not session.compare():
        print(f"Error: {session.error}", file=sys.stderr)
        return EXIT_ERROR

    settings_manager.add_recent_comparison(args.left_path, args.right_path)

    if args.apply_all:
        applied = session.apply_all_to_right()
        print(f"Applied {applied} file{'s' if applied != 1 else ''} left to right", file=out)

    if args.save:
        written: List[str] = []
        session.overlay.file_saved.connect(written.append)
        try:
            report = session.save_all()
        except CompareServiceError as e:
            # The writes already happened; only the re-compare failed
            print_saved(len(written), out)
            print(f"Error: re-compare after save failed: {e}", file=sys.stderr)
            return EXIT_ERROR
        print_saved(report.saved, out)
        for failure in report.failures:
            print(f"Failed: {failure}", file=sys.stderr)

    if args.outline:
        if not print_outline(session, args.outline, args.outline_filter, out):
            return EXIT_ERROR
    else:
        print_comparison(session, out)

    return EXIT_DIFFERENT if remaining_differences(session) else EXIT_IDENTICAL


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    app = QCoreApplication.instance() or QCoreApplication([APP_NAME])
    app.setApplicationName(APP_DISPLAY_NAME)
    app.setApplicationVersion(__version__)

    logging.info(f"Starting {APP_DISPLAY_NAME} {__version__}")
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
