import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import colorama
from colorama import Fore, Style
from dateutil import parser as dateparser

from . import config
from .core import MovePipeline, RepairPipeline
from .exceptions import PreconditionError
from .metadata.extract import NativeMetadataStore
from .metadata.store import ExifToolStore, MetadataStore, require_tool
from .models import DateWindow
from .organization.rules import POLICIES, get_policy
from .reporting import RunReport

COLORS = {
    logging.DEBUG: Style.DIM,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """Colours whole lines by level when writing to a terminal."""

    def format(self, record):
        msg = super().format(record)
        color = COLORS.get(record.levelno)
        return f"{color}{msg}{Style.RESET_ALL}" if color else msg


def setup_logging(verbose: bool, quiet: bool = False, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    fmt = "%(asctime)s [%(levelname)s] %(message)s"

    console = logging.StreamHandler(sys.stdout)
    if sys.stdout.isatty():
        colorama.just_fix_windows_console()
        console.setFormatter(ColorFormatter(fmt))
    handlers: List[logging.Handler] = [console]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(level=log_level, format=fmt, handlers=handlers, force=True)

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def parse_when(value: str) -> float:
    """
    Parses a free-form date ('2022-01-01', 'Jan 5 2022 10:00', '@1640390400')
    into epoch seconds. Dates without a zone are local time.
    """
    value = value.strip()
    try:
        if value.startswith('@'):
            return float(value[1:])
        return dateparser.parse(value).timestamp()
    except (ValueError, OverflowError) as e:
        raise argparse.ArgumentTypeError(f"invalid date '{value}': {e}")


def build_store() -> MetadataStore:
    """exifread/MediaInfo for reads where they can answer, exiftool for the rest."""
    return NativeMetadataStore(fallback=ExifToolStore())


def _add_common(p: argparse.ArgumentParser):
    p.add_argument("-r", "--recursive", action="store_true", help="Process directories recursively")
    p.add_argument("--kind", choices=sorted(config.KIND_PATTERNS), default='all',
                   help="Restrict to images or videos (default: all)")
    p.add_argument("--collision", choices=sorted(POLICIES), default=config.DEFAULT_COLLISION_POLICY,
                   help="How to rename a file whose destination is taken "
                        f"(default: {config.DEFAULT_COLLISION_POLICY})")
    p.add_argument("--no-chown", action="store_true",
                   help="Do not give new folders/files the owner of the target root")
    p.add_argument("--dry-run", action="store_true", help="Simulate actions without modifying disk")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--report-csv", type=Path, default=None, help="Write per-file outcomes to a CSV")


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        prog="media-organizer",
        description="Fix media timestamps from Unix-timestamp filenames and file media by date.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    repair = sub.add_parser("repair", help="Set mtime and metadata dates from timestamp filenames")
    repair.add_argument("media_dir", type=Path, help="Directory holding the media")
    repair.add_argument("-a", "--after", type=parse_when, default=None,
                        help="Only files modified after this date (anything dateutil understands)")
    repair.add_argument("-b", "--before", type=parse_when, default=None,
                        help="Only files modified at or before this date")
    repair.add_argument("-m", "--move", dest="move_target", type=Path, default=None, metavar="TARGET_DIR",
                        help="Move repaired files into TARGET_DIR/YYYY/MM")
    _add_common(repair)

    move = sub.add_parser("move", help="Move media into TARGET_ROOT/YYYY/MM by capture date")
    move.add_argument("source", type=Path, help="A media file or a directory")
    move.add_argument("target_root", type=Path, help="Root of the year/month tree")
    _add_common(move)

    return p.parse_args(argv)


def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.log_file)

    logging.info(f"=== Media Organizer: {args.command} ===")

    report = RunReport()
    move_report = None

    try:
        require_tool(config.EXIFTOOL)
        store = build_store()
        policy = get_policy(args.collision)

        if args.command == "repair":
            mover = None
            if args.move_target:
                move_report = RunReport()
                mover = MovePipeline(
                    args.move_target, store, policy,
                    kind=args.kind, chown=not args.no_chown,
                    dry_run=args.dry_run, report=move_report,
                )
            pipeline = RepairPipeline(
                store,
                window=DateWindow(after=args.after, before=args.before),
                recursive=args.recursive,
                kind=args.kind,
                dry_run=args.dry_run,
                mover=mover,
                report=report,
                progress=not args.quiet and sys.stderr.isatty(),
            )
            pipeline.run(args.media_dir)
        else:
            pipeline = MovePipeline(
                args.target_root, store, policy,
                recursive=args.recursive,
                kind=args.kind,
                chown=not args.no_chown,
                dry_run=args.dry_run,
                report=report,
                progress=not args.quiet and sys.stderr.isatty(),
            )
            pipeline.run(args.source)
    except PreconditionError as e:
        logging.error(str(e))
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception(f"Fatal error during {args.command}.")
        return 1

    report.log_summary()
    if move_report is not None:
        move_report.log_summary()
        report.outcomes.extend(move_report.outcomes)

    if args.report_csv:
        report.write_csv(args.report_csv)

    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
