import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from . import config
from .exceptions import MediaOrganizerError, MetadataWriteError, PreconditionError
from .metadata.dates import MediaDateResolver
from .metadata.store import MetadataStore
from .models import DateWindow
from .organization.mover import FileMover
from .organization.rules import CollisionPolicy, DestinationPlanner, get_policy
from .reporting import RunReport
from .scanning.filesystem import CandidateScanner
from .scanning.mime import classify
from .timestamps.parser import parse_filename_timestamp, to_local_datetime
from .timestamps.writer import TimestampWriter


def _display_time(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime(config.DISPLAY_DATE_FORMAT)


def _kind_allowed(kind: str, selection: str) -> bool:
    if kind == config.KIND_UNSUPPORTED:
        return False
    return selection == 'all' or selection == kind


class MovePipeline:
    """
    Moves media into target_root/YYYY/MM/ by the date it was taken.

    The date comes from metadata (mtime as fallback), never from the filename.
    """

    def __init__(self,
                 target_root: Path,
                 store: MetadataStore,
                 policy: Optional[CollisionPolicy] = None,
                 recursive: bool = False,
                 kind: str = 'all',
                 chown: bool = True,
                 dry_run: bool = False,
                 report: Optional[RunReport] = None,
                 progress: bool = False):
        self.target_root = target_root
        self.resolver = MediaDateResolver(store)
        self.planner = DestinationPlanner(target_root, policy or get_policy(), chown=chown, dry_run=dry_run)
        self.mover = FileMover(dry_run=dry_run)
        self.recursive = recursive
        self.kind = kind
        self.chown = chown
        self.dry_run = dry_run
        self.report = report if report is not None else RunReport()
        self.progress = progress

    def prepare(self):
        """Creates the target root. Must run before move_file()."""
        if self.dry_run:
            return
        try:
            self.target_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PreconditionError(f"Could not create target directory '{self.target_root}': {e}") from e

    def run(self, source: Path) -> RunReport:
        if not source.exists():
            raise PreconditionError(f"Source path '{source}' does not exist")
        self.prepare()

        if source.is_file():
            self.move_file(source)
        else:
            scanner = CandidateScanner(
                recursive=self.recursive,
                exclude_substrings=[config.THUMBNAIL_MARKER],
            )
            self._process(scanner.scan(source), source)

        logging.info("Processing complete.")
        return self.report

    def already_filed(self, path: Path) -> bool:
        """True when path lies somewhere under the target root."""
        return self.target_root.resolve() in path.resolve().parents

    def _process(self, candidates: Iterable[Path], source: Path):
        nested = source.resolve() in self.target_root.resolve().parents

        with logging_redirect_tqdm():
            for path in tqdm(candidates, desc="Moving", unit="file", disable=not self.progress):
                # Files already filed under a nested target root are left alone
                if nested and self.already_filed(path):
                    continue
                self.move_file(path)

    def move_file(self, path: Path):
        """Moves one file. Per-file problems are logged and recorded, never raised."""
        if config.THUMBNAIL_MARKER in str(path):
            logging.debug(f"Skipping thumbnail: {path}")
            self.report.record(path, 'skipped', 'thumbnail')
            return

        kind = classify(path)
        if not _kind_allowed(kind, self.kind):
            logging.debug(f"Skipping unsupported file: {path}")
            self.report.record(path, 'skipped', f'unsupported ({kind})')
            return

        try:
            resolved = self.resolver.resolve(path, kind)
            in_place = self.planner.folder_for(resolved.year, resolved.month) / path.name
            if in_place.resolve() == path.resolve():
                logging.info(f"Already in place: {path}")
                self.report.record(path, 'skipped', 'already in place', destination=path)
                return
            dest = self.planner.resolve_destination(path, resolved.year, resolved.month)
            owner = self._owner_uid()
            self.mover.move(path, dest, owner_uid=owner)
        except (MediaOrganizerError, OSError) as e:
            logging.error(f"Failed to move {path}: {e}")
            self.report.record(path, 'failed', str(e))
            return

        logging.info(f"Moved: {path} -> {dest} (taken {resolved.taken}, from {resolved.source})")
        self.report.record(path, 'moved', resolved.source, destination=dest)

    def _owner_uid(self) -> Optional[int]:
        if not self.chown or self.dry_run:
            return None
        return self.planner.owner_uid()


class RepairPipeline:
    """
    Rewrites mtime and metadata timestamps from Unix-timestamp filenames.

    The filename is the only authority for the timestamp; existing metadata
    is never read. Files can optionally be handed to a MovePipeline after
    being repaired.
    """

    def __init__(self,
                 store: MetadataStore,
                 window: Optional[DateWindow] = None,
                 recursive: bool = False,
                 kind: str = 'all',
                 dry_run: bool = False,
                 mover: Optional[MovePipeline] = None,
                 report: Optional[RunReport] = None,
                 progress: bool = False):
        self.writer = TimestampWriter(store)
        self.window = window or DateWindow()
        self.recursive = recursive
        self.kind = kind
        self.dry_run = dry_run
        self.mover = mover
        self.report = report if report is not None else RunReport()
        self.progress = progress

    def run(self, media_dir: Path) -> RunReport:
        if not media_dir.is_dir():
            raise PreconditionError(f"'{media_dir}' is not a directory")
        if self.mover:
            self.mover.prepare()

        scanner = CandidateScanner(
            recursive=self.recursive,
            patterns=config.KIND_PATTERNS[self.kind],
            window=self.window,
        )

        nested = bool(self.mover) and media_dir.resolve() in self.mover.target_root.resolve().parents

        with logging_redirect_tqdm():
            for path in tqdm(scanner.scan(media_dir), desc="Repairing", unit="file", disable=not self.progress):
                # A target root nested in media_dir holds files moved earlier in this run
                if nested and self.mover.already_filed(path):
                    continue
                self.repair_file(path)

        return self.report

    def repair_file(self, path: Path):
        """Repairs one file. Per-file problems are logged and recorded, never raised."""
        base = path.name
        try:
            ts = parse_filename_timestamp(base)
            local_dt = to_local_datetime(ts)
        except MediaOrganizerError as e:
            logging.info(f"Skipping {e}")
            self.report.record(path, 'skipped', str(e))
            return

        stamp = local_dt.strftime(config.DISPLAY_DATE_FORMAT)

        if self.dry_run:
            logging.info(f"[DRY RUN] Would update: {base} to {stamp} (Unix timestamp: {ts})")
            self.report.record(path, 'updated', f"dry run: {stamp}")
            if self.mover:
                self.mover.move_file(path)
            return

        try:
            before = path.stat().st_mtime
            self.writer.apply(path, ts)
        except MetadataWriteError as e:
            # mtime has already been changed at this point
            logging.error(f"Metadata not updated for {base}: {e}")
            self.report.record(path, 'failed', str(e))
            return
        except (MediaOrganizerError, OSError) as e:
            logging.error(f"Skipping {base}: {e}")
            self.report.record(path, 'failed', str(e))
            return

        after = path.stat().st_mtime
        logging.info(
            f"Updated: {base} from {_display_time(before)} to {_display_time(after)} "
            f"(Unix timestamp: {ts} = {stamp})"
        )
        self.report.record(path, 'updated', stamp)

        if self.mover:
            self.mover.move_file(path)
