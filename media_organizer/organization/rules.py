import os
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Type

from .. import config
from ..exceptions import PreconditionError


def split_name(filename: str) -> Tuple[str, str]:
    """Splits 'name.ext' into ('name', 'ext'); ext is '' when there is none."""
    if '.' in filename:
        stem, ext = filename.rsplit('.', 1)
        return stem, ext
    return filename, ''


def _join(stem: str, suffix: str, ext: str) -> str:
    name = f"{stem}_{suffix}"
    return f"{name}.{ext.lower()}" if ext else name


class CollisionPolicy:
    """Picks a free destination name when the original one is taken."""
    name = ''

    def resolve(self, folder: Path, filename: str) -> Path:
        raise NotImplementedError


class TimestampSuffix(CollisionPolicy):
    """
    Appends the current time, e.g. 'photo_20240101153000.jpg'.

    Only one candidate is tried. Two collisions within the same second map
    to the same name.
    """
    name = config.COLLISION_TIMESTAMP

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    def resolve(self, folder: Path, filename: str) -> Path:
        dest = folder / filename
        if dest.exists():
            stem, ext = split_name(filename)
            suffix = self.clock().strftime(config.COLLISION_SUFFIX_FORMAT)
            dest = folder / _join(stem, suffix, ext)
        return dest


class IncrementingCounter(CollisionPolicy):
    """Appends _1, _2, ... until the name is free."""
    name = config.COLLISION_COUNTER

    def resolve(self, folder: Path, filename: str) -> Path:
        dest = folder / filename
        stem, ext = split_name(filename)
        counter = 1
        while dest.exists():
            dest = folder / _join(stem, str(counter), ext)
            counter += 1
        return dest


POLICIES: Dict[str, Type[CollisionPolicy]] = {
    TimestampSuffix.name: TimestampSuffix,
    IncrementingCounter.name: IncrementingCounter,
}


def get_policy(name: str = config.DEFAULT_COLLISION_POLICY) -> CollisionPolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise PreconditionError(
            f"Unknown collision policy '{name}' (choose from {', '.join(sorted(POLICIES))})"
        ) from None


def copy_owner(path: Path, owner_uid: int) -> None:
    """Gives path the same owner as the target root. Failure is only logged."""
    if not hasattr(os, "chown"):
        return
    try:
        if path.stat().st_uid != owner_uid:
            os.chown(path, owner_uid, -1)
    except OSError as e:
        logging.warning(f"Cannot change owner of {path}: {e}")


class DestinationPlanner:
    """
    Computes target_root/YYYY/MM/<basename>, creating the folder on demand.
    """

    def __init__(self, target_root: Path,
                 policy: Optional[CollisionPolicy] = None,
                 chown: bool = True,
                 dry_run: bool = False):
        self.target_root = target_root
        self.policy = policy or get_policy()
        self.chown = chown
        self.dry_run = dry_run

    def folder_for(self, year: str, month: str) -> Path:
        return self.target_root / config.FOLDER_PATTERN.format(year=year, month=month)

    def resolve_destination(self, src: Path, year: str, month: str) -> Path:
        folder = self.folder_for(year, month)
        if not self.dry_run:
            self._ensure_folder(folder)
        return self.policy.resolve(folder, src.name)

    def owner_uid(self) -> int:
        return self.target_root.stat().st_uid

    def _ensure_folder(self, folder: Path):
        if folder.is_dir():
            return
        folder.mkdir(parents=True, exist_ok=True)
        if self.chown:
            uid = self.owner_uid()
            # Year folder may be new as well
            for d in (folder.parent, folder):
                copy_owner(d, uid)
