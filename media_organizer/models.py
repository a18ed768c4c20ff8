from dataclasses import dataclass
from pathlib import Path
from typing import Optional

@dataclass
class MediaFile:
    """
    A file found during a scan.
    """
    path: Path
    kind: str               # image/video/unsupported
    mtime: float

@dataclass
class DateWindow:
    """
    Optional modification-time bounds in epoch seconds.

    `after` is exclusive and `before` inclusive, the same way
    `find -newermt AFTER ! -newermt BEFORE` selects files: a file whose
    mtime equals `before` is kept, one whose mtime equals `after` is not.
    """
    after: Optional[float] = None
    before: Optional[float] = None

    def contains(self, mtime: float) -> bool:
        if self.after is not None and not mtime > self.after:
            return False
        if self.before is not None and mtime > self.before:
            return False
        return True

    @property
    def unbounded(self) -> bool:
        return self.after is None and self.before is None

@dataclass
class ResolvedDate:
    year: str
    month: str
    taken: str              # YYYY:MM:DD HH:MM:SS
    source: str             # metadata field name, or 'mtime'

@dataclass
class FileOutcome:
    path: Path
    status: str             # updated/moved/skipped/failed
    detail: str = ""
    destination: Optional[Path] = None
