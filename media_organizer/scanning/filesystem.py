import os
import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..models import DateWindow


class CandidateScanner:
    """
    Enumerates candidate files under a root directory.

    Only regular files are yielded; symlinks and directories never are.
    Files are filtered by basename glob (case-insensitive), by an optional
    mtime window, and by path substrings to exclude.
    """

    def __init__(self,
                 recursive: bool = False,
                 patterns: Optional[Iterable[str]] = None,
                 window: Optional[DateWindow] = None,
                 exclude_substrings: Optional[Iterable[str]] = None):
        self.recursive = recursive
        self.patterns = [p.lower() for p in (patterns or ())]
        self.window = window or DateWindow()
        self.exclude_substrings = list(exclude_substrings or ())

    def scan(self, root: Path) -> Iterator[Path]:
        """Generator that yields every qualifying file under root."""
        for path in self._iter_files(root):
            if self._accepts(path):
                yield path

    def _accepts(self, path: Path) -> bool:
        if any(marker in str(path) for marker in self.exclude_substrings):
            logging.debug(f"Excluded: {path}")
            return False

        if self.patterns:
            name = path.name.lower()
            if not any(fnmatchcase(name, pat) for pat in self.patterns):
                return False

        if not self.window.unbounded:
            try:
                mtime = path.stat(follow_symlinks=False).st_mtime
            except OSError as e:
                logging.warning(f"Cannot stat {path}: {e}")
                return False
            if not self.window.contains(mtime):
                return False

        return True

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                logging.warning(f"Cannot read directory: {current}")
                continue

            # Sort for stable display order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            if self.recursive:
                # Push dirs to stack (reversed so we process A before Z)
                for d in reversed(dirs):
                    stack.append(d)

            for f in files:
                yield f
