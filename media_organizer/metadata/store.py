import json
import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional

from .. import config
from ..exceptions import MetadataReadError, MetadataWriteError, MissingToolError


def require_tool(name: str) -> str:
    """Returns the full path of an external command, or raises MissingToolError."""
    found = shutil.which(name)
    if not found:
        raise MissingToolError(f"'{name}' command not found")
    return found


class MetadataStore(ABC):
    """
    Reads and writes embedded timestamp fields by their exiftool names
    (DateTimeOriginal, CreateDate, TrackCreateDate, ...).

    Values are exchanged as 'YYYY:MM:DD HH:MM:SS' strings.
    """

    @abstractmethod
    def read(self, path: Path, field: str) -> Optional[str]:
        """Returns the field's value, or None when absent or empty."""

    @abstractmethod
    def write(self, path: Path, fields: Dict[str, str]) -> None:
        """Writes all fields in one go. Raises MetadataWriteError on failure."""


class ExifToolStore(MetadataStore):
    """
    Wraps the 'exiftool' command line utility.
    Must be installed and on the system PATH.
    """

    def __init__(self, executable: str = config.EXIFTOOL):
        self.executable = executable

    def read(self, path: Path, field: str) -> Optional[str]:
        return self.read_fields(path, [field]).get(field)

    def read_fields(self, path: Path, fields: Iterable[str]) -> Dict[str, str]:
        """Reads several fields with a single exiftool invocation."""
        fields = list(fields)
        # -j = JSON output
        # -d = format every date field the same way
        cmd = [self.executable, "-j", "-d", config.METADATA_DATE_FORMAT]
        cmd += [f"-{f}" for f in fields]
        cmd += ["--", str(path)]

        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise MetadataReadError(f"Cannot run {self.executable}: {e}") from e

        if proc.returncode != 0 or not proc.stdout.strip():
            logging.debug(f"exiftool read failed for {path}: {proc.stderr.strip()}")
            return {}

        try:
            data_list = json.loads(proc.stdout)
        except ValueError as e:
            raise MetadataReadError(f"Unreadable exiftool output for {path}: {e}") from e

        if not data_list:
            return {}

        tags = data_list[0]
        values = {}
        for f in fields:
            val = tags.get(f)
            if val is not None and str(val).strip():
                values[f] = str(val).strip()
        return values

    def write(self, path: Path, fields: Dict[str, str]) -> None:
        # -P keeps the filesystem mtime that was just set
        cmd = [self.executable, "-overwrite_original", "-P"]
        cmd += [f"-{name}={value}" for name, value in fields.items()]
        cmd += ["--", str(path)]

        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise MetadataWriteError(f"Cannot run {self.executable}: {e}") from e

        if proc.returncode != 0:
            msg = proc.stderr.strip() or proc.stdout.strip()
            raise MetadataWriteError(f"exiftool failed for {path}: {msg}")
