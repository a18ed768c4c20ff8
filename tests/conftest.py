import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pytest
from PIL import Image

from media_organizer.exceptions import MetadataWriteError
from media_organizer.metadata.store import MetadataStore

# Smallest ISO-BMFF header that sniffs as video/mp4
MP4_HEADER = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 32


class MemoryStore(MetadataStore):
    """In-memory MetadataStore keyed by file name."""

    def __init__(self, fields: Optional[Dict[str, Dict[str, str]]] = None, fail_on=()):
        self.fields = {name: dict(values) for name, values in (fields or {}).items()}
        self.fail_on = set(fail_on)
        self.writes = []

    def read(self, path: Path, field: str) -> Optional[str]:
        return self.fields.get(Path(path).name, {}).get(field)

    def write(self, path: Path, fields: Dict[str, str]) -> None:
        name = Path(path).name
        if name in self.fail_on:
            raise MetadataWriteError(f"cannot write {name}")
        self.writes.append((name, dict(fields)))
        self.fields.setdefault(name, {}).update(fields)


def set_mtime(path: Path, dt: datetime):
    ts = dt.timestamp()
    os.utime(path, (ts, ts))


@pytest.fixture
def make_jpeg():
    """Returns a factory that writes a small real JPEG."""
    def _make(path: Path, exif=None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", (10, 10), "white")
        if exif is not None:
            img.save(path, format="JPEG", exif=exif)
        else:
            img.save(path, format="JPEG")
        return path
    return _make


@pytest.fixture
def make_mp4():
    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(MP4_HEADER)
        return path
    return _make


@pytest.fixture
def store():
    return MemoryStore()
