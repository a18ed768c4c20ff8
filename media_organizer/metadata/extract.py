import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import exifread
from pymediainfo import MediaInfo

from .. import config
from ..scanning.mime import classify
from .store import MetadataStore, ExifToolStore


class NativeMetadataStore(MetadataStore):
    """
    Reads timestamp fields in-process and defers to another store for the rest.

    Strategies:
      - Images: Uses 'exifread' (fast, Python-native).
      - Video: Uses 'pymediainfo' (fast wrapper).
      - Anything unanswered, and every write: the fallback store (exiftool).
    """

    def __init__(self, fallback: Optional[MetadataStore] = None):
        self.fallback = fallback if fallback is not None else ExifToolStore()

    def read(self, path: Path, field: str) -> Optional[str]:
        kind = classify(path)
        value = None
        if kind == config.KIND_IMAGE and field in config.EXIFREAD_TAGS:
            value = self._read_exifread(path, config.EXIFREAD_TAGS[field])
        elif kind == config.KIND_VIDEO and field in config.MEDIAINFO_FIELDS:
            value = self._read_mediainfo(path, *config.MEDIAINFO_FIELDS[field])

        if value:
            return value
        if self.fallback is None:
            return None
        return self.fallback.read(path, field)

    def write(self, path: Path, fields: Dict[str, str]) -> None:
        self.fallback.write(path, fields)

    # --- Internal Extraction Helpers ---

    def _read_exifread(self, path: Path, tag: str) -> Optional[str]:
        try:
            with path.open('rb') as f:
                # details=False speeds up processing significantly
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            logging.debug(f"ExifRead failed for {path}: {e}")
            return None

        if tag not in tags:
            return None
        raw = str(tags[tag]).strip()
        dt = parse_flexible_date(raw)
        if dt:
            return dt.strftime(config.METADATA_DATE_FORMAT)
        # Placeholders such as '0000:00:00 00:00:00' are passed through as-is
        return raw or None

    def _read_mediainfo(self, path: Path, track_type: str, attr: str) -> Optional[str]:
        try:
            mi = MediaInfo.parse(str(path))
        except Exception as e:
            logging.debug(f"MediaInfo failed for {path}: {e}")
            return None

        for track in mi.tracks:
            if track.track_type != track_type:
                continue
            val = getattr(track, attr, None)
            if val:
                dt = parse_flexible_date(str(val))
                if dt:
                    return dt.strftime(config.METADATA_DATE_FORMAT)
        return None


def parse_flexible_date(dt_str: str) -> Optional[datetime]:
    """
    Handles various date formats (ISO, UTC suffixes, EXIF colons).
    Returns a naive datetime object.
    """
    if not dt_str:
        return None

    # Clean up common suffixes/prefixes
    clean = dt_str.replace("UTC", "").strip()

    # 1. Try ISO format (e.g. 2020-01-01T12:00:00)
    try:
        return datetime.fromisoformat(clean).replace(tzinfo=None)
    except ValueError:
        pass

    # 2. Try Standard EXIF style "YYYY:MM:DD HH:MM:SS"
    try:
        clean_exif = clean.replace(":", "-", 2)
        # Handle potential sub-second precision which strptime hates
        if "." in clean_exif:
            clean_exif = clean_exif.split(".")[0]
        return datetime.strptime(clean_exif, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        pass

    return None
