import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .. import config
from ..exceptions import MetadataReadError
from ..models import ResolvedDate
from .store import MetadataStore


class MediaDateResolver:
    """
    Works out when a media file was taken, for the move-by-date pipeline.

    Metadata fields are tried in order (the field list depends on the kind
    of file); the first non-empty value that is not a '0000...' placeholder
    wins. Without one, the filesystem mtime is used. The filename is never
    consulted.
    """

    def __init__(self, store: MetadataStore):
        self.store = store

    def resolve(self, path: Path, kind: str) -> ResolvedDate:
        for field in self.fields_for(kind):
            value = self._read(path, field)
            if self._usable(value):
                return self._split(value, field)

        # Fallback - filesystem mtime
        mtime = path.stat().st_mtime
        taken = datetime.fromtimestamp(mtime).strftime(config.METADATA_DATE_FORMAT)
        return self._split(taken, 'mtime')

    @staticmethod
    def fields_for(kind: str) -> List[str]:
        if kind == config.KIND_VIDEO:
            return config.VIDEO_DATE_FIELDS
        return config.IMAGE_DATE_FIELDS

    def _read(self, path: Path, field: str) -> Optional[str]:
        try:
            return self.store.read(path, field)
        except MetadataReadError as e:
            logging.debug(f"Reading {field} failed for {path}: {e}")
            return None

    @staticmethod
    def _usable(value: Optional[str]) -> bool:
        if not value or value.startswith(config.ZERO_DATE_PREFIX):
            return False
        try:
            datetime.strptime(value, config.METADATA_DATE_FORMAT)
        except ValueError:
            return False
        return True

    @staticmethod
    def _split(taken: str, source: str) -> ResolvedDate:
        year, month = taken.split(':')[:2]
        return ResolvedDate(year=year, month=month, taken=taken, source=source)
