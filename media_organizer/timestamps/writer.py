import os
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .. import config
from ..exceptions import FileOperationError
from ..metadata.store import MetadataStore
from ..scanning.mime import classify
from .parser import to_local_datetime


class TimestampWriter:
    """
    Stamps a file with a given instant: filesystem mtime/atime first, then
    the embedded metadata fields for its kind.

    There is no rollback. If the metadata write fails the new mtime stays.
    """

    def __init__(self, store: MetadataStore):
        self.store = store

    def apply(self, path: Path, instant: int, kind: Optional[str] = None) -> datetime:
        """
        Returns the local datetime that was written.

        Raises:
            InvalidTimestampError: instant cannot be formatted; file untouched.
            FileOperationError: mtime could not be set.
            MetadataWriteError: metadata write failed (mtime already set).
        """
        local_dt = to_local_datetime(instant)

        try:
            os.utime(path, (instant, instant))
        except OSError as e:
            raise FileOperationError(f"Cannot set mtime on {path}: {e}") from e

        if kind is None:
            kind = classify(path)

        fields = self.fields_for(kind, local_dt)
        if not fields:
            logging.debug(f"No metadata fields for {kind} file {path}")
            return local_dt

        self.store.write(path, fields)
        return local_dt

    @staticmethod
    def fields_for(kind: str, local_dt: datetime) -> Dict[str, str]:
        if kind == config.KIND_IMAGE:
            names = config.IMAGE_WRITE_FIELDS
        elif kind == config.KIND_VIDEO:
            names = config.VIDEO_WRITE_FIELDS
        else:
            return {}
        value = local_dt.strftime(config.METADATA_DATE_FORMAT)
        return {name: value for name in names}
