import shutil
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import FileOperationError
from .rules import copy_owner


class FileMover:
    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def move(self, src: Path, dest: Path, owner_uid: Optional[int] = None):
        """
        Relocates src to dest. The destination is expected to be free.
        """
        if self.dry_run:
            logging.info(f"[DRY RUN] Move {src} -> {dest}")
            return

        try:
            shutil.move(str(src), str(dest))
        except (OSError, shutil.Error) as e:
            raise FileOperationError(f"Failed to move {src} -> {dest}: {e}") from e

        if owner_uid is not None:
            copy_owner(dest, owner_uid)
