import logging
from pathlib import Path
from typing import Optional

import filetype

from .. import config


def sniff_mime(path: Path) -> Optional[str]:
    """Returns the content-based MIME type of a file, or None if unknown."""
    try:
        kind = filetype.guess(str(path))
    except OSError as e:
        logging.debug(f"Cannot sniff {path}: {e}")
        return None
    return kind.mime if kind else None


def classify(path: Path) -> str:
    """
    Classifies a file as 'image', 'video' or 'unsupported' by its content.
    The extension is never consulted.
    """
    mime = sniff_mime(path)
    if mime in config.IMAGE_MIMES:
        return config.KIND_IMAGE
    if mime in config.VIDEO_MIMES:
        return config.KIND_VIDEO
    return config.KIND_UNSUPPORTED
