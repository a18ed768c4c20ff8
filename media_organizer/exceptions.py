"""
Custom exception hierarchy for the media organizer.

Precondition errors abort a run before any file is touched. Everything else
is raised per file and caught by the pipelines, which skip the file and
carry on with the batch.
"""


class MediaOrganizerError(Exception):
    """Base exception for all media organizer errors."""
    pass


class PreconditionError(MediaOrganizerError):
    """Raised when a run cannot start (bad root, bad option value)."""
    pass


class MissingToolError(PreconditionError):
    """Raised when a required external command is not on PATH."""
    pass


class InvalidTimestampError(MediaOrganizerError):
    """Raised when a filename does not encode a usable Unix timestamp."""
    pass


class MetadataReadError(MediaOrganizerError):
    """Raised when metadata cannot be read from a file."""
    pass


class MetadataWriteError(MediaOrganizerError):
    """Raised when metadata cannot be written to a file."""
    pass


class FileOperationError(MediaOrganizerError):
    """Raised when file move/timestamp operations fail."""
    pass
