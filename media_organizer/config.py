"""
Configuration constants for the media organizer.
"""

# --- File Type Definitions ---
RAW_EXTS = {'.cr2', '.arw'}
IMAGE_EXTS = {'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tif', '.tiff', '.heic'} | RAW_EXTS
VIDEO_EXTS = {'.mp4', '.mov', '.avi', '.mkv'}

# Content-based MIME types (sniffed, never taken from the extension)
IMAGE_MIMES = {
    'image/jpeg', 'image/png', 'image/gif', 'image/bmp', 'image/tiff',
    'image/heic', 'image/x-canon-cr2', 'image/x-sony-arw',
}
VIDEO_MIMES = {
    'video/mp4', 'video/quicktime', 'video/x-msvideo', 'video/x-matroska',
}

KIND_IMAGE = 'image'
KIND_VIDEO = 'video'
KIND_UNSUPPORTED = 'unsupported'

# Glob patterns handed to the candidate filter, per --kind selection
KIND_PATTERNS = {
    'image': {f"*{ext}" for ext in IMAGE_EXTS},
    'video': {f"*{ext}" for ext in VIDEO_EXTS},
}
KIND_PATTERNS['all'] = KIND_PATTERNS['image'] | KIND_PATTERNS['video']

# --- Metadata Fields ---
# Read order for the "taken" date; first usable value wins.
IMAGE_DATE_FIELDS = ['DateTimeOriginal', 'CreateDate', 'ModifyDate']
VIDEO_DATE_FIELDS = ['DateTimeOriginal', 'CreateDate', 'TrackCreateDate', 'MediaCreateDate']

# Fields stamped by the timestamp repair
IMAGE_WRITE_FIELDS = ['DateTimeOriginal', 'CreateDate', 'ModifyDate']
VIDEO_WRITE_FIELDS = [
    'DateTimeOriginal', 'CreateDate', 'ModifyDate',
    'TrackCreateDate', 'TrackModifyDate',
    'MediaCreateDate', 'MediaModifyDate',
]

# exiftool field name -> exifread tag name
EXIFREAD_TAGS = {
    'DateTimeOriginal': 'EXIF DateTimeOriginal',
    'CreateDate': 'EXIF DateTimeDigitized',
    'ModifyDate': 'Image DateTime',
}

# exiftool field name -> (MediaInfo track type, attribute)
MEDIAINFO_FIELDS = {
    'CreateDate': ('General', 'encoded_date'),
    'ModifyDate': ('General', 'tagged_date'),
    'TrackCreateDate': ('Video', 'encoded_date'),
    'TrackModifyDate': ('Video', 'tagged_date'),
    'MediaCreateDate': ('Video', 'encoded_date'),
    'MediaModifyDate': ('Video', 'tagged_date'),
}

# --- Formats ---
METADATA_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
COLLISION_SUFFIX_FORMAT = "%Y%m%d%H%M%S"

# Dates starting with this are placeholders written by some cameras
ZERO_DATE_PREFIX = "0000"

# --- Filename Timestamps ---
SECONDS_DIGITS = 10
MILLIS_DIGITS = 13

# --- Organization ---
# Synology thumbnail artifacts; never moved
THUMBNAIL_MARKER = "SYNOPHOTO_THUMB"
FOLDER_PATTERN = "{year}/{month}"

COLLISION_COUNTER = 'counter'
COLLISION_TIMESTAMP = 'timestamp'
DEFAULT_COLLISION_POLICY = COLLISION_COUNTER

# --- External Tools ---
EXIFTOOL = "exiftool"
