"""
Security Constants

Centralized constants for security module.
"""

# Maximum lengths for user inputs
MAX_SLUG_LENGTH = 100
MAX_VIDEO_ID_LENGTH = 100
MAX_FILENAME_LENGTH = 200
MAX_TITLE_LENGTH = 500
MAX_AUTHOR_LENGTH = 100

# Uploads
VIDEO_CONTENT_TYPE_PREFIX = "video/"
DEFAULT_VIDEO_EXTENSION = ".mp4"
THUMBNAIL_EXTENSION = ".jpg"

# Keys used as blob names: letters, digits, dot, hyphen, underscore
SAFE_KEY_PATTERN = r"^[a-zA-Z0-9_.-]+$"
