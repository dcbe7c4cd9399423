import os
import logging
import logging.config
from pathlib import Path

# Base Paths
PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent

# Logging Setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_FILE_PATH = os.getenv(
    "LOG_FILE_PATH",
    str((PROJECT_ROOT / "logs" / "reviewlink.log").resolve()),
)

LOG_DIR = Path(LOG_FILE_PATH).parent
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": LOG_FORMAT,
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "filename": LOG_FILE_PATH,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        },
    },
    "loggers": {
        "reviewlink": {
            "handlers": ["console", "file"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "botocore": {"level": "WARNING"},
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger("reviewlink")


# Storage
# "local" keeps the uploads/ directory layout, "r2" talks to S3-compatible
# object storage, "memory" is process-local and lost on exit.
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()
UPLOADS_DIR = Path(os.getenv("UPLOADS_DIR", str(PROJECT_ROOT / "uploads")))

# Cloudflare R2 (S3-compatible object storage)
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID", "")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID", "")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY", "")
R2_ENDPOINT_URL = os.getenv(
    "R2_ENDPOINT_URL",
    f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com" if R2_ACCOUNT_ID else "",
)
R2_PREFIX = os.getenv("R2_PREFIX", "reviewlink").strip("/")

# -----------------------------------------------------------------------------
# Review Settings
# -----------------------------------------------------------------------------

RETENTION_DAYS = int(os.getenv("RETENTION_DAYS", "14"))
ACTIVE_COMMENT_LEAD_SECONDS = float(os.getenv("ACTIVE_COMMENT_LEAD_SECONDS", "0.5"))
SLUG_MAX_ATTEMPTS = int(os.getenv("SLUG_MAX_ATTEMPTS", "10"))
DEFAULT_AUTHOR = os.getenv("DEFAULT_AUTHOR", "Anonymous")
MAX_COMMENT_LENGTH = int(os.getenv("MAX_COMMENT_LENGTH", "5000"))

# Gemini (feedback summaries)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
DEBUG = not IS_PRODUCTION
