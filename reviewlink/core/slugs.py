"""
Slug allocation for new projects.

Slugs are derived from the uploaded file's name and probed against existing
project records. Allocation does not reserve anything: the slug is taken once
the caller writes the project's metadata record.
"""

import logging
import re
import secrets
import unicodedata
from typing import Callable, Optional

from reviewlink.config import SLUG_MAX_ATTEMPTS
from reviewlink.core.security.constants import MAX_SLUG_LENGTH

logger = logging.getLogger(__name__)

PLACEHOLDER_SLUG = "video"

# Leaves room for "-<counter>" or "-<random>" suffixes
_BASE_MAX_LENGTH = MAX_SLUG_LENGTH - 12


def slugify(name: str) -> str:
    """
    Normalize a display name into a URL-safe slug.

    Diacritics are stripped, the result is lowercased and every run of
    characters other than a-z/0-9 becomes a single hyphen.
    """
    text = unicodedata.normalize("NFKD", name or "")
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    text = text[:_BASE_MAX_LENGTH].rstrip("-")
    return text or PLACEHOLDER_SLUG


class SlugAllocator:
    """Finds a slug that no existing project uses."""

    def __init__(
        self,
        exists: Callable[[str], bool],
        max_attempts: int = SLUG_MAX_ATTEMPTS,
        token_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Args:
            exists: Probe returning True when a project already has the slug
            max_attempts: Probes (bare candidate included) before falling
                back to a random suffix
            token_factory: Source of random suffixes
        """
        self.exists = exists
        self.max_attempts = max(1, max_attempts)
        self.token_factory = token_factory or (lambda: secrets.token_hex(3))

    def allocate(self, base_name: str) -> str:
        base = slugify(base_name)

        for attempt in range(self.max_attempts):
            candidate = base if attempt == 0 else f"{base}-{attempt}"
            if not self.exists(candidate):
                return candidate

        logger.info(
            f"Slug {base} collided {self.max_attempts} times, using a random suffix"
        )
        while True:
            candidate = f"{base}-{self.token_factory()}"
            if not self.exists(candidate):
                return candidate
