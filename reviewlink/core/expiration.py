"""
Project retention policy.

Expiration is evaluated lazily whenever a project is read or listed; there
is no background sweep.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from reviewlink.config import RETENTION_DAYS
from reviewlink.core.repositories.models import VideoProject

RETENTION = timedelta(days=RETENTION_DAYS)


def expires_at(project: VideoProject, retention: timedelta = RETENTION) -> datetime:
    return project.created_at + retention


def is_expired(
    project: VideoProject,
    now: Optional[datetime] = None,
    retention: timedelta = RETENTION,
) -> bool:
    """True once the project is at least `retention` old."""
    now = now or datetime.now(timezone.utc)
    return now - project.created_at >= retention
