"""
Project/version model operations.

Projects are treated as values: each operation returns a new VideoProject
and leaves persisting it to the caller.
"""

from typing import Optional

from reviewlink.core.repositories.models import VideoProject, VideoVersion
from reviewlink.core.security.validation import validate_project_name


def next_version_number(project: VideoProject) -> int:
    if not project.versions:
        return 1
    return max(v.version for v in project.versions) + 1


def append_version(project: VideoProject, new_version: VideoVersion) -> VideoProject:
    """Append an upload as the project's next version number."""
    numbered = new_version.model_copy(update={"version": next_version_number(project)})
    return project.model_copy(update={"versions": [*project.versions, numbered]})


def rename_project(project: VideoProject, new_name: str) -> VideoProject:
    """
    Replace the project's display title.

    Returns the same instance when the name is unchanged, so callers can
    skip the write.

    Raises:
        ValidationError: If the new name is empty
    """
    name = validate_project_name(new_name)
    if name == project.original_name:
        return project
    return project.model_copy(update={"original_name": name})


def sort_versions_descending(project: VideoProject) -> VideoProject:
    ordered = sorted(project.versions, key=lambda v: v.version, reverse=True)
    return project.model_copy(update={"versions": ordered})


def latest_version(project: VideoProject) -> Optional[VideoVersion]:
    if not project.versions:
        return None
    return max(project.versions, key=lambda v: v.version)


def find_version(project: VideoProject, number: int) -> Optional[VideoVersion]:
    for version in project.versions:
        if version.version == number:
            return version
    return None
