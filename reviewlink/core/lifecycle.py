"""
Review service: project, version and comment lifecycle.

Coordinates uploads, cascading deletes, comment writes and expiration over
a BlobStore. Every read-modify-write of a metadata or comment blob runs
under a per-slug lock; lock order is always metadata before comments.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import PurePath
from threading import Lock
from typing import Callable, List, Optional, Union

from reviewlink.core.comment_tree import filter_by_version, nest
from reviewlink.core.exceptions import (
    BlobNotFoundError,
    NotFoundError,
    ProjectExpiredError,
    RepositoryError,
    ValidationError,
)
from reviewlink.core.expiration import RETENTION, expires_at, is_expired
from reviewlink.core.gemini import Summarizer
from reviewlink.core.locks import KeyedLock
from reviewlink.core.repositories import (
    Comment,
    CommentRepository,
    CommentWithReplies,
    ProjectRepository,
    StoredVideo,
    UploadedFile,
    VideoProject,
    VideoVersion,
)
from reviewlink.core.security import (
    ALL_VERSIONS,
    THUMBNAIL_EXTENSION,
    validate_author,
    validate_comment_id,
    validate_comment_text,
    validate_slug,
    validate_thumbnail_filename,
    validate_timestamp,
    validate_upload,
    validate_version_number,
    validate_video_id,
    video_extension,
)
from reviewlink.core.slugs import SlugAllocator
from reviewlink.core.storage import BlobKind, BlobStore
from reviewlink.core.versions import (
    append_version,
    find_version,
    rename_project,
    sort_versions_descending,
)
from reviewlink.schemas import (
    ProjectListing,
    SummaryComment,
    SummaryRequest,
    SummaryResponse,
    UploadResult,
)

logger = logging.getLogger(__name__)

# Returns JPEG bytes for a frame of the video, or None
Thumbnailer = Callable[[bytes, str], Optional[bytes]]

VIDEO_CONTENT_TYPES = {
    ".webm": "video/webm",
    ".ogv": "video/ogg",
    ".mov": "video/quicktime",
}
DEFAULT_VIDEO_CONTENT_TYPE = "video/mp4"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewService:
    """
    Entry point for every project, version and comment operation.

    Raises typed errors from reviewlink.core.exceptions: ValidationError for
    rejected input, NotFoundError (ProjectExpiredError for expired projects)
    for unknown records, StorageError for failed primary writes.
    """

    def __init__(
        self,
        store: BlobStore,
        thumbnailer: Optional[Thumbnailer] = None,
        summarizer: Optional[Summarizer] = None,
        clock: Callable[[], datetime] = _utcnow,
        retention: timedelta = RETENTION,
    ):
        self.store = store
        self.projects = ProjectRepository(store)
        self.comments = CommentRepository(store)
        self.slugs = SlugAllocator(self.projects.exists)
        self.thumbnailer = thumbnailer
        self.summarizer = summarizer
        self.clock = clock
        self.retention = retention
        self._locks = KeyedLock()
        self._allocation_lock = Lock()

    def _metadata_lock(self, slug: str):
        return self._locks.hold(f"metadata:{slug}")

    def _comments_lock(self, slug: str):
        return self._locks.hold(f"comments:{slug}")

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def get_project(self, slug: str) -> VideoProject:
        """
        Load a project with its versions newest first.

        An expired project is deleted on the spot and reported as gone.

        Raises:
            NotFoundError: If the project does not exist
            ProjectExpiredError: If the project has expired
        """
        slug = validate_slug(slug)
        project = self.projects.get(slug)

        if is_expired(project, self.clock(), self.retention):
            logger.info(f"Project {slug} expired on read, deleting")
            self.delete_project(slug)
            raise ProjectExpiredError(slug)

        return sort_versions_descending(project)

    def list_projects(self) -> List[ProjectListing]:
        """
        All live projects with their expiry time, most recently updated first.

        Expired projects are deleted as they are encountered and left out.
        Unreadable records are logged and skipped.
        """
        now = self.clock()
        projects: List[ProjectListing] = []

        for slug in self.projects.list_slugs():
            try:
                project = self.projects.get(slug)
            except NotFoundError:
                continue
            except RepositoryError as e:
                logger.error(f"Skipping unreadable project {slug}: {e}")
                continue

            if not project.is_live:
                continue

            if is_expired(project, now, self.retention):
                logger.info(f"Project {slug} expired, deleting")
                try:
                    self.delete_project(slug)
                except RepositoryError as e:
                    logger.error(f"Failed to delete expired project {slug}: {e}", exc_info=True)
                continue

            projects.append(
                ProjectListing(
                    **sort_versions_descending(project).model_dump(),
                    expires_at=expires_at(project, self.retention),
                )
            )

        projects.sort(key=lambda p: p.versions[0].uploaded_at, reverse=True)
        return projects

    def rename_project(self, slug: str, new_name: str) -> VideoProject:
        """
        Change a project's display title. Unchanged names are not rewritten.

        Raises:
            ValidationError: If the new name is empty
            NotFoundError: If the project does not exist or has expired
        """
        slug = self.get_project(slug).slug

        with self._metadata_lock(slug):
            project = self.projects.get(slug)
            renamed = rename_project(project, new_name)
            if renamed is not project:
                self.projects.save(renamed)
                logger.info(f"Renamed project {slug} to {renamed.original_name!r}")

        return sort_versions_descending(renamed)

    def delete_project(self, slug: str) -> None:
        """
        Delete a project with every version, thumbnail and comment.

        Idempotent: a missing project counts as already deleted. Blob cleanup
        is best effort; only the final metadata delete can fail the call.
        """
        slug = validate_slug(slug)

        with self._metadata_lock(slug), self._comments_lock(slug):
            try:
                project = self.projects.get(slug)
            except NotFoundError:
                logger.info(f"Project metadata for {slug} not found, skipping deletion")
                return

            video_keys = self._list_video_keys()
            for version in project.versions:
                for key in video_keys:
                    if key.startswith(version.video_id):
                        self._delete_blob_quietly(BlobKind.VIDEO, key)

                if version.thumbnail_filename:
                    self._delete_blob_quietly(BlobKind.THUMBNAIL, version.thumbnail_filename)

            try:
                self.comments.delete(slug)
            except NotFoundError:
                pass
            except RepositoryError as e:
                logger.error(f"Could not delete comments for project {slug}: {e}")

            try:
                self.projects.delete(slug)
            except NotFoundError:
                logger.info(f"Project metadata for {slug} already removed")
                return

        logger.info(f"Deleted project {slug} with {len(project.versions)} version(s)")

    def _list_video_keys(self) -> List[str]:
        try:
            return self.store.list(BlobKind.VIDEO)
        except RepositoryError as e:
            logger.error(f"Could not list video blobs: {e}")
            return []

    def _delete_blob_quietly(self, kind: BlobKind, key: str) -> None:
        try:
            self.store.delete(kind, key)
        except BlobNotFoundError:
            pass
        except RepositoryError as e:
            logger.error(f"Could not delete {kind.value} {key}: {e}")

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    def upload(self, file: UploadedFile, existing_slug: Optional[str] = None) -> UploadResult:
        """
        Store an uploaded video as a new project or as the next version of
        an existing one.

        The video and thumbnail blobs are written before the metadata that
        references them.

        Raises:
            ValidationError: If the file is empty or not a video
            NotFoundError: If existing_slug names no live project
        """
        file = validate_upload(file)
        if existing_slug is not None:
            existing_slug = self.get_project(existing_slug).slug

        video_id = str(uuid.uuid4())
        self.store.put(BlobKind.VIDEO, f"{video_id}{video_extension(file.filename)}", file.data)
        thumbnail_filename = self._store_thumbnail(file.data, video_id)

        new_version = VideoVersion(
            version=1,
            video_id=video_id,
            uploaded_at=self.clock(),
            original_name=file.filename or "video",
            thumbnail_filename=thumbnail_filename,
        )

        if existing_slug is not None:
            with self._metadata_lock(existing_slug):
                project = append_version(self.projects.get(existing_slug), new_version)
                self.projects.save(project)
            version = project.versions[-1].version
            logger.info(f"Added version {version} ({video_id}) to project {existing_slug}")
            return UploadResult(video_id=video_id, slug=existing_slug, version=version)

        base_name = PurePath(file.filename or "").stem
        with self._allocation_lock:
            slug = self.slugs.allocate(base_name)
            self.comments.create(slug)
            self.projects.save(
                VideoProject(
                    slug=slug,
                    original_name=file.filename or slug,
                    created_at=new_version.uploaded_at,
                    versions=[new_version],
                )
            )

        logger.info(f"Created project {slug} with video {video_id} ({file.size} bytes)")
        return UploadResult(video_id=video_id, slug=slug, version=1)

    def _store_thumbnail(self, data: bytes, video_id: str) -> Optional[str]:
        if self.thumbnailer is None:
            return None
        try:
            thumbnail = self.thumbnailer(data, video_id)
        except Exception as e:
            logger.warning(f"Thumbnail generation failed for {video_id}: {e}")
            return None
        if not thumbnail:
            return None

        filename = f"{video_id}{THUMBNAIL_EXTENSION}"
        self.store.put(BlobKind.THUMBNAIL, filename, thumbnail)
        return filename

    def get_video(self, video_id: str) -> StoredVideo:
        """
        Resolve a video blob by id; the stored filename carries an extension.

        Raises:
            NotFoundError: If no video blob starts with the id
        """
        video_id = validate_video_id(video_id)
        filename = next(
            (key for key in self.store.list(BlobKind.VIDEO) if key.startswith(video_id)),
            None,
        )
        if filename is None:
            raise NotFoundError(f"Video {video_id} not found")

        data = self.store.get(BlobKind.VIDEO, filename)
        suffix = PurePath(filename).suffix.lower()
        return StoredVideo(
            video_id=video_id,
            filename=filename,
            content_type=VIDEO_CONTENT_TYPES.get(suffix, DEFAULT_VIDEO_CONTENT_TYPE),
            data=data,
        )

    def get_thumbnail(self, filename: str) -> bytes:
        filename = validate_thumbnail_filename(filename)
        return self.store.get(BlobKind.THUMBNAIL, filename)

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    def list_comments(self, slug: str) -> List[Comment]:
        """
        Flat comment list of a live project; empty when none were stored.

        Raises:
            NotFoundError: If the project does not exist or has expired
        """
        project = self.get_project(slug)
        return self.comments.load_or_empty(project.slug)

    def get_comment_tree(
        self,
        slug: str,
        version: Union[int, str] = ALL_VERSIONS,
    ) -> List[CommentWithReplies]:
        return nest(filter_by_version(self.list_comments(slug), version))

    def post_comment(
        self,
        slug: str,
        text: str,
        timestamp: float,
        author: Optional[str] = None,
        version: int = 1,
        parent_id: Optional[str] = None,
    ) -> Comment:
        """
        Append a comment to a project's comment list.

        Replies may only target top-level comments.

        Raises:
            ValidationError: On empty text, a bad timestamp, an unknown
                version or a reply to a reply
            NotFoundError: If the project or the parent comment is missing
        """
        text = validate_comment_text(text)
        timestamp = validate_timestamp(timestamp)
        author = validate_author(author)
        version = validate_version_number(version)
        if parent_id is not None:
            parent_id = validate_comment_id(parent_id)

        project = self.get_project(slug)
        if find_version(project, version) is None:
            raise ValidationError(f"Project {project.slug} has no version {version}", field="version")

        with self._metadata_lock(project.slug), self._comments_lock(project.slug):
            # A concurrent delete may have removed the project since the read above
            if not self.projects.exists(project.slug):
                raise NotFoundError(f"Project {project.slug} not found")
            comments = self.comments.load_or_empty(project.slug)

            if parent_id is not None:
                parent = next((c for c in comments if c.id == parent_id), None)
                if parent is None:
                    raise NotFoundError(f"Parent comment {parent_id} not found")
                if parent.is_reply:
                    raise ValidationError("Replies cannot be nested", field="parent_id")

            comment = Comment(
                id=str(uuid.uuid4()),
                text=text,
                timestamp=timestamp,
                author=author,
                version=version,
                parent_id=parent_id,
            )
            comments.append(comment)
            self.comments.save(project.slug, comments)

        logger.debug(f"Posted comment {comment.id} on {project.slug} v{version} at {timestamp:.2f}s")
        return comment

    def edit_comment(self, slug: str, comment_id: str, new_text: str) -> Comment:
        """
        Replace the text of a comment, keeping every other field.

        Raises:
            ValidationError: On empty text
            NotFoundError: If the comment list or the comment is missing
        """
        slug = validate_slug(slug)
        comment_id = validate_comment_id(comment_id)
        new_text = validate_comment_text(new_text)

        with self._comments_lock(slug):
            comments = self.comments.load(slug)
            index = next((i for i, c in enumerate(comments) if c.id == comment_id), None)
            if index is None:
                raise NotFoundError(f"Comment {comment_id} not found")

            updated = comments[index].model_copy(update={"text": new_text})
            comments[index] = updated
            self.comments.save(slug, comments)

        logger.debug(f"Edited comment {comment_id} on {slug}")
        return updated

    # -------------------------------------------------------------------------
    # Summaries
    # -------------------------------------------------------------------------

    def summarize_feedback(self, slug: str, version: Union[int, str] = ALL_VERSIONS) -> str:
        """
        Summarize a project's feedback with the configured summarizer.

        Raises:
            ValidationError: If there are no comments to summarize
            RuntimeError: If no summarizer is configured
        """
        project = self.get_project(slug)
        comments = filter_by_version(self.comments.load_or_empty(project.slug), version)
        if not comments:
            raise ValidationError("There's no feedback to summarize yet.", field="comments")
        if self.summarizer is None:
            raise RuntimeError("No summarizer configured")

        request = SummaryRequest(
            comments=[SummaryComment(text=c.text, version=c.version) for c in comments],
            video_title=project.original_name,
        )
        response: SummaryResponse = self.summarizer.summarize(request)
        return response.summary
