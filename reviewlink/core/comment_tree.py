"""
Comment tree building and playback tracking.

Comments are stored as one flat list per project. Presentation works on
views of that list: filtered to a version, nested into reply trees, and
scanned for the comment that matches the current playback position.
"""

from typing import Dict, Iterable, List, Optional, Union

from reviewlink.config import ACTIVE_COMMENT_LEAD_SECONDS
from reviewlink.core.exceptions import NotFoundError
from reviewlink.core.repositories.models import Comment, CommentWithReplies
from reviewlink.core.security.validation import ALL_VERSIONS, validate_version_selector


def sort_by_timestamp(comments: Iterable[Comment]) -> List[Comment]:
    # sorted() is stable, so equal timestamps keep insertion order
    return sorted(comments, key=lambda c: c.timestamp)


def filter_by_version(
    comments: Iterable[Comment],
    version: Union[int, str] = ALL_VERSIONS,
) -> List[Comment]:
    """Keep comments left on one version, or all of them for "all"."""
    selector = validate_version_selector(version)
    if selector == ALL_VERSIONS:
        return list(comments)
    return [c for c in comments if c.version == selector]


def _sort_tree(nodes: List[CommentWithReplies]) -> List[CommentWithReplies]:
    ordered = sort_by_timestamp(nodes)
    for node in ordered:
        node.replies = _sort_tree(node.replies)
    return ordered


def nest(comments: Iterable[Comment]) -> List[CommentWithReplies]:
    """
    Build reply trees from a flat comment list.

    A comment whose parent_id names a top-level comment in the list becomes
    one of its replies, so trees are at most one reply deep. Every other
    comment is returned at the top level: no parent, a parent missing from
    the list, or a parent that is itself a reply (which also covers cycles).
    Every level is ordered by timestamp.
    """
    comments = list(comments)
    nodes: Dict[str, CommentWithReplies] = {
        c.id: CommentWithReplies.from_comment(c) for c in comments
    }

    roots: List[CommentWithReplies] = []
    for comment in comments:
        node = nodes[comment.id]
        parent = nodes.get(comment.parent_id) if comment.parent_id else None
        if parent is not None and parent.parent_id is None:
            parent.replies.append(node)
        else:
            roots.append(node)

    return _sort_tree(roots)


def _latest_reached(ordered: List[Comment], playback_time: float, lead: float) -> Optional[str]:
    active = None
    for comment in ordered:
        if comment.timestamp - lead > playback_time:
            break
        active = comment.id
    return active


def compute_active_comment(
    comments: Iterable[Comment],
    playback_time: float,
    lead: float = ACTIVE_COMMENT_LEAD_SECONDS,
) -> Optional[str]:
    """
    Id of the comment most recently reached by playback, or None.

    A comment counts as reached `lead` seconds before its timestamp.
    """
    return _latest_reached(sort_by_timestamp(comments), playback_time, lead)


class PlaybackTracker:
    """
    Tracks the active comment of one player while a version plays.

    Comments are sorted once up front so update() stays a plain linear scan
    however often the player reports its position.
    """

    def __init__(self, comments: Iterable[Comment], lead: float = ACTIVE_COMMENT_LEAD_SECONDS):
        self.comments = sort_by_timestamp(comments)
        self.lead = lead
        self.position = 0.0
        self.active_id: Optional[str] = None

    def update(self, playback_time: float) -> Optional[str]:
        self.position = playback_time
        self.active_id = _latest_reached(self.comments, playback_time, self.lead)
        return self.active_id

    def seek_target(self, comment_id: str) -> float:
        """Playback position to jump to for a comment."""
        for comment in self.comments:
            if comment.id == comment_id:
                return comment.timestamp
        raise NotFoundError(f"Comment {comment_id} not found")

    def add(self, comment: Comment) -> None:
        """Track a newly posted comment and refresh the active one."""
        self.comments = sort_by_timestamp([*self.comments, comment])
        self.update(self.position)
