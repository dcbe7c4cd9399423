"""
Tests for comment nesting, version filtering and active comment tracking.

Run with: pytest tests/test_comment_tree.py -v
"""

import pytest

from reviewlink.core.comment_tree import (
    PlaybackTracker,
    compute_active_comment,
    filter_by_version,
    nest,
)
from reviewlink.core.exceptions import NotFoundError, ValidationError

from tests.conftest import make_comment


class TestNest:
    """Tests for nest()."""

    def test_replies_attach_and_levels_sort(self):
        comments = [
            make_comment("a", 5),
            make_comment("b", 1, parent_id="a"),
            make_comment("c", 2),
        ]
        tree = nest(comments)

        assert [n.id for n in tree] == ["c", "a"]
        assert [r.id for r in tree[1].replies] == ["b"]
        assert tree[0].replies == []

    def test_dangling_parent_is_top_level(self):
        comments = [make_comment("a", 3), make_comment("orphan", 1, parent_id="missing")]
        tree = nest(comments)
        assert [n.id for n in tree] == ["orphan", "a"]

    def test_replies_sorted_by_timestamp(self):
        comments = [
            make_comment("a", 1),
            make_comment("r3", 9, parent_id="a"),
            make_comment("r1", 2, parent_id="a"),
            make_comment("r2", 4, parent_id="a"),
        ]
        tree = nest(comments)
        assert [r.id for r in tree[0].replies] == ["r1", "r2", "r3"]

    def test_equal_timestamps_keep_insertion_order(self):
        comments = [make_comment("x", 4), make_comment("y", 4), make_comment("z", 4)]
        assert [n.id for n in nest(comments)] == ["x", "y", "z"]

    def test_reply_listed_before_parent(self):
        comments = [make_comment("b", 1, parent_id="a"), make_comment("a", 5)]
        tree = nest(comments)
        assert [n.id for n in tree] == ["a"]
        assert [r.id for r in tree[0].replies] == ["b"]

    def test_self_parent_is_top_level(self):
        tree = nest([make_comment("a", 1, parent_id="a")])
        assert [n.id for n in tree] == ["a"]

    def test_reply_cycle_keeps_both_comments(self):
        comments = [make_comment("a", 1, parent_id="b"), make_comment("b", 2, parent_id="a")]
        tree = nest(comments)
        assert [n.id for n in tree] == ["a", "b"]
        assert all(n.replies == [] for n in tree)

    def test_reply_to_reply_is_top_level(self):
        comments = [
            make_comment("a", 1),
            make_comment("b", 2, parent_id="a"),
            make_comment("c", 3, parent_id="b"),
        ]
        tree = nest(comments)
        assert [n.id for n in tree] == ["a", "c"]
        assert [r.id for r in tree[0].replies] == ["b"]
        assert tree[0].replies[0].replies == []

    def test_empty(self):
        assert nest([]) == []

    def test_does_not_mutate_input(self):
        comments = [make_comment("a", 5), make_comment("b", 1, parent_id="a")]
        nest(comments)
        assert [c.id for c in comments] == ["a", "b"]
        assert not hasattr(comments[0], "replies")


class TestFilterByVersion:
    """Tests for filter_by_version()."""

    @pytest.fixture
    def comments(self):
        return [
            make_comment("a", 1, version=1),
            make_comment("b", 2, version=2),
            make_comment("c", 3, version=2),
        ]

    def test_exact_match(self, comments):
        assert [c.id for c in filter_by_version(comments, 2)] == ["b", "c"]

    def test_all(self, comments):
        assert filter_by_version(comments, "all") == comments

    def test_numeric_string(self, comments):
        assert [c.id for c in filter_by_version(comments, "1")] == ["a"]

    def test_unknown_version_is_empty(self, comments):
        assert filter_by_version(comments, 9) == []

    def test_invalid_selector(self, comments):
        with pytest.raises(ValidationError):
            filter_by_version(comments, "latest")

    def test_filter_then_nest_drops_cross_version_parent(self):
        comments = [
            make_comment("a", 5, version=1),
            make_comment("b", 6, version=2, parent_id="a"),
        ]
        tree = nest(filter_by_version(comments, 2))
        assert [n.id for n in tree] == ["b"]


class TestComputeActiveComment:
    """Tests for compute_active_comment()."""

    @pytest.fixture
    def comments(self):
        return [make_comment("t9", 9), make_comment("t2", 2), make_comment("t5", 5)]

    def test_lead_in_activates_next_marker(self, comments):
        assert compute_active_comment(comments, 4.6) == "t5"

    def test_before_first_marker(self, comments):
        assert compute_active_comment(comments, 1.0) is None

    def test_past_last_marker(self, comments):
        assert compute_active_comment(comments, 100) == "t9"

    def test_exact_threshold(self, comments):
        assert compute_active_comment(comments, 1.5) == "t2"
        assert compute_active_comment(comments, 4.4) == "t2"

    def test_no_comments(self):
        assert compute_active_comment([], 10) is None

    def test_custom_lead(self, comments):
        assert compute_active_comment(comments, 4.6, lead=0) == "t2"


class TestPlaybackTracker:
    """Tests for PlaybackTracker."""

    def test_update_tracks_position(self):
        tracker = PlaybackTracker([make_comment("t5", 5), make_comment("t2", 2)])
        assert tracker.active_id is None
        assert tracker.update(2.0) == "t2"
        assert tracker.update(4.7) == "t5"
        assert tracker.active_id == "t5"
        assert tracker.update(0.0) is None

    def test_seek_target(self):
        tracker = PlaybackTracker([make_comment("t5", 5)])
        assert tracker.seek_target("t5") == 5.0
        with pytest.raises(NotFoundError):
            tracker.seek_target("nope")

    def test_add_refreshes_active(self):
        tracker = PlaybackTracker([make_comment("t2", 2)])
        tracker.update(6.0)
        tracker.add(make_comment("t6", 6))
        assert tracker.active_id == "t6"
