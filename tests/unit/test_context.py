"""
Unit tests for the context tracker.
"""

import pytest

from opencode_harness.memory import (
    ContextItem,
    ContextItemType,
    ContextTracker,
    ContextTrackerConfig,
)


def make_tracker(clock, **config) -> ContextTracker:
    return ContextTracker(ContextTrackerConfig(**config), clock=clock)


def find(tracker: ContextTracker, path: str) -> ContextItem:
    return next(i for i in tracker.get_state().items if i.path == path)


# =============================================================================
# Tracking
# =============================================================================


class TestTracking:
    """Tests for the track_* operations."""

    def test_track_file(self, clock):
        """Test tracking a new file."""
        tracker = make_tracker(clock)
        item = tracker.track_file("src/app.py", 1200, summary="entry point")

        assert item.kind == ContextItemType.FILE
        assert item.importance == pytest.approx(0.7)
        assert item.summary == "entry point"
        assert item.viewed_at == clock.now
        assert tracker.get_state().total_tokens_estimate == 1200

    def test_track_file_default_cost(self, clock):
        """Test that a file without a cost uses the default estimate."""
        tracker = make_tracker(clock)
        tracker.track_file("README.md")
        assert tracker.get_state().total_tokens_estimate == 500

    def test_track_symbol(self, clock):
        """Test tracking a function and a class."""
        tracker = make_tracker(clock)
        func = tracker.track_symbol("src/app.py", "main", 50)
        cls = tracker.track_symbol("src/app.py", "App", kind=ContextItemType.CLASS)

        assert func.path == "src/app.py#main"
        assert func.kind == ContextItemType.FUNCTION
        assert func.importance == pytest.approx(0.8)
        assert cls.kind == ContextItemType.CLASS
        assert tracker.get_state().total_tokens_estimate == 50 + 400

    def test_track_search(self, clock):
        """Test tracking a search query."""
        tracker = make_tracker(clock)
        item = tracker.track_search("TODO", 3)

        assert item.path == "search:TODO"
        assert item.summary == "3 results"
        assert item.importance == pytest.approx(0.5)
        assert tracker.get_state().total_tokens_estimate == 100

    def test_track_command_truncates_key(self, clock):
        """Test that command keys use the first 50 characters."""
        tracker = make_tracker(clock)
        command = "pytest " + "x" * 100
        item = tracker.track_command(command, 30)

        assert item.path == f"cmd:{command[:50]}"
        assert item.importance == pytest.approx(0.6)
        assert tracker.has_seen(f"cmd:{command[:50]}")

    def test_commands_sharing_prefix_merge(self, clock):
        """Test that commands with the same 50-char prefix are one item."""
        tracker = make_tracker(clock)
        prefix = "y" * 50
        tracker.track_command(prefix + " first", 10)
        tracker.track_command(prefix + " second", 10)

        state = tracker.get_state()
        assert len(state.items) == 1
        assert state.total_tokens_estimate == 10


class TestMergeRule:
    """Tests for re-observing an existing key."""

    def test_repeat_view_is_free(self, clock):
        """Test that seeing a key again adds no tokens."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 300)
        tracker.track_file("a.py", 9000)

        state = tracker.get_state()
        assert len(state.items) == 1
        assert state.total_tokens_estimate == 300

    def test_repeat_view_boosts_importance(self, clock):
        """Test the +0.1 boost per repeated view, capped at 1.0."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)

        expected = [0.8, 0.9, 1.0, 1.0, 1.0]
        for value in expected:
            tracker.track_file("a.py", 10)
            importance = find(tracker, "a.py").importance
            assert importance == pytest.approx(value)
            assert importance <= 1.0

    def test_repeat_view_refreshes_timestamp(self, clock):
        """Test that viewed_at moves to the latest observation."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)
        later = clock.advance(60)
        tracker.track_file("a.py", 10)

        assert find(tracker, "a.py").viewed_at == later

    def test_summary_only_replaced_when_given(self, clock):
        """Test that a repeat view without summary keeps the old one."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10, summary="first")
        tracker.track_file("a.py", 10)
        assert find(tracker, "a.py").summary == "first"

        tracker.track_file("a.py", 10, summary="second")
        assert find(tracker, "a.py").summary == "second"

    def test_distinct_items_bounded_by_distinct_keys(self, clock):
        """Test that item count never exceeds the number of distinct keys."""
        tracker = make_tracker(clock)
        keys = set()
        for i in range(40):
            name = f"f{i % 7}.py"
            tracker.track_file(name, 5)
            keys.add(name)
            tracker.track_search(f"q{i % 3}", i)
            keys.add(f"search:q{i % 3}")
            assert len(tracker.get_state().items) <= len(keys)

        assert len(tracker.get_state().items) == len(keys)


# =============================================================================
# Compaction Signal
# =============================================================================


class TestCompactionSignal:
    """Tests for needs_compaction and mark_compacted."""

    def test_threshold_is_inclusive(self, clock):
        """Test that reaching the threshold exactly triggers compaction."""
        tracker = make_tracker(clock, max_tokens=1000, compaction_threshold=0.8)
        tracker.track_file("a.py", 799)
        assert tracker.get_state().needs_compaction is False

        tracker.track_file("b.py", 1)
        assert tracker.get_state().needs_compaction is True

    def test_usage_percent(self, clock):
        """Test usage as a fraction of the budget."""
        tracker = make_tracker(clock, max_tokens=2000)
        tracker.track_file("a.py", 500)
        assert tracker.usage_percent == pytest.approx(0.25)

    def test_mark_compacted(self, clock):
        """Test that mark_compacted clears the flag and stamps the time."""
        tracker = make_tracker(clock, max_tokens=100)
        tracker.track_file("a.py", 100)
        assert tracker.get_state().needs_compaction is True

        tracker.mark_compacted()
        state = tracker.get_state()
        assert state.needs_compaction is False
        assert state.last_compaction_at == clock.now
        # Items are untouched
        assert len(state.items) == 1

    def test_mark_compacted_twice(self, clock):
        """Test that a second call only moves the timestamp."""
        tracker = make_tracker(clock, max_tokens=100)
        tracker.track_file("a.py", 100)

        tracker.mark_compacted()
        first = tracker.get_state()
        clock.advance(30)
        tracker.mark_compacted()
        second = tracker.get_state()

        assert second.last_compaction_at == clock.now
        assert second.model_dump(exclude={"last_compaction_at"}) == first.model_dump(
            exclude={"last_compaction_at"}
        )

    def test_next_track_reevaluates(self, clock):
        """Test that tracking after mark_compacted re-raises the flag."""
        tracker = make_tracker(clock, max_tokens=100)
        tracker.track_file("a.py", 100)
        tracker.mark_compacted()

        tracker.track_file("a.py")
        assert tracker.get_state().needs_compaction is True


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    """Tests for state snapshots and ordering."""

    def test_get_state_is_a_snapshot(self, clock):
        """Test that changing a snapshot does not affect the tracker."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)

        state = tracker.get_state()
        state.items[0].importance = 0.0
        state.items.clear()
        state.total_tokens_estimate = 0

        fresh = tracker.get_state()
        assert len(fresh.items) == 1
        assert fresh.items[0].importance == pytest.approx(0.7)
        assert fresh.total_tokens_estimate == 10

    def test_has_seen_is_exact(self, clock):
        """Test exact key membership."""
        tracker = make_tracker(clock)
        tracker.track_file("src/app.py", 10)

        assert tracker.has_seen("src/app.py")
        assert not tracker.has_seen("src/app")
        assert not tracker.has_seen("app.py")

    def test_get_recent(self, clock):
        """Test recency ordering and limit."""
        tracker = make_tracker(clock)
        for name in ["a.py", "b.py", "c.py"]:
            tracker.track_file(name, 10)
            clock.advance()
        tracker.track_file("a.py", 10)

        recent = tracker.get_recent(2)
        assert [i.path for i in recent] == ["a.py", "c.py"]

    def test_get_by_importance_is_stable(self, clock):
        """Test importance ordering with ties in tracking order."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)
        tracker.track_search("needle", 1)
        tracker.track_file("b.py", 10)
        tracker.track_symbol("a.py", "main", 10)

        ordered = [i.path for i in tracker.get_by_importance()]
        assert ordered == ["a.py#main", "a.py", "b.py", "search:needle"]
        assert [i.path for i in tracker.get_important()] == ordered

    def test_reset(self, clock):
        """Test clearing all tracked state."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)
        tracker.reset()

        state = tracker.get_state()
        assert state.items == []
        assert state.total_tokens_estimate == 0
        assert not tracker.has_seen("a.py")


# =============================================================================
# Decay and Pruning
# =============================================================================


class TestDecayAndPrune:
    """Tests for apply_decay and prune."""

    def test_apply_decay(self, clock):
        """Test that decay scales every item."""
        tracker = make_tracker(clock, importance_decay_rate=0.5)
        tracker.track_file("a.py", 10)
        tracker.track_search("q", 1)
        tracker.apply_decay()

        assert find(tracker, "a.py").importance == pytest.approx(0.35)
        assert find(tracker, "search:q").importance == pytest.approx(0.25)

    def test_prune_removes_below_threshold(self, clock):
        """Test that prune drops items strictly below the threshold."""
        tracker = make_tracker(clock, importance_decay_rate=0.18)
        tracker.track_file("a.py", 42)
        tracker.track_search("q", 1)
        tracker.apply_decay()  # file 0.126, search 0.09

        removed = tracker.prune(0.1)

        assert [i.path for i in removed] == ["search:q"]
        assert tracker.has_seen("a.py")
        assert not tracker.has_seen("search:q")

    def test_prune_keeps_items_at_threshold(self, clock):
        """Test that an item exactly at the threshold survives."""
        tracker = make_tracker(clock)
        tracker.track_search("q", 1)
        assert tracker.prune(0.5) == []
        assert tracker.has_seen("search:q")

    def test_prune_recomputes_from_default_estimates(self, clock):
        """Test that the total is rebuilt from per-kind defaults."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 42)
        tracker.track_command("ls", 7)
        assert tracker.get_state().total_tokens_estimate == 49

        tracker.prune(0.1)
        assert tracker.get_state().total_tokens_estimate == 500 + 150

    def test_prune_reevaluates_compaction(self, clock):
        """Test that pruning can clear the compaction flag."""
        tracker = make_tracker(
            clock, max_tokens=1000, compaction_threshold=0.8, importance_decay_rate=0.1
        )
        tracker.track_file("big.py", 900)
        assert tracker.get_state().needs_compaction is True

        tracker.apply_decay()
        tracker.prune(0.1)

        state = tracker.get_state()
        assert state.items == []
        assert state.total_tokens_estimate == 0
        assert state.needs_compaction is False

    def test_track_after_prune_reindexes(self, clock):
        """Test that keys still merge correctly after a prune."""
        tracker = make_tracker(clock, importance_decay_rate=0.1)
        tracker.track_search("gone", 1)
        tracker.apply_decay()
        tracker.track_file("kept.py", 10)
        tracker.prune(0.1)

        tracker.track_file("kept.py", 10)
        assert len(tracker.get_state().items) == 1
        assert find(tracker, "kept.py").importance == pytest.approx(0.8)


# =============================================================================
# Formatting
# =============================================================================


class TestFormatForPrompt:
    """Tests for format_for_prompt."""

    def test_format_sections(self, clock):
        """Test the recent and important sections."""
        tracker = make_tracker(clock)
        tracker.track_file("a.py", 10)
        clock.advance()
        tracker.track_symbol("a.py", "main", 10)

        text = tracker.format_for_prompt()
        assert text.startswith("## Context Navigator")
        assert "**Recently Viewed:**" in text
        assert "- function: a.py#main" in text
        assert "- file: a.py" in text
        assert "**High Importance:**" in text
        assert "- [80%] a.py#main" in text
        assert "- [70%] a.py" in text
        assert "consider compacting" not in text

    def test_format_limits_to_five(self, clock):
        """Test that each section lists at most five items."""
        tracker = make_tracker(clock)
        for i in range(8):
            tracker.track_file(f"f{i}.py", 1)
            clock.advance()

        text = tracker.format_for_prompt()
        assert text.count("- file: ") == 5
        assert text.count("- [70%] ") == 5

    def test_format_compaction_warning(self, clock):
        """Test the trailing warning when compaction is needed."""
        tracker = make_tracker(clock, max_tokens=10)
        tracker.track_file("a.py", 10)

        text = tracker.format_for_prompt()
        assert text.splitlines()[-1].endswith("consider compacting**")


class TestContextItem:
    """Tests for the ContextItem model."""

    def test_importance_is_clamped(self):
        """Test clamping of out-of-range importance."""
        assert ContextItem(path="a", kind="file", importance=1.7).importance == 1.0
        assert ContextItem(path="a", kind="file", importance=-0.2).importance == 0.0
