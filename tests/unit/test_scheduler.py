# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for ControlScheduler."""

from sharebrowser.session.scheduler import ControlScheduler


class TestControlSchedulerJoinLeave:
    """Tests for queue membership."""

    def test_empty_queue_has_no_holder(self):
        """Test an empty queue has no holder."""
        scheduler = ControlScheduler()

        assert scheduler.current_holder() is None
        assert scheduler.is_holder("a") is False
        assert scheduler.is_holder(None) is False
        assert len(scheduler) == 0

    def test_first_participant_holds_control(self):
        """Test the first participant to join holds control."""
        scheduler = ControlScheduler()

        scheduler.join("a")
        scheduler.join("b")

        assert scheduler.current_holder() == "a"
        assert scheduler.is_holder("a") is True
        assert scheduler.is_holder("b") is False
        assert scheduler.ordered_ids() == ["a", "b"]

    def test_join_is_idempotent(self):
        """Test joining twice does not duplicate the participant."""
        scheduler = ControlScheduler()

        assert scheduler.join("a") is True
        assert scheduler.join("a") is False
        assert scheduler.ordered_ids() == ["a"]

    def test_holder_leaving_promotes_next(self):
        """Test the next participant holds control when the holder leaves."""
        scheduler = ControlScheduler()
        for pid in ("a", "b", "c"):
            scheduler.join(pid)

        assert scheduler.leave("a") is True

        assert scheduler.current_holder() == "b"
        assert scheduler.ordered_ids() == ["b", "c"]

    def test_non_holder_leaving_keeps_holder(self):
        """Test removing a waiting participant does not move control."""
        scheduler = ControlScheduler()
        for pid in ("a", "b", "c"):
            scheduler.join(pid)

        scheduler.leave("b")

        assert scheduler.current_holder() == "a"
        assert scheduler.ordered_ids() == ["a", "c"]

    def test_leave_unknown(self):
        """Test leaving when not queued is a no-op."""
        scheduler = ControlScheduler()
        scheduler.join("a")

        assert scheduler.leave("zzz") is False
        assert scheduler.ordered_ids() == ["a"]

    def test_last_participant_leaving(self):
        """Test the queue empties cleanly."""
        scheduler = ControlScheduler()
        scheduler.join("a")
        scheduler.leave("a")

        assert scheduler.current_holder() is None
        assert scheduler.ordered_ids() == []


class TestControlSchedulerAdvance:
    """Tests for voluntary release."""

    def test_advance_rotates_holder_to_back(self):
        """Test releasing moves the holder behind everyone else."""
        scheduler = ControlScheduler()
        for pid in ("a", "b", "c"):
            scheduler.join(pid)

        assert scheduler.advance() == "b"
        assert scheduler.ordered_ids() == ["b", "c", "a"]
        assert scheduler.position("a") == 2

    def test_advance_single_participant(self):
        """Test a lone participant keeps control after release."""
        scheduler = ControlScheduler()
        scheduler.join("a")

        assert scheduler.advance() == "a"

    def test_advance_empty(self):
        """Test advancing an empty queue."""
        assert ControlScheduler().advance() is None


class TestControlSchedulerViews:
    """Tests for read-only views."""

    def test_position(self):
        """Test zero-based positions."""
        scheduler = ControlScheduler()
        scheduler.join("a")
        scheduler.join("b")

        assert scheduler.position("a") == 0
        assert scheduler.position("b") == 1
        assert scheduler.position("c") is None

    def test_snapshot_is_a_copy(self):
        """Test ordered_ids cannot mutate the queue."""
        scheduler = ControlScheduler()
        scheduler.join("a")

        scheduler.ordered_ids().append("b")

        assert scheduler.ordered_ids() == ["a"]
        assert "a" in scheduler
        assert list(scheduler) == ["a"]
