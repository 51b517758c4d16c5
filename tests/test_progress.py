# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for progress events and throttling."""

from copilot_asset_fetch import (
    INDETERMINATE,
    CancellationToken,
    ProgressEvent,
    ProgressThrottle,
    null_progress,
)
from copilot_asset_fetch.progress import progress_ratio


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestProgressRatio:
    """Tests for progress_ratio."""

    def test_known_length(self):
        assert progress_ratio(5, 10) == 0.5

    def test_clamps_overshoot(self):
        """Test ratios past the reported length are clamped."""
        assert progress_ratio(20, 10) == 1.0

    def test_unknown_length_is_indeterminate(self):
        assert progress_ratio(5, None) is INDETERMINATE
        assert progress_ratio(5, 0) is INDETERMINATE


class TestProgressEvent:
    """Tests for ProgressEvent."""

    def test_indeterminate_flag(self):
        assert ProgressEvent("fetch://streamingassets/a", None).is_indeterminate
        assert not ProgressEvent("fetch://streamingassets/a", 0.0).is_indeterminate

    def test_null_progress_accepts_events(self):
        assert null_progress(ProgressEvent("x://y/z", 0.5)) is None


class TestProgressThrottle:
    """Tests for ProgressThrottle."""

    def test_tick_respects_interval(self):
        """Test events are only delivered once the interval elapses."""
        clock = FakeClock()
        events = []
        throttle = ProgressThrottle("src://a/b", events.append, interval=0.1, clock=clock)

        assert throttle.tick(0.1) is False
        clock.now = 0.1
        assert throttle.tick(0.2) is True
        clock.now = 0.15
        assert throttle.tick(0.3) is False
        clock.now = 0.25
        assert throttle.tick(0.4) is True

        assert [event.progress for event in events] == [0.2, 0.4]
        assert all(event.locator == "src://a/b" for event in events)
        assert throttle.emitted == 2

    def test_emit_clamps_values(self):
        """Test emitted ratios are clamped to [0, 1]."""
        events = []
        throttle = ProgressThrottle("src://a/b", events.append)

        throttle.emit(1.5)
        throttle.emit(-0.2)
        throttle.emit(None)

        assert [event.progress for event in events] == [1.0, 0.0, None]

    def test_no_events_after_cancellation(self):
        """Test a cancelled token suppresses further events."""
        events = []
        token = CancellationToken()
        throttle = ProgressThrottle("src://a/b", events.append, interval=0.0, cancel_token=token)

        assert throttle.tick(0.5) is True
        token.cancel()
        assert throttle.tick(0.6) is False
        assert throttle.emit(0.7) is False

        assert len(events) == 1

    def test_failing_callback_is_contained(self, caplog):
        """Test a raising consumer does not propagate into the transfer."""
        def explode(event):
            raise RuntimeError("consumer bug")

        throttle = ProgressThrottle("src://a/b", explode, interval=0.0)

        assert throttle.tick(0.5) is False
        assert "Progress callback failed" in caplog.text

    def test_defaults_to_null_progress(self):
        """Test a throttle without a callback still emits."""
        throttle = ProgressThrottle("src://a/b", None, interval=0.0)

        assert throttle.tick(0.5) is True
