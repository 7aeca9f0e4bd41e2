import logging
import time
from typing import Callable

from ad_beaconing.config import DEFAULT_DISCONTINUITY_TOLERANCE
from ad_beaconing.session.session_state import SessionState
from ad_beaconing.types.data_range import DataRange
from ad_beaconing.utils.merge_ranges import find_containing

logger = logging.getLogger(__name__)


class PlayheadTracker:
    """Accumulates watched time from player position samples.

    `observe` runs on every sample from the host's position observer and must
    stay synchronous. A sample that lands more than `tolerance` seconds away
    from where continuous playback would have put it is treated as a seek: the
    gap is never counted as watched, and a landing spot outside all watched
    ranges opens an out-of-range event that the next continuous sample closes.
    Seeks made while paused are remembered and applied when playback resumes.
    """

    def __init__(
        self,
        state: SessionState,
        *,
        tolerance: float = DEFAULT_DISCONTINUITY_TOLERANCE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state
        self.tolerance = tolerance
        self.clock = clock

        self.latest_playhead: float = 0
        self._latest_sample_time: float | None = None
        self._was_playing = False
        self._seek_pending = False
        self._out_of_range_open = False

    def reset(self) -> None:
        self.latest_playhead = 0
        self._latest_sample_time = None
        self._was_playing = False
        self._seek_pending = False
        self._out_of_range_open = False

    def observe(self, position: float, is_playing: bool) -> None:
        now = self.clock()
        previous_playhead = self.latest_playhead
        previous_sample_time = self._latest_sample_time
        was_playing = self._was_playing

        self.latest_playhead = position
        self._latest_sample_time = now
        self._was_playing = is_playing

        if previous_sample_time is None:
            if is_playing:
                self.state.merge_watched_range(DataRange(start=position, end=position))
            return

        expected = previous_playhead
        if was_playing:
            expected += now - previous_sample_time

        if not is_playing:
            # Playback may have stopped anywhere between the two samples; a
            # jump while paused is applied on the next playing sample
            if not (
                previous_playhead - self.tolerance
                <= position
                <= expected + self.tolerance
            ):
                self._seek_pending = True
            return

        if abs(position - expected) > self.tolerance or self._seek_pending:
            self._seek_pending = False
            self._on_discontinuity(previous_playhead, position)
            return

        self.state.merge_watched_range(
            DataRange(
                start=min(previous_playhead, position),
                end=max(previous_playhead, position),
            )
        )
        if self._out_of_range_open:
            self.state.extend_out_of_range(position)
            self._out_of_range_open = False

    def _on_discontinuity(self, previous_playhead: float, position: float) -> None:
        logger.debug(f"Playhead jumped from {previous_playhead} to {position}")

        self._out_of_range_open = False
        if find_containing(self.state.watched_ranges, position) is None:
            self.state.append_out_of_range(DataRange(start=position, end=position))
            self._out_of_range_open = True
