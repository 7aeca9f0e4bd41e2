"""Published state of a beaconing session."""

import logging
from typing import Any, Callable, Iterable, Mapping

from ad_beaconing.config import DEFAULT_MAX_LOG_MESSAGES
from ad_beaconing.types.data_range import DataRange
from ad_beaconing.types.log_message import LogMessage
from ad_beaconing.types.session_info import SessionInfo
from ad_beaconing.utils.merge_ranges import find_containing, merge_ranges

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]


class SessionState:
    """Single owner of the session's published fields.

    Every write assigns a new immutable value (a frozen model or a tuple), so a
    reader never sees a half-updated field. Observers are told the name of the
    field that changed after the new value is in place.
    """

    def __init__(self, *, max_log_messages: int = DEFAULT_MAX_LOG_MESSAGES):
        self.max_log_messages = max_log_messages

        self.session_info: SessionInfo = SessionInfo()
        self.ad_pods: tuple[Any, ...] = ()
        self.watched_ranges: tuple[DataRange, ...] = ()
        self.latest_data_range: DataRange | None = None
        self.played_time_outside_data_range: tuple[DataRange, ...] = ()
        self.log_messages: tuple[LogMessage, ...] = ()
        self.custom_headers: dict[str, str] = {}
        self.is_show_debug_overlay: bool = True

        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Registers `observer` and returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def current_session(self) -> SessionInfo:
        return self.session_info

    def replace_session(self, session_info: SessionInfo) -> None:
        """Replaces the session wholesale; watched time belongs to one session only."""
        logger.debug(f"Replacing session with {session_info.local_session_id}")

        self.session_info = session_info
        self.watched_ranges = ()
        self.latest_data_range = None
        self.played_time_outside_data_range = ()

        for field in (
            "session_info",
            "watched_ranges",
            "latest_data_range",
            "played_time_outside_data_range",
        ):
            self._publish(field)

    def set_ad_pods(self, ad_pods: Iterable[Any]) -> None:
        self.ad_pods = tuple(ad_pods)
        self._publish("ad_pods")

    def set_custom_headers(self, headers: Mapping[str, str]) -> None:
        self.custom_headers = dict(headers)
        self._publish("custom_headers")

    def set_debug_overlay_visible(self, visible: bool) -> None:
        self.is_show_debug_overlay = visible
        self._publish("is_show_debug_overlay")

    def append_log_message(self, entry: LogMessage) -> None:
        self.log_messages = (self.log_messages + (entry,))[-self.max_log_messages :]
        self._publish("log_messages")

    def merge_watched_range(self, data_range: DataRange) -> None:
        """Merges `data_range` into the watched ranges; contained ranges change nothing."""  # noqa: E501
        watched_ranges = merge_ranges(self.watched_ranges + (data_range,))
        latest_data_range = find_containing(watched_ranges, data_range.end)

        if watched_ranges != self.watched_ranges:
            self.watched_ranges = watched_ranges
            self._publish("watched_ranges")
        if latest_data_range != self.latest_data_range:
            self.latest_data_range = latest_data_range
            self._publish("latest_data_range")

    def append_out_of_range(self, data_range: DataRange) -> None:
        self.played_time_outside_data_range = self.played_time_outside_data_range + (
            data_range,
        )
        self._publish("played_time_outside_data_range")

    def extend_out_of_range(self, end: float) -> None:
        """Moves the end of the most recent out-of-range event forward to `end`."""
        if not self.played_time_outside_data_range:
            return

        *earlier, last = self.played_time_outside_data_range
        if end <= last.end:
            return

        self.played_time_outside_data_range = (
            *earlier,
            DataRange(start=last.start, end=end),
        )
        self._publish("played_time_outside_data_range")

    def _publish(self, field: str) -> None:
        for observer in list(self._observers):
            observer(field)
