import logging
from typing import TYPE_CHECKING

from ad_beaconing.types.log_message import LogLevel, LogMessage

if TYPE_CHECKING:
    from ad_beaconing.session.session_state import SessionState

_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def log(
    message: str,
    *,
    to: "SessionState | None",
    level: LogLevel,
    logger: logging.Logger,
    source: str = "",
) -> None:
    """Send a diagnostic to the stdlib logger and, if given, the session state.

    Debug messages stay out of the session's log so the overlay only shows
    what the viewer-facing integration cares about.
    """
    logger.log(_LOGGING_LEVELS[level], message)
    if to is not None and level is not LogLevel.DEBUG:
        to.append_log_message(
            LogMessage(message=message, source=source or logger.name, level=level)
        )
