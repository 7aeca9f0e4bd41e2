from .ad_beaconing_session import AdBeaconingSession
from .player import Player
from .playhead_tracker import PlayheadTracker
from .reactive_bindings import ReactiveBindings, Trigger
from .session_state import SessionState

__all__ = [
    "AdBeaconingSession",
    "Player",
    "PlayheadTracker",
    "ReactiveBindings",
    "SessionState",
    "Trigger",
]
