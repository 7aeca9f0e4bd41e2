from typing import Final

from .client import AdBeaconingAsyncClient, ResolutionFailure, SessionResolver
from .config import Settings
from .session import AdBeaconingSession, Player, PlayheadTracker, SessionState
from .types import DataRange, MetadataType, SessionConfig, SessionInfo

__version__: Final[str] = "0.1.0"

__all__ = [
    "AdBeaconingAsyncClient",
    "AdBeaconingSession",
    "DataRange",
    "MetadataType",
    "Player",
    "PlayheadTracker",
    "ResolutionFailure",
    "SessionConfig",
    "SessionInfo",
    "SessionResolver",
    "SessionState",
    "Settings",
]
