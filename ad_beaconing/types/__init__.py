from .data_range import DataRange
from .init_response import InitResponse
from .log_message import LogLevel, LogMessage
from .player_item import PlayerItem
from .session_config import MetadataType, SessionConfig
from .session_info import SessionInfo, new_local_session_id

__all__ = [
    "DataRange",
    "InitResponse",
    "LogLevel",
    "LogMessage",
    "MetadataType",
    "PlayerItem",
    "SessionConfig",
    "SessionInfo",
    "new_local_session_id",
]
