from ._client import AdBeaconingAsyncClient
from .exceptions import ResolutionFailure
from .session_resolver import SessionResolver

__all__ = [
    "AdBeaconingAsyncClient",
    "ResolutionFailure",
    "SessionResolver",
]
