import os
from typing import Final

from pydantic import BaseModel, Field

AD_BEACONING_TIMEOUT_NAME: Final[str] = "AD_BEACONING_TIMEOUT"
AD_BEACONING_CONNECT_TIMEOUT_NAME: Final[str] = "AD_BEACONING_CONNECT_TIMEOUT"
AD_BEACONING_DISCONTINUITY_TOLERANCE_NAME: Final[str] = (
    "AD_BEACONING_DISCONTINUITY_TOLERANCE"
)
AD_BEACONING_MAX_LOG_MESSAGES_NAME: Final[str] = "AD_BEACONING_MAX_LOG_MESSAGES"

DEFAULT_TIMEOUT: Final[float] = 10.0
DEFAULT_CONNECT_TIMEOUT: Final[float] = 5.0
DEFAULT_DISCONTINUITY_TOLERANCE: Final[float] = 5.0
DEFAULT_MAX_LOG_MESSAGES: Final[int] = 1000


class Settings(BaseModel):
    """Runtime settings for a beaconing session, overridable from the environment."""

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Total timeout of resolution requests",
    )
    connect_timeout: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT, gt=0, description="Connect timeout"
    )
    discontinuity_tolerance: float = Field(
        default=DEFAULT_DISCONTINUITY_TOLERANCE,
        ge=0,
        description="Seconds a playhead sample may drift before it counts as a seek",
    )
    max_log_messages: int = Field(
        default=DEFAULT_MAX_LOG_MESSAGES,
        gt=0,
        description="Number of log messages kept for the debug overlay",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        env_values = {
            "timeout": os.getenv(AD_BEACONING_TIMEOUT_NAME),
            "connect_timeout": os.getenv(AD_BEACONING_CONNECT_TIMEOUT_NAME),
            "discontinuity_tolerance": os.getenv(
                AD_BEACONING_DISCONTINUITY_TOLERANCE_NAME
            ),
            "max_log_messages": os.getenv(AD_BEACONING_MAX_LOG_MESSAGES_NAME),
        }
        return cls.model_validate({k: v for k, v in env_values.items() if v})
