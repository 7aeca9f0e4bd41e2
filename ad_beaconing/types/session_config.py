from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MetadataType(str, Enum):
    """Which ad tracking metadata snapshot is authoritative."""

    LATEST_ONLY = "latestOnly"
    CUMULATIVE = "cumulative"


class SessionConfig(BaseModel):
    model_config: ConfigDict = ConfigDict(frozen=True)

    is_init_request: bool = Field(
        default=True, description="Initialise the session with a POST request"
    )
    automatically_preserves_time_offset_from_live: bool = False
    metadata_type: MetadataType = MetadataType.LATEST_ONLY
