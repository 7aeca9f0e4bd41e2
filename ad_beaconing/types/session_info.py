import itertools
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

_session_counter = itertools.count(1)


def new_local_session_id() -> str:
    """ISO-8601 timestamp plus a process-wide counter, unique per call."""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="microseconds")
    return f"{timestamp}#{next(_session_counter)}"


class SessionInfo(BaseModel):
    """Resolved pairing of manifest URL and ad-tracking metadata URL.

    Instances are frozen; a new resolution replaces the whole object.
    """

    model_config: ConfigDict = ConfigDict(frozen=True)

    local_session_id: str = Field(default="", description="Local session token")
    media_url: str = Field(default="", description="URL the session was created from")
    manifest_url: str = Field(default="", description="Playable manifest URL")
    ad_tracking_metadata_url: str = Field(
        default="", description="URL of the ad tracking metadata document"
    )

    @classmethod
    def create(
        cls, *, media_url: str, manifest_url: str, ad_tracking_metadata_url: str
    ) -> "SessionInfo":
        return cls(
            local_session_id=new_local_session_id(),
            media_url=media_url,
            manifest_url=manifest_url,
            ad_tracking_metadata_url=ad_tracking_metadata_url,
        )
