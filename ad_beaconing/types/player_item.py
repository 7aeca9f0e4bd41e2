from pydantic import BaseModel, ConfigDict, Field


class PlayerItem(BaseModel):
    """A playable item handed to the host player on reload."""

    model_config: ConfigDict = ConfigDict(frozen=True)

    url: str = Field(..., description="Manifest URL to play")
    automatically_preserves_time_offset_from_live: bool = False
