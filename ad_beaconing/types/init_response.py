from pydantic import BaseModel, ConfigDict, Field


class InitResponse(BaseModel):
    """Body of the POST session initialisation response."""

    model_config: ConfigDict = ConfigDict(extra="allow", populate_by_name=True)

    manifest_url: str = Field(..., alias="manifestUrl", min_length=1)
    tracking_url: str = Field(..., alias="trackingUrl", min_length=1)
