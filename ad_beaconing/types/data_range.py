from pydantic import BaseModel, ConfigDict, Field, model_validator


class DataRange(BaseModel):
    """Contiguous interval of playback time, in seconds."""

    model_config: ConfigDict = ConfigDict(frozen=True)

    start: float = Field(..., description="Interval start")
    end: float = Field(..., description="Interval end, never before start")

    @model_validator(mode="after")
    def _check_order(self) -> "DataRange":
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")
        return self

    def contains(self, position: float) -> bool:
        return self.start <= position <= self.end
