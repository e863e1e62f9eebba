"""
Program guide data models.
Maps to the Broadcaster server's /api/guide schema (camelCase on the wire).
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class Program(BaseModel):
    """A scheduled program; `is_current` comes from the server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    start_ms: int = Field(alias="startTime")
    end_ms: int = Field(alias="endTime")
    duration_seconds: int = Field(alias="duration")
    is_current: bool = Field(alias="isCurrent")

    @property
    def id(self) -> str:
        """Rendering identity: start time plus title."""
        return f"{self.start_ms}-{self.title}"

    @property
    def start(self) -> datetime:
        return datetime.fromtimestamp(self.start_ms / 1000, tz=timezone.utc)

    @property
    def end(self) -> datetime:
        return datetime.fromtimestamp(self.end_ms / 1000, tz=timezone.utc)

    @property
    def duration_minutes(self) -> int:
        return self.duration_seconds // 60

    @property
    def formatted_duration(self) -> str:
        """Human duration, e.g. "1h 30m" or "45m"."""
        hours = self.duration_seconds // 3600
        minutes = (self.duration_seconds % 3600) // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"


class GuideChannel(BaseModel):
    """One channel's schedule, assumed chronological and non-overlapping."""
    name: str
    slug: str
    schedule: list[Program] = Field(default_factory=list)


class GuideData(BaseModel):
    """Response of GET /api/guide."""

    model_config = ConfigDict(populate_by_name=True)

    day_start_ms: int = Field(alias="dayStart")
    channels: dict[str, GuideChannel] = Field(default_factory=dict)

    @property
    def day_start(self) -> datetime:
        return datetime.fromtimestamp(self.day_start_ms / 1000, tz=timezone.utc)
