"""
Channel and manifest data models.
Maps to the Broadcaster server's manifest.json schema.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional


class Channel(BaseModel):
    """A live channel. The slug is unique and doubles as the stream path."""

    model_config = ConfigDict(frozen=True)

    name: str
    slug: str

    @property
    def id(self) -> str:
        return self.slug


class ChannelManifest(BaseModel):
    """Response of GET /manifest.json."""
    channels: list[Channel]
    upcoming: Optional[list[Channel]] = None
