"""
Playback state models published by the player controller.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from broadcaster.models.channel import Channel


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    ERROR = "error"


class PlaybackState(BaseModel):
    """Idle | Loading | Playing | Error(message)."""

    model_config = ConfigDict(frozen=True)

    status: PlaybackStatus = PlaybackStatus.IDLE
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "PlaybackState":
        return cls(status=PlaybackStatus.IDLE)

    @classmethod
    def loading(cls) -> "PlaybackState":
        return cls(status=PlaybackStatus.LOADING)

    @classmethod
    def playing(cls) -> "PlaybackState":
        return cls(status=PlaybackStatus.PLAYING)

    @classmethod
    def error(cls, message: str) -> "PlaybackState":
        return cls(status=PlaybackStatus.ERROR, message=message)

    @property
    def is_error(self) -> bool:
        return self.status == PlaybackStatus.ERROR


class PlayerStatus(str, Enum):
    """Status reported by the media player for the item it was asked to load."""
    READY = "ready"
    FAILED = "failed"
    UNKNOWN = "unknown"


class PlayerEvent(BaseModel):
    """A single status report from the media player."""

    model_config = ConfigDict(frozen=True)

    status: PlayerStatus
    error: Optional[str] = None


class PlayerSnapshot(BaseModel):
    """Immutable view of the controller handed to subscribers."""

    model_config = ConfigDict(frozen=True)

    channels: tuple[Channel, ...] = ()
    selected_index: Optional[int] = None
    state: PlaybackState = Field(default_factory=PlaybackState.idle)
    overlay_visible: bool = False
    retry_count: int = 0

    @property
    def current_channel(self) -> Optional[Channel]:
        if self.selected_index is None:
            return None
        return self.channels[self.selected_index]

    @property
    def display_number(self) -> int:
        """1-based channel number, 0 when nothing is selected."""
        return 0 if self.selected_index is None else self.selected_index + 1
