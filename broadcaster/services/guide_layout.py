"""
Guide layout engine.

Pure geometry over a day's schedule: every position is minutes since the
day start times pixels-per-minute. Nothing here reads the clock; callers pass
the current time in.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from broadcaster.config import get_settings
from broadcaster.models.channel import Channel
from broadcaster.models.guide import GuideChannel, GuideData, Program

MS_PER_MINUTE = 60_000
HOURS_PER_DAY = 24
MIN_BLOCK_WIDTH = 60.0


class TimeMarker(NamedTuple):
    position: float
    label: str


class GuideRow(NamedTuple):
    index: int
    channel: Channel
    guide_channel: Optional[GuideChannel]


def hour_label(moment: datetime) -> str:
    """12-hour clock label such as "9 PM" or "12 AM"."""
    hour = moment.hour % 12 or 12
    return f"{hour} {'AM' if moment.hour < 12 else 'PM'}"


class GuideLayout:
    """Layout constants plus the functions that place programs on the timeline."""

    def __init__(
        self,
        pixels_per_minute: Optional[float] = None,
        row_height: Optional[float] = None,
        channel_column_width: Optional[float] = None,
        tz: Optional[tzinfo] = None,
    ):
        settings = get_settings()
        self.pixels_per_minute = (
            settings.pixels_per_minute if pixels_per_minute is None else pixels_per_minute
        )
        self.row_height = settings.row_height if row_height is None else row_height
        self.channel_column_width = (
            settings.channel_column_width
            if channel_column_width is None
            else channel_column_width
        )
        self.tz = tz if tz is not None else _settings_timezone(settings.guide_timezone)

    @property
    def total_width(self) -> float:
        """Width of the full 24 hour timeline."""
        return HOURS_PER_DAY * 60 * self.pixels_per_minute

    def offset(self, time_ms: int, day_start_ms: int) -> float:
        return (time_ms - day_start_ms) / MS_PER_MINUTE * self.pixels_per_minute

    def now_line_position(self, current_time_ms: int, day_start_ms: int) -> float:
        """May be negative or past `total_width`; the caller decides whether to draw it."""
        return self.offset(current_time_ms, day_start_ms)

    def block_position(self, program: Program, day_start_ms: int) -> float:
        return self.offset(program.start_ms, day_start_ms)

    def block_width(self, program: Program) -> float:
        # Short programs still get a block wide enough to read and select
        return max(MIN_BLOCK_WIDTH, program.duration_seconds / 60 * self.pixels_per_minute)

    def time_markers(self, day_start_ms: int) -> list[TimeMarker]:
        """One marker per hour of the displayed day, 24 in total."""
        start = datetime.fromtimestamp(day_start_ms / 1000, tz=timezone.utc)
        markers = []
        for hour in range(HOURS_PER_DAY):
            moment = (start + timedelta(hours=hour)).astimezone(self.tz)
            markers.append(TimeMarker(hour * 60 * self.pixels_per_minute, hour_label(moment)))
        return markers

    def ordered_channels(
        self, channels: list[Channel], guide_data: Optional[GuideData]
    ) -> list[GuideRow]:
        """Registry order is the display order; channels missing from the guide get no schedule."""
        schedules = guide_data.channels if guide_data else {}
        return [
            GuideRow(index, channel, schedules.get(channel.slug))
            for index, channel in enumerate(channels)
        ]


def _settings_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)
