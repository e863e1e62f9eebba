"""
Tests for the guide layout engine.
"""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from broadcaster.models.channel import Channel
from broadcaster.models.guide import Program
from broadcaster.services.guide_layout import GuideLayout, hour_label

from conftest import DAY_START


def program(start_ms: int, duration_seconds: int, title: str = "Show") -> Program:
    return Program(
        title=title,
        start_ms=start_ms,
        end_ms=start_ms + duration_seconds * 1000,
        duration_seconds=duration_seconds,
        is_current=False,
    )


@pytest.fixture
def layout():
    return GuideLayout(pixels_per_minute=10, row_height=90, channel_column_width=200, tz=timezone.utc)


class TestPositions:
    """Block and now-line geometry."""

    def test_program_at_day_start_is_at_zero(self, layout):
        assert layout.block_position(program(DAY_START, 1800), DAY_START) == 0

    def test_block_position_scales_with_minutes(self, layout):
        assert layout.block_position(program(DAY_START + 90 * 60_000, 1800), DAY_START) == 900

    def test_block_width_from_duration(self, layout):
        assert layout.block_width(program(DAY_START, 3600)) == 600

    @pytest.mark.parametrize("duration", [0, 60, 300])
    def test_block_width_has_floor(self, layout, duration):
        assert layout.block_width(program(DAY_START, duration)) >= 60
        assert layout.block_width(program(DAY_START, 0)) == 60

    def test_now_line(self, layout):
        assert layout.now_line_position(DAY_START + 30 * 60_000, DAY_START) == 300

    def test_now_line_can_be_negative_or_past_the_day(self, layout):
        assert layout.now_line_position(DAY_START - 60_000, DAY_START) == -10
        assert layout.now_line_position(DAY_START + 25 * 3_600_000, DAY_START) > layout.total_width

    def test_total_width(self, layout):
        assert layout.total_width == 14_400

    def test_explicit_zero_column_width_is_kept(self):
        layout = GuideLayout(channel_column_width=0, tz=timezone.utc)
        assert layout.channel_column_width == 0
        assert layout.pixels_per_minute == 10

    def test_deterministic(self, layout):
        first = layout.now_line_position(DAY_START + 12_345, DAY_START)
        assert layout.now_line_position(DAY_START + 12_345, DAY_START) == first


class TestTimeMarkers:
    """Hour ticks."""

    def test_exactly_24_increasing_markers(self, layout):
        markers = layout.time_markers(DAY_START)

        assert len(markers) == 24
        positions = [m.position for m in markers]
        assert positions[0] == 0
        assert all(b - a == 600 for a, b in zip(positions, positions[1:]))

    def test_labels_in_utc(self, layout):
        labels = [m.label for m in layout.time_markers(DAY_START)]
        assert labels[0] == "12 AM"
        assert labels[1] == "1 AM"
        assert labels[12] == "12 PM"
        assert labels[23] == "11 PM"

    def test_labels_follow_configured_timezone(self):
        layout = GuideLayout(pixels_per_minute=10, tz=ZoneInfo("America/New_York"))
        assert layout.time_markers(DAY_START)[0].label == "7 PM"

    def test_markers_even_without_day_start(self, layout):
        assert len(layout.time_markers(0)) == 24

    @pytest.mark.parametrize("hour,label", [(0, "12 AM"), (9, "9 AM"), (12, "12 PM"), (15, "3 PM")])
    def test_hour_label(self, hour, label):
        assert hour_label(datetime(2025, 1, 1, hour)) == label


class TestOrderedChannels:
    """Pairing registry channels with guide schedules."""

    def test_registry_order_wins(self, layout, channels, sample_guide):
        rows = layout.ordered_channels(channels, sample_guide)

        assert [row.channel.slug for row in rows] == ["news", "movies", "sports"]
        assert [row.index for row in rows] == [0, 1, 2]
        assert rows[0].guide_channel.schedule[0].title == "Morning News"
        assert rows[1].guide_channel.schedule == []

    def test_missing_schedule_is_none(self, layout, channels, sample_guide):
        rows = layout.ordered_channels(channels, sample_guide)
        assert rows[2].guide_channel is None

    def test_no_guide_data(self, layout):
        rows = layout.ordered_channels([Channel(name="A", slug="a")], None)
        assert rows[0].guide_channel is None
