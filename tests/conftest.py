"""
Pytest configuration and fixtures for Broadcaster tests.
"""
import json
import pytest
from typing import Optional

from broadcaster.errors import DirectoryError
from broadcaster.models.channel import Channel, ChannelManifest
from broadcaster.models.guide import GuideData
from broadcaster.models.playback import PlayerEvent, PlayerStatus
from broadcaster.models.server import ServerConfig

DAY_START = 1_765_497_600_000  # 2025-12-12 00:00 UTC


class FakePersistence:
    """In-memory stand-in for PersistenceService."""

    def __init__(self, server_config=None, last_channel=None):
        self.server_config = server_config
        self.last_channel = last_channel
        self.cleared = False

    async def get_server_config(self):
        return self.server_config

    async def set_server_config(self, config):
        self.server_config = config

    async def get_last_channel_slug(self):
        return self.last_channel

    async def set_last_channel_slug(self, slug):
        self.last_channel = slug

    async def clear_all(self):
        self.server_config = None
        self.last_channel = None
        self.cleared = True


class FakePlayer:
    """Records what the controller asks of the media player."""

    def __init__(self):
        self.loads: list[tuple[str, Optional[object]]] = []
        self.playing = False
        self.seek_count = 0

    @property
    def is_playing(self):
        return self.playing

    @property
    def current_url(self):
        return self.loads[-1][0] if self.loads else None

    def load(self, url, on_status=None):
        self.loads.append((url, on_status))

    def play(self):
        self.playing = True

    def pause(self):
        self.playing = False

    def seek_to_live(self):
        self.seek_count += 1

    def report(self, status: PlayerStatus, error: Optional[str] = None, load: int = -1):
        """Deliver a status report for one of the recorded loads (latest by default)."""
        handler = self.loads[load][1]
        assert handler is not None, "placeholder loads have no status handler"
        handler(PlayerEvent(status=status, error=error))

    def fail(self, error: str = "HTTP 503", load: int = -1):
        self.report(PlayerStatus.FAILED, error, load)

    def ready(self, load: int = -1):
        self.report(PlayerStatus.READY, load=load)


class FakeDirectoryClient:
    """Directory client returning canned data or raising a canned error."""

    def __init__(self, manifest=None, guide=None, error: Optional[DirectoryError] = None):
        self.manifest = manifest
        self.guide = guide
        self.error = error
        self.manifest_calls = 0
        self.guide_calls = 0

    async def fetch_manifest(self, config):
        self.manifest_calls += 1
        if self.error:
            raise self.error
        return self.manifest

    async def fetch_guide(self, config):
        self.guide_calls += 1
        if self.error:
            raise self.error
        return self.guide

    async def validate(self, config):
        manifest = await self.fetch_manifest(config)
        return len(manifest.channels) > 0


@pytest.fixture
def server_config():
    return ServerConfig(host="192.168.1.100", port=12121)


@pytest.fixture
def sample_manifest_json():
    """Manifest payload as served by GET /manifest.json."""
    return {
        "channels": [
            {"name": "News", "slug": "news"},
            {"name": "Movies", "slug": "movies"},
            {"name": "Sports", "slug": "sports"},
        ],
        "upcoming": [{"name": "Kids", "slug": "kids"}],
    }


@pytest.fixture
def sample_manifest(sample_manifest_json):
    return ChannelManifest.model_validate(sample_manifest_json)


@pytest.fixture
def channels(sample_manifest):
    return list(sample_manifest.channels)


@pytest.fixture
def sample_guide_json():
    """Guide payload as served by GET /api/guide."""
    return {
        "dayStart": DAY_START,
        "channels": {
            "news": {
                "name": "News",
                "slug": "news",
                "schedule": [
                    {
                        "title": "Morning News",
                        "startTime": DAY_START,
                        "endTime": DAY_START + 3_600_000,
                        "duration": 3600,
                        "isCurrent": False,
                    },
                    {
                        "title": "Weather Update",
                        "startTime": DAY_START + 3_600_000,
                        "endTime": DAY_START + 3_900_000,
                        "duration": 300,
                        "isCurrent": True,
                    },
                ],
            },
            "movies": {"name": "Movies", "slug": "movies", "schedule": []},
        },
    }


@pytest.fixture
def sample_guide(sample_guide_json):
    return GuideData.model_validate(sample_guide_json)


@pytest.fixture
def sample_guide_bytes(sample_guide_json):
    return json.dumps(sample_guide_json).encode()


@pytest.fixture
def persistence():
    return FakePersistence()


@pytest.fixture
def player():
    return FakePlayer()
