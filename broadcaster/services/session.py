"""
Broadcaster session.
Wires persistence, the directory client, the channel registry, the playback
controller and the guide into one object the remote-control API drives.
"""
import logging
from typing import Optional

from broadcaster.models.server import ServerConfig
from broadcaster.services.channel_registry import ChannelRegistry
from broadcaster.services.connection import ServerConnection
from broadcaster.services.directory_client import DirectoryClient, get_directory_client
from broadcaster.services.guide import GuideService
from broadcaster.services.media_player import MediaPlayer, ProbingMediaPlayer
from broadcaster.services.persistence import PersistenceService, get_persistence
from broadcaster.services.playback import PlaybackController

logger = logging.getLogger(__name__)


class BroadcasterSession:
    """Everything that lives for as long as the client is running."""

    def __init__(
        self,
        persistence: PersistenceService,
        player: Optional[MediaPlayer] = None,
        client: Optional[DirectoryClient] = None,
        registry: Optional[ChannelRegistry] = None,
        controller: Optional[PlaybackController] = None,
        guide: Optional[GuideService] = None,
    ):
        self.persistence = persistence
        self.client = client or get_directory_client()
        self.player = player or ProbingMediaPlayer()
        self.registry = registry if registry is not None else ChannelRegistry(self.client)
        self.controller = controller or PlaybackController(
            self.registry, self.player, persistence, self.client
        )
        self.guide = guide or GuideService(self.client)
        self.connection = ServerConnection(persistence, self.client)

    @property
    def config(self) -> Optional[ServerConfig]:
        return self.controller.config

    async def start(self):
        """Resume the saved server, if there is one."""
        config = await self.connection.load_saved_config()
        if config is None:
            logger.info("No saved server, waiting for connect")
            return
        self.connection.is_connected = True
        await self.configure(config)

    async def configure(self, config: ServerConfig):
        self.guide.configure(config)
        await self.controller.configure(config)

    async def connect(self, host: str, port: str) -> Optional[ServerConfig]:
        self.connection.host = host
        self.connection.port = port
        config = await self.connection.connect()
        if config:
            await self.configure(config)
        return config

    async def connect_production(self) -> Optional[ServerConfig]:
        config = await self.connection.use_production_server()
        if config:
            await self.configure(config)
        return config

    async def disconnect(self):
        await self.controller.disconnect()
        self.guide.configure(None)
        await self.connection.disconnect()
        logger.info("Disconnected from server")

    def shutdown(self):
        self.controller.shutdown()
        self.guide.stop_time_updates()


# Singleton
_session: Optional[BroadcasterSession] = None


async def get_session() -> BroadcasterSession:
    """Get or create the session singleton."""
    global _session
    if _session is None:
        _session = BroadcasterSession(await get_persistence())
    return _session
