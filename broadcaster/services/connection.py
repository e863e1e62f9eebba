"""
Server connection setup.
Validates user-entered server details before anything is persisted.
"""
import logging
from typing import Optional

from broadcaster.config import get_settings
from broadcaster.errors import DirectoryError
from broadcaster.models.server import ServerConfig
from broadcaster.services.directory_client import DirectoryClient, get_directory_client
from broadcaster.services.persistence import PersistenceService

logger = logging.getLogger(__name__)

EMPTY_HOST = "Please enter a server IP address"
INVALID_PORT = "Please enter a valid port number (1-65535)"
NO_CHANNELS = "Server has no channels available"
CONNECT_FAILED = "Unable to connect to server. Please check the IP address and port."


def parse_port(port: str) -> Optional[int]:
    try:
        number = int(str(port).strip())
    except ValueError:
        return None
    if not 0 < number <= 65535:
        return None
    return number


class ServerConnection:
    """Host and port inputs plus the connect flow."""

    def __init__(
        self,
        persistence: PersistenceService,
        client: Optional[DirectoryClient] = None,
    ):
        settings = get_settings()
        self.persistence = persistence
        self.client = client or get_directory_client()
        self.production_host = settings.production_server_host
        self.production_port = settings.production_server_port

        self.host = ""
        self.port = str(settings.default_server_port)
        self.is_connecting = False
        self.is_connected = False
        self.error_message: Optional[str] = None

    async def load_saved_config(self) -> Optional[ServerConfig]:
        """Pre-fill the inputs from the persisted server, if any."""
        config = await self.persistence.get_server_config()
        if config:
            self.host = config.host
            self.port = str(config.port)
        return config

    @property
    def current_config(self) -> Optional[ServerConfig]:
        port = parse_port(self.port)
        if not self.host or port is None:
            return None
        return ServerConfig(host=self.host, port=port)

    async def connect(self) -> Optional[ServerConfig]:
        """
        Validate the inputs against the server.

        Returns the config (now persisted) on success, or None with
        `error_message` set.
        """
        if not self.host:
            self.error_message = EMPTY_HOST
            return None

        port = parse_port(self.port)
        if port is None:
            self.error_message = INVALID_PORT
            return None

        self.is_connecting = True
        self.error_message = None
        config = ServerConfig(host=self.host, port=port)
        try:
            is_valid = await self.client.validate(config)
        except DirectoryError as e:
            logger.warning(f"Could not validate {config.base_url}: {e}")
            self.error_message = CONNECT_FAILED
            return None
        finally:
            self.is_connecting = False

        if not is_valid:
            self.error_message = NO_CHANNELS
            return None

        await self.persistence.set_server_config(config)
        self.is_connected = True
        logger.info(f"Connected to {config.base_url}")
        return config

    async def use_production_server(self) -> Optional[ServerConfig]:
        self.host = self.production_host
        self.port = str(self.production_port)
        return await self.connect()

    async def disconnect(self):
        """Forget the saved server and everything tied to it."""
        await self.persistence.clear_all()
        self.is_connected = False
        self.error_message = None
