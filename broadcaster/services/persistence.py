"""
SQLite-backed key-value persistence.
Stores the server address and the last played channel between runs.
"""
import aiosqlite
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from broadcaster.config import get_settings
from broadcaster.models.server import ServerConfig

logger = logging.getLogger(__name__)

SERVER_IP_KEY = "broadcaster_server_ip"
SERVER_PORT_KEY = "broadcaster_server_port"
LAST_CHANNEL_KEY = "broadcaster_last_channel"
DEFAULT_PORT = 12121


class PersistenceService:
    """Async SQLite key-value store with typed accessors."""

    def __init__(self, db_path: Optional[str] = None):
        settings = get_settings()
        self.db_path = settings.database_path if db_path is None else db_path
        self._ensure_directory()

    def _ensure_directory(self):
        """Create data directory if it doesn't exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    async def initialize(self):
        """Create the settings table if it doesn't exist."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            await db.commit()

    async def get(self, key: str) -> Optional[Any]:
        """Get a stored value, or None when absent."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()
            if row:
                return json.loads(row[0])
            return None

    async def set(self, key: str, value: Any):
        """Store a value; None removes the key."""
        async with aiosqlite.connect(self.db_path) as db:
            if value is None:
                await db.execute("DELETE FROM settings WHERE key = ?", (key,))
            else:
                await db.execute(
                    """INSERT OR REPLACE INTO settings (key, value, updated_at)
                       VALUES (?, ?, CURRENT_TIMESTAMP)""",
                    (key, json.dumps(value))
                )
            await db.commit()

    async def get_server_config(self) -> Optional[ServerConfig]:
        host = await self.get(SERVER_IP_KEY)
        if not host:
            return None
        port = await self.get(SERVER_PORT_KEY)
        if not isinstance(port, int) or port <= 0:
            port = DEFAULT_PORT
        try:
            return ServerConfig(host=host, port=port)
        except ValidationError as e:
            logger.warning(f"Ignoring unusable saved server config: {e}")
            return None

    async def set_server_config(self, config: Optional[ServerConfig]):
        if config is None:
            await self.set(SERVER_IP_KEY, None)
            await self.set(SERVER_PORT_KEY, None)
        else:
            await self.set(SERVER_IP_KEY, config.host)
            await self.set(SERVER_PORT_KEY, config.port)

    async def get_last_channel_slug(self) -> Optional[str]:
        return await self.get(LAST_CHANNEL_KEY)

    async def set_last_channel_slug(self, slug: Optional[str]):
        await self.set(LAST_CHANNEL_KEY, slug)

    async def clear_all(self):
        """Forget the server address and the last played channel."""
        for key in (SERVER_IP_KEY, SERVER_PORT_KEY, LAST_CHANNEL_KEY):
            await self.set(key, None)


# Global persistence instance
_persistence: Optional[PersistenceService] = None


async def get_persistence() -> PersistenceService:
    """Get or create persistence singleton."""
    global _persistence
    if _persistence is None:
        _persistence = PersistenceService()
        await _persistence.initialize()
    return _persistence
