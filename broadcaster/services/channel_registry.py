"""
Channel registry.

Holds the ordered channel list and the selected index, answers wrap-around
navigation, and keeps the list fresh with a periodic manifest refresh.
"""
import logging
from typing import Callable, Optional

from broadcaster.config import get_settings
from broadcaster.errors import DirectoryError
from broadcaster.models.channel import Channel
from broadcaster.models.server import ServerConfig
from broadcaster.services.directory_client import DirectoryClient, get_directory_client
from broadcaster.services.timers import ScheduledTask

logger = logging.getLogger(__name__)

Listener = Callable[["ChannelRegistry"], None]


class ChannelRegistry:
    """Ordered channels plus an optional selection (None = nothing chosen)."""

    def __init__(
        self,
        client: Optional[DirectoryClient] = None,
        refresh_interval: Optional[float] = None,
    ):
        settings = get_settings()
        self.client = client or get_directory_client()
        self.refresh_interval = (
            settings.channel_refresh_interval if refresh_interval is None else refresh_interval
        )
        self._channels: tuple[Channel, ...] = ()
        self._selected: Optional[int] = None
        self._listeners: list[Listener] = []
        self._refresh_timer = ScheduledTask("channel-refresh")
        self._epoch = 0

    # ------------------------------------------------------------------ state
    @property
    def channels(self) -> tuple[Channel, ...]:
        return self._channels

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected

    def __len__(self) -> int:
        return len(self._channels)

    def current_channel(self) -> Optional[Channel]:
        if self._selected is None:
            return None
        return self._channels[self._selected]

    def display_number(self) -> int:
        """1-based on-screen channel number (0 when nothing is selected)."""
        return 0 if self._selected is None else self._selected + 1

    def index_of(self, slug: str) -> Optional[int]:
        for index, channel in enumerate(self._channels):
            if channel.slug == slug:
                return index
        return None

    # -------------------------------------------------------------- mutation
    def set_channels(self, channels: list[Channel]):
        """
        Replace the list wholesale.

        The selection is kept when still in range and clamped to the last
        channel otherwise. Playback is not touched.
        """
        self._channels = tuple(channels)
        if self._selected is not None and self._selected >= len(self._channels):
            self._selected = len(self._channels) - 1 if self._channels else None
        self._notify()

    def select(self, index: int) -> bool:
        """Select a channel by index. Out-of-range indexes are ignored."""
        if not 0 <= index < len(self._channels):
            return False
        self._selected = index
        self._notify()
        return True

    def clear(self):
        """Drop the list and the selection."""
        self._channels = ()
        self._selected = None
        self._notify()

    # ------------------------------------------------------------ navigation
    def next_index(self) -> Optional[int]:
        """Index after the selection, wrapping from the last to 0."""
        if not self._channels:
            return None
        if self._selected is None or self._selected >= len(self._channels) - 1:
            return 0
        return self._selected + 1

    def previous_index(self) -> Optional[int]:
        """Index before the selection, wrapping from 0 (or none) to the last."""
        if not self._channels:
            return None
        if self._selected is None or self._selected <= 0:
            return len(self._channels) - 1
        return self._selected - 1

    def next(self) -> Optional[int]:
        index = self.next_index()
        if index is not None:
            self.select(index)
        return index

    def previous(self) -> Optional[int]:
        index = self.previous_index()
        if index is not None:
            self.select(index)
        return index

    # --------------------------------------------------------------- refresh
    async def refresh(self, config: ServerConfig) -> bool:
        """
        Re-fetch the manifest and replace the list.

        Failures are logged and swallowed: stale channels beat interrupting
        playback. Returns whether the list was replaced.
        """
        epoch = self._epoch
        try:
            manifest = await self.client.fetch_manifest(config)
        except DirectoryError as e:
            logger.warning(f"Channel refresh failed, keeping {len(self._channels)} channels: {e}")
            return False
        if epoch != self._epoch:
            logger.debug("Discarding channel refresh for a stopped registry")
            return False
        self.set_channels(manifest.channels)
        logger.info(f"Refreshed channel list: {len(manifest.channels)} channels")
        return True

    def start_refresh(self, config: ServerConfig):
        """Refresh every `refresh_interval` seconds until stopped."""
        self._epoch += 1
        self._refresh_timer.start_repeating(self.refresh_interval, lambda: self.refresh(config))

    def stop_refresh(self):
        self._epoch += 1
        self._refresh_timer.cancel()

    @property
    def refreshing(self) -> bool:
        return self._refresh_timer.active

    # --------------------------------------------------------- notification
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)
