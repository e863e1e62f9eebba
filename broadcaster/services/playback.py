"""
Playback controller.

Owns the decision of what the player shows: the placeholder stream while a
channel is being acquired, the target stream once it is ready, transparent
retries on failure, and the placeholder again once retries run out.

All mutation happens on the event loop. Anything that completes after an
await (settle delay, retry wait, manifest fetch, player reports) is tagged
with a token and dropped if the controller has moved on since.
"""
import asyncio
import logging
from typing import Callable, Optional

from broadcaster.config import get_settings
from broadcaster.errors import DirectoryError, InvalidURLError
from broadcaster.models.playback import (
    PlaybackState,
    PlayerEvent,
    PlayerSnapshot,
    PlayerStatus,
)
from broadcaster.models.server import ServerConfig
from broadcaster.services.channel_registry import ChannelRegistry
from broadcaster.services.directory_client import DirectoryClient, get_directory_client
from broadcaster.services.media_player import MediaPlayer
from broadcaster.services.persistence import PersistenceService
from broadcaster.services.timers import ScheduledTask

logger = logging.getLogger(__name__)

INVALID_CHANNEL_URL = "Invalid channel URL"
STREAM_INTERRUPTED = "Stream interrupted. Press select to retry."

SnapshotListener = Callable[[PlayerSnapshot], None]


class PlaybackController:
    """State machine: Idle -> Loading -> Playing, with Error reachable from Loading."""

    def __init__(
        self,
        registry: ChannelRegistry,
        player: MediaPlayer,
        persistence: PersistenceService,
        client: Optional[DirectoryClient] = None,
        settle_delay: Optional[float] = None,
        retry_delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        overlay_duration: Optional[float] = None,
    ):
        settings = get_settings()
        self.registry = registry
        self.player = player
        self.persistence = persistence
        self.client = client or get_directory_client()
        self.settle_delay = settings.settle_delay if settle_delay is None else settle_delay
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.overlay_duration = (
            settings.overlay_duration if overlay_duration is None else overlay_duration
        )

        self._config: Optional[ServerConfig] = None
        self._state = PlaybackState.idle()
        self._overlay_visible = False
        self._retry_count = 0

        # Tokens guarding async completions
        self._session = 0      # bumped by configure / disconnect
        self._change = 0       # bumped by every channel change
        self._generation = 0   # bumped by every player load

        self._overlay_timer = ScheduledTask("overlay-hide")
        self._retry_timer = ScheduledTask("stream-retry")
        self._listeners: list[SnapshotListener] = []
        self.registry.subscribe(lambda _registry: self._publish())

    # ------------------------------------------------------------------ state
    @property
    def config(self) -> Optional[ServerConfig]:
        return self._config

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def overlay_visible(self) -> bool:
        return self._overlay_visible

    @property
    def retry_count(self) -> int:
        return self._retry_count

    def snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            channels=self.registry.channels,
            selected_index=self.registry.selected_index,
            state=self._state,
            overlay_visible=self._overlay_visible,
            retry_count=self._retry_count,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_state(self, state: PlaybackState):
        if state != self._state:
            logger.debug(f"Playback state {self._state.status.value} -> {state.status.value}")
        self._state = state
        self._publish()

    # -------------------------------------------------------------- configure
    async def configure(self, config: ServerConfig):
        """
        Connect to a server: load channels, put the placeholder on screen,
        resume the last played channel and start the periodic refresh.
        """
        self.shutdown()
        self._reset_state()
        session = self._session
        self._config = config
        logger.info(f"Configuring playback for {config.base_url}")

        try:
            manifest = await self.client.fetch_manifest(config)
        except DirectoryError as e:
            if session != self._session:
                return
            logger.error(f"Failed to load channels from {config.base_url}: {e}")
            self.registry.clear()
            self._set_state(PlaybackState.error(f"Failed to load channels: {e}"))
            return

        if session != self._session:
            logger.debug("Discarding manifest for a superseded configure")
            return

        self.registry.set_channels(manifest.channels)
        logger.info(f"📺 Loaded {len(manifest.channels)} channels")
        self.play_static_stream()

        last_slug = await self.persistence.get_last_channel_slug()
        if session != self._session:
            return
        if last_slug:
            index = self.registry.index_of(last_slug)
            if index is not None:
                await self.change_channel(index)
            else:
                logger.info(f"Last played channel {last_slug!r} is no longer listed")

        if session == self._session:
            self.registry.start_refresh(config)

    # --------------------------------------------------------- channel change
    async def change_channel(self, index: int):
        """Switch to the channel at `index`; out-of-range indexes are ignored."""
        if not 0 <= index < len(self.registry):
            return

        self.registry.select(index)
        self._retry_count = 0
        self._retry_timer.cancel()
        self._change += 1
        change = self._change
        self._set_state(PlaybackState.loading())

        self.play_static_stream()
        self.show_overlay()

        await asyncio.sleep(self.settle_delay)
        if change != self._change:
            return

        channel = self.registry.current_channel()
        if channel is None:
            return
        url = self._stream_url_for(channel.slug)
        if url is None:
            self._set_state(PlaybackState.error(INVALID_CHANNEL_URL))
            return

        logger.info(f"Tuning to {self.registry.display_number()} {channel.name} ({channel.slug})")
        self._load_stream(url)
        await self.persistence.set_last_channel_slug(channel.slug)

    async def channel_up(self):
        index = self.registry.previous_index()
        if index is not None:
            await self.change_channel(index)

    async def channel_down(self):
        index = self.registry.next_index()
        if index is not None:
            await self.change_channel(index)

    async def retry(self):
        """User-initiated retry of the selected channel (or the first one)."""
        self._retry_count = 0
        index = self.registry.selected_index
        if index is None:
            if len(self.registry) == 0:
                return
            index = 0
        await self.change_channel(index)

    # ----------------------------------------------------------------- player
    def play_static_stream(self):
        """Put the placeholder stream on screen; it has no retry handling."""
        if self._config is None:
            return
        try:
            url = self._config.static_stream_url()
        except InvalidURLError as e:
            logger.warning(f"Cannot build placeholder stream URL: {e}")
            return
        self._generation += 1
        self.player.load(url)
        self.player.play()
        self.player.seek_to_live()

    def _stream_url_for(self, slug: str) -> Optional[str]:
        if self._config is None:
            return None
        try:
            return self._config.stream_url(slug)
        except InvalidURLError as e:
            logger.error(f"Cannot build stream URL for {slug!r}: {e}")
            return None

    def _load_stream(self, url: str):
        self._generation += 1
        generation = self._generation
        self.player.load(url, lambda event: self.handle_player_event(event, generation))
        self.player.play()
        self.player.seek_to_live()

    def handle_player_event(self, event: PlayerEvent, generation: int):
        """Apply a status report for the load tagged `generation`."""
        if generation != self._generation:
            logger.debug(f"Ignoring {event.status.value} report for a replaced stream")
            return

        if event.status == PlayerStatus.READY:
            self._retry_count = 0
            self._set_state(PlaybackState.playing())
            self.player.seek_to_live()
        elif event.status == PlayerStatus.FAILED:
            self._handle_playback_error(event.error)

    def _handle_playback_error(self, error: Optional[str]):
        if self._retry_count < self.max_retries:
            self._retry_count += 1
            logger.warning(
                f"Stream failed ({error or 'unknown error'}), "
                f"retry {self._retry_count}/{self.max_retries} in {self.retry_delay}s"
            )
            generation = self._generation
            self._retry_timer.start_once(self.retry_delay, lambda: self._retry_load(generation))
            self._publish()
        else:
            logger.error(f"Stream failed after {self.max_retries} retries: {error}")
            self._set_state(PlaybackState.error(STREAM_INTERRUPTED))
            self.play_static_stream()

    def _retry_load(self, generation: int):
        if generation != self._generation:
            return
        channel = self.registry.current_channel()
        if channel is None:
            return
        url = self._stream_url_for(channel.slug)
        if url is None:
            self._set_state(PlaybackState.error(INVALID_CHANNEL_URL))
            return
        self._load_stream(url)

    def toggle_play_pause(self):
        if self.player.is_playing:
            self.player.pause()
        else:
            self.player.play()

    # ---------------------------------------------------------------- overlay
    def show_overlay(self):
        """Show the channel overlay; hides after `overlay_duration`, restarting on each call."""
        self._overlay_visible = True
        self._overlay_timer.start_once(self.overlay_duration, self._hide_overlay)
        self._publish()

    def _hide_overlay(self):
        self._overlay_visible = False
        self._publish()

    # ------------------------------------------------------------- disconnect
    def shutdown(self):
        """Stop every timer and drop pending completions; persisted state is kept."""
        self._session += 1
        self._change += 1
        self._generation += 1
        self._overlay_timer.cancel()
        self._retry_timer.cancel()
        self.registry.stop_refresh()

    def _reset_state(self):
        """Forget the previous server's playback state and channel list."""
        self._retry_count = 0
        self._overlay_visible = False
        self._state = PlaybackState.idle()
        self.registry.clear()

    async def disconnect(self):
        """Tear down timers, forget the channel list and the last played channel."""
        self.shutdown()
        self.player.pause()

        self._config = None
        self._reset_state()
        await self.persistence.set_last_channel_slug(None)
        logger.info("Playback disconnected")
