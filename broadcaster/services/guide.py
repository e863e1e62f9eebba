"""
Program guide service.
Loads the day's schedule, keeps the "now" clock ticking while the guide is
open, and hands layout data to the renderer.
"""
import logging
import time
from typing import Callable, Optional

from broadcaster.config import get_settings
from broadcaster.errors import DirectoryError
from broadcaster.models.channel import Channel
from broadcaster.models.guide import GuideData
from broadcaster.models.server import ServerConfig
from broadcaster.services.directory_client import DirectoryClient, get_directory_client
from broadcaster.services.guide_layout import GuideLayout, GuideRow, TimeMarker
from broadcaster.services.timers import ScheduledTask

logger = logging.getLogger(__name__)

GUIDE_LOAD_ERROR = "Unable to load TV Guide"


def now_ms() -> int:
    return int(time.time() * 1000)


class GuideService:
    """Guide data plus the clock used for the now line."""

    def __init__(
        self,
        client: Optional[DirectoryClient] = None,
        layout: Optional[GuideLayout] = None,
        clock: Callable[[], int] = now_ms,
        tick_interval: Optional[float] = None,
    ):
        settings = get_settings()
        self.client = client or get_directory_client()
        self.layout = layout or GuideLayout()
        self.clock = clock
        self.tick_interval = (
            settings.guide_clock_interval if tick_interval is None else tick_interval
        )
        self.scroll_context = settings.guide_scroll_context

        self.guide_data: Optional[GuideData] = None
        self.is_loading = False
        self.error_message: Optional[str] = None
        self.visible = False
        self.current_time_ms = clock()

        self._config: Optional[ServerConfig] = None
        self._epoch = 0  # bumped on configure and close; stale loads are dropped
        self._clock_timer = ScheduledTask("guide-clock")
        self._listeners: list[Callable[["GuideService"], None]] = []

    def configure(self, config: Optional[ServerConfig]):
        self._epoch += 1
        self._config = config
        if config is None:
            self.close_guide()
            self.guide_data = None

    async def load_guide(self):
        """Fetch the guide; failures stay scoped to the guide."""
        if self._config is None:
            return

        epoch = self._epoch
        self.is_loading = True
        self.error_message = None
        self._notify()
        try:
            guide_data = await self.client.fetch_guide(self._config)
        except DirectoryError as e:
            guide_data = None
            if epoch == self._epoch:
                logger.warning(f"Guide load failed: {e}")
                self.error_message = GUIDE_LOAD_ERROR

        self.is_loading = False
        if epoch != self._epoch:
            logger.debug("Discarding guide for a closed or reconfigured guide")
        elif guide_data is not None:
            self.guide_data = guide_data
            logger.info(f"Loaded guide for {len(guide_data.channels)} channels")
            self.start_time_updates()
        self._notify()

    async def open_guide(self):
        self.visible = True
        await self.load_guide()

    def close_guide(self):
        self._epoch += 1
        self.visible = False
        self.stop_time_updates()
        self._notify()

    def start_time_updates(self):
        self._clock_timer.start_repeating(self.tick_interval, self.tick, immediate=True)

    def stop_time_updates(self):
        self._clock_timer.cancel()

    @property
    def clock_running(self) -> bool:
        return self._clock_timer.active

    def tick(self):
        self.current_time_ms = self.clock()
        self._notify()

    # ----------------------------------------------------------- derived
    @property
    def day_start_ms(self) -> int:
        return self.guide_data.day_start_ms if self.guide_data else 0

    @property
    def now_line_position(self) -> float:
        return self.layout.now_line_position(self.current_time_ms, self.day_start_ms)

    @property
    def initial_scroll_offset(self) -> float:
        """Scroll so the now line sits a little right of the left edge."""
        return self.now_line_position - self.scroll_context

    def time_markers(self) -> list[TimeMarker]:
        return self.layout.time_markers(self.day_start_ms)

    def rows(self, channels: list[Channel]) -> list[GuideRow]:
        return self.layout.ordered_channels(channels, self.guide_data)

    def subscribe(self, listener: Callable[["GuideService"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)
