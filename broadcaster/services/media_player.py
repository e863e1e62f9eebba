"""
Media player contract and a headless implementation.

The platform player (video decoding and rendering) lives outside this
package. The controller only needs `load`, `play`, `pause`, `seek_to_live`
and a status callback per loaded item.
"""
import httpx
import logging
import time
from typing import Callable, Optional, Protocol

from broadcaster.models.playback import PlayerEvent, PlayerStatus
from broadcaster.services.timers import ScheduledTask

logger = logging.getLogger(__name__)

StatusHandler = Callable[[PlayerEvent], None]


class MediaPlayer(Protocol):
    """What the playback controller drives."""

    @property
    def is_playing(self) -> bool: ...

    def load(self, url: str, on_status: Optional[StatusHandler] = None) -> None:
        """Replace the current item. `on_status` receives reports for this item only."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def seek_to_live(self) -> None: ...


class ProbingMediaPlayer:
    """
    Player stand-in for headless runs.

    Loading an item fetches its HLS playlist and reports READY when the server
    answers 200 with an #EXTM3U body, FAILED otherwise.
    """

    PROBE_TIMEOUT = 8.0
    USER_AGENT = "BroadcasterTV/1.0"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._probe = ScheduledTask("player-probe")
        self.current_url: Optional[str] = None
        self.playing = False
        self.seek_count = 0
        self.last_response_ms: Optional[int] = None

    @property
    def is_playing(self) -> bool:
        return self.playing

    def load(self, url: str, on_status: Optional[StatusHandler] = None) -> None:
        self.current_url = url
        logger.debug(f"Loading {url}")
        if on_status is None:
            self._probe.cancel()
            return
        self._probe.start_once(0, lambda: self._report(url, on_status))

    def play(self) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def seek_to_live(self) -> None:
        self.seek_count += 1

    async def wait_for_probe(self) -> None:
        await self._probe.wait()

    async def _report(self, url: str, on_status: StatusHandler) -> None:
        event = await self.probe(url)
        if url == self.current_url:
            on_status(event)

    async def probe(self, url: str) -> PlayerEvent:
        """Fetch the playlist once and classify the result."""
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.PROBE_TIMEOUT),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers={"User-Agent": self.USER_AGENT})
        except httpx.TimeoutException:
            return PlayerEvent(status=PlayerStatus.FAILED, error="Timeout")
        except httpx.ConnectError:
            return PlayerEvent(status=PlayerStatus.FAILED, error="Connection refused")
        except httpx.HTTPError as e:
            return PlayerEvent(status=PlayerStatus.FAILED, error=str(e)[:100])

        self.last_response_ms = int((time.time() - start_time) * 1000)
        if response.status_code != 200:
            return PlayerEvent(status=PlayerStatus.FAILED, error=f"HTTP {response.status_code}")
        if not response.text.lstrip().startswith("#EXTM3U"):
            return PlayerEvent(status=PlayerStatus.FAILED, error="Not an HLS playlist")
        return PlayerEvent(status=PlayerStatus.READY)
