"""
Server directory client.
Fetches the channel manifest and the day's guide from a Broadcaster server.
"""
import asyncio
import httpx
import logging
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from broadcaster.config import get_settings
from broadcaster.errors import (
    DecodeError,
    InvalidResponseError,
    InvalidURLError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from broadcaster.models.channel import ChannelManifest
from broadcaster.models.guide import GuideData
from broadcaster.models.server import ServerConfig

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class DirectoryClient:
    """
    Async HTTP client for the manifest and guide endpoints.

    No retries happen here; callers own their retry policy.
    """

    def __init__(
        self,
        request_timeout: Optional[float] = None,
        resource_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.request_timeout = (
            settings.request_timeout if request_timeout is None else request_timeout
        )
        self.resource_timeout = (
            settings.resource_timeout if resource_timeout is None else resource_timeout
        )
        self._transport = transport

    async def fetch_manifest(self, config: ServerConfig) -> ChannelManifest:
        """Fetch the ordered channel list."""
        return await self._fetch(config.manifest_url(), ChannelManifest)

    async def fetch_guide(self, config: ServerConfig) -> GuideData:
        """Fetch the schedule for the displayed day."""
        return await self._fetch(config.guide_url(), GuideData)

    async def validate(self, config: ServerConfig) -> bool:
        """
        Check that the server answers and has channels.

        Returns False for a well-formed manifest with zero channels; every
        other problem raises a DirectoryError.
        """
        manifest = await self.fetch_manifest(config)
        return len(manifest.channels) > 0

    async def _fetch(self, url: str, model: type[T]) -> T:
        response = await self._get(url)

        if response.status_code != 200:
            logger.warning(f"GET {url} returned {response.status_code}")
            raise ServerError(response.status_code)

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Could not decode {model.__name__} from {url}: {e}")
            raise DecodeError(e) from e

    async def _get(self, url: str) -> httpx.Response:
        logger.debug(f"Fetching {url}")
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.request_timeout),
                transport=self._transport,
            ) as client:
                return await asyncio.wait_for(client.get(url), timeout=self.resource_timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise RequestTimeoutError() from e
        except (httpx.UnsupportedProtocol, httpx.InvalidURL) as e:
            raise InvalidURLError(url) from e
        except (httpx.RemoteProtocolError, httpx.DecodingError) as e:
            raise InvalidResponseError() from e
        except httpx.HTTPError as e:
            raise TransportError(e) from e


# Singleton
_directory_client: Optional[DirectoryClient] = None


def get_directory_client() -> DirectoryClient:
    """Get or create directory client singleton."""
    global _directory_client
    if _directory_client is None:
        _directory_client = DirectoryClient()
    return _directory_client
