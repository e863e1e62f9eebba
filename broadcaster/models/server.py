"""
Server address model.
Derives the base URL and every endpoint the client talks to.
"""
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from broadcaster.errors import InvalidURLError

_SCHEMES = ("http://", "https://")


class ServerConfig(BaseModel):
    """Immutable Broadcaster server address (host or full URL plus port)."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(12121, ge=1, le=65535)

    @property
    def base_url(self) -> str:
        """
        Base URL for every endpoint.

        A host that already carries a scheme is used as-is (minus a trailing
        slash) and the numeric port is ignored.
        """
        if self.host.startswith(_SCHEMES):
            return self.host[:-1] if self.host.endswith("/") else self.host
        return f"http://{self.host}:{self.port}"

    def _endpoint(self, path: str) -> str:
        url = f"{self.base_url}{path}"
        if any(ch.isspace() for ch in url):
            raise InvalidURLError(url)
        try:
            parts = urlsplit(url)
            parts.port  # raises ValueError when out of range or non-numeric
        except ValueError as e:
            raise InvalidURLError(url) from e
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidURLError(url)
        return url

    def manifest_url(self) -> str:
        return self._endpoint("/manifest.json")

    def guide_url(self) -> str:
        return self._endpoint("/api/guide")

    def stream_url(self, slug: str) -> str:
        """Live HLS playlist for one channel."""
        if not slug:
            raise InvalidURLError(f"{self.base_url}/.m3u8")
        return self._endpoint(f"/{slug}.m3u8")

    def static_stream_url(self) -> str:
        """Always-available placeholder stream."""
        return self._endpoint("/channels/static/_.m3u8")
