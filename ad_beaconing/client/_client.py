import json
import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ad_beaconing.config import Settings
from ad_beaconing.types.init_response import InitResponse

logger = logging.getLogger(__name__)


class AdBeaconingAsyncClient(httpx.AsyncClient):
    """HTTP client for the session resolution requests.

    Beaconing headers are deliberately not part of this client; resolution
    requests go out with only the caller supplied `headers`.
    """

    def __init__(self, *, settings: Settings | None = None, **kwargs: Any):
        settings = settings or Settings.from_env()
        headers = json.loads(json.dumps(kwargs.pop("headers", None) or {}))

        default_timeout = httpx.Timeout(
            timeout=settings.timeout, connect=settings.connect_timeout
        )
        timeout = kwargs.pop("timeout", default_timeout)

        super().__init__(headers=headers, timeout=timeout, **kwargs)

    async def make_init_request(self, url: str) -> InitResponse:
        """POSTs to the media URL and returns the session's manifest and tracking URLs.

        Absolute paths in the response are resolved against the request's host.
        """
        logger.debug(f"Initialising session with POST to '{url}'")

        response = await self.post(url)
        response.raise_for_status()
        init_response = InitResponse.model_validate(response.json())

        base_url = httpx.URL(url)
        return InitResponse(
            manifest_url=_join_absolute_path(base_url, init_response.manifest_url),
            tracking_url=_join_absolute_path(base_url, init_response.tracking_url),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception_type(
            (
                httpx.ConnectError,
                httpx.TimeoutException,
                httpx.NetworkError,
                httpx.RemoteProtocolError,
            )
        ),
        reraise=True,
    )
    async def make_request(self, url: str) -> httpx.URL:
        """GETs the media URL following redirects and returns the final URL."""
        response = await self.get(url, follow_redirects=True)
        response.raise_for_status()

        if response.history:
            logger.debug(f"Media URL '{url}' redirected to '{response.url}'")
        return response.url


def _join_absolute_path(base_url: httpx.URL, value: str) -> str:
    if value.startswith("/"):
        return str(base_url.join(value))
    return value
