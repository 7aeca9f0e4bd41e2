"""Session resolution: POST init with a GET fallback."""

import logging
from typing import TYPE_CHECKING, Callable

import httpx

from ad_beaconing.client._client import AdBeaconingAsyncClient
from ad_beaconing.client.exceptions import ResolutionFailure
from ad_beaconing.types.log_message import LogLevel
from ad_beaconing.types.session_info import SessionInfo
from ad_beaconing.utils.log import log
from ad_beaconing.utils.rewrite_to_metadata_url import rewrite_to_metadata_url

if TYPE_CHECKING:
    from ad_beaconing.session.session_state import SessionState

logger = logging.getLogger(__name__)

# ValueError covers malformed JSON and init response validation
RESOLUTION_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


class SessionResolver:
    """Resolves a media URL into a `SessionInfo`.

    Every call to `resolve_latest` takes a new generation number; a result is
    only handed back if no newer call started while it was in flight.
    """

    def __init__(
        self,
        client: AdBeaconingAsyncClient,
        *,
        state: "SessionState | None" = None,
        rewrite: Callable[[str], str] = rewrite_to_metadata_url,
    ):
        self.client = client
        self.state = state
        self.rewrite = rewrite
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def invalidate(self) -> None:
        """Drops the result of any resolution still in flight."""
        self._generation += 1

    async def resolve(self, media_url: str, use_init_protocol: bool) -> SessionInfo:
        """Runs the resolution protocol once, raising `ResolutionFailure` if both paths fail."""  # noqa: E501

        if use_init_protocol:
            try:
                init_response = await self.client.make_init_request(media_url)
            except RESOLUTION_ERRORS as e:
                self._log(
                    f"Failed to make POST request to {media_url} to initialise "
                    + f"the session: {e}. Falling back to GET request.",
                    LogLevel.WARNING,
                )
            else:
                self._log(
                    "Parsed URLs from POST init request: "
                    + f"{init_response.manifest_url}, {init_response.tracking_url}",
                    LogLevel.INFO,
                )
                return SessionInfo.create(
                    media_url=media_url,
                    manifest_url=init_response.manifest_url,
                    ad_tracking_metadata_url=init_response.tracking_url,
                )

        try:
            effective_url = str(await self.client.make_request(media_url))
        except RESOLUTION_ERRORS as e:
            raise ResolutionFailure(
                f"Failed to load media with URL: {media_url}; Error: {e}",
                media_url=media_url,
                error=e,
            ) from e

        # No redirect leaves the final URL equal to the media URL
        effective_url = effective_url or media_url
        return SessionInfo.create(
            media_url=media_url,
            manifest_url=effective_url,
            ad_tracking_metadata_url=self.rewrite(effective_url),
        )

    async def resolve_latest(
        self, media_url: str, use_init_protocol: bool
    ) -> SessionInfo | None:
        """Resolves `media_url`, returning the session only if no newer call exists.

        Returns None for an empty URL, a failed resolution, or a result that a
        newer call has superseded.
        """  # noqa: E501

        if not media_url:
            return None

        self._generation += 1
        generation = self._generation
        logger.debug(f"Resolving '{media_url}' (generation {generation})")

        try:
            session_info = await self.resolve(media_url, use_init_protocol)
        except ResolutionFailure as e:
            self._log(e.message, LogLevel.WARNING)
            return None

        if not self.is_current(generation):
            logger.debug(
                f"Discarding session for '{media_url}': generation {generation} "
                + f"superseded by {self._generation}"
            )
            return None

        return session_info

    def _log(self, message: str, level: LogLevel) -> None:
        log(
            message,
            to=self.state,
            level=level,
            logger=logger,
            source="SessionResolver",
        )
