import asyncio
import logging
from typing import Any, Iterable, Mapping

import httpx

from ad_beaconing.client._client import AdBeaconingAsyncClient
from ad_beaconing.client.session_resolver import SessionResolver
from ad_beaconing.config import Settings
from ad_beaconing.session.player import Player
from ad_beaconing.session.playhead_tracker import PlayheadTracker
from ad_beaconing.session.reactive_bindings import ReactiveBindings, Trigger
from ad_beaconing.session.session_state import SessionState
from ad_beaconing.types.log_message import LogLevel
from ad_beaconing.types.player_item import PlayerItem
from ad_beaconing.types.session_config import MetadataType, SessionConfig
from ad_beaconing.types.session_info import SessionInfo
from ad_beaconing.utils.log import log

logger = logging.getLogger(__name__)


class AdBeaconingSession:
    """Coordinates resolution, playhead tracking and player reloads for one player.

    Must be driven from a single event loop. Setters that need network work
    schedule it and return the task; read published fields through `state`.
    """

    def __init__(
        self,
        *,
        player: Player | None = None,
        client: AdBeaconingAsyncClient | None = None,
        settings: Settings | None = None,
        config: SessionConfig | None = None,
        custom_headers_for_beaconing: Mapping[str, str] | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self.config = config or SessionConfig()
        self.player = player
        self.media_url: str = ""

        self._owns_client = client is None
        self.client = client or AdBeaconingAsyncClient(settings=self.settings)

        self.state = SessionState(max_log_messages=self.settings.max_log_messages)
        self.resolver = SessionResolver(self.client, state=self.state)
        self.playhead_tracker = PlayheadTracker(
            self.state, tolerance=self.settings.discontinuity_tolerance
        )
        self.bindings = ReactiveBindings(self)

        self._unsubscribe = self.state.subscribe(self._on_state_changed)
        if custom_headers_for_beaconing:
            self.state.set_custom_headers(custom_headers_for_beaconing)

    async def __aenter__(self) -> "AdBeaconingSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.wait_for_pending()
        self._unsubscribe()
        if self._owns_client:
            await self.client.aclose()

    async def wait_for_pending(self) -> None:
        """Waits until every scheduled resolution has finished."""
        await self.bindings.wait_for_pending()

    def set_media_url(self, media_url: str) -> "asyncio.Task[None] | None":
        self.media_url = media_url
        return self.bindings.dispatch(Trigger.MEDIA_URL_SET)

    def set_is_init_request(self, is_init_request: bool) -> "asyncio.Task[None] | None":
        if is_init_request == self.config.is_init_request:
            return None
        self.config = self.config.model_copy(
            update={"is_init_request": is_init_request}
        )
        return self.bindings.dispatch(Trigger.INIT_REQUEST_TOGGLED)

    def set_metadata_type(self, metadata_type: MetadataType) -> None:
        if metadata_type == self.config.metadata_type:
            return
        self.config = self.config.model_copy(update={"metadata_type": metadata_type})
        self.bindings.dispatch(Trigger.METADATA_TYPE_CHANGED)

    def set_automatically_preserves_time_offset_from_live(self, value: bool) -> None:
        self.config = self.config.model_copy(
            update={"automatically_preserves_time_offset_from_live": value}
        )

    def set_custom_headers(self, headers: Mapping[str, str]) -> None:
        """Sets headers sent with every beacon, e.g. forwarded client IP headers.

        Resolution requests never carry them; beacon dispatch reads
        `state.custom_headers`.
        """
        self.state.set_custom_headers(headers)

    def set_session_info(
        self, manifest_url: str, ad_tracking_metadata_url: str, media_url: str = ""
    ) -> None:
        """Sets the session directly, for tracking-only use without a media URL."""
        session_info = SessionInfo.create(
            media_url=media_url,
            manifest_url=manifest_url,
            ad_tracking_metadata_url=ad_tracking_metadata_url,
        )
        self.bindings.dispatch(Trigger.SESSION_INFO_SET, session_info)

    def set_ad_pods(self, ad_pods: Iterable[Any]) -> None:
        self.state.set_ad_pods(ad_pods)

    def set_debug_overlay_visible(self, visible: bool) -> None:
        self.state.set_debug_overlay_visible(visible)

    def observe_playhead(self, position: float, is_playing: bool) -> None:
        self.playhead_tracker.observe(position, is_playing)

    def reload(self, manifest_url: str, preserve_live_offset: bool) -> None:
        """Swaps a fresh item for `manifest_url` into the player.

        Invalid URLs are ignored.
        """
        if self.player is None:
            logger.debug("No player attached, skipping reload")
            return
        if not _is_playable_url(manifest_url):
            logger.debug(f"Ignoring reload with invalid URL '{manifest_url}'")
            return

        self.player.cancel_current_interstitial_event(resumption_offset=0)
        self.player.replace_current_item(
            PlayerItem(
                url=manifest_url,
                automatically_preserves_time_offset_from_live=preserve_live_offset,
            )
        )
        log(
            f"Reloaded player with {manifest_url}",
            to=self.state,
            level=LogLevel.INFO,
            logger=logger,
            source="AdBeaconingSession",
        )

    def _on_state_changed(self, field: str) -> None:
        if field == "session_info":
            self.playhead_tracker.reset()


def _is_playable_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return bool(url.scheme and url.host)
