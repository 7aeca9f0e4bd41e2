"""Rules that turn setter calls into resolution and reload work.

Each trigger maps to a precondition and an effect. Setters on
`AdBeaconingSession` only update their field and then dispatch a trigger, so
no resolution starts as a hidden side effect of assignment.
"""

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

from ad_beaconing.types.log_message import LogLevel
from ad_beaconing.types.session_info import SessionInfo
from ad_beaconing.utils.log import log

if TYPE_CHECKING:
    from ad_beaconing.session.ad_beaconing_session import AdBeaconingSession

logger = logging.getLogger(__name__)


class Trigger(str, Enum):
    MEDIA_URL_SET = "media_url_set"
    INIT_REQUEST_TOGGLED = "init_request_toggled"
    METADATA_TYPE_CHANGED = "metadata_type_changed"
    SESSION_INFO_SET = "session_info_set"


class Rule(NamedTuple):
    precondition: Callable[["AdBeaconingSession"], bool]
    effect: Callable[["ReactiveBindings", Any], "asyncio.Task[None] | None"]


def _has_media_url(session: "AdBeaconingSession") -> bool:
    return bool(session.media_url)


def _has_manifest_url(session: "AdBeaconingSession") -> bool:
    return bool(session.state.session_info.manifest_url)


def _always(session: "AdBeaconingSession") -> bool:
    return True


class ReactiveBindings:
    rules: dict[Trigger, Rule] = {
        Trigger.MEDIA_URL_SET: Rule(
            _has_media_url, lambda b, _: b.schedule_resolution()
        ),
        Trigger.INIT_REQUEST_TOGGLED: Rule(
            _has_media_url, lambda b, _: b.schedule_resolution()
        ),
        Trigger.METADATA_TYPE_CHANGED: Rule(
            _has_manifest_url, lambda b, _: b.reload_current_manifest()
        ),
        Trigger.SESSION_INFO_SET: Rule(
            _always, lambda b, info: b.apply_session_info(info)
        ),
    }

    def __init__(self, session: "AdBeaconingSession"):
        self.session = session
        self.pending: set[asyncio.Task[None]] = set()

    def dispatch(
        self, trigger: Trigger, payload: Any = None
    ) -> "asyncio.Task[None] | None":
        rule = self.rules[trigger]
        if not rule.precondition(self.session):
            logger.debug(f"Skipping {trigger.value}: precondition not met")
            return None
        return rule.effect(self, payload)

    def schedule_resolution(self) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(
            self._resolve_and_apply(
                self.session.media_url, self.session.config.is_init_request
            )
        )
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
        return task

    async def _resolve_and_apply(self, media_url: str, use_init_protocol: bool) -> None:
        session_info = await self.session.resolver.resolve_latest(
            media_url, use_init_protocol
        )
        # No await between the generation check and the replacement
        if session_info is not None:
            self.session.state.replace_session(session_info)
            log(
                f"Session {session_info.local_session_id} resolved for {media_url}",
                to=self.session.state,
                level=LogLevel.INFO,
                logger=logger,
                source="ReactiveBindings",
            )

    def reload_current_manifest(self) -> None:
        self.session.reload(
            self.session.state.session_info.manifest_url,
            self.session.config.automatically_preserves_time_offset_from_live,
        )

    def apply_session_info(self, session_info: SessionInfo) -> None:
        # Supersedes any resolution still in flight
        self.session.resolver.invalidate()
        self.session.state.replace_session(session_info)

    async def wait_for_pending(self) -> None:
        while self.pending:
            await asyncio.gather(*list(self.pending))
