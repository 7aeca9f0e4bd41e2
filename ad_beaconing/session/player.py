from typing import Protocol

from ad_beaconing.types.player_item import PlayerItem


class Player(Protocol):
    """The host application's player, as seen by the session.

    Only the reload path calls into it; position samples arrive separately
    through `AdBeaconingSession.observe_playhead`.
    """

    def cancel_current_interstitial_event(self, resumption_offset: float) -> None: ...

    def replace_current_item(self, item: PlayerItem) -> None: ...
