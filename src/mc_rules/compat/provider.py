"""Optional integrations a deployment may or may not provide.

Rules referencing an unavailable integration compile without that check; the
compiler asks :class:`CompatibilityLayer` which integrations are present.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Sequence

from mc_rules.query import EventQuery
from mc_rules.world import Biome, ItemStack, Player, World


class Capability(str, Enum):
    SEASONS = "seasons"
    WORLD_STATE = "world_state"
    GAME_STAGES = "game_stages"
    LOST_CITIES = "lost_cities"
    BAUBLES = "baubles"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def probe(self) -> str:
        """Name of the :class:`CompatibilityLayer` method reporting availability."""
        return f"has_{self.value}"


_LABELS = {
    Capability.SEASONS: "Serene Seasons",
    Capability.WORLD_STATE: "EnigmaScript",
    Capability.GAME_STAGES: "Game Stages",
    Capability.LOST_CITIES: "The Lost Cities",
    Capability.BAUBLES: "Baubles",
}


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


class BaubleSlot(str, Enum):
    AMULET = "amulet"
    RING = "ring"
    BELT = "belt"
    TRINKET = "trinket"
    HEAD = "head"
    BODY = "body"
    CHARM = "charm"


class CompatibilityLayer(Protocol):
    def has_seasons(self) -> bool: ...

    def has_world_state(self) -> bool: ...

    def has_game_stages(self) -> bool: ...

    def has_lost_cities(self) -> bool: ...

    def has_baubles(self) -> bool: ...

    def is_season(self, world: World, season: Season) -> bool: ...

    def get_state(self, world: World, name: str) -> str | None: ...

    def get_player_state(self, player: Player, name: str) -> str | None: ...

    def has_game_stage(self, player: Player, stage: str) -> bool: ...

    def is_city(self, query: EventQuery, event: Any) -> bool: ...

    def is_street(self, query: EventQuery, event: Any) -> bool: ...

    def in_sphere(self, query: EventQuery, event: Any) -> bool: ...

    def is_building(self, query: EventQuery, event: Any) -> bool: ...

    def bauble_slots(self, slot: BaubleSlot) -> Sequence[int]: ...

    def get_bauble_stack(self, player: Player, index: int) -> ItemStack: ...

    def get_biome_name(self, biome: Biome) -> str | None: ...


def supports(compatibility: CompatibilityLayer, capability: Capability) -> bool:
    return bool(getattr(compatibility, capability.probe)())
