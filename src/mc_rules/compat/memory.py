"""Compatibility layers that do not depend on any installed integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from mc_rules.compat.provider import BaubleSlot, Capability, Season
from mc_rules.query import EventQuery
from mc_rules.world import EMPTY_STACK, Biome, ItemStack, Player, World

# Slot layout used by Baubles.
DEFAULT_BAUBLE_SLOTS: dict[BaubleSlot, tuple[int, ...]] = {
    BaubleSlot.AMULET: (0,),
    BaubleSlot.RING: (1, 2),
    BaubleSlot.BELT: (3,),
    BaubleSlot.HEAD: (4,),
    BaubleSlot.BODY: (5,),
    BaubleSlot.CHARM: (6,),
    BaubleSlot.TRINKET: (0, 1, 2, 3, 4, 5, 6),
}


class NoCompatibility:
    """Reports every optional integration as missing."""

    def has_seasons(self) -> bool:
        return False

    def has_world_state(self) -> bool:
        return False

    def has_game_stages(self) -> bool:
        return False

    def has_lost_cities(self) -> bool:
        return False

    def has_baubles(self) -> bool:
        return False

    def is_season(self, world: World, season: Season) -> bool:
        return False

    def get_state(self, world: World, name: str) -> str | None:
        return None

    def get_player_state(self, player: Player, name: str) -> str | None:
        return None

    def has_game_stage(self, player: Player, stage: str) -> bool:
        return False

    def is_city(self, query: EventQuery, event: Any) -> bool:
        return False

    def is_street(self, query: EventQuery, event: Any) -> bool:
        return False

    def in_sphere(self, query: EventQuery, event: Any) -> bool:
        return False

    def is_building(self, query: EventQuery, event: Any) -> bool:
        return False

    def bauble_slots(self, slot: BaubleSlot) -> Sequence[int]:
        return ()

    def get_bauble_stack(self, player: Player, index: int) -> ItemStack:
        return EMPTY_STACK

    def get_biome_name(self, biome: Biome) -> str | None:
        return None


@dataclass(slots=True)
class InMemoryCompatibility:
    """Table-driven integration state.

    Location memberships (cities, streets, spheres, buildings) are chunk
    coordinate sets, matching how city generators lay out their grids.
    """

    capabilities: frozenset[Capability] = field(default_factory=frozenset)
    seasons: dict[str, Season] = field(default_factory=dict)
    world_states: dict[str, str] = field(default_factory=dict)
    player_states: dict[str, dict[str, str]] = field(default_factory=dict)
    game_stages: dict[str, set[str]] = field(default_factory=dict)
    cities: set[tuple[int, int]] = field(default_factory=set)
    streets: set[tuple[int, int]] = field(default_factory=set)
    spheres: set[tuple[int, int]] = field(default_factory=set)
    buildings: set[tuple[int, int]] = field(default_factory=set)
    baubles: dict[str, dict[int, ItemStack]] = field(default_factory=dict)
    biome_names: dict[str, str] = field(default_factory=dict)

    def has_seasons(self) -> bool:
        return Capability.SEASONS in self.capabilities

    def has_world_state(self) -> bool:
        return Capability.WORLD_STATE in self.capabilities

    def has_game_stages(self) -> bool:
        return Capability.GAME_STAGES in self.capabilities

    def has_lost_cities(self) -> bool:
        return Capability.LOST_CITIES in self.capabilities

    def has_baubles(self) -> bool:
        return Capability.BAUBLES in self.capabilities

    def is_season(self, world: World, season: Season) -> bool:
        return self.seasons.get(world.dimension) is season

    def get_state(self, world: World, name: str) -> str | None:
        return self.world_states.get(name)

    def get_player_state(self, player: Player, name: str) -> str | None:
        if player is None:
            return None
        return self.player_states.get(player.name, {}).get(name)

    def has_game_stage(self, player: Player, stage: str) -> bool:
        if player is None:
            return False
        return stage in self.game_stages.get(player.name, set())

    def _chunk_in(self, chunks: set[tuple[int, int]], query: EventQuery, event: Any) -> bool:
        pos = query.get_pos(event)
        if pos is None:
            return False
        return (pos.chunk_x, pos.chunk_z) in chunks

    def is_city(self, query: EventQuery, event: Any) -> bool:
        return self._chunk_in(self.cities, query, event)

    def is_street(self, query: EventQuery, event: Any) -> bool:
        return self._chunk_in(self.streets, query, event)

    def in_sphere(self, query: EventQuery, event: Any) -> bool:
        return self._chunk_in(self.spheres, query, event)

    def is_building(self, query: EventQuery, event: Any) -> bool:
        return self._chunk_in(self.buildings, query, event)

    def bauble_slots(self, slot: BaubleSlot) -> Sequence[int]:
        return DEFAULT_BAUBLE_SLOTS[slot]

    def get_bauble_stack(self, player: Player, index: int) -> ItemStack:
        return self.baubles.get(player.name, {}).get(index, EMPTY_STACK)

    def get_biome_name(self, biome: Biome) -> str | None:
        return self.biome_names.get(biome.id)
