"""Interfaces for the game objects that compiled checks inspect."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from mc_rules.world.model import Biome, BlockPos, BlockState, Difficulty, Direction, EquipmentSlot, ItemStack


class BlockEntity(Protocol):
    """Capability access for the block entity occupying a position."""

    def energy_stored(self, side: Direction | None) -> int | None:
        """Return stored energy, or ``None`` when no energy store is exposed on ``side``."""

    def item_slots(self, side: Direction | None) -> Sequence[ItemStack] | None:
        """Return inventory contents, or ``None`` when no inventory is exposed on ``side``."""


class World(Protocol):
    """Read-only view of a loaded level.

    Every lookup must return immediately; implementations report unloaded
    data through ``is_chunk_loaded`` instead of loading it.
    """

    dimension: str
    day_time: int | None
    raining: bool
    thundering: bool
    difficulty: Difficulty
    spawn_pos: BlockPos

    def is_chunk_loaded(self, chunk_x: int, chunk_z: int) -> bool: ...

    def get_block_state(self, pos: BlockPos) -> BlockState: ...

    def get_block_entity(self, pos: BlockPos) -> BlockEntity | None: ...

    def get_biome(self, pos: BlockPos) -> Biome: ...

    def light_at(self, pos: BlockPos) -> int: ...

    def effective_difficulty_at(self, pos: BlockPos) -> float: ...

    def can_see_sky(self, pos: BlockPos) -> bool: ...

    def is_in_structure(self, structure: str, pos: BlockPos) -> bool: ...


class Player(Protocol):
    name: str

    def get_item_by_slot(self, slot: EquipmentSlot) -> ItemStack: ...

    def target_block(self, world: World) -> BlockPos | None:
        """Return the block the player is looking at, if any."""


class GameRegistry(Protocol):
    """Identity lookups used while compiling descriptors."""

    def has_item(self, name: str) -> bool: ...

    def has_block(self, name: str) -> bool: ...

    def default_block_state(self, name: str) -> BlockState: ...

    def block_properties(self, name: str) -> Mapping[str, Sequence[str]]:
        """Return allowed values per property name for ``name``."""

    def biomes_of_type(self, biome_type: str) -> frozenset[str] | None:
        """Return biome ids for a biome type, or ``None`` for an unknown type."""
