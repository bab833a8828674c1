"""In-memory world, player and registry used by tests and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from mc_rules.world.model import (
    AIR,
    AIR_STATE,
    EMPTY_STACK,
    Biome,
    BlockPos,
    BlockState,
    Difficulty,
    Direction,
    EquipmentSlot,
    ItemStack,
    resource_location,
)
from mc_rules.world.protocols import BlockEntity


@dataclass(slots=True)
class InMemoryBlockEntity:
    """Block entity with an optional inventory and energy store."""

    items: list[ItemStack] | None = None
    energy: int | None = None
    sides: frozenset[Direction] | None = None

    def _exposes(self, side: Direction | None) -> bool:
        return side is None or self.sides is None or side in self.sides

    def energy_stored(self, side: Direction | None) -> int | None:
        if not self._exposes(side):
            return None
        return self.energy

    def item_slots(self, side: Direction | None) -> Sequence[ItemStack] | None:
        if not self._exposes(side):
            return None
        return self.items


@dataclass(slots=True)
class InMemoryWorld:
    dimension: str = "minecraft:overworld"
    day_time: int | None = 0
    raining: bool = False
    thundering: bool = False
    difficulty: Difficulty = Difficulty.NORMAL
    spawn_pos: BlockPos = BlockPos(0, 64, 0)
    default_biome: Biome = Biome("minecraft:plains", "plains")
    default_light: int = 15
    default_local_difficulty: float = 1.5
    biomes: dict[BlockPos, Biome] = field(default_factory=dict)
    blocks: dict[BlockPos, BlockState] = field(default_factory=dict)
    block_entities: dict[BlockPos, BlockEntity] = field(default_factory=dict)
    light: dict[BlockPos, int] = field(default_factory=dict)
    local_difficulty: dict[BlockPos, float] = field(default_factory=dict)
    covered: set[BlockPos] = field(default_factory=set)
    structures: dict[str, set[tuple[int, int]]] = field(default_factory=dict)
    unloaded_chunks: set[tuple[int, int]] = field(default_factory=set)

    def is_chunk_loaded(self, chunk_x: int, chunk_z: int) -> bool:
        return (chunk_x, chunk_z) not in self.unloaded_chunks

    def set_block(self, pos: BlockPos, state: BlockState) -> None:
        if state.block == AIR:
            self.blocks.pop(pos, None)
        else:
            self.blocks[pos] = state

    def get_block_state(self, pos: BlockPos) -> BlockState:
        return self.blocks.get(pos, AIR_STATE)

    def get_block_entity(self, pos: BlockPos) -> BlockEntity | None:
        return self.block_entities.get(pos)

    def get_biome(self, pos: BlockPos) -> Biome:
        return self.biomes.get(pos, self.default_biome)

    def light_at(self, pos: BlockPos) -> int:
        return self.light.get(pos, self.default_light)

    def effective_difficulty_at(self, pos: BlockPos) -> float:
        return self.local_difficulty.get(pos, self.default_local_difficulty)

    def can_see_sky(self, pos: BlockPos) -> bool:
        return pos not in self.covered

    def is_in_structure(self, structure: str, pos: BlockPos) -> bool:
        chunks = self.structures.get(resource_location(structure), set())
        return (pos.chunk_x, pos.chunk_z) in chunks


@dataclass(slots=True)
class InMemoryPlayer:
    name: str = "player"
    equipment: dict[EquipmentSlot, ItemStack] = field(default_factory=dict)
    looking_at: BlockPos | None = None

    def get_item_by_slot(self, slot: EquipmentSlot) -> ItemStack:
        return self.equipment.get(slot, EMPTY_STACK)

    def target_block(self, world) -> BlockPos | None:
        return self.looking_at


@dataclass(slots=True)
class StaticRegistry:
    """Registry backed by fixed item, block and biome-type tables.

    Block properties map a property name to its allowed values; the first
    value is the default.
    """

    items: set[str] = field(default_factory=set)
    blocks: dict[str, dict[str, tuple[str, ...]]] = field(default_factory=dict)
    biome_types: dict[str, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        items: Sequence[str] = (),
        blocks: Mapping[str, Mapping[str, Sequence[str]]] | Sequence[str] = (),
        biome_types: Mapping[str, Sequence[str]] | None = None,
    ) -> StaticRegistry:
        if isinstance(blocks, Mapping):
            block_table = {
                resource_location(name): {prop: tuple(values) for prop, values in props.items()}
                for name, props in blocks.items()
            }
        else:
            block_table = {resource_location(name): {} for name in blocks}
        return cls(
            items={resource_location(name) for name in items},
            blocks=block_table,
            biome_types={
                name.lower(): frozenset(resource_location(b) for b in biomes)
                for name, biomes in (biome_types or {}).items()
            },
        )

    def has_item(self, name: str) -> bool:
        location = resource_location(name)
        return location in self.items or location in self.blocks

    def has_block(self, name: str) -> bool:
        return resource_location(name) in self.blocks

    def default_block_state(self, name: str) -> BlockState:
        location = resource_location(name)
        props = self.blocks[location]
        return BlockState.of(location, {prop: values[0] for prop, values in props.items() if values})

    def block_properties(self, name: str) -> Mapping[str, Sequence[str]]:
        return self.blocks.get(resource_location(name), {})

    def biomes_of_type(self, biome_type: str) -> frozenset[str] | None:
        return self.biome_types.get(biome_type.lower())
