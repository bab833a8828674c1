"""JSON snapshots describing one event, for compiling and evaluating rules offline."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mc_rules.compat import Capability, InMemoryCompatibility, Season
from mc_rules.query import RuleEvent, SimpleEventQuery
from mc_rules.world import (
    Biome,
    BlockPos,
    BlockState,
    Difficulty,
    Direction,
    EquipmentSlot,
    InMemoryBlockEntity,
    InMemoryPlayer,
    InMemoryWorld,
    ItemStack,
    StaticRegistry,
    resource_location,
)

Coords = tuple[int, int, int]
ChunkCoords = tuple[int, int]


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read or validated."""


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StackModel(_Model):
    item: str
    count: int = 1
    damage: int = 0
    tag: dict[str, Any] | None = None
    energy: int | None = None

    def build(self) -> ItemStack:
        return ItemStack(
            item=resource_location(self.item),
            count=self.count,
            damage=self.damage,
            tag=self.tag,
            energy=self.energy,
        )


class BlockEntityModel(_Model):
    items: list[StackModel] | None = None
    energy: int | None = None
    sides: list[Direction] | None = None


class PlacedBlockModel(_Model):
    pos: Coords
    block: str
    properties: dict[str, str] = Field(default_factory=dict)
    entity: BlockEntityModel | None = None


class BiomeModel(_Model):
    id: str = "minecraft:plains"
    category: str = "plains"


class RegistryModel(_Model):
    items: list[str] = Field(default_factory=list)
    blocks: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    biome_types: dict[str, list[str]] = Field(default_factory=dict)


class WorldModel(_Model):
    dimension: str = "minecraft:overworld"
    day_time: int | None = 0
    raining: bool = False
    thundering: bool = False
    difficulty: Difficulty = Difficulty.NORMAL
    spawn: Coords = (0, 64, 0)
    biome: BiomeModel = Field(default_factory=BiomeModel)
    light: int = 15
    local_difficulty: float = 1.5
    covered: list[Coords] = Field(default_factory=list)
    blocks: list[PlacedBlockModel] = Field(default_factory=list)
    unloaded_chunks: list[ChunkCoords] = Field(default_factory=list)
    structures: dict[str, list[ChunkCoords]] = Field(default_factory=dict)


class PlayerModel(_Model):
    name: str = "player"
    equipment: dict[EquipmentSlot, StackModel] = Field(default_factory=dict)
    looking_at: Coords | None = None


class EventModel(_Model):
    pos: Coords
    block_pos: Coords | None = None


class CompatModel(_Model):
    capabilities: list[Capability] | None = None
    seasons: dict[str, Season] = Field(default_factory=dict)
    world_states: dict[str, str] = Field(default_factory=dict)
    player_states: dict[str, dict[str, str]] = Field(default_factory=dict)
    game_stages: dict[str, list[str]] = Field(default_factory=dict)
    cities: list[ChunkCoords] = Field(default_factory=list)
    streets: list[ChunkCoords] = Field(default_factory=list)
    spheres: list[ChunkCoords] = Field(default_factory=list)
    buildings: list[ChunkCoords] = Field(default_factory=list)
    baubles: dict[str, dict[int, StackModel]] = Field(default_factory=dict)
    biome_names: dict[str, str] = Field(default_factory=dict)


class SnapshotModel(_Model):
    registry: RegistryModel = Field(default_factory=RegistryModel)
    world: WorldModel | None = None
    player: PlayerModel | None = None
    event: EventModel | None = None
    compat: CompatModel = Field(default_factory=CompatModel)


@dataclass(slots=True)
class Snapshot:
    registry: StaticRegistry
    compatibility: InMemoryCompatibility
    event: RuleEvent | None
    query: SimpleEventQuery


def _pos(coords: Coords | None) -> BlockPos | None:
    return None if coords is None else BlockPos(*coords)


def _build_world(model: WorldModel) -> InMemoryWorld:
    world = InMemoryWorld(
        dimension=resource_location(model.dimension),
        day_time=model.day_time,
        raining=model.raining,
        thundering=model.thundering,
        difficulty=model.difficulty,
        spawn_pos=BlockPos(*model.spawn),
        default_biome=Biome(resource_location(model.biome.id), model.biome.category),
        default_light=model.light,
        default_local_difficulty=model.local_difficulty,
        covered={BlockPos(*coords) for coords in model.covered},
        unloaded_chunks=set(model.unloaded_chunks),
        structures={resource_location(name): set(chunks) for name, chunks in model.structures.items()},
    )
    for placed in model.blocks:
        pos = BlockPos(*placed.pos)
        world.set_block(pos, BlockState.of(placed.block, placed.properties))
        if placed.entity is not None:
            world.block_entities[pos] = InMemoryBlockEntity(
                items=None if placed.entity.items is None else [stack.build() for stack in placed.entity.items],
                energy=placed.entity.energy,
                sides=None if placed.entity.sides is None else frozenset(placed.entity.sides),
            )
    return world


def _build_compat(model: CompatModel, default_capabilities: list[Capability]) -> InMemoryCompatibility:
    capabilities = model.capabilities if model.capabilities is not None else default_capabilities
    return InMemoryCompatibility(
        capabilities=frozenset(capabilities),
        seasons={resource_location(dim): season for dim, season in model.seasons.items()},
        world_states=dict(model.world_states),
        player_states={name: dict(states) for name, states in model.player_states.items()},
        game_stages={name: set(stages) for name, stages in model.game_stages.items()},
        cities=set(model.cities),
        streets=set(model.streets),
        spheres=set(model.spheres),
        buildings=set(model.buildings),
        baubles={
            name: {index: stack.build() for index, stack in slots.items()} for name, slots in model.baubles.items()
        },
        biome_names=dict(model.biome_names),
    )


def build_snapshot(payload: Any, *, default_capabilities: list[Capability] | None = None) -> Snapshot:
    try:
        model = SnapshotModel.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid snapshot: {exc}") from exc

    registry = StaticRegistry.build(
        items=model.registry.items,
        blocks=model.registry.blocks,
        biome_types=model.registry.biome_types,
    )
    event = None
    if model.event is not None:
        player = None
        if model.player is not None:
            player = InMemoryPlayer(
                name=model.player.name,
                equipment={slot: stack.build() for slot, stack in model.player.equipment.items()},
                looking_at=_pos(model.player.looking_at),
            )
        event = RuleEvent(
            world=_build_world(model.world or WorldModel()),
            pos=_pos(model.event.pos),
            player=player,
            block_pos=_pos(model.event.block_pos),
        )

    return Snapshot(
        registry=registry,
        compatibility=_build_compat(model.compat, default_capabilities or []),
        event=event,
        query=SimpleEventQuery(),
    )


def load_snapshot(path: str | Path, *, default_capabilities: list[Capability] | None = None) -> Snapshot:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SnapshotError(f"Unable to read snapshot {path}: {exc}") from exc
    return build_snapshot(payload, default_capabilities=default_capabilities)


def load_rules(path: str | Path) -> list[tuple[str, dict[str, Any]]]:
    """Read a rules file holding one rule object or a list of them."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SnapshotError(f"Unable to read rules {path}: {exc}") from exc

    rules = payload if isinstance(payload, list) else [payload]
    named: list[tuple[str, dict[str, Any]]] = []
    for index, rule in enumerate(rules, start=1):
        if not isinstance(rule, dict):
            raise SnapshotError(f"Rule #{index} in {path} is not an object")
        named.append((str(rule.get("name", f"rule-{index}")), rule))
    return named
