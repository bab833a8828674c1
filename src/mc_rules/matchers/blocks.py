"""Block matcher compiler and block-offset resolution.

Every compiled matcher first checks that the chunk holding the position is
loaded and answers ``False`` otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from mc_rules.errors import MalformedDescriptorError, UnknownBlockError
from mc_rules.expressions import expression_from_json
from mc_rules.matchers.descriptors import BlockDescriptor, OffsetDescriptor, decode, parse_model
from mc_rules.matchers.items import ItemPredicate, any_match, compile_items
from mc_rules.query import EventQuery
from mc_rules.telemetry import Diagnostics
from mc_rules.world import BlockPos, BlockState, Direction, GameRegistry, World, resource_location

SpatialPredicate = Callable[[World, BlockPos], bool]
PositionResolver = Callable[[Any, EventQuery], "BlockPos | None"]

logger = logging.getLogger("mc_rules.matchers.blocks")


@dataclass(frozen=True, slots=True)
class BlockMatcher:
    tests: tuple[SpatialPredicate, ...]

    def __call__(self, world: World, pos: BlockPos) -> bool:
        if not world.is_chunk_loaded(pos.chunk_x, pos.chunk_z):
            return False
        return all(test(world, pos) for test in self.tests)


def _same_block(block: str) -> SpatialPredicate:
    return lambda world, pos: world.get_block_state(pos).block == block


def _same_state(state: BlockState) -> SpatialPredicate:
    return lambda world, pos: world.get_block_state(pos) == state


def _require_block(name: str, registry: GameRegistry) -> str:
    location = resource_location(name)
    if not registry.has_block(location):
        raise UnknownBlockError(f"Block '{name}' is not valid!", subject=name)
    return location


def _narrow_state(block: str, descriptor: BlockDescriptor, registry: GameRegistry) -> BlockState:
    """Apply property assignments to the default state, skipping unknown names and values."""
    state = registry.default_block_state(block)
    allowed = registry.block_properties(block)
    for prop in descriptor.properties or ():
        values = allowed.get(prop.name)
        if values is not None and prop.value in values:
            state = state.with_property(prop.name, prop.value)
    return state


def _parse_side(descriptor: BlockDescriptor) -> Direction | None:
    if descriptor.side is None:
        return None
    side = Direction.by_name(descriptor.side)
    if side is None:
        raise MalformedDescriptorError(f"Unknown side '{descriptor.side}'!", subject=descriptor.side)
    return side


def _energy_test(expression, side: Direction | None) -> SpatialPredicate:
    def test(world: World, pos: BlockPos) -> bool:
        entity = world.get_block_entity(pos)
        stored = entity.energy_stored(side) if entity is not None else None
        return expression(stored or 0)

    return test


def _contents_test(items: list[ItemPredicate], side: Direction | None) -> SpatialPredicate:
    def test(world: World, pos: BlockPos) -> bool:
        entity = world.get_block_entity(pos)
        if entity is None:
            return False
        slots = entity.item_slots(side)
        if slots is None:
            return False
        return any(any_match(items, stack) for stack in slots)

    return test


def compile_block(raw: Any, registry: GameRegistry, diagnostics: Diagnostics) -> BlockMatcher:
    """Compile one block descriptor, raising :class:`RuleCompileError` on problems."""
    value = decode(raw)
    if isinstance(value, str):
        return BlockMatcher((_same_block(_require_block(value, registry)),))
    if not isinstance(value, dict):
        raise MalformedDescriptorError(f"Block description '{raw}' is not valid!", subject=str(raw))

    descriptor: BlockDescriptor = parse_model(BlockDescriptor, value, "Block")
    tests: list[SpatialPredicate] = []
    if descriptor.block is not None:
        block = _require_block(descriptor.block, registry)
        if descriptor.properties:
            tests.append(_same_state(_narrow_state(block, descriptor, registry)))
        else:
            tests.append(_same_block(block))
    if descriptor.mod is not None:
        mod = descriptor.mod
        tests.append(lambda world, pos: world.get_block_state(pos).namespace == mod)

    side = _parse_side(descriptor)
    if descriptor.energy is not None:
        tests.append(_energy_test(expression_from_json(descriptor.energy), side))
    if descriptor.contains is not None:
        contents = descriptor.contains if isinstance(descriptor.contains, list) else [descriptor.contains]
        tests.append(_contents_test(compile_items(contents, registry, diagnostics), side))

    return BlockMatcher(tuple(tests))


def compile_offset(raw: Any) -> PositionResolver:
    """Compile a ``blockoffset`` descriptor into a position resolver.

    With ``look`` set the offset applies to the block the player looks at,
    falling back to the event position when nothing is targeted.
    """
    value = decode(raw)
    descriptor: OffsetDescriptor = parse_model(OffsetDescriptor, value, "Block offset")
    dx, dy, dz = descriptor.offset.x, descriptor.offset.y, descriptor.offset.z

    if descriptor.look:
        def resolve_look(event: Any, query: EventQuery) -> BlockPos | None:
            world = query.get_world(event)
            player = query.get_player(event)
            target = player.target_block(world) if world is not None and player is not None else None
            if target is None:
                target = query.get_valid_block_pos(event)
            return None if target is None else target.offset(dx, dy, dz)

        return resolve_look

    def resolve(event: Any, query: EventQuery) -> BlockPos | None:
        pos = query.get_valid_block_pos(event)
        return None if pos is None else pos.offset(dx, dy, dz)

    return resolve


def event_block_pos(event: Any, query: EventQuery) -> BlockPos | None:
    return query.get_valid_block_pos(event)
