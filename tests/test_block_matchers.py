from __future__ import annotations

import pytest

from mc_rules.errors import MalformedDescriptorError, UnknownBlockError
from mc_rules.matchers import compile_block, compile_offset
from mc_rules.query import RuleEvent, SimpleEventQuery
from mc_rules.telemetry import CollectingDiagnostics
from mc_rules.world import (
    BlockPos,
    BlockState,
    Direction,
    InMemoryBlockEntity,
    InMemoryPlayer,
    InMemoryWorld,
    ItemStack,
)

POS = BlockPos(3, 64, -7)


def _furnace(facing: str, lit: str = "false") -> BlockState:
    return BlockState.of("minecraft:furnace", {"facing": facing, "lit": lit})


def test_properties_narrow_to_exact_state(registry, world: InMemoryWorld) -> None:
    matcher = compile_block(
        {"block": "minecraft:furnace", "properties": [{"name": "facing", "value": "east"}]},
        registry,
        CollectingDiagnostics(),
    )

    world.set_block(POS, _furnace("east"))
    assert matcher(world, POS)

    world.set_block(POS, _furnace("north"))
    assert not matcher(world, POS)

    world.set_block(POS, BlockState.of("minecraft:stone"))
    assert not matcher(world, POS)


def test_property_values_may_be_json_scalars(registry, world: InMemoryWorld) -> None:
    ripe = compile_block(
        '{"block": "minecraft:wheat", "properties": [{"name": "age", "value": 7}]}',
        registry,
        CollectingDiagnostics(),
    )
    lit = compile_block(
        {"block": "minecraft:furnace", "properties": [{"name": "lit", "value": True}]},
        registry,
        CollectingDiagnostics(),
    )

    world.set_block(POS, BlockState.of("minecraft:wheat", {"age": "7"}))
    assert ripe(world, POS)
    world.set_block(POS, BlockState.of("minecraft:wheat", {"age": "6"}))
    assert not ripe(world, POS)

    world.set_block(POS, _furnace("north", lit="true"))
    assert lit(world, POS)
    world.set_block(POS, _furnace("north"))
    assert not lit(world, POS)


def test_unknown_property_names_are_ignored(registry, world: InMemoryWorld) -> None:
    matcher = compile_block(
        '{"block": "minecraft:furnace", "properties": [{"name": "color", "value": "red"}]}',
        registry,
        CollectingDiagnostics(),
    )

    world.set_block(POS, _furnace("north"))
    assert matcher(world, POS)


def test_unloaded_chunk_is_false(registry, world: InMemoryWorld) -> None:
    matcher = compile_block("minecraft:stone", registry, CollectingDiagnostics())
    world.set_block(POS, BlockState.of("minecraft:stone"))
    assert matcher(world, POS)

    world.unloaded_chunks.add((POS.chunk_x, POS.chunk_z))
    assert not matcher(world, POS)


def test_plain_name_ignores_state(registry, world: InMemoryWorld) -> None:
    matcher = compile_block('"minecraft:furnace"', registry, CollectingDiagnostics())

    world.set_block(POS, _furnace("west", lit="true"))
    assert matcher(world, POS)


def test_unknown_block(registry) -> None:
    with pytest.raises(UnknownBlockError):
        compile_block("minecraft:unobtainium_ore", registry, CollectingDiagnostics())
    with pytest.raises(UnknownBlockError):
        compile_block({"block": "minecraft:unobtainium_ore"}, registry, CollectingDiagnostics())


def test_mod_namespace(registry, world: InMemoryWorld) -> None:
    matcher = compile_block({"mod": "thermal"}, registry, CollectingDiagnostics())

    world.set_block(POS, BlockState.of("thermal:energy_cell"))
    assert matcher(world, POS)

    world.set_block(POS, BlockState.of("minecraft:stone"))
    assert not matcher(world, POS)


def test_energy_respects_side(registry, world: InMemoryWorld) -> None:
    world.set_block(POS, BlockState.of("thermal:energy_cell"))
    world.block_entities[POS] = InMemoryBlockEntity(energy=500, sides=frozenset({Direction.UP}))

    top = compile_block({"block": "thermal:energy_cell", "energy": ">=100", "side": "up"}, registry, CollectingDiagnostics())
    bottom = compile_block({"block": "thermal:energy_cell", "energy": ">=100", "side": "DOWN"}, registry, CollectingDiagnostics())
    anywhere = compile_block({"energy": "400-600"}, registry, CollectingDiagnostics())

    assert top(world, POS)
    assert not bottom(world, POS)
    assert anywhere(world, POS)


def test_energy_without_block_entity_reads_zero(registry, world: InMemoryWorld) -> None:
    matcher = compile_block({"energy": 0}, registry, CollectingDiagnostics())

    assert matcher(world, POS)


def test_contains_checks_inventory(registry, world: InMemoryWorld) -> None:
    world.set_block(POS, BlockState.of("minecraft:chest", {"facing": "north"}))
    world.block_entities[POS] = InMemoryBlockEntity(
        items=[ItemStack("minecraft:torch", count=3), ItemStack("minecraft:stick", count=8)]
    )

    sticks = compile_block(
        {"block": "minecraft:chest", "contains": {"item": "minecraft:stick", "count": ">=4"}},
        registry,
        CollectingDiagnostics(),
    )
    swords = compile_block(
        {"block": "minecraft:chest", "contains": [{"item": "minecraft:diamond_sword"}, "minecraft:potion"]},
        registry,
        CollectingDiagnostics(),
    )

    assert sticks(world, POS)
    assert not swords(world, POS)


def test_contains_reports_bad_items_but_keeps_the_rest(registry, world: InMemoryWorld) -> None:
    diagnostics = CollectingDiagnostics()
    world.block_entities[POS] = InMemoryBlockEntity(items=[ItemStack("minecraft:torch")])

    matcher = compile_block({"contains": [{"item": "minecraft:nope"}, {"item": "minecraft:torch"}]}, registry, diagnostics)

    assert matcher(world, POS)
    assert len(diagnostics.warnings) == 1
    assert diagnostics.errors == []


def test_bad_side(registry) -> None:
    with pytest.raises(MalformedDescriptorError):
        compile_block({"energy": 1, "side": "sideways"}, registry, CollectingDiagnostics())


def test_offset_shifts_event_position(world: InMemoryWorld) -> None:
    resolve = compile_offset({"offset": {"y": -1}})
    query = SimpleEventQuery()

    assert resolve(RuleEvent(world=world, pos=POS), query) == BlockPos(3, 63, -7)
    assert resolve(RuleEvent(world=world, pos=None), query) is None


def test_look_offset_uses_target_then_falls_back(world: InMemoryWorld) -> None:
    resolve = compile_offset('{"look": true, "offset": {"x": 1}}')
    query = SimpleEventQuery()
    player = InMemoryPlayer(looking_at=BlockPos(100, 70, 100))

    assert resolve(RuleEvent(world=world, pos=POS, player=player), query) == BlockPos(101, 70, 100)

    player.looking_at = None
    assert resolve(RuleEvent(world=world, pos=POS, player=player), query) == BlockPos(4, 64, -7)
