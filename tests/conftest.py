from __future__ import annotations

import pytest

from mc_rules.query import RuleEvent, SimpleEventQuery
from mc_rules.world import BlockPos, InMemoryPlayer, InMemoryWorld, StaticRegistry


@pytest.fixture
def registry() -> StaticRegistry:
    return StaticRegistry.build(
        items=[
            "minecraft:diamond_sword",
            "minecraft:stick",
            "minecraft:potion",
            "minecraft:enchanted_book",
            "minecraft:iron_helmet",
            "minecraft:torch",
            "thermal:flux_capacitor",
        ],
        blocks={
            "minecraft:stone": {},
            "minecraft:grass_block": {"snowy": ["false", "true"]},
            "minecraft:furnace": {"facing": ["north", "south", "west", "east"], "lit": ["false", "true"]},
            "minecraft:chest": {"facing": ["north", "south", "west", "east"]},
            "minecraft:wheat": {"age": [str(age) for age in range(8)]},
            "thermal:energy_cell": {},
        },
        biome_types={"warm": ["minecraft:desert", "minecraft:savanna"], "icy": ["minecraft:snowy_tundra"]},
    )


@pytest.fixture
def world() -> InMemoryWorld:
    return InMemoryWorld()


@pytest.fixture
def player() -> InMemoryPlayer:
    return InMemoryPlayer(name="steve")


@pytest.fixture
def query() -> SimpleEventQuery:
    return SimpleEventQuery()


@pytest.fixture
def event(world: InMemoryWorld, player: InMemoryPlayer) -> RuleEvent:
    return RuleEvent(world=world, pos=BlockPos(10, 64, 10), player=player)
