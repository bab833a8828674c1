from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from mc_rules import keys
from mc_rules.attributes import AttributeMap
from mc_rules.compat import Capability, InMemoryCompatibility, NoCompatibility, Season
from mc_rules.evaluator import CHECK_ORDER, CheckSpec, RuleEvaluator
from mc_rules.query import RuleEvent
from mc_rules.telemetry import CollectingDiagnostics
from mc_rules.world import (
    Biome,
    BlockPos,
    BlockState,
    Difficulty,
    EquipmentSlot,
    InMemoryPlayer,
    InMemoryWorld,
    ItemStack,
)

ALL_CAPABILITIES = frozenset(Capability)


def _rule(raw: dict, registry, *, compatibility=None, rng=None) -> tuple[RuleEvaluator, CollectingDiagnostics]:
    diagnostics = CollectingDiagnostics()
    evaluator = RuleEvaluator(
        AttributeMap.from_mapping(raw, diagnostics),
        registry=registry,
        compatibility=compatibility,
        diagnostics=diagnostics,
        rng=rng,
    )
    return evaluator, diagnostics


def _at(world: InMemoryWorld, x: int = 10, y: int = 64, z: int = 10, player: InMemoryPlayer | None = None) -> RuleEvent:
    return RuleEvent(world=world, pos=BlockPos(x, y, z), player=player)


def test_no_recognised_keys_always_matches(registry, query, event) -> None:
    evaluator, diagnostics = _rule({"name": "anything", "result": "allow"}, registry)

    assert evaluator.checks == ()
    assert evaluator.match(event, query)
    assert evaluator.match(RuleEvent(world=None, pos=None), query)
    assert diagnostics.entries == []


def test_checks_follow_fixed_order(registry) -> None:
    evaluator, _ = _rule({"charm": "minecraft:stick", "maxlight": 7, "random": 0.5, "block": "minecraft:stone"}, registry,
                         compatibility=InMemoryCompatibility(capabilities=ALL_CAPABILITIES))

    assert evaluator.compiled_keys == [keys.RANDOM, keys.MAXLIGHT, keys.BLOCK, keys.CHARM]
    order = [spec.key for spec in CHECK_ORDER]
    assert order.index(keys.RANDOM) < order.index(keys.BLOCK) < order.index(keys.STATE)


def test_short_circuit_skips_later_checks(registry, query, event) -> None:
    calls: list[str] = []

    class ProbeEvaluator(RuleEvaluator):
        check_order = (
            CheckSpec(keys.MINHEIGHT, "_compile_min_height"),
            CheckSpec(keys.STRUCTURE, "_compile_exploding"),
        )

        def _compile_exploding(self, attributes):
            def check(event, query):
                calls.append("exploding")
                raise RuntimeError("must not run")

            return check

    evaluator = ProbeEvaluator(
        AttributeMap.from_mapping({"minheight": 200, "structure": "minecraft:village"}),
        registry=registry,
    )

    assert evaluator.match(event, query) is False
    assert calls == []


def test_runtime_failure_counts_as_false(registry, query, event) -> None:
    class BrokenEvaluator(RuleEvaluator):
        check_order = (CheckSpec(keys.STRUCTURE, "_compile_broken"),)

        def _compile_broken(self, attributes):
            def check(event, query):
                raise RuntimeError("lookup failed")

            return check

    evaluator = BrokenEvaluator(AttributeMap.from_mapping({"structure": "x"}), registry=registry)

    assert evaluator.match(event, query) is False


def test_absent_world_and_player_never_raise(registry, query) -> None:
    rule = {
        "dimension": "minecraft:overworld",
        "mintime": 0,
        "minheight": 0,
        "weather": "rain",
        "category": "plains",
        "difficulty": "normal",
        "minspawndist": 0,
        "maxlight": 15,
        "mindifficulty": 0,
        "seesky": True,
        "block": "minecraft:stone",
        "biome": "minecraft:plains",
        "helditem": "minecraft:stick",
        "structure": "minecraft:village",
    }
    evaluator, diagnostics = _rule(rule, registry)
    assert diagnostics.entries == []

    for key in rule:
        single, _ = _rule({key: rule[key]}, registry)
        assert single.match(RuleEvent(world=None, pos=None), query) is False, key


def test_single_and_multi_value_lists_agree(registry, query) -> None:
    nether = InMemoryWorld(dimension="minecraft:the_nether")
    overworld = InMemoryWorld()

    single, _ = _rule({"dimension": "minecraft:the_nether"}, registry)
    double, _ = _rule({"dimension": ["minecraft:the_nether", "minecraft:the_nether"]}, registry)
    pair, _ = _rule({"dimension": ["the_nether", "minecraft:the_end"]}, registry)

    for world in (nether, overworld):
        event = _at(world)
        assert single.match(event, query) == double.match(event, query) == pair.match(event, query)
    assert single.match(_at(nether), query)
    assert not single.match(_at(overworld), query)


def test_dimension_mod(registry, query) -> None:
    evaluator, _ = _rule({"dimension_mod": ["rftoolsdim", "twilightforest"]}, registry)

    assert evaluator.match(_at(InMemoryWorld(dimension="twilightforest:twilight_forest")), query)
    assert not evaluator.match(_at(InMemoryWorld()), query)


def test_random_frequency_tracks_probability(registry, query, event) -> None:
    evaluator, _ = _rule({"random": 0.3}, registry, rng=random.Random(1234))

    hits = sum(evaluator.match(event, query) for _ in range(20_000))

    assert 0.28 < hits / 20_000 < 0.32


def test_random_extremes(registry, query, event) -> None:
    never, _ = _rule({"random": 0.0}, registry, rng=random.Random(1))
    always, _ = _rule({"random": 1.0}, registry, rng=random.Random(1))

    assert not any(never.match(event, query) for _ in range(200))
    assert all(always.match(event, query) for _ in range(200))


def test_time_uses_day_time_modulo(registry, query) -> None:
    evening, _ = _rule({"mintime": 12000, "maxtime": 13000}, registry)

    assert evening.match(_at(InMemoryWorld(day_time=24000 * 3 + 12500)), query)
    assert not evening.match(_at(InMemoryWorld(day_time=1000)), query)
    assert not evening.match(_at(InMemoryWorld(day_time=None)), query)


def test_height_bounds(registry, query, world) -> None:
    evaluator, _ = _rule({"minheight": 40, "maxheight": 80}, registry)

    assert evaluator.match(_at(world, y=40), query)
    assert evaluator.match(_at(world, y=80), query)
    assert not evaluator.match(_at(world, y=39), query)
    assert not evaluator.match(_at(world, y=81), query)


def test_weather(registry, query) -> None:
    rain, _ = _rule({"weather": "Rain"}, registry)
    thunder, _ = _rule({"weather": "thunderstorm"}, registry)

    assert rain.match(_at(InMemoryWorld(raining=True)), query)
    assert not rain.match(_at(InMemoryWorld()), query)
    assert thunder.match(_at(InMemoryWorld(thundering=True)), query)
    assert not thunder.match(_at(InMemoryWorld(raining=True)), query)


@pytest.mark.parametrize(
    "rule, fragment",
    [
        ({"weather": "snow"}, "Unknown weather"),
        ({"difficulty": "nightmare"}, "Unknown difficulty"),
        ({"biometype": "soggy"}, "Unknown biome type"),
        ({"block": "minecraft:unobtainium_ore"}, "is not valid"),
    ],
)
def test_invalid_conditions_are_dropped_with_one_error(registry, query, event, rule, fragment) -> None:
    evaluator, diagnostics = _rule({**rule, "maxheight": 100}, registry)

    assert evaluator.compiled_keys == [keys.MAXHEIGHT]
    assert len(diagnostics.entries) == 1
    assert fragment in diagnostics.errors[0]
    assert evaluator.match(event, query)


@pytest.mark.parametrize(
    "rule",
    [
        {"helmet": {"item": "minecraft:iron_helmet", "damage": "abc"}},
        {"block": {"block": "thermal:energy_cell", "energy": ">=lots"}},
    ],
)
def test_bad_expressions_are_dropped_with_one_warning(registry, query, event, rule) -> None:
    evaluator, diagnostics = _rule({**rule, "maxheight": 100}, registry)

    assert evaluator.compiled_keys == [keys.MAXHEIGHT]
    assert diagnostics.errors == []
    assert len(diagnostics.warnings) == 1
    assert "Bad expression" in diagnostics.warnings[0]
    assert evaluator.match(event, query)


def test_block_list_fails_as_a_whole(registry) -> None:
    evaluator, diagnostics = _rule({"block": ["minecraft:stone", "minecraft:unobtainium_ore"]}, registry)

    assert evaluator.checks == ()
    assert len(diagnostics.errors) == 1


def test_category_and_difficulty(registry, query) -> None:
    evaluator, _ = _rule({"category": ["DESERT", "mesa"], "difficulty": "Hard"}, registry)
    desert = Biome("minecraft:desert", "desert")

    assert evaluator.match(_at(InMemoryWorld(default_biome=desert, difficulty=Difficulty.HARD)), query)
    assert not evaluator.match(_at(InMemoryWorld(default_biome=desert)), query)
    assert not evaluator.match(_at(InMemoryWorld(difficulty=Difficulty.HARD)), query)


def test_spawn_distance(registry, query, world) -> None:
    evaluator, _ = _rule({"minspawndist": 10, "maxspawndist": 20}, registry)

    assert evaluator.match(_at(world, x=15, y=64, z=0), query)
    assert not evaluator.match(_at(world, x=5, y=64, z=0), query)
    assert not evaluator.match(_at(world, x=25, y=64, z=0), query)


def test_light_local_difficulty_and_sky(registry, query) -> None:
    world = InMemoryWorld(default_light=4, default_local_difficulty=2.5)
    dark_and_hard, _ = _rule({"maxlight": 7, "mindifficulty": 2.0, "maxdifficulty": 3.0, "seesky": False}, registry)

    assert not dark_and_hard.match(_at(world), query)
    world.covered.add(BlockPos(10, 64, 10))
    assert dark_and_hard.match(_at(world), query)

    world.light[BlockPos(10, 64, 10)] = 12
    assert not dark_and_hard.match(_at(world), query)


def test_numeric_block_property_keeps_the_block_check(registry, query, world) -> None:
    world.set_block(BlockPos(10, 64, 10), BlockState.of("minecraft:wheat", {"age": "7"}))
    evaluator, diagnostics = _rule(
        {"block": '{"block": "minecraft:wheat", "properties": [{"name": "age", "value": 7}]}'}, registry
    )

    assert evaluator.compiled_keys == [keys.BLOCK]
    assert diagnostics.entries == []
    assert evaluator.match(_at(world), query)


def test_block_check_uses_offset(registry, query, world) -> None:
    world.set_block(BlockPos(10, 63, 10), BlockState.of("minecraft:grass_block", {"snowy": "false"}))
    evaluator, _ = _rule(
        {
            "block": {"block": "minecraft:grass_block", "properties": [{"name": "snowy", "value": "false"}]},
            "blockoffset": {"offset": {"y": -1}},
        },
        registry,
    )

    assert evaluator.match(_at(world), query)
    assert not evaluator.match(_at(world, y=70), query)

    world.unloaded_chunks.add((0, 0))
    assert not evaluator.match(_at(world), query)


def test_block_list_matches_any(registry, query, world) -> None:
    world.set_block(BlockPos(10, 64, 10), BlockState.of("minecraft:stone"))
    evaluator, _ = _rule({"block": ["minecraft:furnace", "minecraft:stone"]}, registry)

    assert evaluator.match(_at(world), query)
    assert not evaluator.match(_at(world, y=65), query)


def test_biome_by_id_or_provided_name(registry, query) -> None:
    world = InMemoryWorld(default_biome=Biome("minecraft:savanna", "savanna"))
    compatibility = InMemoryCompatibility(biome_names={"minecraft:savanna": "Savanna"})

    by_id, _ = _rule({"biome": "minecraft:savanna"}, registry)
    by_name, _ = _rule({"biome": ["Savanna", "Jungle"]}, registry, compatibility=compatibility)
    unnamed, _ = _rule({"biome": "Savanna"}, registry)

    assert by_id.match(_at(world), query)
    assert by_name.match(_at(world), query)
    assert not unnamed.match(_at(world), query)


def test_biome_types(registry, query) -> None:
    evaluator, _ = _rule({"biometype": ["warm", "ICY"]}, registry)

    assert evaluator.match(_at(InMemoryWorld(default_biome=Biome("minecraft:desert", "desert"))), query)
    assert evaluator.match(_at(InMemoryWorld(default_biome=Biome("minecraft:snowy_tundra", "icy"))), query)
    assert not evaluator.match(_at(InMemoryWorld()), query)


def test_structure(registry, query) -> None:
    world = InMemoryWorld(structures={"minecraft:village": {(0, 0)}})
    evaluator, _ = _rule({"structure": "minecraft:village"}, registry)

    assert evaluator.match(_at(world), query)
    assert not evaluator.match(_at(world, x=100), query)


def test_armour_and_hands(registry, query, world, player) -> None:
    helmet, _ = _rule({"helmet": "minecraft:iron_helmet"}, registry)
    held, _ = _rule({"helditem": {"item": "minecraft:stick", "count": ">=2"}}, registry)
    offhand, _ = _rule({"offhanditem": "minecraft:torch"}, registry)
    both, _ = _rule({"bothhandsitem": ["minecraft:torch"]}, registry)
    event = _at(world, player=player)

    assert not helmet.match(event, query)
    player.equipment[EquipmentSlot.HEAD] = ItemStack("minecraft:iron_helmet")
    assert helmet.match(event, query)

    player.equipment[EquipmentSlot.MAINHAND] = ItemStack("minecraft:stick", count=1)
    assert not held.match(event, query)
    player.equipment[EquipmentSlot.MAINHAND] = ItemStack("minecraft:stick", count=5)
    assert held.match(event, query)

    assert not both.match(event, query)
    player.equipment[EquipmentSlot.MAINHAND] = ItemStack("minecraft:torch")
    assert both.match(event, query)
    assert not offhand.match(event, query)
    player.equipment[EquipmentSlot.OFFHAND] = ItemStack("minecraft:torch")
    assert offhand.match(event, query)


def test_equipment_check_without_player_is_false(registry, query, world) -> None:
    evaluator, _ = _rule({"boots": "minecraft:stick"}, registry)

    assert not evaluator.match(_at(world, player=None), query)


def test_all_item_descriptors_failing_drops_the_check(registry) -> None:
    evaluator, diagnostics = _rule({"helditem": ["minecraft:nope", "minecraft:gone"]}, registry)

    assert evaluator.checks == ()
    assert len(diagnostics.warnings) == 2
    assert diagnostics.errors == []


def test_missing_capability_omits_only_that_check(registry, query, world) -> None:
    evaluator, diagnostics = _rule({"minheight": 10, "summer": True}, registry, compatibility=NoCompatibility())

    assert evaluator.compiled_keys == [keys.MINHEIGHT]
    assert len(diagnostics.entries) == 1
    assert "Serene Seasons" in diagnostics.warnings[0]
    assert "summer" in diagnostics.warnings[0]
    assert evaluator.match(_at(world, y=64), query)
    assert not evaluator.match(_at(world, y=5), query)


@pytest.mark.parametrize(
    "key, value, label",
    [
        ("state", "phase=2", "EnigmaScript"),
        ("pstate", "quest=done", "EnigmaScript"),
        ("gamestage", "nether", "Game Stages"),
        ("incity", True, "The Lost Cities"),
        ("ring", "minecraft:stick", "Baubles"),
    ],
)
def test_each_gated_key_reports_its_capability(registry, key, value, label) -> None:
    evaluator, diagnostics = _rule({key: value}, registry)

    assert evaluator.checks == ()
    assert diagnostics.warnings == [f"{label} is missing: the '{key}' test cannot work!"]


def test_seasons(registry, query, world) -> None:
    compatibility = InMemoryCompatibility(
        capabilities=frozenset({Capability.SEASONS}),
        seasons={"minecraft:overworld": Season.SUMMER},
    )
    summer, _ = _rule({"summer": True}, registry, compatibility=compatibility)
    not_winter, _ = _rule({"winter": False}, registry, compatibility=compatibility)
    spring, _ = _rule({"spring": True}, registry, compatibility=compatibility)

    assert summer.match(_at(world), query)
    assert not_winter.match(_at(world), query)
    assert not spring.match(_at(world), query)


def test_world_and_player_state(registry, query, world, player) -> None:
    compatibility = InMemoryCompatibility(
        capabilities=frozenset({Capability.WORLD_STATE}),
        world_states={"phase": "2"},
        player_states={"steve": {"quest": "done"}},
    )
    state, _ = _rule({"state": "phase=2", "pstate": "quest = done"}, registry, compatibility=compatibility)
    wrong, _ = _rule({"state": "phase=3"}, registry, compatibility=compatibility)
    malformed, diagnostics = _rule({"state": "phase"}, registry, compatibility=compatibility)

    assert state.match(_at(world, player=player), query)
    assert not state.match(_at(world, player=None), query)
    assert not wrong.match(_at(world, player=player), query)
    assert malformed.checks == ()
    assert "Bad state=value specifier" in diagnostics.errors[0]


def test_game_stage(registry, query, world, player) -> None:
    compatibility = InMemoryCompatibility(
        capabilities=frozenset({Capability.GAME_STAGES}),
        game_stages={"steve": {"nether"}},
    )
    evaluator, _ = _rule({"gamestage": "nether"}, registry, compatibility=compatibility)

    assert evaluator.match(_at(world, player=player), query)
    assert not evaluator.match(_at(world, player=InMemoryPlayer(name="alex")), query)


def test_lost_city_membership(registry, query, world) -> None:
    compatibility = InMemoryCompatibility(
        capabilities=frozenset({Capability.LOST_CITIES}),
        cities={(0, 0)},
        buildings={(0, 0)},
    )
    in_city, _ = _rule({"incity": True, "instreet": False, "inbuilding": True}, registry, compatibility=compatibility)
    outside_sphere, _ = _rule({"insphere": False}, registry, compatibility=compatibility)

    assert in_city.match(_at(world), query)
    assert not in_city.match(_at(world, x=500), query)
    assert outside_sphere.match(_at(world), query)


def test_bauble_slots(registry, query, world, player) -> None:
    compatibility = InMemoryCompatibility(
        capabilities=frozenset({Capability.BAUBLES}),
        baubles={"steve": {2: ItemStack("minecraft:stick")}},
    )
    ring, _ = _rule({"ring": "minecraft:stick"}, registry, compatibility=compatibility)
    trinket, _ = _rule({"trinket": "minecraft:stick"}, registry, compatibility=compatibility)
    amulet, _ = _rule({"amulet": "minecraft:stick"}, registry, compatibility=compatibility)
    event = _at(world, player=player)

    assert ring.match(event, query)
    assert trinket.match(event, query)
    assert not amulet.match(event, query)


def test_concurrent_matching_is_consistent(registry, query) -> None:
    world = InMemoryWorld(default_biome=Biome("minecraft:desert", "desert"))
    world.set_block(BlockPos(10, 64, 10), BlockState.of("minecraft:stone"))
    evaluator, _ = _rule({"category": "desert", "block": "minecraft:stone", "minheight": 60}, registry)
    events = [_at(world, y=y) for y in range(55, 70)]
    expected = [evaluator.match(event, query) for event in events]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: [evaluator.match(event, query) for event in events], range(64)))

    assert all(result == expected for result in results)
    assert expected.count(True) == 1
