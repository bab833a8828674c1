"""Compiles a rule's attributes into ordered checks and matches events against them."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from mc_rules import keys
from mc_rules.attributes import AttributeMap
from mc_rules.compat import BaubleSlot, Capability, CompatibilityLayer, NoCompatibility, Season, supports
from mc_rules.errors import InvalidExpressionError, MalformedDescriptorError, MissingCapabilityError, RuleCompileError
from mc_rules.keys import Key
from mc_rules.matchers import (
    ItemPredicate,
    PositionResolver,
    any_match,
    compile_block,
    compile_items,
    compile_offset,
    event_block_pos,
)
from mc_rules.query import EventQuery
from mc_rules.telemetry import Diagnostics, LoggingDiagnostics
from mc_rules.world import BlockPos, Difficulty, EquipmentSlot, GameRegistry, World, namespace_of, resource_location

Check = Callable[[Any, EventQuery], bool]

# Process-wide source for ``random`` checks.
SHARED_RANDOM = random.Random()


@dataclass(frozen=True, slots=True)
class CompiledCheck:
    key: Key
    test: Check

    def __call__(self, event: Any, query: EventQuery) -> bool:
        return self.test(event, query)


@dataclass(frozen=True, slots=True)
class CheckSpec:
    """Binds a key to the compiler method that handles it."""

    key: Key
    compiler: str
    capability: Capability | None = None


# Cheap checks first so that short-circuiting skips the expensive ones.
CHECK_ORDER: tuple[CheckSpec, ...] = (
    CheckSpec(keys.RANDOM, "_compile_random"),
    CheckSpec(keys.DIMENSION, "_compile_dimension"),
    CheckSpec(keys.DIMENSION_MOD, "_compile_dimension_mod"),
    CheckSpec(keys.MINTIME, "_compile_min_time"),
    CheckSpec(keys.MAXTIME, "_compile_max_time"),
    CheckSpec(keys.MINHEIGHT, "_compile_min_height"),
    CheckSpec(keys.MAXHEIGHT, "_compile_max_height"),
    CheckSpec(keys.WEATHER, "_compile_weather"),
    CheckSpec(keys.CATEGORY, "_compile_category"),
    CheckSpec(keys.DIFFICULTY, "_compile_difficulty"),
    CheckSpec(keys.MINSPAWNDIST, "_compile_min_spawn_dist"),
    CheckSpec(keys.MAXSPAWNDIST, "_compile_max_spawn_dist"),
    CheckSpec(keys.MINLIGHT, "_compile_min_light"),
    CheckSpec(keys.MAXLIGHT, "_compile_max_light"),
    CheckSpec(keys.MINDIFFICULTY, "_compile_min_local_difficulty"),
    CheckSpec(keys.MAXDIFFICULTY, "_compile_max_local_difficulty"),
    CheckSpec(keys.SEESKY, "_compile_see_sky"),
    CheckSpec(keys.BLOCK, "_compile_blocks"),
    CheckSpec(keys.BIOME, "_compile_biomes"),
    CheckSpec(keys.BIOMETYPE, "_compile_biome_types"),
    CheckSpec(keys.HELMET, "_compile_helmet"),
    CheckSpec(keys.CHESTPLATE, "_compile_chestplate"),
    CheckSpec(keys.LEGGINGS, "_compile_leggings"),
    CheckSpec(keys.BOOTS, "_compile_boots"),
    CheckSpec(keys.PLAYER_HELDITEM, "_compile_player_held_item"),
    CheckSpec(keys.HELDITEM, "_compile_held_item"),
    CheckSpec(keys.OFFHANDITEM, "_compile_off_hand_item"),
    CheckSpec(keys.BOTHHANDSITEM, "_compile_both_hands_item"),
    CheckSpec(keys.STRUCTURE, "_compile_structure"),
    CheckSpec(keys.STATE, "_compile_state", Capability.WORLD_STATE),
    CheckSpec(keys.PSTATE, "_compile_player_state", Capability.WORLD_STATE),
    CheckSpec(keys.SUMMER, "_compile_summer", Capability.SEASONS),
    CheckSpec(keys.WINTER, "_compile_winter", Capability.SEASONS),
    CheckSpec(keys.SPRING, "_compile_spring", Capability.SEASONS),
    CheckSpec(keys.AUTUMN, "_compile_autumn", Capability.SEASONS),
    CheckSpec(keys.GAMESTAGE, "_compile_game_stage", Capability.GAME_STAGES),
    CheckSpec(keys.INCITY, "_compile_in_city", Capability.LOST_CITIES),
    CheckSpec(keys.INSTREET, "_compile_in_street", Capability.LOST_CITIES),
    CheckSpec(keys.INSPHERE, "_compile_in_sphere", Capability.LOST_CITIES),
    CheckSpec(keys.INBUILDING, "_compile_in_building", Capability.LOST_CITIES),
    CheckSpec(keys.AMULET, "_compile_amulet", Capability.BAUBLES),
    CheckSpec(keys.RING, "_compile_ring", Capability.BAUBLES),
    CheckSpec(keys.BELT, "_compile_belt", Capability.BAUBLES),
    CheckSpec(keys.TRINKET, "_compile_trinket", Capability.BAUBLES),
    CheckSpec(keys.HEAD, "_compile_head", Capability.BAUBLES),
    CheckSpec(keys.BODY, "_compile_body", Capability.BAUBLES),
    CheckSpec(keys.CHARM, "_compile_charm", Capability.BAUBLES),
)


def _located(query: EventQuery, event: Any) -> tuple[World, BlockPos] | None:
    world = query.get_world(event)
    pos = query.get_pos(event)
    if world is None or pos is None:
        return None
    return world, pos


def _split_state(key: Key, text: str) -> tuple[str, str]:
    name, _, value = text.partition("=")
    if not name.strip() or not value.strip():
        raise MalformedDescriptorError(f"Bad state=value specifier '{text}'!", subject=str(key))
    return name.strip(), value.strip()


class RuleEvaluator:
    """Ordered, immutable set of checks compiled from one :class:`AttributeMap`.

    Keys whose compilation fails, or whose integration is unavailable, are
    reported to ``diagnostics`` and left out; everything else still compiles.
    Unknown blocks and malformed descriptors are errors; any other compile
    failure is reported as a warning.
    ``match`` is safe to call from several threads at once.
    """

    check_order: Sequence[CheckSpec] = CHECK_ORDER

    def __init__(
        self,
        attributes: AttributeMap,
        *,
        registry: GameRegistry,
        compatibility: CompatibilityLayer | None = None,
        diagnostics: Diagnostics | None = None,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._compatibility = compatibility or NoCompatibility()
        self._logger = logger or logging.getLogger("mc_rules.evaluator")
        self._diagnostics = diagnostics or LoggingDiagnostics(self._logger)
        self._rng = rng or SHARED_RANDOM
        self._checks: tuple[CompiledCheck, ...] = tuple(self._add_checks(attributes))
        self._logger.debug(
            "rule_compiled",
            extra={"keys": [check.key.name for check in self._checks], "check_count": len(self._checks)},
        )

    @property
    def checks(self) -> tuple[CompiledCheck, ...]:
        return self._checks

    @property
    def compiled_keys(self) -> list[Key]:
        return [check.key for check in self._checks]

    def match(self, event: Any, query: EventQuery) -> bool:
        """Return ``True`` when every check passes, stopping at the first failure."""
        for check in self._checks:
            try:
                passed = check(event, query)
            except Exception:  # noqa: BLE001 - a failing lookup counts as an unmet condition.
                self._logger.exception("rule_check_failed", extra={"key": check.key.name})
                return False
            if not passed:
                return False
        return True

    def _add_checks(self, attributes: AttributeMap) -> list[CompiledCheck]:
        checks: list[CompiledCheck] = []
        for spec in self.check_order:
            if not attributes.has(spec.key):
                continue
            try:
                test = self._compile(spec, attributes)
            except (MissingCapabilityError, InvalidExpressionError) as exc:
                self._diagnostics.warning(str(exc))
                continue
            except RuleCompileError as exc:
                self._diagnostics.error(str(exc))
                continue
            if test is None:
                self._logger.debug("rule_check_omitted", extra={"key": spec.key.name})
                continue
            checks.append(CompiledCheck(spec.key, test))
        return checks

    def _compile(self, spec: CheckSpec, attributes: AttributeMap) -> Check | None:
        if spec.capability is not None and not supports(self._compatibility, spec.capability):
            raise MissingCapabilityError(
                f"{spec.capability.label} is missing: the '{spec.key}' test cannot work!",
                subject=str(spec.key),
            )
        return getattr(self, spec.compiler)(attributes)

    # -- world and position -------------------------------------------------

    def _compile_random(self, attributes: AttributeMap) -> Check:
        chance = attributes.get(keys.RANDOM)
        rng = self._rng
        return lambda event, query: rng.random() < chance

    def _compile_dimension(self, attributes: AttributeMap) -> Check:
        dimensions = [resource_location(name) for name in attributes.get_list(keys.DIMENSION)]
        if len(dimensions) == 1:
            dimension = dimensions[0]

            def check(event: Any, query: EventQuery) -> bool:
                world = query.get_world(event)
                return world is not None and world.dimension == dimension

            return check

        allowed = frozenset(dimensions)

        def check_any(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            return world is not None and world.dimension in allowed

        return check_any

    def _compile_dimension_mod(self, attributes: AttributeMap) -> Check:
        mods = attributes.get_list(keys.DIMENSION_MOD)
        if len(mods) == 1:
            mod = mods[0]

            def check(event: Any, query: EventQuery) -> bool:
                world = query.get_world(event)
                return world is not None and namespace_of(world.dimension) == mod

            return check

        allowed = frozenset(mods)

        def check_any(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            return world is not None and namespace_of(world.dimension) in allowed

        return check_any

    def _time_check(self, bound: int, compare: Callable[[int, int], bool]) -> Check:
        def check(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            if world is None or world.day_time is None:
                return False
            return compare(world.day_time % 24000, bound)

        return check

    def _compile_min_time(self, attributes: AttributeMap) -> Check:
        return self._time_check(attributes.get(keys.MINTIME), lambda time, bound: time >= bound)

    def _compile_max_time(self, attributes: AttributeMap) -> Check:
        return self._time_check(attributes.get(keys.MAXTIME), lambda time, bound: time <= bound)

    def _compile_min_height(self, attributes: AttributeMap) -> Check:
        minimum = attributes.get(keys.MINHEIGHT)

        def check(event: Any, query: EventQuery) -> bool:
            y = query.get_y(event)
            return y is not None and y >= minimum

        return check

    def _compile_max_height(self, attributes: AttributeMap) -> Check:
        maximum = attributes.get(keys.MAXHEIGHT)

        def check(event: Any, query: EventQuery) -> bool:
            y = query.get_y(event)
            return y is not None and y <= maximum

        return check

    def _compile_weather(self, attributes: AttributeMap) -> Check:
        weather = attributes.get(keys.WEATHER)
        lowered = weather.lower()
        if lowered.startswith("rain"):

            def raining(event: Any, query: EventQuery) -> bool:
                world = query.get_world(event)
                return world is not None and world.raining

            return raining
        if lowered.startswith("thunder"):

            def thundering(event: Any, query: EventQuery) -> bool:
                world = query.get_world(event)
                return world is not None and world.thundering

            return thundering
        raise MalformedDescriptorError(f"Unknown weather '{weather}'! Use 'rain' or 'thunder'", subject=str(keys.WEATHER))

    def _compile_category(self, attributes: AttributeMap) -> Check:
        categories = frozenset(name.lower() for name in attributes.get_list(keys.CATEGORY))

        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            world, pos = located
            return world.get_biome(pos).category.lower() in categories

        return check

    def _compile_difficulty(self, attributes: AttributeMap) -> Check:
        name = attributes.get(keys.DIFFICULTY)
        difficulty = Difficulty.by_name(name)
        if difficulty is None:
            raise MalformedDescriptorError(
                f"Unknown difficulty '{name}'! Use one of 'easy', 'normal', 'hard', or 'peaceful'",
                subject=str(keys.DIFFICULTY),
            )

        def check(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            return world is not None and world.difficulty == difficulty

        return check

    def _spawn_distance_check(self, distance: float, compare: Callable[[float, float], bool]) -> Check:
        squared = distance * distance

        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            world, pos = located
            return compare(pos.dist_sqr(world.spawn_pos), squared)

        return check

    def _compile_min_spawn_dist(self, attributes: AttributeMap) -> Check:
        return self._spawn_distance_check(attributes.get(keys.MINSPAWNDIST), lambda d, bound: d >= bound)

    def _compile_max_spawn_dist(self, attributes: AttributeMap) -> Check:
        return self._spawn_distance_check(attributes.get(keys.MAXSPAWNDIST), lambda d, bound: d <= bound)

    def _located_value_check(
        self, measure: Callable[[World, BlockPos], float], bound: float, compare: Callable[[float, float], bool]
    ) -> Check:
        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            return compare(measure(*located), bound)

        return check

    def _compile_min_light(self, attributes: AttributeMap) -> Check:
        return self._located_value_check(
            lambda world, pos: world.light_at(pos), attributes.get(keys.MINLIGHT), lambda v, b: v >= b
        )

    def _compile_max_light(self, attributes: AttributeMap) -> Check:
        return self._located_value_check(
            lambda world, pos: world.light_at(pos), attributes.get(keys.MAXLIGHT), lambda v, b: v <= b
        )

    def _compile_min_local_difficulty(self, attributes: AttributeMap) -> Check:
        return self._located_value_check(
            lambda world, pos: world.effective_difficulty_at(pos),
            attributes.get(keys.MINDIFFICULTY),
            lambda v, b: v >= b,
        )

    def _compile_max_local_difficulty(self, attributes: AttributeMap) -> Check:
        return self._located_value_check(
            lambda world, pos: world.effective_difficulty_at(pos),
            attributes.get(keys.MAXDIFFICULTY),
            lambda v, b: v <= b,
        )

    def _compile_see_sky(self, attributes: AttributeMap) -> Check:
        expected = attributes.get(keys.SEESKY)

        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            world, pos = located
            return world.can_see_sky(pos) == expected

        return check

    def _compile_blocks(self, attributes: AttributeMap) -> Check:
        resolve: PositionResolver = event_block_pos
        if attributes.has(keys.BLOCKOFFSET):
            resolve = compile_offset(attributes.get(keys.BLOCKOFFSET))

        matchers = [compile_block(raw, self._registry, self._diagnostics) for raw in attributes.get_list(keys.BLOCK)]
        if len(matchers) == 1:
            matcher = matchers[0]

            def check(event: Any, query: EventQuery) -> bool:
                world = query.get_world(event)
                pos = resolve(event, query)
                return world is not None and pos is not None and matcher(world, pos)

            return check

        def check_any(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            pos = resolve(event, query)
            if world is None or pos is None:
                return False
            return any(matcher(world, pos) for matcher in matchers)

        return check_any

    def _compile_biomes(self, attributes: AttributeMap) -> Check:
        names = attributes.get_list(keys.BIOME)
        compatibility = self._compatibility
        if len(names) == 1:
            name = names[0]

            def check(event: Any, query: EventQuery) -> bool:
                located = _located(query, event)
                if located is None:
                    return False
                biome = located[0].get_biome(located[1])
                return biome.id == name or compatibility.get_biome_name(biome) == name

            return check

        allowed = frozenset(names)

        def check_any(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            biome = located[0].get_biome(located[1])
            return biome.id in allowed or compatibility.get_biome_name(biome) in allowed

        return check_any

    def _compile_biome_types(self, attributes: AttributeMap) -> Check:
        biomes: set[str] = set()
        for biome_type in attributes.get_list(keys.BIOMETYPE):
            members = self._registry.biomes_of_type(biome_type)
            if members is None:
                raise MalformedDescriptorError(f"Unknown biome type '{biome_type}'!", subject=str(keys.BIOMETYPE))
            biomes.update(members)
        allowed = frozenset(biomes)

        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            return located[0].get_biome(located[1]).id in allowed

        return check

    def _compile_structure(self, attributes: AttributeMap) -> Check:
        structure = attributes.get(keys.STRUCTURE)

        def check(event: Any, query: EventQuery) -> bool:
            located = _located(query, event)
            if located is None:
                return False
            world, pos = located
            return world.is_in_structure(structure, pos)

        return check

    # -- player equipment -----------------------------------------------------

    def _items(self, attributes: AttributeMap, key: Key) -> list[ItemPredicate]:
        return compile_items(attributes.get_list(key), self._registry, self._diagnostics)

    def _equipment_check(self, attributes: AttributeMap, key: Key, *slots: EquipmentSlot) -> Check | None:
        items = self._items(attributes, key)
        if not items:
            return None

        def check(event: Any, query: EventQuery) -> bool:
            player = query.get_player(event)
            if player is None:
                return False
            return any(any_match(items, player.get_item_by_slot(slot)) for slot in slots)

        return check

    def _compile_helmet(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.HELMET, EquipmentSlot.HEAD)

    def _compile_chestplate(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.CHESTPLATE, EquipmentSlot.CHEST)

    def _compile_leggings(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.LEGGINGS, EquipmentSlot.LEGS)

    def _compile_boots(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.BOOTS, EquipmentSlot.FEET)

    def _compile_player_held_item(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.PLAYER_HELDITEM, EquipmentSlot.MAINHAND)

    def _compile_held_item(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.HELDITEM, EquipmentSlot.MAINHAND)

    def _compile_off_hand_item(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.OFFHANDITEM, EquipmentSlot.OFFHAND)

    def _compile_both_hands_item(self, attributes: AttributeMap) -> Check | None:
        return self._equipment_check(attributes, keys.BOTHHANDSITEM, EquipmentSlot.OFFHAND, EquipmentSlot.MAINHAND)

    # -- capability gated -----------------------------------------------------

    def _compile_state(self, attributes: AttributeMap) -> Check:
        name, value = _split_state(keys.STATE, attributes.get(keys.STATE))
        compatibility = self._compatibility

        def check(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            return world is not None and compatibility.get_state(world, name) == value

        return check

    def _compile_player_state(self, attributes: AttributeMap) -> Check:
        name, value = _split_state(keys.PSTATE, attributes.get(keys.PSTATE))
        compatibility = self._compatibility

        def check(event: Any, query: EventQuery) -> bool:
            player = query.get_player(event)
            return player is not None and compatibility.get_player_state(player, name) == value

        return check

    def _season_check(self, attributes: AttributeMap, key: Key, season: Season) -> Check:
        expected = attributes.get(key)
        compatibility = self._compatibility

        def check(event: Any, query: EventQuery) -> bool:
            world = query.get_world(event)
            return world is not None and compatibility.is_season(world, season) == expected

        return check

    def _compile_summer(self, attributes: AttributeMap) -> Check:
        return self._season_check(attributes, keys.SUMMER, Season.SUMMER)

    def _compile_winter(self, attributes: AttributeMap) -> Check:
        return self._season_check(attributes, keys.WINTER, Season.WINTER)

    def _compile_spring(self, attributes: AttributeMap) -> Check:
        return self._season_check(attributes, keys.SPRING, Season.SPRING)

    def _compile_autumn(self, attributes: AttributeMap) -> Check:
        return self._season_check(attributes, keys.AUTUMN, Season.AUTUMN)

    def _compile_game_stage(self, attributes: AttributeMap) -> Check:
        stage = attributes.get(keys.GAMESTAGE)
        compatibility = self._compatibility

        def check(event: Any, query: EventQuery) -> bool:
            player = query.get_player(event)
            return player is not None and compatibility.has_game_stage(player, stage)

        return check

    def _membership_check(self, attributes: AttributeMap, key: Key, probe: Callable[[EventQuery, Any], bool]) -> Check:
        expected = attributes.get(key)
        return lambda event, query: probe(query, event) == expected

    def _compile_in_city(self, attributes: AttributeMap) -> Check:
        return self._membership_check(attributes, keys.INCITY, self._compatibility.is_city)

    def _compile_in_street(self, attributes: AttributeMap) -> Check:
        return self._membership_check(attributes, keys.INSTREET, self._compatibility.is_street)

    def _compile_in_sphere(self, attributes: AttributeMap) -> Check:
        return self._membership_check(attributes, keys.INSPHERE, self._compatibility.in_sphere)

    def _compile_in_building(self, attributes: AttributeMap) -> Check:
        return self._membership_check(attributes, keys.INBUILDING, self._compatibility.is_building)

    def _bauble_check(self, attributes: AttributeMap, key: Key, slot: BaubleSlot) -> Check | None:
        items = self._items(attributes, key)
        if not items:
            return None
        indices = tuple(self._compatibility.bauble_slots(slot))
        compatibility = self._compatibility

        def check(event: Any, query: EventQuery) -> bool:
            player = query.get_player(event)
            if player is None:
                return False
            return any(any_match(items, compatibility.get_bauble_stack(player, index)) for index in indices)

        return check

    def _compile_amulet(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.AMULET, BaubleSlot.AMULET)

    def _compile_ring(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.RING, BaubleSlot.RING)

    def _compile_belt(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.BELT, BaubleSlot.BELT)

    def _compile_trinket(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.TRINKET, BaubleSlot.TRINKET)

    def _compile_head(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.HEAD, BaubleSlot.HEAD)

    def _compile_body(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.BODY, BaubleSlot.BODY)

    def _compile_charm(self, attributes: AttributeMap) -> Check | None:
        return self._bauble_check(attributes, keys.CHARM, BaubleSlot.CHARM)
