"""Item matcher compiler.

Descriptors come in two forms. The compact form is an item name with
optional modifiers: ``name@damage`` matches the exact variant and
``name/{tag json}`` requires equal tag data (both may be combined). The
object form is validated by :class:`ItemDescriptor`; all present fields
must hold.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from mc_rules.errors import MalformedDescriptorError, RuleCompileError, UnknownItemError
from mc_rules.expressions import IntPredicate, expression_from_json
from mc_rules.matchers.descriptors import ItemDescriptor, decode, parse_model
from mc_rules.matchers.nbt import TagTest, compile_tag_tests, matches_all
from mc_rules.telemetry import Diagnostics
from mc_rules.world import GameRegistry, ItemStack, resource_location

ItemPredicate = Callable[[ItemStack], bool]

logger = logging.getLogger("mc_rules.matchers.items")


@dataclass(frozen=True, slots=True)
class CompactItemMatcher:
    item: str
    damage: int
    tag: Any
    exact: bool
    match_tag: bool

    def __call__(self, stack: ItemStack) -> bool:
        if stack.item != self.item:
            return False
        if self.exact and stack.damage != self.damage:
            return False
        if self.match_tag and (stack.tag or None) != self.tag:
            return False
        return True


@dataclass(frozen=True, slots=True)
class ItemMatcher:
    """Conjunction of the field tests of an object descriptor."""

    empty: bool | None = None
    item: str | None = None
    damage: IntPredicate | None = None
    count: IntPredicate | None = None
    mod: str | None = None
    tags: tuple[TagTest, ...] = ()
    energy: IntPredicate | None = None

    def __call__(self, stack: ItemStack) -> bool:
        if self.empty is not None and stack.is_empty != self.empty:
            return False
        if self.item is not None and stack.item != self.item:
            return False
        if self.damage is not None and not self.damage(stack.damage):
            return False
        if self.count is not None and not self.count(stack.count):
            return False
        if self.mod is not None and stack.namespace != self.mod:
            return False
        if self.tags and not matches_all(self.tags, stack.tag):
            return False
        if self.energy is not None and not self.energy(stack.energy or 0):
            return False
        return True


def _require_item(name: str, registry: GameRegistry) -> str:
    location = resource_location(name)
    if not registry.has_item(location):
        raise UnknownItemError(f"Unknown item '{name}'!", subject=name)
    return location


def _compile_compact(text: str, registry: GameRegistry) -> ItemPredicate:
    name, slash, tag_text = text.partition("/")
    item_name, at, damage_text = name.partition("@")
    item = _require_item(item_name, registry)

    damage = 0
    if damage_text.strip():
        try:
            damage = int(damage_text)
        except ValueError:
            raise MalformedDescriptorError(f"Bad damage value in item '{text}'!", subject=text) from None

    tag = None
    if tag_text.strip():
        try:
            tag = json.loads(tag_text)
        except json.JSONDecodeError:
            raise MalformedDescriptorError(f"Bad tag data in item '{text}'!", subject=text) from None

    return CompactItemMatcher(item=item, damage=damage, tag=tag or None, exact=bool(at), match_tag=bool(slash))


def _optional_expression(value: Any) -> IntPredicate | None:
    return None if value is None else expression_from_json(value)


def _compile_object(value: dict, registry: GameRegistry) -> ItemPredicate:
    descriptor: ItemDescriptor = parse_model(ItemDescriptor, value, "Item")
    if descriptor.item is None and descriptor.empty is None:
        raise MalformedDescriptorError(
            f"Item description '{json.dumps(value)}' needs an 'item' or 'empty' field!", subject=str(value)
        )

    return ItemMatcher(
        empty=descriptor.empty,
        item=None if descriptor.item is None else _require_item(descriptor.item, registry),
        damage=_optional_expression(descriptor.damage),
        count=_optional_expression(descriptor.count),
        mod=descriptor.mod,
        tags=compile_tag_tests(descriptor.nbt or ()),
        energy=_optional_expression(descriptor.energy),
    )


def compile_item(raw: Any, registry: GameRegistry) -> ItemPredicate:
    """Compile one item descriptor, raising :class:`RuleCompileError` on problems."""
    value = decode(raw)
    if isinstance(value, str):
        return _compile_compact(value, registry)
    if isinstance(value, dict):
        return _compile_object(value, registry)
    raise MalformedDescriptorError(f"Item description '{raw}' is not valid!", subject=str(raw))


def compile_items(descriptors: Iterable[Any], registry: GameRegistry, diagnostics: Diagnostics) -> list[ItemPredicate]:
    """Compile every descriptor, dropping the ones that fail with a warning each.

    A single JSON array is expanded into its elements.
    """
    matchers: list[ItemPredicate] = []
    for raw in descriptors:
        try:
            value = decode(raw)
        except RuleCompileError as exc:
            diagnostics.warning(str(exc))
            continue
        for entry in value if isinstance(value, list) else [value]:
            try:
                matchers.append(compile_item(entry, registry))
            except RuleCompileError as exc:
                diagnostics.warning(str(exc))
    logger.debug("items_compiled", extra={"matcher_count": len(matchers)})
    return matchers


def any_match(matchers: Iterable[ItemPredicate], stack: ItemStack) -> bool:
    return not stack.is_empty and any(matcher(stack) for matcher in matchers)
