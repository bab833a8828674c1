"""Compiled tests over nested tag data attached to item stacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from mc_rules.errors import MalformedDescriptorError
from mc_rules.expressions import IntPredicate, expression_from_json
from mc_rules.matchers.descriptors import TagDescriptor


def _get_int(compound: Mapping[str, Any] | None, tag: str) -> int:
    """Integer value of ``tag``; missing or non-numeric tags read as 0."""
    if not compound:
        return 0
    value = compound.get(tag)
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value)
    return 0


@dataclass(frozen=True, slots=True)
class TagValueTest:
    tag: str
    expression: IntPredicate

    def __call__(self, compound: Mapping[str, Any] | None) -> bool:
        return self.expression(_get_int(compound, self.tag))


@dataclass(frozen=True, slots=True)
class TagListTest:
    """Passes when any compound element of list tag ``tag`` passes every child."""

    tag: str
    children: tuple[TagTest, ...]

    def __call__(self, compound: Mapping[str, Any] | None) -> bool:
        if not compound:
            return False
        elements = compound.get(self.tag)
        if not isinstance(elements, list):
            return False
        return any(
            isinstance(element, Mapping) and all(child(element) for child in self.children)
            for element in elements
        )


TagTest = Union[TagValueTest, TagListTest]


def compile_tag_tests(descriptors: Sequence[TagDescriptor]) -> tuple[TagTest, ...]:
    tests: list[TagTest] = []
    for descriptor in descriptors:
        if descriptor.contains is not None:
            tests.append(TagListTest(descriptor.tag, compile_tag_tests(descriptor.contains)))
        elif descriptor.value is not None:
            tests.append(TagValueTest(descriptor.tag, expression_from_json(descriptor.value)))
        else:
            raise MalformedDescriptorError(
                f"Tag test for '{descriptor.tag}' needs a 'value' or a 'contains' list!",
                subject=descriptor.tag,
            )
    return tuple(tests)


def matches_all(tests: Sequence[TagTest], compound: Mapping[str, Any] | None) -> bool:
    return all(test(compound) for test in tests)
