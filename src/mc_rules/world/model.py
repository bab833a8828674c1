"""Value types shared by world models, matchers and checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

DEFAULT_NAMESPACE = "minecraft"
AIR = "minecraft:air"


def resource_location(name: str) -> str:
    """Normalize ``name`` to ``namespace:path`` form."""
    text = name.strip()
    if ":" not in text:
        return f"{DEFAULT_NAMESPACE}:{text}"
    return text


def namespace_of(name: str) -> str:
    return resource_location(name).split(":", 1)[0]


class Difficulty(str, Enum):
    PEACEFUL = "peaceful"
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    @classmethod
    def by_name(cls, name: str) -> Difficulty | None:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


class Direction(str, Enum):
    DOWN = "down"
    UP = "up"
    NORTH = "north"
    SOUTH = "south"
    WEST = "west"
    EAST = "east"

    @classmethod
    def by_name(cls, name: str) -> Direction | None:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


class EquipmentSlot(str, Enum):
    MAINHAND = "mainhand"
    OFFHAND = "offhand"
    HEAD = "head"
    CHEST = "chest"
    LEGS = "legs"
    FEET = "feet"


@dataclass(frozen=True, slots=True)
class BlockPos:
    x: int
    y: int
    z: int

    def offset(self, dx: int, dy: int, dz: int) -> BlockPos:
        return BlockPos(self.x + dx, self.y + dy, self.z + dz)

    @property
    def chunk_x(self) -> int:
        return self.x >> 4

    @property
    def chunk_z(self) -> int:
        return self.z >> 4

    def dist_sqr(self, other: BlockPos) -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return dx * dx + dy * dy + dz * dz


@dataclass(frozen=True, slots=True)
class BlockState:
    """A block identity plus its property assignment, compared by value."""

    block: str
    properties: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, block: str, properties: Mapping[str, str] | None = None) -> BlockState:
        pairs = tuple(sorted((str(k), str(v)) for k, v in (properties or {}).items()))
        return cls(block=resource_location(block), properties=pairs)

    def get(self, name: str) -> str | None:
        for key, value in self.properties:
            if key == name:
                return value
        return None

    def with_property(self, name: str, value: str) -> BlockState:
        values = dict(self.properties)
        values[name] = value
        return BlockState.of(self.block, values)

    @property
    def namespace(self) -> str:
        return namespace_of(self.block)


AIR_STATE = BlockState(block=AIR)


@dataclass(frozen=True, slots=True)
class ItemStack:
    """Snapshot of an item stack as seen by item matchers."""

    item: str
    count: int = 1
    damage: int = 0
    tag: Mapping[str, Any] | None = None
    energy: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.item == AIR or self.count <= 0

    @property
    def namespace(self) -> str:
        return namespace_of(self.item)


EMPTY_STACK = ItemStack(item=AIR, count=0)


@dataclass(frozen=True, slots=True)
class Biome:
    id: str
    category: str = "none"
