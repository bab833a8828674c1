"""Game-side model consumed by compiled rule checks."""

from .memory import InMemoryBlockEntity, InMemoryPlayer, InMemoryWorld, StaticRegistry
from .model import (
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
    namespace_of,
    resource_location,
)
from .protocols import BlockEntity, GameRegistry, Player, World

__all__ = [
    "AIR",
    "AIR_STATE",
    "EMPTY_STACK",
    "Biome",
    "BlockEntity",
    "BlockPos",
    "BlockState",
    "Difficulty",
    "Direction",
    "EquipmentSlot",
    "GameRegistry",
    "InMemoryBlockEntity",
    "InMemoryPlayer",
    "InMemoryWorld",
    "ItemStack",
    "Player",
    "StaticRegistry",
    "World",
    "namespace_of",
    "resource_location",
]
