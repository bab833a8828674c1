"""Compilers for item and block descriptors."""

from .blocks import BlockMatcher, PositionResolver, SpatialPredicate, compile_block, compile_offset, event_block_pos
from .items import ItemPredicate, any_match, compile_item, compile_items

__all__ = [
    "BlockMatcher",
    "ItemPredicate",
    "PositionResolver",
    "SpatialPredicate",
    "any_match",
    "compile_block",
    "compile_item",
    "compile_items",
    "compile_offset",
    "event_block_pos",
]
