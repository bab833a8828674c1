"""Per-event accessors that compiled checks read the environment through."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from mc_rules.world import BlockPos, Player, World


class EventQuery(Protocol):
    """Adapter extracting environment facts from one kind of event.

    Every accessor may return ``None``; checks treat that as "not satisfied".
    """

    def get_world(self, event: Any) -> World | None: ...

    def get_pos(self, event: Any) -> BlockPos | None: ...

    def get_valid_block_pos(self, event: Any) -> BlockPos | None: ...

    def get_y(self, event: Any) -> int | None: ...

    def get_player(self, event: Any) -> Player | None: ...


@dataclass(frozen=True, slots=True)
class RuleEvent:
    """Generic event carrying the facts most rule checks need."""

    world: World | None
    pos: BlockPos | None
    player: Player | None = None
    block_pos: BlockPos | None = None


class SimpleEventQuery:
    """``EventQuery`` for :class:`RuleEvent` instances."""

    def get_world(self, event: RuleEvent) -> World | None:
        return event.world

    def get_pos(self, event: RuleEvent) -> BlockPos | None:
        return event.pos

    def get_valid_block_pos(self, event: RuleEvent) -> BlockPos | None:
        return event.block_pos if event.block_pos is not None else event.pos

    def get_y(self, event: RuleEvent) -> int | None:
        return None if event.pos is None else event.pos.y

    def get_player(self, event: RuleEvent) -> Player | None:
        return event.player
