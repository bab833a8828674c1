"""Optional integration support for capability-gated rule keys."""

from .memory import DEFAULT_BAUBLE_SLOTS, InMemoryCompatibility, NoCompatibility
from .provider import BaubleSlot, Capability, CompatibilityLayer, Season, supports

__all__ = [
    "DEFAULT_BAUBLE_SLOTS",
    "BaubleSlot",
    "Capability",
    "CompatibilityLayer",
    "InMemoryCompatibility",
    "NoCompatibility",
    "Season",
    "supports",
]
