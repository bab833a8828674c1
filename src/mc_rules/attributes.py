"""Typed attribute storage for one rule."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import TypeAdapter, ValidationError

from mc_rules.keys import AttributeType, Key, key_for_name
from mc_rules.telemetry import Diagnostics, LoggingDiagnostics

logger = logging.getLogger("mc_rules.attributes")

_ADAPTERS: dict[AttributeType, TypeAdapter] = {
    AttributeType.INTEGER: TypeAdapter(int),
    AttributeType.FLOAT: TypeAdapter(float),
    AttributeType.BOOLEAN: TypeAdapter(bool),
    AttributeType.STRING: TypeAdapter(str),
}


class AttributeMap:
    """Ordered mapping from :class:`Key` to one or more typed values."""

    def __init__(self) -> None:
        self._values: dict[Key, list[Any]] = {}

    def add(self, key: Key, value: Any) -> None:
        self._values.setdefault(key, []).append(value)

    def has(self, key: Key) -> bool:
        return key in self._values

    def get(self, key: Key) -> Any:
        values = self._values.get(key)
        if not values:
            raise KeyError(f"Attribute '{key}' is not set")
        return values[0]

    def get_list(self, key: Key) -> list[Any]:
        return list(self._values.get(key, ()))

    def __len__(self) -> int:
        return len(self._values)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], diagnostics: Diagnostics | None = None) -> AttributeMap:
        """Build a map from plain ``name -> value`` data.

        List values become multiple entries. Values that do not fit the key's
        type are reported and left out.
        """
        sink = diagnostics or LoggingDiagnostics(logger)
        attributes = cls()
        for name, value in raw.items():
            key = key_for_name(str(name))
            if key is None:
                logger.debug("attribute_ignored", extra={"attribute": name})
                continue
            entries = value if isinstance(value, list) else [value]
            try:
                coerced = [_coerce(key, entry) for entry in entries]
            except ValidationError as exc:
                sink.error(f"Bad value for '{key}': {exc.errors()[0]['msg']}")
                continue
            for entry in coerced:
                attributes.add(key, entry)
        return attributes


def _coerce(key: Key, value: Any) -> Any:
    adapter = _ADAPTERS.get(key.type)
    if adapter is None:
        return value
    return adapter.validate_python(value)
