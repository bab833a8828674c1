"""Pydantic models for the JSON descriptor grammar of item and block matchers."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from mc_rules.errors import MalformedDescriptorError


class _Descriptor(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class TagDescriptor(_Descriptor):
    """One entry of an ``nbt`` array: a numeric test or a nested list test."""

    tag: str
    value: Any = None
    contains: list[TagDescriptor] | None = None


class ItemDescriptor(_Descriptor):
    empty: bool | None = None
    item: str | None = None
    damage: Any = None
    count: Any = None
    mod: str | None = None
    nbt: list[TagDescriptor] | None = None
    energy: Any = None


class PropertyDescriptor(_Descriptor):
    name: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _scalar_as_text(cls, value: Any) -> Any:
        # JSON true reads as "true", not "True".
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class BlockDescriptor(_Descriptor):
    block: str | None = None
    properties: list[PropertyDescriptor] | None = None
    mod: str | None = None
    energy: Any = None
    side: str | None = None
    contains: Any = None


class OffsetVector(_Descriptor):
    x: int = 0
    y: int = 0
    z: int = 0


class OffsetDescriptor(_Descriptor):
    offset: OffsetVector = OffsetVector()
    look: bool = False


TagDescriptor.model_rebuild()


def decode(raw: Any) -> Any:
    """Decode descriptor text; strings that are not JSON literals stay compact names."""
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if not text.startswith(("{", "[", '"')):
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDescriptorError(f"Descriptor '{raw}' is not valid JSON: {exc.msg}", subject=raw) from None


def parse_model(model: type[_Descriptor], value: Any, kind: str) -> Any:
    if not isinstance(value, dict):
        raise MalformedDescriptorError(f"{kind} description '{value}' is not valid!", subject=str(value))
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise MalformedDescriptorError(
            f"{kind} description '{json.dumps(value)}' is not valid: {problems}", subject=str(value)
        ) from None
