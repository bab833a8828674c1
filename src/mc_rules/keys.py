"""Attribute keys recognised by the rule compiler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AttributeType(str, Enum):
    """Value kinds an attribute key can carry."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class Key:
    name: str
    type: AttributeType

    def __str__(self) -> str:
        return self.name


RANDOM = Key("random", AttributeType.FLOAT)
DIMENSION = Key("dimension", AttributeType.STRING)
DIMENSION_MOD = Key("dimension_mod", AttributeType.STRING)
MINTIME = Key("mintime", AttributeType.INTEGER)
MAXTIME = Key("maxtime", AttributeType.INTEGER)
MINHEIGHT = Key("minheight", AttributeType.INTEGER)
MAXHEIGHT = Key("maxheight", AttributeType.INTEGER)
WEATHER = Key("weather", AttributeType.STRING)
CATEGORY = Key("category", AttributeType.STRING)
DIFFICULTY = Key("difficulty", AttributeType.STRING)
MINSPAWNDIST = Key("minspawndist", AttributeType.FLOAT)
MAXSPAWNDIST = Key("maxspawndist", AttributeType.FLOAT)
MINLIGHT = Key("minlight", AttributeType.INTEGER)
MAXLIGHT = Key("maxlight", AttributeType.INTEGER)
MINDIFFICULTY = Key("mindifficulty", AttributeType.FLOAT)
MAXDIFFICULTY = Key("maxdifficulty", AttributeType.FLOAT)
SEESKY = Key("seesky", AttributeType.BOOLEAN)
BLOCK = Key("block", AttributeType.JSON)
BLOCKOFFSET = Key("blockoffset", AttributeType.JSON)
BIOME = Key("biome", AttributeType.STRING)
BIOMETYPE = Key("biometype", AttributeType.STRING)
HELMET = Key("helmet", AttributeType.JSON)
CHESTPLATE = Key("chestplate", AttributeType.JSON)
LEGGINGS = Key("leggings", AttributeType.JSON)
BOOTS = Key("boots", AttributeType.JSON)
PLAYER_HELDITEM = Key("playerhelditem", AttributeType.JSON)
HELDITEM = Key("helditem", AttributeType.JSON)
OFFHANDITEM = Key("offhanditem", AttributeType.JSON)
BOTHHANDSITEM = Key("bothhandsitem", AttributeType.JSON)
STRUCTURE = Key("structure", AttributeType.STRING)
STATE = Key("state", AttributeType.STRING)
PSTATE = Key("pstate", AttributeType.STRING)
SUMMER = Key("summer", AttributeType.BOOLEAN)
WINTER = Key("winter", AttributeType.BOOLEAN)
SPRING = Key("spring", AttributeType.BOOLEAN)
AUTUMN = Key("autumn", AttributeType.BOOLEAN)
GAMESTAGE = Key("gamestage", AttributeType.STRING)
INCITY = Key("incity", AttributeType.BOOLEAN)
INSTREET = Key("instreet", AttributeType.BOOLEAN)
INSPHERE = Key("insphere", AttributeType.BOOLEAN)
INBUILDING = Key("inbuilding", AttributeType.BOOLEAN)
AMULET = Key("amulet", AttributeType.JSON)
RING = Key("ring", AttributeType.JSON)
BELT = Key("belt", AttributeType.JSON)
TRINKET = Key("trinket", AttributeType.JSON)
HEAD = Key("head", AttributeType.JSON)
BODY = Key("body", AttributeType.JSON)
CHARM = Key("charm", AttributeType.JSON)

ALL_KEYS: tuple[Key, ...] = (
    RANDOM,
    DIMENSION,
    DIMENSION_MOD,
    MINTIME,
    MAXTIME,
    MINHEIGHT,
    MAXHEIGHT,
    WEATHER,
    CATEGORY,
    DIFFICULTY,
    MINSPAWNDIST,
    MAXSPAWNDIST,
    MINLIGHT,
    MAXLIGHT,
    MINDIFFICULTY,
    MAXDIFFICULTY,
    SEESKY,
    BLOCK,
    BLOCKOFFSET,
    BIOME,
    BIOMETYPE,
    HELMET,
    CHESTPLATE,
    LEGGINGS,
    BOOTS,
    PLAYER_HELDITEM,
    HELDITEM,
    OFFHANDITEM,
    BOTHHANDSITEM,
    STRUCTURE,
    STATE,
    PSTATE,
    SUMMER,
    WINTER,
    SPRING,
    AUTUMN,
    GAMESTAGE,
    INCITY,
    INSTREET,
    INSPHERE,
    INBUILDING,
    AMULET,
    RING,
    BELT,
    TRINKET,
    HEAD,
    BODY,
    CHARM,
)

KEYS_BY_NAME: dict[str, Key] = {key.name: key for key in ALL_KEYS}


def key_for_name(name: str) -> Key | None:
    return KEYS_BY_NAME.get(name.strip().lower())
