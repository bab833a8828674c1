"""Declarative condition compiler and evaluator for Minecraft rules."""

from .attributes import AttributeMap
from .errors import (
    InvalidExpressionError,
    MalformedDescriptorError,
    MissingCapabilityError,
    RuleCompileError,
    UnknownBlockError,
    UnknownItemError,
)
from .evaluator import CHECK_ORDER, SHARED_RANDOM, CheckSpec, CompiledCheck, RuleEvaluator
from .expressions import expression_from_json, parse_expression
from .query import EventQuery, RuleEvent, SimpleEventQuery

__all__ = [
    "CHECK_ORDER",
    "SHARED_RANDOM",
    "AttributeMap",
    "CheckSpec",
    "CompiledCheck",
    "EventQuery",
    "InvalidExpressionError",
    "MalformedDescriptorError",
    "MissingCapabilityError",
    "RuleCompileError",
    "RuleEvaluator",
    "RuleEvent",
    "SimpleEventQuery",
    "UnknownBlockError",
    "UnknownItemError",
    "expression_from_json",
    "parse_expression",
]
