"""Compile-time errors raised while turning rule attributes into checks."""

from __future__ import annotations


class RuleCompileError(ValueError):
    """Base class for problems that make a single check uncompilable."""

    def __init__(self, message: str, *, subject: str | None = None) -> None:
        super().__init__(message)
        self.subject = subject


class InvalidExpressionError(RuleCompileError):
    """Raised for numeric expressions outside the comparison grammar."""


class UnknownItemError(RuleCompileError):
    """Raised when an item descriptor names an item the registry does not know."""


class UnknownBlockError(RuleCompileError):
    """Raised when a block descriptor names a block the registry does not know."""


class MalformedDescriptorError(RuleCompileError):
    """Raised for structurally invalid descriptors or attribute values."""


class MissingCapabilityError(RuleCompileError):
    """Raised when a key needs an optional capability the deployment lacks."""
