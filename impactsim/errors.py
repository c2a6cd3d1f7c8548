"""Exceptions raised by the impact calculator."""

from __future__ import annotations


class ImpactError(Exception):
    """Base class for impact calculation failures."""


class InvalidInput(ImpactError, ValueError):
    """A parameter has a non-physical value (non-finite, non-positive, out of range)."""

    def __init__(self, field: str, value: float, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class ComputationDegenerate(ImpactError, ArithmeticError):
    """The calculation produced NaN or infinity in one of the result fields."""

    def __init__(self, fields: list[str]):
        self.fields = list(fields)
        super().__init__(f"Non-finite result in: {', '.join(self.fields)}")
