"""Immutable value objects shared across the domain layer."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from math import hypot

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

_CURRENCY_QUANTIZE = Decimal("0.01")


class Money(BaseModel):
    """Representation of monetary values with fixed precision."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ..., description="Monetary amount expressed in whole currency units."
    )
    currency: str = Field(
        default="USD", min_length=3, max_length=3, description="ISO-like currency code."
    )

    @model_validator(mode="after")
    def _normalize_amount(self) -> Money:
        """Ensure the amount is rounded to two decimal places and currency uppercase."""
        quantized = self.amount.quantize(_CURRENCY_QUANTIZE, rounding=ROUND_HALF_UP)
        object.__setattr__(self, "amount", quantized)
        object.__setattr__(self, "currency", self.currency.upper())
        return self

    @classmethod
    def of(cls, amount: Decimal | int | float | str, currency: str = "USD") -> Money:
        """Build a value from any numeric representation."""
        return cls(amount=Decimal(str(amount)), currency=currency)

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        """Return an empty amount in *currency*."""
        return cls(amount=Decimal(0), currency=currency)

    def add(self, other: Money) -> Money:
        """Return a new instance with *other* added to this monetary value."""
        self._assert_same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other: Money) -> Money:
        """Return a new instance with *other* subtracted from this monetary value."""
        self._assert_same_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def covers(self, other: Money) -> bool:
        """Return whether this balance is large enough to pay *other*."""
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            msg = f"Currency mismatch: {self.currency} vs {other.currency}."
            raise ValueError(msg)


class Position(BaseModel):
    """Planar map coordinate of a country centroid."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def distance_to(self, other: Position) -> float:
        """Return the Euclidean distance between two positions."""
        return hypot(other.x - self.x, other.y - self.y)


class PhaseIdentifier(StrEnum):
    """Enumeration of the phases executed during a daily tick."""

    PRODUCTION = "production"
    LOGISTICS = "logistics"
    MARKET = "market"


class PhaseSequence(BaseModel):
    """Immutable list of phase identifiers executed during a day."""

    model_config = ConfigDict(frozen=True)

    phases: tuple[PhaseIdentifier, ...]

    @model_validator(mode="after")
    def _validate_unique(self) -> PhaseSequence:
        """Ensure each phase runs at most once per day."""
        if len(self.phases) != len(set(self.phases)):
            msg = "Phase sequence must not contain duplicates."
            raise ValueError(msg)
        return self


DEFAULT_PHASE_SEQUENCE = PhaseSequence(
    phases=(
        PhaseIdentifier.PRODUCTION,
        PhaseIdentifier.LOGISTICS,
        PhaseIdentifier.MARKET,
    )
)


__all__ = [
    "DEFAULT_PHASE_SEQUENCE",
    "Money",
    "PhaseIdentifier",
    "PhaseSequence",
    "Position",
]
