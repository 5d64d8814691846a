"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types for all pricing computations:
    Currency and Money, plus the percent/ratio normalization helpers shared
    by the engines.  These replace primitive types (Decimal, str) wherever
    monetary data appears in domain logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module and by the engines.  No outward
    dependencies except pricing_kernel.domain.currency (CurrencyRegistry).

Invariants enforced:
    - All monetary amounts use Money value objects (never raw float)
    - ISO 4217 enforcement: Currency codes validated at construction time
    - Rounding tolerance derived from currency decimal places, never
      hardcoded

Failure modes:
    - ValueError on construction with invalid amounts or currencies
    - TypeError when a float is passed where a Decimal is required
    - ValueError when arithmetic mixes different currencies
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pricing_kernel.domain.currency import CurrencyRegistry

HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Contract:
        Wraps a three-letter ISO 4217 code. Validated and normalized (uppercased)
        on construction. Invalid codes are rejected immediately.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - code is always uppercase and stripped of whitespace
        - code is always registered in CurrencyRegistry
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        """Number of decimal places for this currency."""
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest currency unit (one cent for two-decimal currencies)."""
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER separated.
        This is the canonical representation of monetary values throughout
        the engine.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is always a Decimal (never float)
        - currency is always a valid Currency (ISO 4217)
        - Arithmetic operations enforce same-currency constraint

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT auto-round -- callers must explicitly call .round()
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise TypeError(f"Money amount must not be float: {self.amount!r}")
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """
        Factory method for creating Money.

        Preconditions:
            - amount is convertible to Decimal (no float allowed at call site)
            - currency is a valid ISO 4217 code or Currency object

        Raises:
            ValueError: If amount cannot be converted or currency is invalid.
            TypeError: If amount is a float.
        """
        if isinstance(amount, (str, int)) and not isinstance(amount, bool):
            amount = Decimal(str(amount))
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def total(cls, amounts: list[Money], currency: str | Currency) -> Money:
        """Sum a list of Money values, returning zero for an empty list."""
        result = cls.zero(currency)
        for amount in amounts:
            result = result + amount
        return result

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """
        Round to the currency's decimal places.

        Returns a new Money; the original is unchanged.
        """
        decimal_places = self.currency.decimal_places
        quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
        rounded = self.amount.quantize(Decimal(quantize_str), rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def round_whole(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to whole currency units (closing prices are charged in units)."""
        rounded = self.amount.quantize(Decimal("1"), rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def floor_zero(self) -> Money:
        """max(0, self)."""
        if self.amount < Decimal("0"):
            return Money.zero(self.currency)
        return self

    def is_close_to(self, other: Money) -> bool:
        """True if the two amounts differ by no more than one currency unit tolerance."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot compare Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return abs(self.amount - other.amount) <= self.currency.rounding_tolerance

    def __add__(self, other: Money) -> Money:
        """Add two Money values. Must be same currency."""
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        """Subtract two Money values. Must be same currency."""
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot subtract Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar."""
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        """Divide by a scalar."""
        if isinstance(divisor, (int, str)) and not isinstance(divisor, bool):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        return Money(amount=self.amount / divisor, currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError("Cannot compare Money with different currencies")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError("Cannot compare Money with different currencies")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError("Cannot compare Money with different currencies")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError("Cannot compare Money with different currencies")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def to_decimal(value: Decimal | int | str | None) -> Decimal:
    """
    Coerce a numeric input to Decimal; None becomes zero.

    Raises:
        TypeError: If value is a float.
        ValueError: If value is not numeric.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, float):
        raise TypeError(f"Float values are not accepted: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid numeric value: {value!r}") from e


def normalize_ratio(value: Decimal | int | str | None) -> Decimal:
    """
    Normalize a rate to a ratio in [0, 1].

    Studio configuration historically stores rates either as ratios
    (``0.05``) or whole percents (``5``).  Values greater than 1 are read
    as percents and divided by 100; negative values become 0.
    """
    ratio = to_decimal(value)
    if ratio < Decimal("0"):
        return Decimal("0")
    if ratio > Decimal("1"):
        return ratio / HUNDRED
    return ratio


def percent_of(amount: Money, percent: Decimal) -> Money:
    """Return ``amount * percent / 100``."""
    return amount * (percent / HUNDRED)
