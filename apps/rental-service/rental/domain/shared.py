"""
Shared value objects: currency, VAT, money, ranges and paging.

Amounts are `Decimal` throughout and rounded to cents with banker's
rounding, the same mode the accounting exports use.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional, Union

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.validation import ensure, ensure_range

CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # avoid binary float artefacts such as 29.989999...
        return Decimal(repr(value))
    return Decimal(value)


def round_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class Currency:
    code: str

    @classmethod
    def of(cls, code: str) -> "Currency":
        normalized = (code or "").strip().upper()
        ensure(bool(re.fullmatch(r"[A-Z]{3}", normalized)), "Currency code must be a 3-letter ISO code", "currency")
        return cls(normalized)

    def __str__(self) -> str:
        return self.code


EUR = Currency("EUR")


@dataclass(frozen=True)
class VatRate:
    value: Decimal

    @classmethod
    def of(cls, rate: Number) -> "VatRate":
        rate = to_decimal(rate)
        ensure_range(rate, Decimal("0"), Decimal("1"), "vat_rate")
        return cls(rate.quantize(RATE_PLACES, rounding=ROUND_HALF_EVEN))

    @classmethod
    def from_percentage(cls, percentage: Number) -> "VatRate":
        return cls.of(to_decimal(percentage) / Decimal(100))

    @property
    def as_percentage(self) -> Decimal:
        return (self.value * 100).normalize()

    def vat_amount(self, net: Number) -> Decimal:
        return round_money(to_decimal(net) * self.value)

    def gross_amount(self, net: Number) -> Decimal:
        return round_money(to_decimal(net) + self.vat_amount(net))

    def net_amount(self, gross: Number) -> Decimal:
        return round_money(to_decimal(gross) / (1 + self.value))

    def german_format(self) -> str:
        return f"{self.as_percentage:f} %"

    def __str__(self) -> str:
        return f"{self.as_percentage:f}%"


VatRate.GERMAN_STANDARD = VatRate(Decimal("0.1900"))
VatRate.GERMAN_REDUCED = VatRate(Decimal("0.0700"))
VatRate.ZERO = VatRate(Decimal("0.0000"))


@dataclass(frozen=True)
class Money:
    """Net amount plus VAT in one currency. Gross is always derived."""

    net_amount: Decimal
    vat_amount: Decimal
    currency: Currency = EUR

    @classmethod
    def of(cls, net: Number, vat_rate: VatRate | Number = VatRate.GERMAN_STANDARD, currency: Currency = EUR) -> "Money":
        net = to_decimal(net)
        if net < 0:
            raise DomainValidationError("Net amount cannot be negative", "net_amount")
        rate = vat_rate if isinstance(vat_rate, VatRate) else VatRate.of(vat_rate)
        net = round_money(net)
        return cls(net, rate.vat_amount(net), currency)

    @classmethod
    def from_gross(cls, gross: Number, vat_rate: VatRate | Number = VatRate.GERMAN_STANDARD, currency: Currency = EUR) -> "Money":
        gross = to_decimal(gross)
        if gross < 0:
            raise DomainValidationError("Gross amount cannot be negative", "gross_amount")
        rate = vat_rate if isinstance(vat_rate, VatRate) else VatRate.of(vat_rate)
        net = rate.net_amount(gross)
        return cls(net, round_money(gross) - net, currency)

    @classmethod
    def euro(cls, net: Number) -> "Money":
        return cls.of(net, VatRate.GERMAN_STANDARD, EUR)

    @classmethod
    def euro_gross(cls, gross: Number) -> "Money":
        return cls.from_gross(gross, VatRate.GERMAN_STANDARD, EUR)

    @classmethod
    def zero(cls, currency: Currency = EUR) -> "Money":
        return cls(Decimal("0.00"), Decimal("0.00"), currency)

    @property
    def gross_amount(self) -> Decimal:
        return self.net_amount + self.vat_amount

    @property
    def vat_rate(self) -> Decimal:
        if self.net_amount == 0:
            return Decimal("0.00")
        return round_money(self.vat_amount / self.net_amount)

    def _ensure_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise BusinessRuleViolation(
                f"Cannot combine amounts in {self.currency} and {other.currency}"
            )

    def __add__(self, other: "Money") -> "Money":
        self._ensure_same_currency(other)
        return Money(self.net_amount + other.net_amount, self.vat_amount + other.vat_amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._ensure_same_currency(other)
        return Money(self.net_amount - other.net_amount, self.vat_amount - other.vat_amount, self.currency)

    def __mul__(self, factor) -> "Money":
        if isinstance(factor, bool):
            return NotImplemented
        if isinstance(factor, int):
            return Money(self.net_amount * factor, self.vat_amount * factor, self.currency)
        if isinstance(factor, (Decimal, float)):
            factor = to_decimal(factor)
            return Money(round_money(self.net_amount * factor), round_money(self.vat_amount * factor), self.currency)
        return NotImplemented

    __rmul__ = __mul__

    def to_german_string(self) -> str:
        formatted = f"{self.gross_amount:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
        return f"{formatted} {self.currency}"

    def __str__(self) -> str:
        return f"{self.gross_amount:.2f} {self.currency}"


@dataclass(frozen=True)
class DateRange:
    from_date: Optional[date] = None
    to_date: Optional[date] = None

    @classmethod
    def create(cls, from_date: Optional[date] = None, to_date: Optional[date] = None, field_name: str = "date_range") -> "DateRange":
        if from_date and to_date and from_date > to_date:
            raise DomainValidationError(f"{field_name}: start date must be on or before end date", field_name)
        return cls(from_date, to_date)

    @property
    def has_filter(self) -> bool:
        return self.from_date is not None or self.to_date is not None

    @property
    def is_bounded(self) -> bool:
        return self.from_date is not None and self.to_date is not None

    def contains(self, value: date) -> bool:
        if self.from_date and value < self.from_date:
            return False
        if self.to_date and value > self.to_date:
            return False
        return True

    def days_in_range(self) -> int:
        if not self.is_bounded:
            raise BusinessRuleViolation("Cannot count days of an open date range")
        return (self.to_date - self.from_date).days + 1


@dataclass(frozen=True)
class PriceRange:
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None

    @classmethod
    def create(cls, min_price: Optional[Number] = None, max_price: Optional[Number] = None) -> "PriceRange":
        lo = to_decimal(min_price) if min_price is not None else None
        hi = to_decimal(max_price) if max_price is not None else None
        if (lo is not None and lo < 0) or (hi is not None and hi < 0):
            raise DomainValidationError("Price bounds cannot be negative", "price_range")
        if lo is not None and hi is not None and lo > hi:
            raise DomainValidationError("Minimum price cannot exceed maximum price", "price_range")
        return cls(lo, hi)

    @property
    def has_filter(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    def contains(self, amount: Decimal) -> bool:
        if self.min_price is not None and amount < self.min_price:
            return False
        if self.max_price is not None and amount > self.max_price:
            return False
        return True


@dataclass(frozen=True)
class IntRange:
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    @classmethod
    def create(cls, minimum: Optional[int] = None, maximum: Optional[int] = None, field_name: str = "range") -> "IntRange":
        if (minimum is not None and minimum < 0) or (maximum is not None and maximum < 0):
            raise DomainValidationError(f"{field_name} cannot be negative", field_name)
        if minimum is not None and maximum is not None and minimum > maximum:
            raise DomainValidationError(f"{field_name}: minimum cannot exceed maximum", field_name)
        return cls(minimum, maximum)

    @property
    def has_filter(self) -> bool:
        return self.minimum is not None or self.maximum is not None


@dataclass(frozen=True)
class PagingInfo:
    page_number: int = 1
    page_size: int = 20

    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    @classmethod
    def create(cls, page_number: int = 1, page_size: Optional[int] = None, default_page_size: int = DEFAULT_PAGE_SIZE) -> "PagingInfo":
        size = default_page_size if page_size is None else page_size
        if page_number < 1:
            raise DomainValidationError("Page number must be at least 1", "page_number")
        ensure_range(size, 1, cls.MAX_PAGE_SIZE, "page_size")
        return cls(page_number, size)

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def next_page(self) -> "PagingInfo":
        return PagingInfo(self.page_number + 1, self.page_size)

    def previous_page(self) -> "PagingInfo":
        return PagingInfo(max(1, self.page_number - 1), self.page_size)


@dataclass(frozen=True)
class SortingInfo:
    sort_by: Optional[str] = None
    descending: bool = False
