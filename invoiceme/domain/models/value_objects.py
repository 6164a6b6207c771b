"""
Value objects and exact decimal helpers for the domain layer.
All monetary math goes through Decimal; binary floats never reach a total.
"""

from typing import Any, Optional
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from dataclasses import dataclass
import re

from invoiceme.domain.models.base import ValidationError


CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
# Largest amount a NUMERIC(12, 2) column holds
MAX_MONEY = Decimal("9999999999.99")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Convert user input to Decimal.
    Floats go through ``str()`` so 0.1 becomes Decimal("0.1"), not its binary expansion.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a decimal number", field)
    else:
        raise ValidationError(f"{field} must be a decimal number", field)

    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field)

    return result


def round_money(value: Decimal, field: str = "amount") -> Decimal:
    """Round to 2 decimal places using round-half-up."""
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field} is too large", field)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Exact ``amount * percent / 100`` (unrounded)."""
    return amount * percent / HUNDRED


def validate_percentage(value: Any, field: str) -> Decimal:
    """Parse a percentage expressed on a 0-100 scale (8.25 means 8.25%)."""
    percent = to_decimal(value, field)
    if percent < 0 or percent > HUNDRED:
        raise ValidationError(f"{field} must be between 0 and 100", field)
    return percent


@dataclass(frozen=True)
class InvoiceNumber:
    """
    Invoice number value object: ``{prefix}-{year}-{sequence}``.
    The sequence is zero-padded to ``width`` digits and simply grows wider past 9999.
    """

    prefix: str
    year: int
    sequence: int
    width: int = 4

    _PATTERN = re.compile(r"^(?P<prefix>[A-Za-z][A-Za-z0-9]{0,9})-(?P<year>\d{4})-(?P<sequence>\d+)$")

    def __post_init__(self):
        if not self.prefix or len(self.prefix) > 10:
            raise ValidationError("Invoice prefix must be 1-10 characters", "prefix")
        if self.year < 1 or self.year > 9999:
            raise ValidationError("Invoice year must be a four digit year", "year")
        if self.sequence <= 0:
            raise ValidationError("Invoice sequence must be positive", "sequence")

    def __str__(self) -> str:
        return f"{self.prefix}-{self.year}-{str(self.sequence).zfill(self.width)}"

    @classmethod
    def from_string(cls, value: str, width: int = 4) -> "InvoiceNumber":
        """Parse an invoice number string such as ``INV-2024-0001``."""
        match = cls._PATTERN.match(value.strip()) if value else None
        if not match:
            raise ValidationError(f"Invalid invoice number format: {value}", "invoice_number")
        return cls(
            prefix=match.group("prefix"),
            year=int(match.group("year")),
            sequence=int(match.group("sequence")),
            width=width
        )

    def next(self, year: Optional[int] = None) -> "InvoiceNumber":
        """Next number in sequence; the sequence restarts at 1 in a new year."""
        target_year = year or self.year
        if target_year < self.year:
            raise ValidationError("Invoice numbering cannot move back in time", "year")
        if target_year != self.year:
            return InvoiceNumber(self.prefix, target_year, 1, self.width)
        return InvoiceNumber(self.prefix, self.year, self.sequence + 1, self.width)


@dataclass(frozen=True)
class Address:
    """Value object representing a postal address. All parts are required."""

    street: str
    city: str
    state: str
    postal_code: str
    country: str

    def __post_init__(self):
        for name in ("street", "city", "state", "postal_code", "country"):
            value = getattr(self, name)
            if value is None or not str(value).strip():
                label = name.replace("_", " ").capitalize()
                raise ValidationError(f"{label} is required", name)
            object.__setattr__(self, name, str(value).strip())

    def format_single_line(self) -> str:
        """Format address as single line."""
        return f"{self.street}, {self.city}, {self.state} {self.postal_code}, {self.country}"

    def to_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country
        }

    def __str__(self) -> str:
        return self.format_single_line()
