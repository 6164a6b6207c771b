"""
Invoice line items and the line-level money calculation.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional
import uuid

from invoiceme.domain.models.base import ValidationError
from invoiceme.domain.models.value_objects import (
    MAX_MONEY,
    ZERO,
    percent_of,
    round_money,
    to_decimal,
    validate_percentage,
)


@dataclass(frozen=True)
class LineItemTotals:
    """Derived amounts for one line, each rounded to cents."""

    subtotal: Decimal
    discount: Decimal
    taxable: Decimal
    tax: Decimal
    total: Decimal


def _validate_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float, Decimal, str)):
        raise ValidationError("Quantity must be a positive whole number", "quantity")
    try:
        value = Decimal(str(quantity).strip())
    except ArithmeticError:
        raise ValidationError("Quantity must be a positive whole number", "quantity")
    if not value.is_finite() or value != value.to_integral_value():
        raise ValidationError("Quantity must be a positive whole number", "quantity")
    if value <= 0:
        raise ValidationError("Quantity must be positive", "quantity")
    return int(value)


def calculate_line_item_totals(
    quantity: Any,
    unit_price: Any,
    discount_percent: Any = ZERO,
    tax_rate: Any = ZERO
) -> LineItemTotals:
    """
    Compute subtotal, discount, taxable amount, tax and total for one line.

    Percentages are on a 0-100 scale. Each derived amount is rounded half-up
    to 2 places, so ``total == subtotal - discount + tax`` holds exactly.
    """
    qty = _validate_quantity(quantity)
    price = to_decimal(unit_price, "unit_price")
    if price < 0:
        raise ValidationError("Unit price cannot be negative", "unit_price")
    if price > MAX_MONEY:
        raise ValidationError("Unit price is too large", "unit_price")
    discount_pct = validate_percentage(discount_percent, "discount_percent")
    tax_pct = validate_percentage(tax_rate, "tax_rate")

    subtotal = round_money(price * qty, "quantity")
    if subtotal > MAX_MONEY:
        raise ValidationError("Line subtotal is too large", "quantity")
    discount = round_money(percent_of(subtotal, discount_pct))
    taxable = subtotal - discount
    tax = round_money(percent_of(taxable, tax_pct))

    return LineItemTotals(
        subtotal=subtotal,
        discount=discount,
        taxable=taxable,
        tax=tax,
        total=taxable + tax
    )


@dataclass(frozen=True)
class LineItem:
    """
    Immutable line item owned by exactly one invoice.
    Replacing a line means removing it and adding a new one.
    """

    description: str
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal = ZERO
    tax_rate: Decimal = ZERO
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    totals: LineItemTotals = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.description or not str(self.description).strip():
            raise ValidationError("Description is required", "description")
        if not self.id:
            object.__setattr__(self, "id", str(uuid.uuid4()))

        # Stored price has 2 places; totals are computed from the stored value
        unit_price = round_money(to_decimal(self.unit_price, "unit_price"), "unit_price")
        totals = calculate_line_item_totals(
            self.quantity, unit_price, self.discount_percent, self.tax_rate
        )

        object.__setattr__(self, "description", str(self.description).strip())
        object.__setattr__(self, "quantity", _validate_quantity(self.quantity))
        object.__setattr__(self, "unit_price", unit_price)
        object.__setattr__(self, "discount_percent", to_decimal(self.discount_percent, "discount_percent"))
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate, "tax_rate"))
        object.__setattr__(self, "totals", totals)

    @classmethod
    def create(
        cls,
        description: str,
        quantity: Any,
        unit_price: Any,
        discount_percent: Any = ZERO,
        tax_rate: Any = ZERO,
        line_item_id: Optional[str] = None
    ) -> "LineItem":
        """Build a validated line item, generating an id when none is given."""
        return cls(
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            discount_percent=discount_percent if discount_percent is not None else ZERO,
            tax_rate=tax_rate if tax_rate is not None else ZERO,
            id=line_item_id or str(uuid.uuid4())
        )

    @property
    def subtotal(self) -> Decimal:
        return self.totals.subtotal

    @property
    def discount_amount(self) -> Decimal:
        return self.totals.discount

    @property
    def taxable_amount(self) -> Decimal:
        return self.totals.taxable

    @property
    def tax_amount(self) -> Decimal:
        return self.totals.tax

    @property
    def total(self) -> Decimal:
        return self.totals.total

    def to_dict(self) -> Dict[str, Any]:
        """Stored fields only; decimals as strings so they survive JSON."""
        return {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "discount_percent": str(self.discount_percent),
            "tax_rate": str(self.tax_rate)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        return cls.create(
            description=data["description"],
            quantity=data["quantity"],
            unit_price=data["unit_price"],
            discount_percent=data.get("discount_percent", ZERO),
            tax_rate=data.get("tax_rate", ZERO),
            line_item_id=data.get("id")
        )
