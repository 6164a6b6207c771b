"""
Payment domain model.
A payment is recorded once against a sent invoice and never changes afterwards.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
import uuid

from invoiceme.domain.models.base import ValidationError, utcnow
from invoiceme.domain.models.value_objects import round_money, to_decimal


class PaymentMethod(str, Enum):
    """Payment method."""
    CREDIT_CARD = "CreditCard"
    BANK_TRANSFER = "BankTransfer"
    CHECK = "Check"
    CASH = "Cash"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    PaymentMethod.CREDIT_CARD: "Credit Card",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.CHECK: "Check",
    PaymentMethod.CASH: "Cash",
}


def parse_payment_method(value: Any) -> PaymentMethod:
    """Accept an enum member, its value (``BankTransfer``) or its name (``BANK_TRANSFER``)."""
    if isinstance(value, PaymentMethod):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("Payment method is required", "payment_method")

    text = str(value).strip()
    for method in PaymentMethod:
        if text in (method.value, method.name) or text.lower() == method.display_name.lower():
            return method

    raise ValidationError(f"Unknown payment method: {value}", "payment_method")


@dataclass(frozen=True, eq=False)
class Payment:
    """
    Payment applied to an invoice.

    Frozen: payments are created once and never mutated. Deleting or
    refunding a payment is not supported.
    """

    invoice_id: uuid.UUID
    payment_date: date
    amount: Decimal
    method: PaymentMethod
    created_by: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.invoice_id:
            raise ValidationError("Invoice ID is required", "invoice_id")

        if not self.payment_date:
            raise ValidationError("Payment date is required", "payment_date")

        amount = to_decimal(self.amount, "amount")
        if amount <= 0:
            raise ValidationError("Payment amount must be positive", "amount")
        if amount != round_money(amount):
            raise ValidationError("Payment amount cannot have more than 2 decimal places", "amount")
        object.__setattr__(self, "amount", round_money(amount))

        object.__setattr__(self, "method", parse_payment_method(self.method))

        if not self.created_by or not str(self.created_by).strip():
            raise ValidationError("Created by is required", "created_by")

        if self.reference and len(self.reference) > 255:
            raise ValidationError("Reference too long (max 255 characters)", "reference")

        if self.idempotency_key is not None:
            key = str(self.idempotency_key).strip()
            if not key or len(key) > 255:
                raise ValidationError("Idempotency key must be 1-255 characters", "idempotency_key")
            object.__setattr__(self, "idempotency_key", key)

    @classmethod
    def create(
        cls,
        invoice_id: uuid.UUID,
        payment_date: date,
        amount: Any,
        method: Any,
        created_by: str,
        today: date,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        idempotency_key: Optional[str] = None
    ) -> "Payment":
        """Build a new payment, rejecting dates after ``today``."""
        if payment_date and payment_date > today:
            raise ValidationError("Payment date cannot be in the future", "payment_date")

        return cls(
            invoice_id=invoice_id,
            payment_date=payment_date,
            amount=amount,
            method=method,
            created_by=created_by,
            reference=reference,
            notes=notes,
            idempotency_key=idempotency_key
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Payment):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
