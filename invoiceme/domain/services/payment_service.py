"""Payment service.
Validates a payment against the current invoice state and applies it.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional
import logging

from invoiceme.domain.events import DomainEvent, PaymentRecorded
from invoiceme.domain.models.base import (
    InvoiceNotSentError,
    PaymentExceedsBalanceError,
    ValidationError
)
from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.payment import Payment
from invoiceme.domain.models.value_objects import to_decimal
from invoiceme.domain.services.clock import Clock


logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    """Outcome of a recorded payment: the mutated invoice, the new payment and the events to publish."""

    invoice: Invoice
    payment: Payment
    events: List[DomainEvent] = field(default_factory=list)

    @property
    def new_balance(self) -> Decimal:
        return self.invoice.balance

    @property
    def new_status(self) -> InvoiceStatus:
        return self.invoice.status


class PaymentService:
    """
    Domain service for applying payments to invoices.

    It holds no state between calls. Persisting the result and suppressing
    duplicate idempotency keys are the caller's job; by the time this
    service runs the caller has already checked that the key is new.
    """

    def __init__(self, clock: Clock):
        self.clock = clock

    def record_payment(
        self,
        invoice: Invoice,
        payment_date: date,
        amount: Any,
        method: Any,
        created_by: str,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        idempotency_key: Optional[str] = None
    ) -> PaymentResult:
        """
        Record a payment against ``invoice``.

        Checks run in this order: amount is positive, payment date is not in
        the future, invoice is Sent, amount does not exceed the balance.
        Partial payments are fine; overpayments are rejected outright.
        """
        amount = to_decimal(amount, "amount")
        if amount <= 0:
            raise ValidationError("Payment amount must be positive", "amount")

        today = self.clock.today()
        if payment_date is None:
            raise ValidationError("Payment date is required", "payment_date")
        if payment_date > today:
            raise ValidationError("Payment date cannot be in the future", "payment_date")

        if invoice.status != InvoiceStatus.SENT:
            raise InvoiceNotSentError(invoice.status, invoice.id)

        if amount > invoice.balance:
            raise PaymentExceedsBalanceError(amount, invoice.balance, invoice.id)

        payment = Payment.create(
            invoice_id=invoice.id,
            payment_date=payment_date,
            amount=amount,
            method=method,
            created_by=created_by,
            today=today,
            reference=reference,
            notes=notes,
            idempotency_key=idempotency_key
        )

        # Events raised earlier in the same transaction keep their place ahead of this payment
        earlier_events = invoice.pull_events()
        new_balance = invoice.apply_payment(payment.amount)
        status_events = invoice.pull_events()

        recorded = PaymentRecorded(
            payment_id=payment.id,
            invoice_id=invoice.id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            payment_method=payment.method.value,
            new_balance=new_balance,
            new_status=invoice.status.value
        )

        logger.info(
            f"Applied payment {payment.id} of {payment.amount} to invoice {invoice.invoice_number}; "
            f"balance now {new_balance} ({invoice.status.value})"
        )

        return PaymentResult(invoice=invoice, payment=payment, events=earlier_events + [recorded] + status_events)
