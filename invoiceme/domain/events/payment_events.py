"""
Domain events related to payments.
"""

from typing import Dict, Any
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from .base import DomainEvent


@dataclass
class PaymentRecorded(DomainEvent):
    """
    Event fired when a payment has been applied to an invoice.
    Captures the invoice state after application (new balance and status).
    """

    payment_id: UUID
    invoice_id: UUID
    amount: Decimal
    payment_date: date
    payment_method: str
    new_balance: Decimal
    new_status: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "payment_id": str(self.payment_id),
            "invoice_id": str(self.invoice_id),
            "amount": str(self.amount),
            "payment_date": self.payment_date.isoformat(),
            "payment_method": self.payment_method,
            "new_balance": str(self.new_balance),
            "new_status": self.new_status
        }
