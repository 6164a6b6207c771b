"""
Domain events related to invoices.
Events for the invoice lifecycle: creation, line item edits, sending, payment.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from .base import DomainEvent


@dataclass
class InvoiceCreated(DomainEvent):
    """Event fired when a new invoice is created."""

    invoice_id: UUID
    customer_id: UUID
    invoice_number: str
    issue_date: Optional[date] = None
    due_date: Optional[date] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": str(self.invoice_id),
            "customer_id": str(self.customer_id),
            "invoice_number": self.invoice_number,
            "issue_date": self.issue_date.isoformat() if self.issue_date else None,
            "due_date": self.due_date.isoformat() if self.due_date else None
        }


@dataclass
class LineItemAdded(DomainEvent):
    """Event fired when a line item is appended to a draft invoice."""

    invoice_id: UUID
    line_item_id: str
    description: str
    line_total: Decimal
    invoice_total: Decimal

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": str(self.invoice_id),
            "line_item_id": self.line_item_id,
            "description": self.description,
            "line_total": str(self.line_total),
            "invoice_total": str(self.invoice_total)
        }


@dataclass
class LineItemRemoved(DomainEvent):
    """Event fired when a line item is removed from a draft invoice."""

    invoice_id: UUID
    line_item_id: str
    invoice_total: Decimal

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": str(self.invoice_id),
            "line_item_id": self.line_item_id,
            "invoice_total": str(self.invoice_total)
        }


@dataclass
class InvoiceSent(DomainEvent):
    """Event fired when an invoice leaves Draft."""

    invoice_id: UUID
    customer_id: UUID
    invoice_number: str
    total_amount: Decimal
    due_date: Optional[date] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": str(self.invoice_id),
            "customer_id": str(self.customer_id),
            "invoice_number": self.invoice_number,
            "total_amount": str(self.total_amount),
            "due_date": self.due_date.isoformat() if self.due_date else None
        }


@dataclass
class InvoicePaid(DomainEvent):
    """Event fired when the balance of a sent invoice reaches zero."""

    invoice_id: UUID
    customer_id: UUID
    invoice_number: str
    total_amount: Decimal

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_id": str(self.invoice_id),
            "customer_id": str(self.customer_id),
            "invoice_number": self.invoice_number,
            "total_amount": str(self.total_amount)
        }
