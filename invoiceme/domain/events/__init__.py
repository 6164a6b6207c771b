"""
Domain events for the application.
Events are recorded by aggregates and published by the application layer.
"""

from .base import DomainEvent, EventHandler, EventDispatcher
from .invoice_events import (
    InvoiceCreated,
    LineItemAdded,
    LineItemRemoved,
    InvoiceSent,
    InvoicePaid
)
from .payment_events import PaymentRecorded
from .customer_events import CustomerCreated, CustomerUpdated, CustomerDeleted

__all__ = [
    "DomainEvent",
    "EventHandler",
    "EventDispatcher",
    "InvoiceCreated",
    "LineItemAdded",
    "LineItemRemoved",
    "InvoiceSent",
    "InvoicePaid",
    "PaymentRecorded",
    "CustomerCreated",
    "CustomerUpdated",
    "CustomerDeleted"
]
