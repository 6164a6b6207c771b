"""
Event handlers that write an audit trail of domain events to the log.
"""

import json
import logging
from typing import Optional

from invoiceme.domain.events.base import EventHandler, DomainEvent
from invoiceme.domain.events.invoice_events import InvoicePaid, InvoiceSent
from invoiceme.domain.events.payment_events import PaymentRecorded


logger = logging.getLogger(__name__)


class AuditLogEventHandler(EventHandler):
    """Logs every event as one JSON line on the ``invoiceme.audit`` logger."""

    def __init__(self, audit_logger: Optional[logging.Logger] = None):
        self.audit_logger = audit_logger or logging.getLogger("invoiceme.audit")

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    async def handle(self, event: DomainEvent) -> None:
        self.audit_logger.info(json.dumps(event.to_dict(), default=str, sort_keys=True))


class InvoiceLifecycleHandler(EventHandler):
    """Summarizes invoice state changes and payments in plain words."""

    def can_handle(self, event: DomainEvent) -> bool:
        return isinstance(event, (InvoiceSent, InvoicePaid, PaymentRecorded))

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, InvoiceSent):
            logger.info(
                f"Invoice {event.invoice_number} sent to customer {event.customer_id} "
                f"for {event.total_amount}, due {event.due_date}"
            )
        elif isinstance(event, PaymentRecorded):
            logger.info(
                f"Payment of {event.amount} by {event.payment_method} recorded on invoice "
                f"{event.invoice_id}; balance now {event.new_balance} ({event.new_status})"
            )
        elif isinstance(event, InvoicePaid):
            logger.info(f"Invoice {event.invoice_number} paid in full")
