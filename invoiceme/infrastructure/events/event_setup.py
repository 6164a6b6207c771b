"""
Event system setup and configuration.
Registers all event handlers with the event dispatcher.
"""

import logging

from invoiceme.domain.events.base import EventDispatcher
from .audit_handlers import AuditLogEventHandler, InvoiceLifecycleHandler


logger = logging.getLogger(__name__)


def setup_event_handlers(dispatcher: EventDispatcher) -> EventDispatcher:
    """Set up and register all event handlers."""

    # Register global handler for the audit trail
    dispatcher.register_global_handler(AuditLogEventHandler())

    # Register specific handlers for invoice events
    lifecycle_handler = InvoiceLifecycleHandler()
    dispatcher.register_handler("InvoiceSent", lifecycle_handler)
    dispatcher.register_handler("InvoicePaid", lifecycle_handler)
    dispatcher.register_handler("PaymentRecorded", lifecycle_handler)

    logger.info("Event handlers registered successfully")

    # Log registered handlers
    registered = dispatcher.get_registered_handlers()
    for event_type, handlers in registered.items():
        logger.debug(f"Event {event_type}: {', '.join(handlers)} handlers")

    return dispatcher
