"""
Event handlers and event system setup.
"""

from .audit_handlers import AuditLogEventHandler, InvoiceLifecycleHandler
from .event_setup import setup_event_handlers

__all__ = [
    "AuditLogEventHandler",
    "InvoiceLifecycleHandler",
    "setup_event_handlers",
]
