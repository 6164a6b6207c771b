"""
Domain services for the invoicing core.
This module exports all domain services for logic that spans aggregates.
"""

from .clock import Clock, SystemClock, FixedClock
from .numbering_service import NumberingService, InvoiceNumberGenerator
from .payment_service import PaymentService, PaymentResult

__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
    "NumberingService",
    "InvoiceNumberGenerator",
    "PaymentService",
    "PaymentResult",
]
