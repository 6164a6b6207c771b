"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .invoice_repository import InvoiceRepository, CustomerInvoiceSummary, DashboardTotals
from .payment_repository import PaymentRepository, PaymentStatistics
from .customer_repository import CustomerRepository
from .sequence_repository import InvoiceSequenceRepository
from .unit_of_work import UnitOfWork

__all__ = [
    "InvoiceRepository",
    "CustomerInvoiceSummary",
    "DashboardTotals",
    "PaymentRepository",
    "PaymentStatistics",
    "CustomerRepository",
    "InvoiceSequenceRepository",
    "UnitOfWork",
]
