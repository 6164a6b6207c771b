"""
Mappers between domain entities and SQLAlchemy models.
"""

from .customer_mapper import CustomerMapper
from .invoice_mapper import InvoiceMapper
from .payment_mapper import PaymentMapper

__all__ = [
    "CustomerMapper",
    "InvoiceMapper",
    "PaymentMapper",
]
