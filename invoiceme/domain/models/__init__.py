"""
Domain models for the invoicing core.
This module exports all domain entities, value objects and errors.
"""

# Base classes and errors
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainException,
    ValidationError,
    PaymentExceedsBalanceError,
    BusinessRuleViolation,
    InvalidStateError,
    InvoiceImmutableError,
    InvoiceNotSentError,
    EntityNotFoundError,
    DuplicateEntityError,
    ConcurrencyError
)

# Value objects and money helpers
from .value_objects import (
    CENT,
    ZERO,
    HUNDRED,
    to_decimal,
    round_money,
    percent_of,
    validate_percentage,
    InvoiceNumber,
    Address
)

# Domain entities
from .line_item import LineItem, LineItemTotals, calculate_line_item_totals
from .invoice import Invoice, InvoiceStatus
from .payment import Payment, PaymentMethod, parse_payment_method
from .customer import Customer, CustomerStatus


__all__ = [
    # Base
    "BaseEntity",
    "AggregateRoot",
    "DomainException",
    "ValidationError",
    "PaymentExceedsBalanceError",
    "BusinessRuleViolation",
    "InvalidStateError",
    "InvoiceImmutableError",
    "InvoiceNotSentError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ConcurrencyError",

    # Value objects
    "CENT",
    "ZERO",
    "HUNDRED",
    "to_decimal",
    "round_money",
    "percent_of",
    "validate_percentage",
    "InvoiceNumber",
    "Address",

    # Line items
    "LineItem",
    "LineItemTotals",
    "calculate_line_item_totals",

    # Invoice
    "Invoice",
    "InvoiceStatus",

    # Payment
    "Payment",
    "PaymentMethod",
    "parse_payment_method",

    # Customer
    "Customer",
    "CustomerStatus"
]
