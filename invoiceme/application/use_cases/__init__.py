"""
Use cases for the application layer.
This module exports all use cases for dependency injection.
"""

from .base_use_case import (
    UseCaseResult,
    BaseUseCase,
    QueryUseCase,
    CommandUseCase,
    PaginatedQueryUseCase
)
from .invoice_use_cases import (
    CreateInvoiceUseCase,
    UpdateInvoiceUseCase,
    AddLineItemUseCase,
    RemoveLineItemUseCase,
    SendInvoiceUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    GetDashboardStatsUseCase
)
from .payment_use_cases import (
    RecordPaymentUseCase,
    GetPaymentUseCase,
    ListPaymentsByInvoiceUseCase,
    ListPaymentHistoryUseCase,
    GetPaymentStatisticsUseCase
)
from .customer_use_cases import (
    CreateCustomerUseCase,
    UpdateCustomerUseCase,
    DeleteCustomerUseCase,
    GetCustomerUseCase,
    ListCustomersUseCase
)

__all__ = [
    # Base classes
    "UseCaseResult",
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "PaginatedQueryUseCase",

    # Invoice use cases
    "CreateInvoiceUseCase",
    "UpdateInvoiceUseCase",
    "AddLineItemUseCase",
    "RemoveLineItemUseCase",
    "SendInvoiceUseCase",
    "GetInvoiceUseCase",
    "ListInvoicesUseCase",
    "GetDashboardStatsUseCase",

    # Payment use cases
    "RecordPaymentUseCase",
    "GetPaymentUseCase",
    "ListPaymentsByInvoiceUseCase",
    "ListPaymentHistoryUseCase",
    "GetPaymentStatisticsUseCase",

    # Customer use cases
    "CreateCustomerUseCase",
    "UpdateCustomerUseCase",
    "DeleteCustomerUseCase",
    "GetCustomerUseCase",
    "ListCustomersUseCase",
]
