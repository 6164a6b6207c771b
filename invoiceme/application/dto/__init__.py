"""
Data Transfer Objects for the application layer.
"""

from .base_dto import (
    BaseDTO,
    RequestDTO,
    ResponseDTO,
    ListRequestDTO,
    ListResponseDTO,
    NotesMixin
)
from .invoice_dto import (
    LineItemRequestDTO,
    LineItemResponseDTO,
    CreateInvoiceRequestDTO,
    UpdateInvoiceRequestDTO,
    AddLineItemRequestDTO,
    RemoveLineItemRequestDTO,
    SendInvoiceRequestDTO,
    GetInvoiceRequestDTO,
    ListInvoicesRequestDTO,
    DashboardStatsRequestDTO,
    InvoiceResponseDTO,
    InvoiceSummaryResponseDTO,
    DashboardStatsResponseDTO
)
from .payment_dto import (
    RecordPaymentRequestDTO,
    GetPaymentRequestDTO,
    ListPaymentsByInvoiceRequestDTO,
    ListPaymentHistoryRequestDTO,
    PaymentStatisticsRequestDTO,
    PaymentResponseDTO,
    RecordPaymentResponseDTO,
    PaymentListResponseDTO,
    PaymentStatisticsResponseDTO
)
from .customer_dto import (
    AddressDTO,
    CreateCustomerRequestDTO,
    UpdateCustomerRequestDTO,
    DeleteCustomerRequestDTO,
    GetCustomerRequestDTO,
    ListCustomersRequestDTO,
    CustomerResponseDTO,
)

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "ListRequestDTO",
    "ListResponseDTO",
    "NotesMixin",

    # Invoice DTOs
    "LineItemRequestDTO",
    "LineItemResponseDTO",
    "CreateInvoiceRequestDTO",
    "UpdateInvoiceRequestDTO",
    "AddLineItemRequestDTO",
    "RemoveLineItemRequestDTO",
    "SendInvoiceRequestDTO",
    "GetInvoiceRequestDTO",
    "ListInvoicesRequestDTO",
    "DashboardStatsRequestDTO",
    "InvoiceResponseDTO",
    "InvoiceSummaryResponseDTO",
    "DashboardStatsResponseDTO",

    # Payment DTOs
    "RecordPaymentRequestDTO",
    "GetPaymentRequestDTO",
    "ListPaymentsByInvoiceRequestDTO",
    "ListPaymentHistoryRequestDTO",
    "PaymentStatisticsRequestDTO",
    "PaymentResponseDTO",
    "RecordPaymentResponseDTO",
    "PaymentListResponseDTO",
    "PaymentStatisticsResponseDTO",

    # Customer DTOs
    "AddressDTO",
    "CreateCustomerRequestDTO",
    "UpdateCustomerRequestDTO",
    "DeleteCustomerRequestDTO",
    "GetCustomerRequestDTO",
    "ListCustomersRequestDTO",
    "CustomerResponseDTO",
]
