"""
Invoice DTOs for the application layer.
Data Transfer Objects for invoice lifecycle operations.
"""

from typing import Dict, List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
from pydantic import Field, field_validator, model_validator

from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.line_item import LineItem
from invoiceme.domain.repositories.invoice_repository import DashboardTotals
from .base_dto import BaseDTO, RequestDTO, ResponseDTO, ListRequestDTO, NotesMixin


# Nested DTOs
class LineItemRequestDTO(RequestDTO):
    """DTO for a line item in requests."""

    description: str = Field(min_length=1, max_length=500, description="Item description")
    quantity: int = Field(gt=0, description="Quantity (whole units)")
    unit_price: Decimal = Field(ge=0, le=Decimal("9999999999.99"), decimal_places=2, description="Unit price")
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=6, description="Discount (0-100)")
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=6, description="Tax rate (0-100)")

    def to_domain(self) -> LineItem:
        return LineItem.create(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=self.discount_percent,
            tax_rate=self.tax_rate
        )


class LineItemResponseDTO(BaseDTO):
    """DTO for a line item in responses."""

    id: str
    description: str
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal
    tax_rate: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    total: Decimal

    @classmethod
    def from_domain(cls, item: LineItem) -> "LineItemResponseDTO":
        return cls(
            id=item.id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount_percent=item.discount_percent,
            tax_rate=item.tax_rate,
            subtotal=item.subtotal,
            discount_amount=item.discount_amount,
            taxable_amount=item.taxable_amount,
            tax_amount=item.tax_amount,
            total=item.total
        )


# Request DTOs
class CreateInvoiceRequestDTO(RequestDTO, NotesMixin):
    """DTO for invoice creation requests."""

    customer_id: UUID = Field(description="Customer ID")
    issue_date: date = Field(description="Issue date")
    due_date: date = Field(description="Due date")
    payment_terms: Optional[str] = Field(default=None, max_length=100, description="Payment terms")
    line_items: List[LineItemRequestDTO] = Field(min_length=1, description="Line items")

    @model_validator(mode="after")
    def validate_dates(self) -> "CreateInvoiceRequestDTO":
        if self.due_date < self.issue_date:
            raise ValueError("Due date must be on or after issue date")
        return self


class UpdateInvoiceRequestDTO(RequestDTO, NotesMixin):
    """
    DTO for invoice update requests.
    ``line_items`` replaces the whole list when given.
    """

    invoice_id: UUID = Field(description="Invoice ID")
    version: int = Field(ge=1, description="Version the caller last read")
    customer_id: Optional[UUID] = Field(default=None, description="Customer ID")
    issue_date: Optional[date] = Field(default=None, description="Issue date")
    due_date: Optional[date] = Field(default=None, description="Due date")
    payment_terms: Optional[str] = Field(default=None, max_length=100, description="Payment terms")
    line_items: Optional[List[LineItemRequestDTO]] = Field(default=None, description="Replacement line items")

    @field_validator("line_items")
    @classmethod
    def validate_line_items(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError("At least one line item is required")
        return v


class AddLineItemRequestDTO(RequestDTO):
    """DTO for appending a line item to a draft invoice."""

    invoice_id: UUID
    line_item: LineItemRequestDTO


class RemoveLineItemRequestDTO(RequestDTO):
    """DTO for removing a line item from a draft invoice."""

    invoice_id: UUID
    line_item_id: str = Field(min_length=1)


class SendInvoiceRequestDTO(RequestDTO):
    invoice_id: UUID


class GetInvoiceRequestDTO(RequestDTO):
    invoice_id: UUID


class ListInvoicesRequestDTO(ListRequestDTO):
    """DTO for listing invoices."""

    status: Optional[InvoiceStatus] = Field(default=None, description="Filter by status")
    customer_id: Optional[UUID] = Field(default=None, description="Filter by customer")
    start_date: Optional[date] = Field(default=None, description="Earliest issue date")
    end_date: Optional[date] = Field(default=None, description="Latest issue date")
    sort_by: str = Field(
        default="issue_date",
        pattern="^(issue_date|due_date|invoice_number|total_amount|balance|status|created_at)$",
        description="Sort field"
    )
    sort_order: str = Field(default="desc", pattern="^(asc|desc)$", description="Sort order")

    @model_validator(mode="after")
    def validate_dates(self) -> "ListInvoicesRequestDTO":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class DashboardStatsRequestDTO(RequestDTO):
    as_of: Optional[date] = Field(default=None, description="Reference date for overdue checks")


# Response DTOs
class InvoiceResponseDTO(ResponseDTO, NotesMixin):
    """DTO for invoice responses."""

    customer_id: UUID
    invoice_number: str
    issue_date: date
    due_date: date
    status: InvoiceStatus
    payment_terms: str
    line_items: List[LineItemResponseDTO] = Field(default_factory=list)
    subtotal: Decimal
    total_discount: Decimal
    total_tax: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    balance: Decimal
    version: int

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceResponseDTO":
        return cls(
            id=invoice.id,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            customer_id=invoice.customer_id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            status=invoice.status,
            payment_terms=invoice.payment_terms,
            notes=invoice.notes,
            line_items=[LineItemResponseDTO.from_domain(item) for item in invoice.line_items],
            subtotal=invoice.subtotal,
            total_discount=invoice.total_discount,
            total_tax=invoice.total_tax,
            total_amount=invoice.total_amount,
            amount_paid=invoice.amount_paid,
            balance=invoice.balance,
            version=invoice.version
        )


class InvoiceSummaryResponseDTO(ResponseDTO):
    """Compact invoice for list views."""

    customer_id: UUID
    invoice_number: str
    issue_date: date
    due_date: date
    status: InvoiceStatus
    total_amount: Decimal
    balance: Decimal
    line_item_count: int

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceSummaryResponseDTO":
        return cls(
            id=invoice.id,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            customer_id=invoice.customer_id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            status=invoice.status,
            total_amount=invoice.total_amount,
            balance=invoice.balance,
            line_item_count=invoice.line_item_count
        )


class DashboardStatsResponseDTO(BaseDTO):
    """Headline numbers for the dashboard."""

    total_customers: int
    total_invoices: int
    counts_by_status: Dict[str, int]
    total_revenue: Decimal
    outstanding_amount: Decimal
    overdue_count: int
    overdue_amount: Decimal
    as_of: date

    @classmethod
    def from_totals(cls, totals: DashboardTotals, total_customers: int, as_of: date) -> "DashboardStatsResponseDTO":
        counts = {status.value: totals.counts_by_status.get(status.value, 0) for status in InvoiceStatus}
        return cls(
            total_customers=total_customers,
            total_invoices=sum(counts.values()),
            counts_by_status=counts,
            total_revenue=totals.total_revenue,
            outstanding_amount=totals.outstanding_amount,
            overdue_count=totals.overdue_count,
            overdue_amount=totals.overdue_amount,
            as_of=as_of
        )
