"""
Payment DTOs for the application layer.
"""

from typing import Dict, List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
from pydantic import Field, field_validator, model_validator

from invoiceme.domain.models.base import ValidationError as DomainValidationError
from invoiceme.domain.models.payment import Payment, PaymentMethod, parse_payment_method
from invoiceme.domain.repositories.payment_repository import PaymentStatistics
from .base_dto import BaseDTO, RequestDTO, ResponseDTO, ListRequestDTO, NotesMixin


class RecordPaymentRequestDTO(RequestDTO, NotesMixin):
    """DTO for recording a payment against an invoice."""

    invoice_id: UUID = Field(description="Invoice ID")
    payment_date: date = Field(description="Date the payment was received")
    amount: Decimal = Field(gt=0, decimal_places=2, description="Payment amount")
    payment_method: PaymentMethod = Field(description="Payment method")
    reference: Optional[str] = Field(default=None, max_length=255, description="Transaction or check reference")
    created_by: str = Field(min_length=1, max_length=255, description="User recording the payment")
    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Client supplied key; replays return the original payment"
    )

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_method(cls, v):
        try:
            return parse_payment_method(v)
        except DomainValidationError as exc:
            raise ValueError(exc.message)


class GetPaymentRequestDTO(RequestDTO):
    payment_id: UUID


class ListPaymentsByInvoiceRequestDTO(RequestDTO):
    invoice_id: UUID


class ListPaymentHistoryRequestDTO(ListRequestDTO):
    """DTO for the payment history across invoices. Date bounds are inclusive."""

    customer_id: Optional[UUID] = Field(default=None, description="Filter by the invoice's customer")
    start_date: Optional[date] = Field(default=None, description="Earliest payment date")
    end_date: Optional[date] = Field(default=None, description="Latest payment date")
    payment_method: Optional[PaymentMethod] = Field(default=None, description="Filter by payment method")

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_method(cls, v):
        if v is None:
            return v
        try:
            return parse_payment_method(v)
        except DomainValidationError as exc:
            raise ValueError(exc.message)

    @model_validator(mode="after")
    def validate_dates(self) -> "ListPaymentHistoryRequestDTO":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class PaymentStatisticsRequestDTO(RequestDTO):
    as_of: Optional[date] = Field(default=None, description="Reference date for the today/month/year windows")


class PaymentResponseDTO(ResponseDTO, NotesMixin):
    """DTO for payment responses."""

    invoice_id: UUID
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    payment_method_display: str
    reference: Optional[str] = None
    created_by: str
    idempotency_key: Optional[str] = None

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentResponseDTO":
        return cls(
            id=payment.id,
            created_at=payment.created_at,
            invoice_id=payment.invoice_id,
            payment_date=payment.payment_date,
            amount=payment.amount,
            payment_method=payment.method,
            payment_method_display=payment.method.display_name,
            reference=payment.reference,
            notes=payment.notes,
            created_by=payment.created_by,
            idempotency_key=payment.idempotency_key
        )


class RecordPaymentResponseDTO(BaseDTO):
    """Recorded payment together with the invoice state it produced."""

    payment: PaymentResponseDTO
    invoice_id: UUID
    invoice_number: str
    new_balance: Decimal
    new_status: str
    replayed: bool = Field(default=False, description="True when an earlier payment with the same key was returned")


class PaymentListResponseDTO(BaseDTO):
    invoice_id: UUID
    items: List[PaymentResponseDTO]
    total_paid: Decimal


class PaymentStatisticsResponseDTO(BaseDTO):
    """Payment totals by window and method."""

    total_amount: Decimal
    total_today: Decimal
    total_this_month: Decimal
    total_this_year: Decimal
    payment_count: int
    by_method: Dict[str, Decimal]
    as_of: date

    @classmethod
    def from_statistics(cls, stats: PaymentStatistics, as_of: date) -> "PaymentStatisticsResponseDTO":
        return cls(
            total_amount=stats.total_amount,
            total_today=stats.total_today,
            total_this_month=stats.total_this_month,
            total_this_year=stats.total_this_year,
            payment_count=stats.payment_count,
            by_method={method.value: stats.by_method.get(method.value, Decimal("0.00")) for method in PaymentMethod},
            as_of=as_of
        )
