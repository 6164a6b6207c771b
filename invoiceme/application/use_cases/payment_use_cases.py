"""
Payment use cases for the application layer.
"""

from decimal import Decimal
from typing import Optional
import logging

from invoiceme.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase
)
from invoiceme.application.use_cases.invoice_use_cases import load_invoice
from invoiceme.application.dto.base_dto import ListResponseDTO
from invoiceme.application.dto.payment_dto import (
    RecordPaymentRequestDTO, GetPaymentRequestDTO, ListPaymentsByInvoiceRequestDTO, ListPaymentHistoryRequestDTO,
    PaymentStatisticsRequestDTO, PaymentResponseDTO, RecordPaymentResponseDTO,
    PaymentListResponseDTO, PaymentStatisticsResponseDTO
)
from invoiceme.domain.events import EventDispatcher
from invoiceme.domain.models.base import EntityNotFoundError
from invoiceme.domain.models.invoice import Invoice
from invoiceme.domain.models.payment import Payment
from invoiceme.domain.repositories.invoice_repository import InvoiceRepository
from invoiceme.domain.repositories.payment_repository import PaymentRepository
from invoiceme.domain.repositories.unit_of_work import UnitOfWork
from invoiceme.domain.services.clock import Clock
from invoiceme.domain.services.payment_service import PaymentService


logger = logging.getLogger(__name__)


def _record_response(payment: Payment, invoice: Invoice, replayed: bool = False) -> RecordPaymentResponseDTO:
    return RecordPaymentResponseDTO(
        payment=PaymentResponseDTO.from_domain(payment),
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        new_balance=invoice.balance,
        new_status=invoice.status.value,
        replayed=replayed
    )


class RecordPaymentUseCase(CommandUseCase[RecordPaymentRequestDTO, RecordPaymentResponseDTO]):
    """
    Use case for recording a payment against a sent invoice.

    Idempotent on ``(invoice_id, idempotency_key)``: when a payment with the
    same key was already recorded for the invoice it is returned as is and
    nothing is applied or published again.
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        payment_repository: PaymentRepository,
        payment_service: PaymentService,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository
        self.payment_repository = payment_repository
        self.payment_service = payment_service

    async def _execute_command_logic(self, request: RecordPaymentRequestDTO) -> RecordPaymentResponseDTO:
        if request.idempotency_key:
            existing = await self.payment_repository.find_by_idempotency_key(
                request.invoice_id, request.idempotency_key
            )
            if existing:
                logger.info(
                    f"Payment with idempotency key {request.idempotency_key} already recorded "
                    f"for invoice {request.invoice_id}; returning payment {existing.id}"
                )
                invoice = await load_invoice(self.invoice_repository, existing.invoice_id)
                return _record_response(existing, invoice, replayed=True)

        invoice = await load_invoice(self.invoice_repository, request.invoice_id)

        result = self.payment_service.record_payment(
            invoice=invoice,
            payment_date=request.payment_date,
            amount=request.amount,
            method=request.payment_method,
            created_by=request.created_by,
            reference=request.reference,
            notes=request.notes,
            idempotency_key=request.idempotency_key
        )

        saved_invoice = await self.invoice_repository.save(result.invoice)
        saved_payment = await self.payment_repository.save(result.payment)
        self.events.extend(result.events)

        return _record_response(saved_payment, saved_invoice)


class GetPaymentUseCase(QueryUseCase[GetPaymentRequestDTO, PaymentResponseDTO]):
    """Use case for getting a payment by ID."""

    def __init__(self, payment_repository: PaymentRepository):
        super().__init__()
        self.payment_repository = payment_repository

    async def _execute_business_logic(self, request: GetPaymentRequestDTO) -> PaymentResponseDTO:
        payment = await self.payment_repository.find_by_id(request.payment_id)
        if not payment:
            raise EntityNotFoundError("Payment", request.payment_id)
        return PaymentResponseDTO.from_domain(payment)


class ListPaymentsByInvoiceUseCase(QueryUseCase[ListPaymentsByInvoiceRequestDTO, PaymentListResponseDTO]):
    """Use case for the payment history of one invoice."""

    def __init__(self, invoice_repository: InvoiceRepository, payment_repository: PaymentRepository):
        super().__init__()
        self.invoice_repository = invoice_repository
        self.payment_repository = payment_repository

    async def _execute_business_logic(self, request: ListPaymentsByInvoiceRequestDTO) -> PaymentListResponseDTO:
        await load_invoice(self.invoice_repository, request.invoice_id)
        payments = await self.payment_repository.find_by_invoice_id(request.invoice_id)

        return PaymentListResponseDTO(
            invoice_id=request.invoice_id,
            items=[PaymentResponseDTO.from_domain(payment) for payment in payments],
            total_paid=sum((payment.amount for payment in payments), Decimal("0.00"))
        )


class ListPaymentHistoryUseCase(
    PaginatedQueryUseCase[ListPaymentHistoryRequestDTO, ListResponseDTO[PaymentResponseDTO]]
):
    """Use case for the payment history across invoices, newest first."""

    def __init__(self, payment_repository: PaymentRepository, default_page_size: int = 20, max_page_size: int = 100):
        super().__init__(default_page_size, max_page_size)
        self.payment_repository = payment_repository

    async def _execute_business_logic(
        self,
        request: ListPaymentHistoryRequestDTO
    ) -> ListResponseDTO[PaymentResponseDTO]:
        page_size = self.page_size_for(request)
        filters = {
            "customer_id": request.customer_id,
            "start_date": request.start_date,
            "end_date": request.end_date,
            "method": request.payment_method,
        }

        payments = await self.payment_repository.list(
            offset=(request.page - 1) * page_size, limit=page_size, **filters
        )
        total = await self.payment_repository.count(**filters)

        return ListResponseDTO[PaymentResponseDTO].create(
            items=[PaymentResponseDTO.from_domain(payment) for payment in payments],
            total=total,
            page=request.page,
            page_size=page_size
        )


class GetPaymentStatisticsUseCase(QueryUseCase[PaymentStatisticsRequestDTO, PaymentStatisticsResponseDTO]):
    """Use case for payment totals."""

    def __init__(self, payment_repository: PaymentRepository, clock: Clock):
        super().__init__()
        self.payment_repository = payment_repository
        self.clock = clock

    async def _execute_business_logic(self, request: PaymentStatisticsRequestDTO) -> PaymentStatisticsResponseDTO:
        as_of = request.as_of or self.clock.today()
        stats = await self.payment_repository.statistics(as_of)
        return PaymentStatisticsResponseDTO.from_statistics(stats, as_of)
