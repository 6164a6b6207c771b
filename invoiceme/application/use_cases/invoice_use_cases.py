"""
Invoice use cases for the application layer.
Implements the invoice lifecycle: create, edit while Draft, send, query.
"""

from typing import Optional
from uuid import UUID
import logging

from invoiceme.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase
)
from invoiceme.application.dto.base_dto import ListResponseDTO
from invoiceme.application.dto.invoice_dto import (
    CreateInvoiceRequestDTO, UpdateInvoiceRequestDTO, AddLineItemRequestDTO,
    RemoveLineItemRequestDTO, SendInvoiceRequestDTO, GetInvoiceRequestDTO,
    ListInvoicesRequestDTO, DashboardStatsRequestDTO, InvoiceResponseDTO,
    InvoiceSummaryResponseDTO, DashboardStatsResponseDTO
)
from invoiceme.domain.events import EventDispatcher
from invoiceme.domain.models.base import (
    BusinessRuleViolation, ConcurrencyError, EntityNotFoundError
)
from invoiceme.domain.models.customer import Customer
from invoiceme.domain.models.invoice import Invoice
from invoiceme.domain.repositories.customer_repository import CustomerRepository
from invoiceme.domain.repositories.invoice_repository import InvoiceRepository
from invoiceme.domain.repositories.unit_of_work import UnitOfWork
from invoiceme.domain.services.clock import Clock
from invoiceme.domain.services.numbering_service import InvoiceNumberGenerator


logger = logging.getLogger(__name__)


async def load_invoice(invoice_repository: InvoiceRepository, invoice_id: UUID) -> Invoice:
    invoice = await invoice_repository.find_by_id(invoice_id)
    if not invoice:
        raise EntityNotFoundError("Invoice", invoice_id)
    return invoice


async def load_billable_customer(customer_repository: CustomerRepository, customer_id: UUID) -> Customer:
    """Customer that may receive new invoices: it must exist and not be deleted."""
    customer = await customer_repository.find_by_id(customer_id)
    if not customer:
        raise EntityNotFoundError("Customer", customer_id)
    if customer.is_deleted:
        raise BusinessRuleViolation(
            f"Customer {customer_id} has been deleted and cannot be invoiced",
            details={"customer_id": customer_id}
        )
    return customer


class CreateInvoiceUseCase(CommandUseCase[CreateInvoiceRequestDTO, InvoiceResponseDTO]):
    """Use case for creating a new Draft invoice with its line items."""

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        customer_repository: CustomerRepository,
        number_generator: InvoiceNumberGenerator,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None,
        default_payment_terms: str = "Net 30"
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository
        self.number_generator = number_generator
        self.default_payment_terms = default_payment_terms

    async def _execute_command_logic(self, request: CreateInvoiceRequestDTO) -> InvoiceResponseDTO:
        await load_billable_customer(self.customer_repository, request.customer_id)

        invoice_number = await self.number_generator.generate_next_invoice_number()

        invoice = Invoice.create(
            customer_id=request.customer_id,
            issue_date=request.issue_date,
            due_date=request.due_date,
            payment_terms=request.payment_terms or self.default_payment_terms,
            invoice_number=invoice_number,
            notes=request.notes
        )

        for item_request in request.line_items:
            invoice.add_line_item(item_request.to_domain())

        saved_invoice = await self.invoice_repository.save(invoice)
        self._collect_events(saved_invoice)

        logger.info(
            f"Created invoice {saved_invoice.invoice_number} for customer {saved_invoice.customer_id} "
            f"totalling {saved_invoice.total_amount}"
        )

        return InvoiceResponseDTO.from_domain(saved_invoice)


class UpdateInvoiceUseCase(CommandUseCase[UpdateInvoiceRequestDTO, InvoiceResponseDTO]):
    """
    Use case for editing a Draft invoice.
    The caller passes the version it last read; a stale version is rejected.
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        customer_repository: CustomerRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository

    async def _execute_command_logic(self, request: UpdateInvoiceRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.invoice_repository, request.invoice_id)

        if invoice.version != request.version:
            raise ConcurrencyError("Invoice", invoice.id, request.version, invoice.version)

        if request.customer_id is not None and request.customer_id != invoice.customer_id:
            await load_billable_customer(self.customer_repository, request.customer_id)

        invoice.update_details(
            customer_id=request.customer_id,
            issue_date=request.issue_date,
            due_date=request.due_date,
            payment_terms=request.payment_terms
        )
        # An explicit null clears the notes; an omitted field keeps them
        if "notes" in request.model_fields_set:
            invoice.set_notes(request.notes)

        if request.line_items is not None:
            invoice.clear_line_items()
            for item_request in request.line_items:
                invoice.add_line_item(item_request.to_domain())

        saved_invoice = await self.invoice_repository.save(invoice)
        self._collect_events(saved_invoice)

        return InvoiceResponseDTO.from_domain(saved_invoice)


class AddLineItemUseCase(CommandUseCase[AddLineItemRequestDTO, InvoiceResponseDTO]):
    """Use case for appending a line item to a Draft invoice."""

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository

    async def _execute_command_logic(self, request: AddLineItemRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.invoice_repository, request.invoice_id)
        invoice.add_line_item(request.line_item.to_domain())

        saved_invoice = await self.invoice_repository.save(invoice)
        self._collect_events(saved_invoice)

        return InvoiceResponseDTO.from_domain(saved_invoice)


class RemoveLineItemUseCase(CommandUseCase[RemoveLineItemRequestDTO, InvoiceResponseDTO]):
    """Use case for removing a line item from a Draft invoice."""

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository

    async def _execute_command_logic(self, request: RemoveLineItemRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.invoice_repository, request.invoice_id)
        invoice.remove_line_item(request.line_item_id)

        saved_invoice = await self.invoice_repository.save(invoice)
        self._collect_events(saved_invoice)

        return InvoiceResponseDTO.from_domain(saved_invoice)


class SendInvoiceUseCase(CommandUseCase[SendInvoiceRequestDTO, InvoiceResponseDTO]):
    """Use case for moving an invoice from Draft to Sent."""

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.invoice_repository = invoice_repository

    async def _execute_command_logic(self, request: SendInvoiceRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.invoice_repository, request.invoice_id)
        invoice.mark_as_sent()

        saved_invoice = await self.invoice_repository.save(invoice)
        self._collect_events(saved_invoice)

        logger.info(f"Invoice {saved_invoice.invoice_number} sent")

        return InvoiceResponseDTO.from_domain(saved_invoice)


class GetInvoiceUseCase(QueryUseCase[GetInvoiceRequestDTO, InvoiceResponseDTO]):
    """Use case for getting an invoice by ID."""

    def __init__(self, invoice_repository: InvoiceRepository):
        super().__init__()
        self.invoice_repository = invoice_repository

    async def _execute_business_logic(self, request: GetInvoiceRequestDTO) -> InvoiceResponseDTO:
        invoice = await load_invoice(self.invoice_repository, request.invoice_id)
        return InvoiceResponseDTO.from_domain(invoice)


class ListInvoicesUseCase(PaginatedQueryUseCase[ListInvoicesRequestDTO, ListResponseDTO[InvoiceSummaryResponseDTO]]):
    """Use case for listing invoices with optional status, customer and issue date filters."""

    def __init__(self, invoice_repository: InvoiceRepository, default_page_size: int = 20, max_page_size: int = 100):
        super().__init__(default_page_size, max_page_size)
        self.invoice_repository = invoice_repository

    async def _execute_business_logic(
        self,
        request: ListInvoicesRequestDTO
    ) -> ListResponseDTO[InvoiceSummaryResponseDTO]:
        page_size = self.page_size_for(request)
        offset = (request.page - 1) * page_size

        filters = {
            "status": request.status,
            "customer_id": request.customer_id,
            "start_date": request.start_date,
            "end_date": request.end_date,
        }

        invoices = await self.invoice_repository.list(
            sort_by=request.sort_by,
            descending=request.sort_order == "desc",
            offset=offset,
            limit=page_size,
            **filters
        )
        total = await self.invoice_repository.count(**filters)

        return ListResponseDTO[InvoiceSummaryResponseDTO].create(
            items=[InvoiceSummaryResponseDTO.from_domain(invoice) for invoice in invoices],
            total=total,
            page=request.page,
            page_size=page_size
        )


class GetDashboardStatsUseCase(QueryUseCase[DashboardStatsRequestDTO, DashboardStatsResponseDTO]):
    """Use case for the dashboard headline numbers."""

    def __init__(self, invoice_repository: InvoiceRepository, customer_repository: CustomerRepository, clock: Clock):
        super().__init__()
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository
        self.clock = clock

    async def _execute_business_logic(self, request: DashboardStatsRequestDTO) -> DashboardStatsResponseDTO:
        as_of = request.as_of or self.clock.today()
        totals = await self.invoice_repository.dashboard_totals(as_of)
        total_customers = await self.customer_repository.count_active()
        return DashboardStatsResponseDTO.from_totals(totals, total_customers, as_of)
