"""
Unit tests for invoice use cases.
"""

import pytest
import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from invoiceme.application.dto.invoice_dto import (
    AddLineItemRequestDTO,
    CreateInvoiceRequestDTO,
    DashboardStatsRequestDTO,
    GetInvoiceRequestDTO,
    LineItemRequestDTO,
    ListInvoicesRequestDTO,
    RemoveLineItemRequestDTO,
    SendInvoiceRequestDTO,
    UpdateInvoiceRequestDTO
)
from invoiceme.application.use_cases.invoice_use_cases import (
    AddLineItemUseCase,
    CreateInvoiceUseCase,
    GetDashboardStatsUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    RemoveLineItemUseCase,
    SendInvoiceUseCase,
    UpdateInvoiceUseCase
)
from invoiceme.domain.models.customer import Customer
from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.repositories.invoice_repository import DashboardTotals
from invoiceme.domain.services.clock import FixedClock


def consulting_request() -> LineItemRequestDTO:
    return LineItemRequestDTO(
        description="Consulting",
        quantity=40,
        unit_price=Decimal("100.00"),
        discount_percent=Decimal("10"),
        tax_rate=Decimal("8")
    )


def draft_invoice(with_items: bool = True) -> Invoice:
    invoice = Invoice.create(
        customer_id=uuid.uuid4(),
        issue_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        payment_terms="Net 30",
        invoice_number="INV-2024-0001"
    )
    if with_items:
        invoice.add_line_item(consulting_request().to_domain())
    invoice.pull_events()
    invoice.version = 1
    return invoice


async def return_saved(aggregate):
    return aggregate


class TestCreateInvoiceUseCase:
    """Test cases for CreateInvoiceUseCase."""

    def setup_method(self):
        self.invoice_repository = AsyncMock()
        self.invoice_repository.save.side_effect = return_saved
        self.customer_repository = AsyncMock()
        self.customer = Customer.create(name="Acme", email="billing@acme.example")
        self.customer_repository.find_by_id.return_value = self.customer
        self.number_generator = AsyncMock()
        self.number_generator.generate_next_invoice_number.return_value = "INV-2024-0007"
        self.unit_of_work = AsyncMock()
        self.dispatcher = AsyncMock()
        self.use_case = CreateInvoiceUseCase(
            self.invoice_repository,
            self.customer_repository,
            self.number_generator,
            self.unit_of_work,
            self.dispatcher
        )

    def request(self, **overrides) -> CreateInvoiceRequestDTO:
        params = {
            "customer_id": self.customer.id,
            "issue_date": date(2024, 3, 1),
            "due_date": date(2024, 3, 31),
            "line_items": [consulting_request()],
        }
        params.update(overrides)
        return CreateInvoiceRequestDTO(**params)

    @pytest.mark.asyncio
    async def test_create_invoice(self):
        result = await self.use_case.execute(self.request(notes="Thanks"))

        assert result.success is True
        assert result.data.invoice_number == "INV-2024-0007"
        assert result.data.status == InvoiceStatus.DRAFT
        assert result.data.payment_terms == "Net 30"
        assert result.data.total_amount == Decimal("3888.00")
        assert result.data.balance == Decimal("3888.00")
        assert result.data.line_items[0].tax_amount == Decimal("288.00")
        self.unit_of_work.commit.assert_awaited_once()

        published = self.dispatcher.dispatch_all.await_args.args[0]
        assert [event.event_type for event in published] == ["InvoiceCreated", "LineItemAdded"]

    @pytest.mark.asyncio
    async def test_unknown_customer(self):
        self.customer_repository.find_by_id.return_value = None

        result = await self.use_case.execute(self.request())

        assert result.success is False
        assert result.error_code == "ENTITY_NOT_FOUND"
        self.number_generator.generate_next_invoice_number.assert_not_awaited()
        self.unit_of_work.rollback.assert_awaited_once()
        self.dispatcher.dispatch_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deleted_customer(self):
        self.customer.delete()

        result = await self.use_case.execute(self.request())

        assert result.success is False
        assert result.error_code == "BUSINESS_RULE_VIOLATION"
        self.invoice_repository.save.assert_not_awaited()

    def test_line_items_required(self):
        with pytest.raises(ValueError):
            self.request(line_items=[])

    def test_due_date_before_issue_date(self):
        with pytest.raises(ValueError):
            self.request(due_date=date(2024, 2, 1))


class TestEditInvoiceUseCases:
    """Test cases for the Draft-only edit use cases."""

    def setup_method(self):
        self.invoice = draft_invoice()
        self.invoice_repository = AsyncMock()
        self.invoice_repository.find_by_id.return_value = self.invoice
        self.invoice_repository.save.side_effect = return_saved
        self.customer_repository = AsyncMock()
        self.unit_of_work = AsyncMock()

    @pytest.mark.asyncio
    async def test_add_line_item(self):
        use_case = AddLineItemUseCase(self.invoice_repository, self.unit_of_work)
        line_item = LineItemRequestDTO(description="Hosting", quantity=1, unit_price=Decimal("12.00"))

        result = await use_case.execute(AddLineItemRequestDTO(invoice_id=self.invoice.id, line_item=line_item))

        assert result.success is True
        assert len(result.data.line_items) == 2
        assert result.data.total_amount == Decimal("3900.00")

    @pytest.mark.asyncio
    async def test_add_line_item_to_sent_invoice(self):
        self.invoice.mark_as_sent()
        use_case = AddLineItemUseCase(self.invoice_repository, self.unit_of_work)
        line_item = LineItemRequestDTO(description="Hosting", quantity=1, unit_price=Decimal("12.00"))

        result = await use_case.execute(AddLineItemRequestDTO(invoice_id=self.invoice.id, line_item=line_item))

        assert result.success is False
        assert result.error_code == "INVOICE_IMMUTABLE"
        assert result.details["current_status"] == "Sent"
        self.invoice_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_line_item(self):
        item_id = self.invoice.line_items[0].id
        use_case = RemoveLineItemUseCase(self.invoice_repository, self.unit_of_work)

        result = await use_case.execute(RemoveLineItemRequestDTO(invoice_id=self.invoice.id, line_item_id=item_id))

        assert result.success is True
        assert result.data.line_items == []
        assert result.data.total_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_update_replaces_line_items(self):
        use_case = UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository, self.unit_of_work)
        request = UpdateInvoiceRequestDTO(
            invoice_id=self.invoice.id,
            version=1,
            payment_terms="Net 15",
            line_items=[LineItemRequestDTO(description="Audit", quantity=2, unit_price=Decimal("50.00"))]
        )

        result = await use_case.execute(request)

        assert result.success is True
        assert result.data.payment_terms == "Net 15"
        assert [item.description for item in result.data.line_items] == ["Audit"]
        assert result.data.total_amount == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_add_line_item_with_overflowing_quantity(self):
        use_case = AddLineItemUseCase(self.invoice_repository, self.unit_of_work)
        line_item = LineItemRequestDTO(description="Bulk", quantity=10 ** 30, unit_price=Decimal("1.00"))

        result = await use_case.execute(AddLineItemRequestDTO(invoice_id=self.invoice.id, line_item=line_item))

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert result.details["field"] == "quantity"
        self.invoice_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_clears_notes_with_explicit_null(self):
        self.invoice.notes = "Call before paying"
        use_case = UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository, self.unit_of_work)

        result = await use_case.execute(UpdateInvoiceRequestDTO(invoice_id=self.invoice.id, version=1, notes=None))

        assert result.success is True
        assert result.data.notes is None

    @pytest.mark.asyncio
    async def test_update_without_notes_keeps_them(self):
        self.invoice.notes = "Call before paying"
        use_case = UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository, self.unit_of_work)

        result = await use_case.execute(
            UpdateInvoiceRequestDTO(invoice_id=self.invoice.id, version=1, payment_terms="Net 15")
        )

        assert result.success is True
        assert result.data.notes == "Call before paying"

    @pytest.mark.asyncio
    async def test_update_with_stale_version(self):
        use_case = UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository, self.unit_of_work)

        result = await use_case.execute(UpdateInvoiceRequestDTO(invoice_id=self.invoice.id, version=2, notes="x"))

        assert result.success is False
        assert result.error_code == "CONCURRENCY_CONFLICT"
        assert result.details["expected_version"] == 2
        assert result.details["actual_version"] == 1

    @pytest.mark.asyncio
    async def test_update_moves_to_deleted_customer(self):
        other = Customer.create(name="Gone", email="gone@example.com")
        other.delete()
        self.customer_repository.find_by_id.return_value = other
        use_case = UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository, self.unit_of_work)

        result = await use_case.execute(
            UpdateInvoiceRequestDTO(invoice_id=self.invoice.id, version=1, customer_id=other.id)
        )

        assert result.success is False
        assert result.error_code == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    async def test_send_invoice(self):
        dispatcher = AsyncMock()
        use_case = SendInvoiceUseCase(self.invoice_repository, self.unit_of_work, dispatcher)

        result = await use_case.execute(SendInvoiceRequestDTO(invoice_id=self.invoice.id))

        assert result.success is True
        assert result.data.status == InvoiceStatus.SENT
        published = dispatcher.dispatch_all.await_args.args[0]
        assert [event.event_type for event in published] == ["InvoiceSent"]

    @pytest.mark.asyncio
    async def test_send_invoice_without_line_items(self):
        self.invoice_repository.find_by_id.return_value = draft_invoice(with_items=False)
        use_case = SendInvoiceUseCase(self.invoice_repository, self.unit_of_work)

        result = await use_case.execute(SendInvoiceRequestDTO(invoice_id=self.invoice.id))

        assert result.success is False
        assert result.error_code == "INVALID_STATE"
        assert result.details["current_status"] == "Draft"

    @pytest.mark.asyncio
    async def test_missing_invoice(self):
        self.invoice_repository.find_by_id.return_value = None
        use_case = SendInvoiceUseCase(self.invoice_repository, self.unit_of_work)

        result = await use_case.execute(SendInvoiceRequestDTO(invoice_id=uuid.uuid4()))

        assert result.success is False
        assert result.error_code == "ENTITY_NOT_FOUND"


class TestInvoiceQueries:
    """Test cases for invoice queries."""

    def setup_method(self):
        self.invoice_repository = AsyncMock()
        self.customer_repository = AsyncMock()

    @pytest.mark.asyncio
    async def test_get_invoice(self):
        invoice = draft_invoice()
        self.invoice_repository.find_by_id.return_value = invoice

        result = await GetInvoiceUseCase(self.invoice_repository).execute(GetInvoiceRequestDTO(invoice_id=invoice.id))

        assert result.success is True
        assert result.data.id == invoice.id
        assert result.data.version == 1

    @pytest.mark.asyncio
    async def test_list_invoices_uses_default_page_size(self):
        invoices = [draft_invoice(), draft_invoice()]
        self.invoice_repository.list.return_value = invoices
        self.invoice_repository.count.return_value = 7
        use_case = ListInvoicesUseCase(self.invoice_repository, default_page_size=2, max_page_size=10)

        result = await use_case.execute(ListInvoicesRequestDTO(page=2, status=InvoiceStatus.DRAFT))

        assert result.success is True
        assert len(result.data.items) == 2
        assert result.data.items[0].line_item_count == 1
        assert result.data.total == 7
        assert result.data.page_size == 2
        assert result.data.total_pages == 4
        self.invoice_repository.list.assert_awaited_once_with(
            status=InvoiceStatus.DRAFT,
            customer_id=None,
            start_date=None,
            end_date=None,
            sort_by="issue_date",
            descending=True,
            offset=2,
            limit=2
        )

    @pytest.mark.asyncio
    async def test_list_invoices_with_date_range_and_sort(self):
        self.invoice_repository.list.return_value = []
        self.invoice_repository.count.return_value = 0
        use_case = ListInvoicesUseCase(self.invoice_repository)

        result = await use_case.execute(ListInvoicesRequestDTO(
            start_date=date(2024, 1, 1), end_date=date(2024, 3, 31), sort_by="due_date", sort_order="asc"
        ))

        assert result.success is True
        self.invoice_repository.list.assert_awaited_once_with(
            status=None,
            customer_id=None,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 3, 31),
            sort_by="due_date",
            descending=False,
            offset=0,
            limit=20
        )
        self.invoice_repository.count.assert_awaited_once_with(
            status=None, customer_id=None, start_date=date(2024, 1, 1), end_date=date(2024, 3, 31)
        )

    @pytest.mark.parametrize("overrides", [
        {"sort_by": "notes"},
        {"sort_order": "sideways"},
        {"start_date": date(2024, 3, 31), "end_date": date(2024, 3, 1)},
    ])
    def test_list_invoices_rejects_bad_sort_and_range(self, overrides):
        with pytest.raises(ValueError):
            ListInvoicesRequestDTO(**overrides)

    @pytest.mark.asyncio
    async def test_list_invoices_page_size_limit(self):
        use_case = ListInvoicesUseCase(self.invoice_repository, max_page_size=10)

        result = await use_case.execute(ListInvoicesRequestDTO(page_size=11))

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_dashboard_stats(self):
        self.invoice_repository.dashboard_totals.return_value = DashboardTotals(
            counts_by_status={"Draft": 2, "Sent": 3},
            total_revenue=Decimal("1500.00"),
            outstanding_amount=Decimal("700.00"),
            overdue_count=1,
            overdue_amount=Decimal("200.00")
        )
        self.customer_repository.count_active.return_value = 4
        clock = FixedClock.on(date(2024, 6, 1))
        use_case = GetDashboardStatsUseCase(self.invoice_repository, self.customer_repository, clock)

        result = await use_case.execute(DashboardStatsRequestDTO())

        assert result.success is True
        assert result.data.total_customers == 4
        assert result.data.total_invoices == 5
        assert result.data.counts_by_status == {"Draft": 2, "Sent": 3, "Paid": 0}
        assert result.data.outstanding_amount == Decimal("700.00")
        assert result.data.as_of == date(2024, 6, 1)
        self.invoice_repository.dashboard_totals.assert_awaited_once_with(date(2024, 6, 1))
