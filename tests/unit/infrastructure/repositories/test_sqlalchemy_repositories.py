"""
Tests for the SQLAlchemy repositories against an in-memory SQLite database.
"""

import pytest
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from invoiceme.domain.models.base import ConcurrencyError, DuplicateEntityError, ValidationError
from invoiceme.domain.models.customer import Customer
from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.line_item import LineItem
from invoiceme.domain.models.payment import Payment, PaymentMethod
from invoiceme.infrastructure.db import (
    SQLAlchemyUnitOfWork,
    build_engine,
    build_session_factory,
    create_all_tables
)
from invoiceme.infrastructure.repositories import (
    SQLAlchemyCustomerRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemyInvoiceSequenceRepository,
    SQLAlchemyPaymentRepository
)


def build_invoice(customer_id, number, *prices, issue_date=date(2024, 3, 1), due_date=date(2024, 3, 31)) -> Invoice:
    invoice = Invoice.create(
        customer_id=customer_id,
        issue_date=issue_date,
        due_date=due_date,
        payment_terms="Net 30",
        invoice_number=number
    )
    for index, price in enumerate(prices):
        invoice.add_line_item(LineItem.create(description=f"Item {index}", quantity=1, unit_price=Decimal(price)))
    return invoice


class RepositoryTestCase:
    """Fresh in-memory database per test."""

    def setup_method(self):
        self.engine = build_engine("sqlite://")
        create_all_tables(self.engine)
        self.session = build_session_factory(self.engine)()
        self.customers = SQLAlchemyCustomerRepository(self.session)
        self.invoices = SQLAlchemyInvoiceRepository(self.session)
        self.payments = SQLAlchemyPaymentRepository(self.session)
        self.sequences = SQLAlchemyInvoiceSequenceRepository(self.session)

    def teardown_method(self):
        self.session.close()
        self.engine.dispose()

    def reload(self):
        """Commit and forget loaded rows so the next read comes from the database."""
        self.session.commit()
        self.session.expunge_all()


class TestInvoiceRepository(RepositoryTestCase):
    """Test cases for SQLAlchemyInvoiceRepository."""

    @pytest.mark.asyncio
    async def test_save_and_find(self):
        invoice = build_invoice(uuid.uuid4(), "INV-2024-0001", "100.00", "25.50")
        invoice.add_line_item(LineItem.create(
            description="Consulting", quantity=40, unit_price=Decimal("100.00"),
            discount_percent=Decimal("10"), tax_rate=Decimal("8.25")
        ))

        saved = await self.invoices.save(invoice)
        assert saved.version == 1
        self.reload()

        found = await self.invoices.find_by_id(invoice.id)

        assert found.invoice_number == "INV-2024-0001"
        assert found.status == InvoiceStatus.DRAFT
        assert [item.id for item in found.line_items] == [item.id for item in invoice.line_items]
        assert found.line_items[2].tax_rate == Decimal("8.25")
        assert found.total_amount == invoice.total_amount
        assert found.balance == invoice.total_amount
        assert found.created_at.tzinfo is not None
        assert found.version == 1

    @pytest.mark.asyncio
    async def test_find_missing(self):
        assert await self.invoices.find_by_id(uuid.uuid4()) is None
        assert await self.invoices.find_by_invoice_number("INV-1999-0001") is None

    @pytest.mark.asyncio
    async def test_update_bumps_version(self):
        await self.invoices.save(build_invoice(uuid.uuid4(), "INV-2024-0001", "10.00"))
        self.reload()

        invoice = await self.invoices.find_by_invoice_number("INV-2024-0001")
        invoice.mark_as_sent()
        saved = await self.invoices.save(invoice)
        self.reload()

        assert saved.version == 2
        found = await self.invoices.find_by_invoice_number("INV-2024-0001")
        assert found.status == InvoiceStatus.SENT
        assert found.version == 2

    @pytest.mark.asyncio
    async def test_line_item_changes_are_persisted(self):
        invoice = build_invoice(uuid.uuid4(), "INV-2024-0001", "10.00", "20.00")
        await self.invoices.save(invoice)
        self.reload()

        loaded = await self.invoices.find_by_id(invoice.id)
        kept_id = loaded.line_items[1].id
        loaded.remove_line_item(loaded.line_items[0].id)
        added = loaded.add_line_item(LineItem.create(description="Extra", quantity=3, unit_price=Decimal("5.00")))
        await self.invoices.save(loaded)
        self.reload()

        found = await self.invoices.find_by_id(invoice.id)
        assert [item.id for item in found.line_items] == [kept_id, added.id]
        assert found.total_amount == Decimal("35.00")

    @pytest.mark.asyncio
    async def test_stale_copy_is_rejected(self):
        invoice = build_invoice(uuid.uuid4(), "INV-2024-0001", "10.00")
        await self.invoices.save(invoice)
        self.reload()

        first = await self.invoices.find_by_id(invoice.id)
        second = await self.invoices.find_by_id(invoice.id)

        first.set_notes("first writer")
        await self.invoices.save(first)

        second.set_notes("second writer")
        with pytest.raises(ConcurrencyError) as exc_info:
            await self.invoices.save(second)

        assert exc_info.value.details["expected_version"] == 1
        assert exc_info.value.details["actual_version"] == 2

    @pytest.mark.asyncio
    async def test_duplicate_invoice_number(self):
        await self.invoices.save(build_invoice(uuid.uuid4(), "INV-2024-0001", "10.00"))

        with pytest.raises(DuplicateEntityError):
            await self.invoices.save(build_invoice(uuid.uuid4(), "INV-2024-0001", "20.00"))

    @pytest.mark.asyncio
    async def test_list_and_count(self):
        customer_id = uuid.uuid4()
        first = build_invoice(customer_id, "INV-2024-0001", "10.00")
        second = build_invoice(customer_id, "INV-2024-0002", "20.00")
        second.mark_as_sent()
        other = build_invoice(uuid.uuid4(), "INV-2024-0003", "30.00")
        for invoice in (first, second, other):
            await self.invoices.save(invoice)
        self.reload()

        everything = await self.invoices.list()
        assert [i.invoice_number for i in everything] == ["INV-2024-0003", "INV-2024-0002", "INV-2024-0001"]

        drafts = await self.invoices.list(status=InvoiceStatus.DRAFT, customer_id=customer_id)
        assert [i.invoice_number for i in drafts] == ["INV-2024-0001"]

        page = await self.invoices.list(offset=1, limit=1)
        assert [i.invoice_number for i in page] == ["INV-2024-0002"]

        assert await self.invoices.count() == 3
        assert await self.invoices.count(customer_id=customer_id) == 2
        assert await self.invoices.count(status=InvoiceStatus.PAID) == 0

    @pytest.mark.asyncio
    async def test_list_by_issue_date_range_and_sort(self):
        customer_id = uuid.uuid4()
        for number, price, issue_date, due_date in [
            ("INV-2024-0001", "300.00", date(2024, 1, 10), date(2024, 4, 30)),
            ("INV-2024-0002", "100.00", date(2024, 2, 10), date(2024, 3, 10)),
            ("INV-2024-0003", "200.00", date(2024, 3, 10), date(2024, 4, 9)),
        ]:
            invoice = build_invoice(customer_id, number, price, issue_date=issue_date, due_date=due_date)
            await self.invoices.save(invoice)
        self.reload()

        newest_first = await self.invoices.list()
        assert [i.invoice_number for i in newest_first] == ["INV-2024-0003", "INV-2024-0002", "INV-2024-0001"]

        in_range = await self.invoices.list(start_date=date(2024, 2, 10), end_date=date(2024, 3, 10))
        assert [i.invoice_number for i in in_range] == ["INV-2024-0003", "INV-2024-0002"]
        assert await self.invoices.count(start_date=date(2024, 2, 11)) == 1
        assert await self.invoices.count(end_date=date(2024, 2, 9)) == 1

        by_due_date = await self.invoices.list(sort_by="due_date", descending=False)
        assert [i.invoice_number for i in by_due_date] == ["INV-2024-0002", "INV-2024-0003", "INV-2024-0001"]

        by_total = await self.invoices.list(sort_by="total_amount")
        assert [i.invoice_number for i in by_total] == ["INV-2024-0001", "INV-2024-0003", "INV-2024-0002"]

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_sort_field(self):
        with pytest.raises(ValidationError) as exc_info:
            await self.invoices.list(sort_by="notes")

        assert exc_info.value.field == "sort_by"

    async def _seed_dashboard(self):
        self.customer_a, self.customer_b, self.customer_c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

        draft = build_invoice(self.customer_a, "INV-2024-0001", "100.00")

        overdue = build_invoice(self.customer_a, "INV-2024-0002", "200.00", due_date=date(2024, 5, 1))
        overdue.mark_as_sent()
        overdue.apply_payment(Decimal("50.00"))

        current = build_invoice(self.customer_b, "INV-2024-0003", "250.00", due_date=date(2024, 7, 1))
        current.mark_as_sent()

        paid = build_invoice(self.customer_b, "INV-2024-0004", "400.00", due_date=date(2024, 4, 1))
        paid.mark_as_sent()
        paid.apply_payment(Decimal("400.00"))

        for invoice in (draft, overdue, current, paid):
            await self.invoices.save(invoice)
        self.reload()

    @pytest.mark.asyncio
    async def test_summarize_by_customers(self):
        await self._seed_dashboard()

        summaries = await self.invoices.summarize_by_customers(
            [self.customer_a, self.customer_b, self.customer_c]
        )

        assert summaries[self.customer_a].invoice_count == 2
        assert summaries[self.customer_a].outstanding_balance == Decimal("150.00")
        assert summaries[self.customer_b].invoice_count == 2
        assert summaries[self.customer_b].outstanding_balance == Decimal("250.00")
        assert summaries[self.customer_c].invoice_count == 0
        assert summaries[self.customer_c].outstanding_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_summarize_nothing(self):
        assert await self.invoices.summarize_by_customers([]) == {}

    @pytest.mark.asyncio
    async def test_dashboard_totals(self):
        await self._seed_dashboard()

        totals = await self.invoices.dashboard_totals(date(2024, 6, 1))

        assert totals.counts_by_status == {"Draft": 1, "Sent": 2, "Paid": 1}
        assert totals.total_revenue == Decimal("450.00")
        assert totals.outstanding_amount == Decimal("400.00")
        assert totals.overdue_count == 1
        assert totals.overdue_amount == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_dashboard_totals_empty(self):
        totals = await self.invoices.dashboard_totals(date(2024, 6, 1))

        assert totals.counts_by_status == {"Draft": 0, "Sent": 0, "Paid": 0}
        assert totals.total_revenue == Decimal("0")
        assert totals.overdue_count == 0


class TestInvoiceSequenceRepository(RepositoryTestCase):
    """Test cases for the per-year invoice counter."""

    @pytest.mark.asyncio
    async def test_sequence_increments(self):
        assert await self.sequences.next_sequence(2024) == 1
        assert await self.sequences.next_sequence(2024) == 2
        self.session.commit()
        assert await self.sequences.next_sequence(2024) == 3

    @pytest.mark.asyncio
    async def test_sequence_per_year(self):
        await self.sequences.next_sequence(2024)
        await self.sequences.next_sequence(2024)

        assert await self.sequences.next_sequence(2025) == 1
        assert await self.sequences.next_sequence(2024) == 3

    @pytest.mark.asyncio
    async def test_rolled_back_number_is_reused(self):
        assert await self.sequences.next_sequence(2024) == 1
        self.session.commit()

        assert await self.sequences.next_sequence(2024) == 2
        self.session.rollback()

        assert await self.sequences.next_sequence(2024) == 2


class TestPaymentRepository(RepositoryTestCase):
    """Test cases for SQLAlchemyPaymentRepository."""

    def payment(self, invoice_id, amount, payment_date, method=PaymentMethod.CASH, key=None):
        return Payment.create(
            invoice_id=invoice_id,
            payment_date=payment_date,
            amount=Decimal(amount),
            method=method,
            created_by="alice",
            today=date(2024, 12, 31),
            idempotency_key=key
        )

    @pytest.mark.asyncio
    async def test_save_and_find(self):
        invoice_id = uuid.uuid4()
        later = self.payment(invoice_id, "20.00", date(2024, 3, 10))
        earlier = self.payment(invoice_id, "10.00", date(2024, 3, 5), PaymentMethod.CHECK, key="abc")
        await self.payments.save(later)
        await self.payments.save(earlier)
        self.reload()

        found = await self.payments.find_by_id(earlier.id)
        assert found.amount == Decimal("10.00")
        assert found.method == PaymentMethod.CHECK
        assert found.created_at.tzinfo is not None

        history = await self.payments.find_by_invoice_id(invoice_id)
        assert [p.id for p in history] == [earlier.id, later.id]

        assert (await self.payments.find_by_idempotency_key(invoice_id, "abc")).id == earlier.id
        assert await self.payments.find_by_idempotency_key(invoice_id, "other") is None
        assert await self.payments.find_by_idempotency_key(uuid.uuid4(), "abc") is None

    @pytest.mark.asyncio
    async def test_duplicate_idempotency_key(self):
        invoice_id = uuid.uuid4()
        await self.payments.save(self.payment(invoice_id, "10.00", date(2024, 3, 5), key="abc"))

        with pytest.raises(DuplicateEntityError):
            await self.payments.save(self.payment(invoice_id, "10.00", date(2024, 3, 5), key="abc"))

    @pytest.mark.asyncio
    async def test_same_key_on_other_invoice(self):
        await self.payments.save(self.payment(uuid.uuid4(), "10.00", date(2024, 3, 5), key="abc"))
        await self.payments.save(self.payment(uuid.uuid4(), "10.00", date(2024, 3, 5), key="abc"))
        await self.payments.save(self.payment(uuid.uuid4(), "10.00", date(2024, 3, 5)))
        await self.payments.save(self.payment(uuid.uuid4(), "10.00", date(2024, 3, 5)))

    @pytest.mark.asyncio
    async def test_history_filters_and_order(self):
        acme, beta = uuid.uuid4(), uuid.uuid4()
        acme_invoice = build_invoice(acme, "INV-2024-0001", "500.00")
        beta_invoice = build_invoice(beta, "INV-2024-0002", "500.00")
        await self.invoices.save(acme_invoice)
        await self.invoices.save(beta_invoice)

        march_cash = self.payment(acme_invoice.id, "10.00", date(2024, 3, 5))
        april_check = self.payment(acme_invoice.id, "20.00", date(2024, 4, 1), PaymentMethod.CHECK)
        may_cash = self.payment(acme_invoice.id, "30.00", date(2024, 5, 20))
        beta_cash = self.payment(beta_invoice.id, "40.00", date(2024, 4, 15))
        for payment in (march_cash, april_check, may_cash, beta_cash):
            await self.payments.save(payment)
        self.reload()

        everything = await self.payments.list()
        assert [p.id for p in everything] == [may_cash.id, beta_cash.id, april_check.id, march_cash.id]
        assert await self.payments.count() == 4

        for_acme = await self.payments.list(customer_id=acme)
        assert [p.id for p in for_acme] == [may_cash.id, april_check.id, march_cash.id]
        assert await self.payments.count(customer_id=acme) == 3

        april = await self.payments.list(start_date=date(2024, 4, 1), end_date=date(2024, 4, 30))
        assert [p.id for p in april] == [beta_cash.id, april_check.id]

        acme_cash = await self.payments.list(customer_id=acme, method=PaymentMethod.CASH)
        assert [p.id for p in acme_cash] == [may_cash.id, march_cash.id]
        assert await self.payments.count(customer_id=acme, method=PaymentMethod.CASH, end_date=date(2024, 4, 30)) == 1

        second_page = await self.payments.list(offset=2, limit=2)
        assert [p.id for p in second_page] == [april_check.id, march_cash.id]

    @pytest.mark.asyncio
    async def test_statistics(self):
        invoice_id = uuid.uuid4()
        for amount, payment_date, method in [
            ("100.00", date(2023, 12, 31), PaymentMethod.CASH),
            ("200.00", date(2024, 2, 10), PaymentMethod.BANK_TRANSFER),
            ("30.00", date(2024, 3, 1), PaymentMethod.CREDIT_CARD),
            ("5.50", date(2024, 3, 15), PaymentMethod.CASH),
            ("999.00", date(2024, 3, 16), PaymentMethod.CASH),
        ]:
            await self.payments.save(self.payment(invoice_id, amount, payment_date, method))
        self.reload()

        stats = await self.payments.statistics(date(2024, 3, 15))

        assert stats.total_amount == Decimal("335.50")
        assert stats.total_today == Decimal("5.50")
        assert stats.total_this_month == Decimal("35.50")
        assert stats.total_this_year == Decimal("235.50")
        assert stats.payment_count == 4
        assert stats.by_method == {
            "Cash": Decimal("105.50"),
            "BankTransfer": Decimal("200.00"),
            "CreditCard": Decimal("30.00"),
        }


class TestCustomerRepository(RepositoryTestCase):
    """Test cases for SQLAlchemyCustomerRepository."""

    async def add(self, name, email, created_at=None):
        customer = Customer.create(name=name, email=email)
        if created_at:
            customer.created_at = created_at
        return await self.customers.save(customer)

    @pytest.mark.asyncio
    async def test_save_and_find(self):
        customer = await self.add("Acme", "billing@acme.io")
        self.reload()

        found = await self.customers.find_by_id(customer.id)
        assert found.name == "Acme"
        assert found.version == 1
        assert (await self.customers.find_by_email("BILLING@acme.io")).id == customer.id

    @pytest.mark.asyncio
    async def test_duplicate_email(self):
        await self.add("Acme", "billing@acme.io")

        with pytest.raises(DuplicateEntityError):
            await self.add("Other", "billing@acme.io")

    @pytest.mark.asyncio
    async def test_deleted_customer_frees_its_email(self):
        old = await self.add("Acme", "billing@acme.io")
        old.delete()
        await self.customers.save(old)

        new = await self.add("Acme Two", "billing@acme.io")
        self.reload()

        assert new.id != old.id
        assert (await self.customers.find_by_email("billing@acme.io")).id == new.id
        assert (await self.customers.find_by_id(old.id)).is_deleted

    @pytest.mark.asyncio
    async def test_email_stays_unique_among_active_customers_at_the_database(self):
        await self.add("Acme", "billing@acme.io")
        other = await self.add("Other", "ap@acme.io")
        other.update(email="billing@acme.io")

        with pytest.raises(DuplicateEntityError):
            await self.customers.save(other)

    @pytest.mark.asyncio
    async def test_update_and_soft_delete(self):
        customer = await self.add("Acme", "billing@acme.io")
        self.reload()

        loaded = await self.customers.find_by_id(customer.id)
        loaded.update(phone="555-0100")
        await self.customers.save(loaded)
        loaded.delete()
        saved = await self.customers.save(loaded)
        self.reload()

        assert saved.version == 3
        found = await self.customers.find_by_id(customer.id)
        assert found.is_deleted
        assert found.phone == "555-0100"
        assert found.deleted_at is not None

    @pytest.mark.asyncio
    async def test_list_active(self):
        await self.add("Charlie Ltd", "c@charlie.io", datetime(2024, 1, 3, tzinfo=timezone.utc))
        await self.add("Alpha Inc", "z@alpha.io", datetime(2024, 1, 1, tzinfo=timezone.utc))
        bravo = await self.add("Bravo Co", "a@bravo.io", datetime(2024, 1, 2, tzinfo=timezone.utc))
        bravo.delete()
        await self.customers.save(bravo)
        self.reload()

        by_name = await self.customers.list_active()
        assert [c.name for c in by_name] == ["Alpha Inc", "Charlie Ltd"]

        by_email_desc = await self.customers.list_active(sort_by="email", descending=True)
        assert [c.name for c in by_email_desc] == ["Alpha Inc", "Charlie Ltd"]

        newest_first = await self.customers.list_active(sort_by="created_at", descending=True, limit=1)
        assert [c.name for c in newest_first] == ["Charlie Ltd"]

        searched = await self.customers.list_active(search="CHAR")
        assert [c.name for c in searched] == ["Charlie Ltd"]

        assert await self.customers.count_active() == 2
        assert await self.customers.count_active(search="alpha") == 1

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_sort(self):
        with pytest.raises(ValidationError):
            await self.customers.list_active(sort_by="phone")


class TestSQLAlchemyUnitOfWork(RepositoryTestCase):
    """Test cases for commit and rollback."""

    @pytest.mark.asyncio
    async def test_commit_and_rollback(self):
        unit_of_work = SQLAlchemyUnitOfWork(self.session)

        kept = await self.customers.save(Customer.create(name="Kept", email="kept@acme.io"))
        await unit_of_work.commit()

        await self.customers.save(Customer.create(name="Dropped", email="dropped@acme.io"))
        await unit_of_work.rollback()

        assert await self.customers.find_by_id(kept.id) is not None
        assert await self.customers.find_by_email("dropped@acme.io") is None
