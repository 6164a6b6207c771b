"""
Invoice repository implementation using SQLAlchemy.
"""

from typing import Any, Dict, List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
import logging

from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from invoiceme.domain.models.base import ConcurrencyError, DuplicateEntityError, ValidationError
from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.value_objects import ZERO, round_money
from invoiceme.domain.repositories.invoice_repository import (
    CustomerInvoiceSummary,
    DashboardTotals,
    InvoiceRepository as InvoiceRepositoryInterface
)
from invoiceme.infrastructure.db.models import InvoiceModel
from invoiceme.infrastructure.mappers.invoice_mapper import InvoiceMapper


logger = logging.getLogger(__name__)


SORT_COLUMNS = {
    "issue_date": InvoiceModel.issue_date,
    "due_date": InvoiceModel.due_date,
    "invoice_number": InvoiceModel.invoice_number,
    "total_amount": InvoiceModel.total_amount,
    "balance": InvoiceModel.balance,
    "status": InvoiceModel.status,
    "created_at": InvoiceModel.created_at,
}


def to_money(value: Any) -> Decimal:
    """Aggregate result to a 2-place Decimal; SQLite may hand back floats."""
    if value is None:
        return ZERO
    return round_money(Decimal(str(value)))


class SQLAlchemyInvoiceRepository(InvoiceRepositoryInterface):
    """SQLAlchemy implementation of invoice repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = InvoiceMapper()

    async def save(self, invoice: Invoice) -> Invoice:
        """Save an invoice entity together with its line items."""
        if invoice.is_new:
            existing = self.session.query(InvoiceModel.id).filter_by(
                invoice_number=invoice.invoice_number
            ).first()
            if existing:
                raise DuplicateEntityError("Invoice", "invoice_number", invoice.invoice_number)

            model = self.mapper.domain_to_model(invoice)
            self.session.add(model)
        else:
            model = self.session.query(InvoiceModel).options(
                selectinload(InvoiceModel.line_items)
            ).filter_by(id=invoice.id).first()
            if not model:
                raise ConcurrencyError("Invoice", invoice.id, invoice.version)
            if model.version != invoice.version:
                raise ConcurrencyError("Invoice", invoice.id, invoice.version, model.version)

            self.mapper.update_model(model, invoice)

        try:
            self.session.flush()
        except StaleDataError as e:
            logger.warning(f"Invoice {invoice.id} changed concurrently: {str(e)}")
            raise ConcurrencyError("Invoice", invoice.id, invoice.version) from e
        except IntegrityError as e:
            logger.warning(f"Integrity error saving invoice {invoice.invoice_number}: {str(e.orig)}")
            raise DuplicateEntityError("Invoice", "invoice_number", invoice.invoice_number) from e

        invoice.version = model.version
        return invoice

    async def find_by_id(self, invoice_id: UUID) -> Optional[Invoice]:
        """Get invoice by ID."""
        model = self.session.query(InvoiceModel).options(
            selectinload(InvoiceModel.line_items)
        ).filter_by(id=invoice_id).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        """Get invoice by number."""
        model = self.session.query(InvoiceModel).options(
            selectinload(InvoiceModel.line_items)
        ).filter_by(invoice_number=invoice_number).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    def _filtered_query(
        self,
        query,
        status: Optional[InvoiceStatus],
        customer_id: Optional[UUID],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ):
        if status is not None:
            query = query.filter(InvoiceModel.status == InvoiceStatus(status).value)
        if customer_id is not None:
            query = query.filter(InvoiceModel.customer_id == customer_id)
        if start_date is not None:
            query = query.filter(InvoiceModel.issue_date >= start_date)
        if end_date is not None:
            query = query.filter(InvoiceModel.issue_date <= end_date)
        return query

    async def list(
        self,
        status: Optional[InvoiceStatus] = None,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: str = "issue_date",
        descending: bool = True,
        offset: int = 0,
        limit: int = 20
    ) -> List[Invoice]:
        """List invoices with optional filters; newest issue date first by default."""
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort invoices by '{sort_by}'", "sort_by")

        # Invoice number breaks ties so pages stay stable
        tie_breaker = InvoiceModel.invoice_number.desc() if descending else InvoiceModel.invoice_number.asc()
        query = self._filtered_query(
            self.session.query(InvoiceModel).options(selectinload(InvoiceModel.line_items)),
            status,
            customer_id,
            start_date,
            end_date
        ).order_by(column.desc() if descending else column.asc(), tie_breaker)

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        models = query.all()
        return [self.mapper.model_to_domain(model) for model in models]

    async def count(
        self,
        status: Optional[InvoiceStatus] = None,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> int:
        query = self._filtered_query(
            self.session.query(func.count(InvoiceModel.id)), status, customer_id, start_date, end_date
        )
        return query.scalar() or 0

    async def summarize_by_customers(self, customer_ids: List[UUID]) -> Dict[UUID, CustomerInvoiceSummary]:
        """Invoice count and amount still owed on sent invoices, per customer."""
        summaries = {
            customer_id: CustomerInvoiceSummary(customer_id=customer_id)
            for customer_id in customer_ids
        }
        if not customer_ids:
            return summaries

        outstanding = func.coalesce(func.sum(case(
            (InvoiceModel.status == InvoiceStatus.SENT.value, InvoiceModel.balance),
            else_=0
        )), 0)

        rows = self.session.query(
            InvoiceModel.customer_id,
            func.count(InvoiceModel.id),
            outstanding
        ).filter(
            InvoiceModel.customer_id.in_(customer_ids)
        ).group_by(InvoiceModel.customer_id).all()

        for customer_id, invoice_count, balance in rows:
            summaries[customer_id] = CustomerInvoiceSummary(
                customer_id=customer_id,
                invoice_count=invoice_count,
                outstanding_balance=to_money(balance)
            )

        return summaries

    async def dashboard_totals(self, today: date) -> DashboardTotals:
        """Dashboard figures computed in the database."""
        counts_by_status = {status.value: 0 for status in InvoiceStatus}
        rows = self.session.query(
            InvoiceModel.status, func.count(InvoiceModel.id)
        ).group_by(InvoiceModel.status).all()
        for status, count in rows:
            counts_by_status[status] = count

        total_revenue = self.session.query(
            func.sum(InvoiceModel.total_amount - InvoiceModel.balance)
        ).filter(InvoiceModel.status != InvoiceStatus.DRAFT.value).scalar()

        outstanding_amount = self.session.query(
            func.sum(InvoiceModel.balance)
        ).filter(InvoiceModel.status == InvoiceStatus.SENT.value).scalar()

        overdue_count, overdue_amount = self.session.query(
            func.count(InvoiceModel.id), func.sum(InvoiceModel.balance)
        ).filter(and_(
            InvoiceModel.status == InvoiceStatus.SENT.value,
            InvoiceModel.balance > 0,
            InvoiceModel.due_date < today
        )).one()

        return DashboardTotals(
            counts_by_status=counts_by_status,
            total_revenue=to_money(total_revenue),
            outstanding_amount=to_money(outstanding_amount),
            overdue_count=overdue_count or 0,
            overdue_amount=to_money(overdue_amount)
        )
