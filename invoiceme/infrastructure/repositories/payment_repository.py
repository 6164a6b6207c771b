"""
Payment repository implementation using SQLAlchemy.
"""

from typing import List, Optional
from datetime import date
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoiceme.domain.models.base import DuplicateEntityError
from invoiceme.domain.models.payment import Payment, PaymentMethod
from invoiceme.domain.repositories.payment_repository import (
    PaymentRepository as PaymentRepositoryInterface,
    PaymentStatistics
)
from invoiceme.infrastructure.db.models import InvoiceModel, PaymentModel
from invoiceme.infrastructure.mappers.payment_mapper import PaymentMapper
from invoiceme.infrastructure.repositories.invoice_repository import to_money


logger = logging.getLogger(__name__)


class SQLAlchemyPaymentRepository(PaymentRepositoryInterface):
    """SQLAlchemy implementation of payment repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = PaymentMapper()

    async def save(self, payment: Payment) -> Payment:
        """Insert a payment. Payments are append-only."""
        model = self.mapper.domain_to_model(payment)
        self.session.add(model)

        try:
            self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Integrity error saving payment for invoice {payment.invoice_id}: {str(e.orig)}")
            raise DuplicateEntityError("Payment", "idempotency_key", payment.idempotency_key) from e

        return payment

    async def find_by_id(self, payment_id: UUID) -> Optional[Payment]:
        model = self.session.query(PaymentModel).filter_by(id=payment_id).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_by_invoice_id(self, invoice_id: UUID) -> List[Payment]:
        models = self.session.query(PaymentModel).filter_by(
            invoice_id=invoice_id
        ).order_by(PaymentModel.payment_date, PaymentModel.created_at).all()

        return [self.mapper.model_to_domain(model) for model in models]

    async def find_by_idempotency_key(self, invoice_id: UUID, idempotency_key: str) -> Optional[Payment]:
        model = self.session.query(PaymentModel).filter_by(
            invoice_id=invoice_id,
            idempotency_key=idempotency_key
        ).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    def _history_query(self, query, customer_id, start_date, end_date, method):
        if customer_id is not None:
            query = query.join(InvoiceModel, PaymentModel.invoice_id == InvoiceModel.id).filter(
                InvoiceModel.customer_id == customer_id
            )
        if start_date is not None:
            query = query.filter(PaymentModel.payment_date >= start_date)
        if end_date is not None:
            query = query.filter(PaymentModel.payment_date <= end_date)
        if method is not None:
            query = query.filter(PaymentModel.payment_method == PaymentMethod(method).value)
        return query

    async def list(
        self,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        method: Optional[PaymentMethod] = None,
        offset: int = 0,
        limit: int = 20
    ) -> List[Payment]:
        query = self._history_query(
            self.session.query(PaymentModel), customer_id, start_date, end_date, method
        ).order_by(PaymentModel.payment_date.desc(), PaymentModel.created_at.desc(), PaymentModel.id)

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        return [self.mapper.model_to_domain(model) for model in query.all()]

    async def count(
        self,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        method: Optional[PaymentMethod] = None
    ) -> int:
        query = self._history_query(
            self.session.query(func.count(PaymentModel.id)), customer_id, start_date, end_date, method
        )
        return query.scalar() or 0

    def _sum_since(self, start: Optional[date], end: date):
        query = self.session.query(func.sum(PaymentModel.amount)).filter(PaymentModel.payment_date <= end)
        if start is not None:
            query = query.filter(PaymentModel.payment_date >= start)
        return to_money(query.scalar())

    async def statistics(self, today: date) -> PaymentStatistics:
        """Payment totals up to and including ``today``."""
        payment_count = self.session.query(func.count(PaymentModel.id)).filter(
            PaymentModel.payment_date <= today
        ).scalar() or 0

        rows = self.session.query(
            PaymentModel.payment_method, func.sum(PaymentModel.amount)
        ).filter(
            PaymentModel.payment_date <= today
        ).group_by(PaymentModel.payment_method).all()

        return PaymentStatistics(
            total_amount=self._sum_since(None, today),
            total_today=self._sum_since(today, today),
            total_this_month=self._sum_since(today.replace(day=1), today),
            total_this_year=self._sum_since(today.replace(month=1, day=1), today),
            payment_count=payment_count,
            by_method={method: to_money(total) for method, total in rows}
        )
