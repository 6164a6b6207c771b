"""Payment repository interface.
Defines the contract for payment data persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from invoiceme.domain.models.payment import Payment, PaymentMethod
from invoiceme.domain.models.value_objects import ZERO


@dataclass(frozen=True)
class PaymentStatistics:
    """Payment totals over a few standard windows plus a per-method breakdown."""

    total_amount: Decimal = ZERO
    total_today: Decimal = ZERO
    total_this_month: Decimal = ZERO
    total_this_year: Decimal = ZERO
    payment_count: int = 0
    by_method: Dict[str, Decimal] = field(default_factory=dict)


class PaymentRepository(ABC):
    """
    Repository interface for payments.
    ``(invoice_id, idempotency_key)`` is unique; saving a duplicate raises
    ``DuplicateEntityError``.
    """

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        """
        Persist a new payment. Payments are never updated.
        """
        pass

    @abstractmethod
    async def find_by_id(self, payment_id: UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def find_by_invoice_id(self, invoice_id: UUID) -> List[Payment]:
        """
        Payments for an invoice, oldest payment date first.
        """
        pass

    @abstractmethod
    async def find_by_idempotency_key(self, invoice_id: UUID, idempotency_key: str) -> Optional[Payment]:
        """
        Payment previously recorded for this invoice with this key, if any.
        """
        pass

    @abstractmethod
    async def statistics(self, today: date) -> PaymentStatistics:
        pass

    @abstractmethod
    async def list(
        self,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        method: Optional[PaymentMethod] = None,
        offset: int = 0,
        limit: int = 20
    ) -> List[Payment]:
        """
        Payment history across invoices, newest payment date first.
        Date bounds are inclusive; ``customer_id`` matches through the invoice.
        """
        pass

    @abstractmethod
    async def count(
        self,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        method: Optional[PaymentMethod] = None
    ) -> int:
        pass
