"""Invoice repository interface.
Defines the contract for invoice data persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.value_objects import ZERO


@dataclass(frozen=True)
class CustomerInvoiceSummary:
    """Invoice count and outstanding balance for one customer."""

    customer_id: UUID
    invoice_count: int = 0
    outstanding_balance: Decimal = ZERO


@dataclass(frozen=True)
class DashboardTotals:
    """Headline invoice figures."""

    counts_by_status: Dict[str, int] = field(default_factory=dict)
    total_revenue: Decimal = ZERO
    outstanding_amount: Decimal = ZERO
    overdue_count: int = 0
    overdue_amount: Decimal = ZERO

    @property
    def total_invoices(self) -> int:
        return sum(self.counts_by_status.values())


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice aggregate.

    Postconditions every implementation must satisfy:
    - ``save`` compares ``invoice.version`` against the stored row and
      raises ``ConcurrencyError`` on mismatch;
    - invoice numbers are unique (``DuplicateEntityError``);
    - line items are stored with the invoice in the same write.
    """

    @abstractmethod
    async def save(self, invoice: Invoice) -> Invoice:
        """
        Insert a new invoice or update an existing one.
        Returns the saved invoice with its version advanced.
        """
        pass

    @abstractmethod
    async def find_by_id(self, invoice_id: UUID) -> Optional[Invoice]:
        """
        Find an invoice by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        pass

    @abstractmethod
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
        """
        List invoices, optionally filtered. Date bounds apply to the issue
        date and are inclusive. ``sort_by`` is one of issue_date, due_date,
        invoice_number, total_amount, balance, status or created_at; an
        unknown field raises ``ValidationError``.
        """
        pass

    @abstractmethod
    async def count(
        self,
        status: Optional[InvoiceStatus] = None,
        customer_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> int:
        pass

    @abstractmethod
    async def summarize_by_customers(self, customer_ids: List[UUID]) -> Dict[UUID, CustomerInvoiceSummary]:
        """
        Invoice count and outstanding balance for each of ``customer_ids``
        in a single aggregated query. Customers without invoices are
        returned with zero values.
        """
        pass

    @abstractmethod
    async def dashboard_totals(self, today: date) -> DashboardTotals:
        """
        Counts by status, revenue collected, amount outstanding and the
        overdue subset (sent, unpaid, due before ``today``).
        """
        pass
