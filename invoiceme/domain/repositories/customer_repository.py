"""Customer repository interface.
Defines the contract for customer data persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from invoiceme.domain.models.customer import Customer


class CustomerRepository(ABC):
    """
    Repository interface for Customer aggregate.

    Soft-deleted customers are still returned by ``find_by_id`` so that
    existing invoices resolve. Only the ``*_active`` queries filter them
    out; there is no hidden global filter.
    """

    @abstractmethod
    async def save(self, customer: Customer) -> Customer:
        """
        Insert or update a customer.
        Raises DuplicateEntityError when the email is already taken.
        """
        pass

    @abstractmethod
    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Customer]:
        """
        Find the active customer with this email (case-insensitive).
        Deleted customers are ignored so their email can be reused.
        """
        pass

    @abstractmethod
    async def list_active(
        self,
        search: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False,
        offset: int = 0,
        limit: int = 20
    ) -> List[Customer]:
        """
        Active customers, optionally filtered by a name/email substring.
        ``sort_by`` is one of ``name``, ``email``, ``created_at``.
        """
        pass

    @abstractmethod
    async def count_active(self, search: Optional[str] = None) -> int:
        pass
