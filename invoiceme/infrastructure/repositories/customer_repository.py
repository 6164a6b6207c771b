"""
Customer repository implementation using SQLAlchemy.
"""

from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from invoiceme.domain.models.base import ConcurrencyError, DuplicateEntityError, ValidationError
from invoiceme.domain.models.customer import Customer, CustomerStatus
from invoiceme.domain.repositories.customer_repository import CustomerRepository as CustomerRepositoryInterface
from invoiceme.infrastructure.db.models import CustomerModel
from invoiceme.infrastructure.mappers.customer_mapper import CustomerMapper


logger = logging.getLogger(__name__)


SORT_COLUMNS = {
    "name": CustomerModel.name,
    "email": CustomerModel.email,
    "created_at": CustomerModel.created_at,
}


class SQLAlchemyCustomerRepository(CustomerRepositoryInterface):
    """SQLAlchemy implementation of customer repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = CustomerMapper()

    async def save(self, customer: Customer) -> Customer:
        """Save a customer entity."""
        if customer.is_new:
            existing = self.session.query(CustomerModel.id).filter(
                func.lower(CustomerModel.email) == customer.email.lower(),
                CustomerModel.status == CustomerStatus.ACTIVE.value
            ).first()
            if existing:
                raise DuplicateEntityError("Customer", "email", customer.email)

            model = self.mapper.domain_to_model(customer)
            self.session.add(model)
        else:
            model = self.session.query(CustomerModel).filter_by(id=customer.id).first()
            if not model:
                raise ConcurrencyError("Customer", customer.id, customer.version)
            if model.version != customer.version:
                raise ConcurrencyError("Customer", customer.id, customer.version, model.version)

            self.mapper.update_model(model, customer)

        try:
            self.session.flush()
        except StaleDataError as e:
            logger.warning(f"Customer {customer.id} changed concurrently: {str(e)}")
            raise ConcurrencyError("Customer", customer.id, customer.version) from e
        except IntegrityError as e:
            logger.warning(f"Integrity error saving customer {customer.id}: {str(e.orig)}")
            raise DuplicateEntityError("Customer", "email", customer.email) from e

        customer.version = model.version
        return customer

    async def find_by_id(self, customer_id: UUID) -> Optional[Customer]:
        """Get customer by ID, including soft-deleted ones."""
        model = self.session.query(CustomerModel).filter_by(id=customer_id).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_by_email(self, email: str) -> Optional[Customer]:
        model = self.session.query(CustomerModel).filter(
            func.lower(CustomerModel.email) == email.strip().lower(),
            CustomerModel.status == CustomerStatus.ACTIVE.value
        ).first()

        if not model:
            return None

        return self.mapper.model_to_domain(model)

    def _active_query(self, query, search: Optional[str]):
        query = query.filter(CustomerModel.status == CustomerStatus.ACTIVE.value)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                CustomerModel.name.ilike(pattern),
                CustomerModel.email.ilike(pattern)
            ))
        return query

    async def list_active(
        self,
        search: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False,
        offset: int = 0,
        limit: int = 20
    ) -> List[Customer]:
        """Active customers, sorted and paginated."""
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort customers by '{sort_by}'", "sort_by")

        query = self._active_query(self.session.query(CustomerModel), search)
        query = query.order_by(column.desc() if descending else column.asc(), CustomerModel.id)

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        models = query.all()
        return [self.mapper.model_to_domain(model) for model in models]

    async def count_active(self, search: Optional[str] = None) -> int:
        query = self._active_query(self.session.query(func.count(CustomerModel.id)), search)
        return query.scalar() or 0
