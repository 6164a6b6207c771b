"""
Customer use cases for the application layer.
"""

from typing import Optional
import logging

from invoiceme.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase
)
from invoiceme.application.dto.base_dto import ListResponseDTO
from invoiceme.application.dto.customer_dto import (
    CreateCustomerRequestDTO, UpdateCustomerRequestDTO, DeleteCustomerRequestDTO,
    GetCustomerRequestDTO, ListCustomersRequestDTO, CustomerResponseDTO
)
from invoiceme.domain.events import EventDispatcher
from invoiceme.domain.models.base import DuplicateEntityError, EntityNotFoundError
from invoiceme.domain.models.customer import Customer
from invoiceme.domain.repositories.customer_repository import CustomerRepository
from invoiceme.domain.repositories.invoice_repository import InvoiceRepository
from invoiceme.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


async def load_customer(customer_repository: CustomerRepository, customer_id) -> Customer:
    """Active customer by id; deleted customers are reported as not found."""
    customer = await customer_repository.find_by_id(customer_id)
    if not customer or customer.is_deleted:
        raise EntityNotFoundError("Customer", customer_id)
    return customer


class CreateCustomerUseCase(CommandUseCase[CreateCustomerRequestDTO, CustomerResponseDTO]):
    """Use case for registering a customer. Emails are unique."""

    def __init__(
        self,
        customer_repository: CustomerRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.customer_repository = customer_repository

    async def _execute_command_logic(self, request: CreateCustomerRequestDTO) -> CustomerResponseDTO:
        email = str(request.email).strip().lower()
        if await self.customer_repository.find_by_email(email):
            raise DuplicateEntityError("Customer", "email", email)

        customer = Customer.create(
            name=request.name,
            email=email,
            phone=request.phone,
            address=request.address.to_domain() if request.address else None
        )

        saved_customer = await self.customer_repository.save(customer)
        self._collect_events(saved_customer)

        logger.info(f"Created customer {saved_customer.id} ({saved_customer.email})")

        return CustomerResponseDTO.from_domain(saved_customer)


class UpdateCustomerUseCase(CommandUseCase[UpdateCustomerRequestDTO, CustomerResponseDTO]):
    """Use case for partial customer updates."""

    def __init__(
        self,
        customer_repository: CustomerRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.customer_repository = customer_repository

    async def _execute_command_logic(self, request: UpdateCustomerRequestDTO) -> CustomerResponseDTO:
        customer = await load_customer(self.customer_repository, request.customer_id)

        email = str(request.email).strip().lower() if request.email is not None else None
        if email is not None and email != customer.email:
            other = await self.customer_repository.find_by_email(email)
            if other and other.id != customer.id:
                raise DuplicateEntityError("Customer", "email", email)

        updated_fields = customer.update(
            name=request.name,
            email=email,
            phone=request.phone,
            address=request.address.to_domain() if request.address else None
        )

        if not updated_fields:
            return CustomerResponseDTO.from_domain(customer)

        saved_customer = await self.customer_repository.save(customer)
        self._collect_events(saved_customer)

        return CustomerResponseDTO.from_domain(saved_customer)


class DeleteCustomerUseCase(CommandUseCase[DeleteCustomerRequestDTO, bool]):
    """
    Use case for soft-deleting a customer.
    Invoices of the customer are left untouched and still reference it.
    """

    def __init__(
        self,
        customer_repository: CustomerRepository,
        unit_of_work: UnitOfWork,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        super().__init__(unit_of_work, event_dispatcher)
        self.customer_repository = customer_repository

    async def _execute_command_logic(self, request: DeleteCustomerRequestDTO) -> bool:
        customer = await load_customer(self.customer_repository, request.customer_id)
        customer.delete()

        saved_customer = await self.customer_repository.save(customer)
        self._collect_events(saved_customer)

        logger.info(f"Soft-deleted customer {saved_customer.id}")

        return True


class GetCustomerUseCase(QueryUseCase[GetCustomerRequestDTO, CustomerResponseDTO]):
    """Use case for getting an active customer with its invoice summary."""

    def __init__(self, customer_repository: CustomerRepository, invoice_repository: InvoiceRepository):
        super().__init__()
        self.customer_repository = customer_repository
        self.invoice_repository = invoice_repository

    async def _execute_business_logic(self, request: GetCustomerRequestDTO) -> CustomerResponseDTO:
        customer = await load_customer(self.customer_repository, request.customer_id)
        summaries = await self.invoice_repository.summarize_by_customers([customer.id])
        return CustomerResponseDTO.from_domain(customer, summaries.get(customer.id))


class ListCustomersUseCase(PaginatedQueryUseCase[ListCustomersRequestDTO, ListResponseDTO[CustomerResponseDTO]]):
    """
    Use case for listing active customers with their invoice summaries.
    Summaries for the whole page come from one aggregated query.
    """

    def __init__(
        self,
        customer_repository: CustomerRepository,
        invoice_repository: InvoiceRepository,
        default_page_size: int = 20,
        max_page_size: int = 100
    ):
        super().__init__(default_page_size, max_page_size)
        self.customer_repository = customer_repository
        self.invoice_repository = invoice_repository

    async def _execute_business_logic(self, request: ListCustomersRequestDTO) -> ListResponseDTO[CustomerResponseDTO]:
        page_size = self.page_size_for(request)
        offset = (request.page - 1) * page_size

        customers = await self.customer_repository.list_active(
            search=request.search,
            sort_by=request.sort_by,
            descending=request.sort_order == "desc",
            offset=offset,
            limit=page_size
        )
        total = await self.customer_repository.count_active(search=request.search)

        summaries = await self.invoice_repository.summarize_by_customers([c.id for c in customers]) if customers else {}

        return ListResponseDTO[CustomerResponseDTO].create(
            items=[CustomerResponseDTO.from_domain(c, summaries.get(c.id)) for c in customers],
            total=total,
            page=request.page,
            page_size=page_size
        )
