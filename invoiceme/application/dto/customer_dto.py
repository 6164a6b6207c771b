"""
Customer DTOs for the application layer.
Data Transfer Objects for customer-related operations.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import Field, EmailStr, field_validator

from invoiceme.domain.models.customer import Customer
from invoiceme.domain.models.value_objects import Address
from invoiceme.domain.repositories.invoice_repository import CustomerInvoiceSummary
from .base_dto import BaseDTO, RequestDTO, ResponseDTO, ListRequestDTO


# Nested DTOs
class AddressDTO(BaseDTO):
    """Postal address. Every part is required."""

    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)

    def to_domain(self) -> Address:
        return Address(
            street=self.street,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country
        )

    @classmethod
    def from_domain(cls, address: Optional[Address]) -> Optional["AddressDTO"]:
        if address is None:
            return None
        return cls(**address.to_dict())


# Request DTOs
class CreateCustomerRequestDTO(RequestDTO):
    """DTO for customer creation requests."""

    name: str = Field(min_length=1, max_length=255, description="Customer name")
    email: EmailStr = Field(description="Customer email")
    phone: Optional[str] = Field(default=None, max_length=50, description="Phone number")
    address: Optional[AddressDTO] = Field(default=None, description="Postal address")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class UpdateCustomerRequestDTO(RequestDTO):
    """DTO for customer update requests. Omitted fields are left unchanged."""

    customer_id: UUID
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[AddressDTO] = None


class DeleteCustomerRequestDTO(RequestDTO):
    customer_id: UUID


class GetCustomerRequestDTO(RequestDTO):
    customer_id: UUID


class ListCustomersRequestDTO(ListRequestDTO):
    """DTO for listing active customers."""

    search: Optional[str] = Field(default=None, max_length=255, description="Name or email substring")
    sort_by: str = Field(default="name", pattern="^(name|email|created_at)$", description="Sort field")
    sort_order: str = Field(default="asc", pattern="^(asc|desc)$", description="Sort order")


# Response DTOs
class CustomerResponseDTO(ResponseDTO):
    """DTO for customer responses, with the customer's invoice summary when known."""

    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[AddressDTO] = None
    status: str
    deleted_at: Optional[datetime] = None
    invoice_count: int = 0
    outstanding_balance: Decimal = Decimal("0.00")

    @classmethod
    def from_domain(
        cls,
        customer: Customer,
        summary: Optional[CustomerInvoiceSummary] = None
    ) -> "CustomerResponseDTO":
        return cls(
            id=customer.id,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            address=AddressDTO.from_domain(customer.address),
            status=customer.status.value,
            deleted_at=customer.deleted_at,
            invoice_count=summary.invoice_count if summary else 0,
            outstanding_balance=summary.outstanding_balance if summary else Decimal("0.00")
        )
