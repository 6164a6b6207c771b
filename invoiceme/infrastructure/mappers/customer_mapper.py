"""
Customer mapper for converting between domain entities and database models.
"""

from typing import Optional

from invoiceme.domain.models.base import as_utc
from invoiceme.domain.models.customer import Customer, CustomerStatus
from invoiceme.domain.models.value_objects import Address
from invoiceme.infrastructure.db.models import CustomerModel


class CustomerMapper:
    """Maps between Customer domain entity and CustomerModel database model."""

    def domain_to_model(self, customer: Customer) -> CustomerModel:
        """Convert Customer domain entity to a new CustomerModel."""
        model = CustomerModel(id=customer.id, created_at=customer.created_at)
        self.update_model(model, customer)
        return model

    def update_model(self, model: CustomerModel, customer: Customer) -> None:
        model.name = customer.name
        model.email = customer.email
        model.phone = customer.phone
        model.status = customer.status.value
        model.deleted_at = customer.deleted_at
        model.updated_at = customer.updated_at

        address = customer.address
        model.street = address.street if address else None
        model.city = address.city if address else None
        model.state = address.state if address else None
        model.postal_code = address.postal_code if address else None
        model.country = address.country if address else None

    def model_to_domain(self, model: CustomerModel) -> Customer:
        """Convert CustomerModel to Customer domain entity."""
        return Customer(
            id=model.id,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            version=model.version,
            name=model.name,
            email=model.email,
            phone=model.phone,
            address=self._address_from_model(model),
            status=CustomerStatus(model.status),
            deleted_at=as_utc(model.deleted_at)
        )

    def _address_from_model(self, model: CustomerModel) -> Optional[Address]:
        if not model.street:
            return None
        return Address(
            street=model.street,
            city=model.city,
            state=model.state,
            postal_code=model.postal_code,
            country=model.country
        )
