"""
Customer domain model.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional
import re

from invoiceme.domain.events import CustomerCreated, CustomerDeleted, CustomerUpdated
from invoiceme.domain.models.base import AggregateRoot, InvalidStateError, ValidationError, utcnow
from invoiceme.domain.models.value_objects import Address


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


class CustomerStatus(str, Enum):
    """Customer lifecycle state."""
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(eq=False)
class Customer(AggregateRoot):
    """
    Customer aggregate root.

    Deletion is soft: the customer moves to DELETED and keeps its row so
    existing invoices still resolve. Repositories filter on ``status``
    explicitly when only active customers are wanted.
    """

    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[Address] = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.status = CustomerStatus(self.status)
        self.name = (self.name or "").strip()
        self.email = (self.email or "").strip().lower()
        self.validate()

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[Address] = None
    ) -> "Customer":
        customer = cls(name=name, email=email, phone=phone, address=address)
        customer.add_event(CustomerCreated(
            customer_id=customer.id,
            name=customer.name,
            email=customer.email
        ))
        return customer

    def validate(self) -> None:
        """Validate customer state."""
        if not self.name:
            raise ValidationError("Name is required", "name")

        if len(self.name) > 255:
            raise ValidationError("Name must not exceed 255 characters", "name")

        if not self.email:
            raise ValidationError("Email is required", "email")

        if len(self.email) > 255:
            raise ValidationError("Email must not exceed 255 characters", "email")

        if not EMAIL_PATTERN.match(self.email):
            raise ValidationError("Invalid email format", "email")

        if self.phone and len(self.phone) > 50:
            raise ValidationError("Phone must not exceed 50 characters", "phone")

        if self.status == CustomerStatus.DELETED and not self.deleted_at:
            raise ValidationError("Deleted customer must have a deletion time", "deleted_at")

    @property
    def is_active(self) -> bool:
        return self.status == CustomerStatus.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.status == CustomerStatus.DELETED

    def update(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[Address] = None
    ) -> List[str]:
        """
        Apply the given changes; ``None`` leaves a field untouched.
        Returns the names of the fields that actually changed.
        """
        if self.is_deleted:
            raise InvalidStateError("Cannot update a deleted customer", self.status)

        changes = {}
        if name is not None and name.strip() != self.name:
            changes["name"] = name.strip()
        if email is not None and email.strip().lower() != self.email:
            changes["email"] = email.strip().lower()
        if phone is not None and phone != self.phone:
            changes["phone"] = phone
        if address is not None and address != self.address:
            changes["address"] = address

        if not changes:
            return []

        previous = {key: getattr(self, key) for key in changes}
        for key, value in changes.items():
            setattr(self, key, value)

        try:
            self.validate()
        except ValidationError:
            for key, value in previous.items():
                setattr(self, key, value)
            raise

        self.mark_as_updated()
        updated_fields = list(changes)
        self.add_event(CustomerUpdated(customer_id=self.id, updated_fields=updated_fields))
        return updated_fields

    def delete(self, when: Optional[datetime] = None) -> None:
        """Soft delete the customer."""
        if self.is_deleted:
            raise InvalidStateError("Customer is already deleted", self.status)

        self.status = CustomerStatus.DELETED
        self.deleted_at = when or utcnow()
        self.mark_as_updated()

        self.add_event(CustomerDeleted(customer_id=self.id, email=self.email))
