"""
Domain events related to customers.
"""

from typing import Dict, Any, List
from dataclasses import dataclass, field
from uuid import UUID

from .base import DomainEvent


@dataclass
class CustomerCreated(DomainEvent):
    """Event fired when a customer is registered."""

    customer_id: UUID
    name: str
    email: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "customer_id": str(self.customer_id),
            "name": self.name,
            "email": self.email
        }


@dataclass
class CustomerUpdated(DomainEvent):
    """Event fired when customer details change."""

    customer_id: UUID
    updated_fields: List[str] = field(default_factory=list)

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "customer_id": str(self.customer_id),
            "updated_fields": list(self.updated_fields)
        }


@dataclass
class CustomerDeleted(DomainEvent):
    """Event fired when a customer is soft-deleted."""

    customer_id: UUID
    email: str

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "customer_id": str(self.customer_id),
            "email": self.email
        }
