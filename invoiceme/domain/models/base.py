"""
Base entity classes and the domain error taxonomy.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict, List
from abc import ABC
from dataclasses import dataclass, field
from decimal import Decimal
import uuid

from invoiceme.domain.events.base import DomainEvent


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (some databases drop the offset)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(eq=False)
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Identity is assigned on construction so that aggregates can reference
    each other before anything is persisted.
    """

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Domain events
    _events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if self.id is None:
            self.id = uuid.uuid4()
        if self.created_at is None:
            self.created_at = utcnow()
        if self.updated_at is None:
            self.updated_at = self.created_at

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    def add_event(self, event: DomainEvent) -> None:
        """Record a domain event."""
        self._events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Get and clear all recorded domain events."""
        events = self._events.copy()
        self._events.clear()
        return events

    @property
    def pending_events(self) -> List[DomainEvent]:
        """Recorded events not yet pulled (read-only copy)."""
        return list(self._events)

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.

    ``version`` is the optimistic concurrency token. It is owned by the
    persistence layer: 0 means the aggregate has never been stored, and the
    repository compares it against the stored row before every update.
    """

    version: int = field(default=0)

    @property
    def is_new(self) -> bool:
        """Check if the aggregate has never been persisted."""
        return self.version == 0


class DomainException(Exception):
    """Base exception for domain errors."""

    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Error payload for callers that render messages."""
        return {
            "code": self.code,
            "message": self.message,
            "details": {
                key: str(value) if isinstance(value, (Decimal, uuid.UUID)) else value
                for key, value in self.details.items()
            }
        }


class ValidationError(DomainException):
    """Raised when input is malformed or out of range."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message, code, details)
        self.field = field


class PaymentExceedsBalanceError(ValidationError):
    """Raised when a payment is larger than the invoice's remaining balance."""

    default_code = "PAYMENT_EXCEEDS_BALANCE"

    def __init__(self, requested_amount: Decimal, balance: Decimal, invoice_id: Optional[uuid.UUID] = None):
        message = f"Payment amount ({requested_amount}) exceeds invoice balance ({balance})"
        super().__init__(
            message,
            field="amount",
            details={
                "invoice_id": invoice_id,
                "requested_amount": requested_amount,
                "balance": balance,
            }
        )
        self.invoice_id = invoice_id
        self.requested_amount = requested_amount
        self.balance = balance


class BusinessRuleViolation(DomainException):
    """Raised when a business rule is violated."""

    default_code = "BUSINESS_RULE_VIOLATION"


class InvalidStateError(BusinessRuleViolation):
    """Raised when an operation is not permitted in the current status."""

    default_code = "INVALID_STATE"

    def __init__(self, message: str, current_status: Any = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        status_value = getattr(current_status, "value", current_status)
        details.setdefault("current_status", status_value)
        super().__init__(message, details=details)
        self.current_status = current_status


class InvoiceImmutableError(InvalidStateError):
    """Raised when a non-draft invoice is edited."""

    default_code = "INVOICE_IMMUTABLE"


class InvoiceNotSentError(InvalidStateError):
    """Raised when a payment targets an invoice that is not in Sent status."""

    default_code = "INVOICE_NOT_SENT"

    def __init__(self, current_status: Any, invoice_id: Optional[uuid.UUID] = None):
        status_value = getattr(current_status, "value", current_status)
        message = (
            f"Cannot apply payment to {status_value} invoice. "
            f"Invoice must be in Sent status to accept payments"
        )
        super().__init__(message, current_status, details={"invoice_id": invoice_id})
        self.invoice_id = invoice_id


class EntityNotFoundError(DomainException):
    """Raised when an entity is not found."""

    default_code = "ENTITY_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, details={"entity_type": entity_type, "entity_id": entity_id})
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityError(DomainException):
    """Raised when trying to create a duplicate entity."""

    default_code = "DUPLICATE_ENTITY"

    def __init__(self, entity_type: str, field: str, value: Any):
        message = f"{entity_type} with {field}='{value}' already exists"
        super().__init__(message, details={"entity_type": entity_type, "field": field, "value": value})
        self.entity_type = entity_type
        self.field = field
        self.value = value


class ConcurrencyError(DomainException):
    """Raised when an aggregate was modified by someone else since it was loaded."""

    default_code = "CONCURRENCY_CONFLICT"

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int, actual_version: Optional[int] = None):
        message = (
            f"{entity_type} {entity_id} has been modified by another transaction. "
            f"Please refresh and try again"
        )
        super().__init__(message, details={
            "entity_type": entity_type,
            "entity_id": entity_id,
            "expected_version": expected_version,
            "actual_version": actual_version,
        })
        self.expected_version = expected_version
        self.actual_version = actual_version
