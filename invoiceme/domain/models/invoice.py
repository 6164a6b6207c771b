"""
Invoice domain model.
The invoice aggregate owns its line items, keeps its money totals in step
with them and enforces the Draft -> Sent -> Paid lifecycle.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional
import uuid

from invoiceme.domain.events import (
    InvoiceCreated,
    InvoicePaid,
    InvoiceSent,
    LineItemAdded,
    LineItemRemoved
)
from invoiceme.domain.models.base import (
    AggregateRoot,
    InvalidStateError,
    InvoiceImmutableError,
    InvoiceNotSentError,
    PaymentExceedsBalanceError,
    ValidationError
)
from invoiceme.domain.models.line_item import LineItem
from invoiceme.domain.models.value_objects import ZERO, round_money, to_decimal


class InvoiceStatus(str, Enum):
    """Invoice status."""
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"


@dataclass(eq=False)
class Invoice(AggregateRoot):
    """
    Invoice aggregate root.

    Totals (subtotal, total_discount, total_tax, total_amount) are always
    derived from the current line items. ``balance`` is the part of
    ``total_amount`` not yet covered by payments and is the only money
    figure that is stored rather than derived. When it is omitted on
    construction the invoice is assumed to be unpaid.
    """

    customer_id: Optional[uuid.UUID] = None
    invoice_number: str = ""
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_terms: str = ""
    notes: Optional[str] = None
    line_items: List[LineItem] = field(default_factory=list)
    balance: Optional[Decimal] = None

    # Derived amounts
    subtotal: Decimal = field(default=ZERO, init=False)
    total_discount: Decimal = field(default=ZERO, init=False)
    total_tax: Decimal = field(default=ZERO, init=False)
    total_amount: Decimal = field(default=ZERO, init=False)

    def __post_init__(self):
        super().__post_init__()
        self.status = InvoiceStatus(self.status)
        self.invoice_number = str(self.invoice_number).strip() if self.invoice_number else ""
        self.payment_terms = (self.payment_terms or "").strip()
        self.line_items = list(self.line_items)

        self._sum_line_items()
        if self.balance is None:
            self.balance = self.total_amount
        else:
            self.balance = round_money(to_decimal(self.balance, "balance"))

        self.validate()

    @classmethod
    def create(
        cls,
        customer_id: uuid.UUID,
        issue_date: date,
        due_date: date,
        payment_terms: str,
        invoice_number: Any,
        notes: Optional[str] = None
    ) -> "Invoice":
        """Start a new Draft invoice with no line items and zero totals."""
        invoice = cls(
            customer_id=customer_id,
            invoice_number=str(invoice_number) if invoice_number else "",
            issue_date=issue_date,
            due_date=due_date,
            payment_terms=payment_terms,
            notes=notes
        )

        invoice.add_event(InvoiceCreated(
            invoice_id=invoice.id,
            customer_id=invoice.customer_id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date
        ))

        return invoice

    def validate(self) -> None:
        """Validate invoice state."""
        if not self.customer_id:
            raise ValidationError("Customer ID is required", "customer_id")

        if not self.invoice_number:
            raise ValidationError("Invoice number is required", "invoice_number")

        if not self.issue_date:
            raise ValidationError("Issue date is required", "issue_date")

        if not self.due_date:
            raise ValidationError("Due date is required", "due_date")

        if self.due_date < self.issue_date:
            raise ValidationError("Due date must be on or after issue date", "due_date")

        if self.total_amount < 0:
            raise ValidationError("Total amount cannot be negative", "total_amount")

        if self.balance < 0:
            raise ValidationError("Balance cannot be negative", "balance")

        if self.balance > self.total_amount:
            raise ValidationError("Balance cannot exceed total amount", "balance")

        # Payments are only ever applied to sent invoices
        if self.status == InvoiceStatus.DRAFT and self.balance != self.total_amount:
            raise ValidationError("Draft invoice cannot carry payments", "balance")

        if self.status == InvoiceStatus.PAID and self.balance != 0:
            raise ValidationError("Paid invoice must have a zero balance", "balance")

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    @property
    def is_sent(self) -> bool:
        return self.status == InvoiceStatus.SENT

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @property
    def amount_paid(self) -> Decimal:
        """Sum of payments applied so far."""
        return self.total_amount - self.balance

    @property
    def line_item_count(self) -> int:
        return len(self.line_items)

    def is_overdue(self, today: date) -> bool:
        """A sent invoice with money outstanding after its due date."""
        return self.is_sent and self.balance > 0 and today > self.due_date

    def get_line_item(self, line_item_id: str) -> LineItem:
        for item in self.line_items:
            if item.id == line_item_id:
                return item
        raise ValidationError(f"Line item {line_item_id} not found on invoice", "line_item_id")

    def add_line_item(self, item: LineItem) -> LineItem:
        """Append a line item and recompute totals."""
        self._ensure_draft("add line items to")

        if any(existing.id == item.id for existing in self.line_items):
            raise ValidationError(f"Line item {item.id} already exists on invoice", "line_item_id")

        self.line_items.append(item)
        self._recalculate_totals()
        self.mark_as_updated()

        self.add_event(LineItemAdded(
            invoice_id=self.id,
            line_item_id=item.id,
            description=item.description,
            line_total=item.total,
            invoice_total=self.total_amount
        ))

        return item

    def remove_line_item(self, line_item_id: str) -> LineItem:
        """Remove a line item by id and recompute totals."""
        self._ensure_draft("remove line items from")

        item = self.get_line_item(line_item_id)
        self.line_items.remove(item)
        self._recalculate_totals()
        self.mark_as_updated()

        self.add_event(LineItemRemoved(
            invoice_id=self.id,
            line_item_id=item.id,
            invoice_total=self.total_amount
        ))

        return item

    def update_line_item(self, line_item_id: str, item: LineItem) -> LineItem:
        """
        Replace a line item in place, keeping its id and position.
        Line items are immutable, so this is a remove followed by an add.
        """
        self._ensure_draft("update line items on")

        current = self.get_line_item(line_item_id)
        position = self.line_items.index(current)
        replacement = replace(item, id=line_item_id)

        self.line_items[position] = replacement
        self._recalculate_totals()
        self.mark_as_updated()

        self.add_event(LineItemRemoved(
            invoice_id=self.id,
            line_item_id=line_item_id,
            invoice_total=self.total_amount - replacement.total
        ))
        self.add_event(LineItemAdded(
            invoice_id=self.id,
            line_item_id=line_item_id,
            description=replacement.description,
            line_total=replacement.total,
            invoice_total=self.total_amount
        ))

        return replacement

    def clear_line_items(self) -> None:
        """Remove every line item."""
        self._ensure_draft("remove line items from")

        removed = list(self.line_items)
        self.line_items.clear()
        self._recalculate_totals()
        self.mark_as_updated()

        for item in removed:
            self.add_event(LineItemRemoved(
                invoice_id=self.id,
                line_item_id=item.id,
                invoice_total=self.total_amount
            ))

    def update_details(
        self,
        customer_id: Optional[uuid.UUID] = None,
        issue_date: Optional[date] = None,
        due_date: Optional[date] = None,
        payment_terms: Optional[str] = None,
        notes: Optional[str] = None
    ) -> None:
        """Change header fields of a draft invoice. ``None`` leaves a field as is."""
        self._ensure_draft("update")

        new_issue_date = issue_date or self.issue_date
        new_due_date = due_date or self.due_date
        if new_due_date < new_issue_date:
            raise ValidationError("Due date must be on or after issue date", "due_date")

        if customer_id is not None:
            self.customer_id = customer_id
        self.issue_date = new_issue_date
        self.due_date = new_due_date
        if payment_terms is not None:
            self.payment_terms = payment_terms.strip()
        if notes is not None:
            self.notes = notes

        self.mark_as_updated()

    def set_notes(self, notes: Optional[str]) -> None:
        self._ensure_draft("update notes on")
        self.notes = notes
        self.mark_as_updated()

    def can_be_edited(self) -> bool:
        """Check if invoice can be edited."""
        return self.status == InvoiceStatus.DRAFT

    def can_be_sent(self) -> bool:
        """Only a draft with at least one line item can be sent."""
        return self.status == InvoiceStatus.DRAFT and len(self.line_items) >= 1

    def can_accept_payment(self) -> bool:
        return self.status == InvoiceStatus.SENT

    def mark_as_sent(self) -> None:
        """Transition Draft -> Sent. Irreversible."""
        if not self.can_be_sent():
            if self.status != InvoiceStatus.DRAFT:
                raise InvalidStateError(
                    f"Cannot send invoice in {self.status.value} status. Only Draft invoices can be sent",
                    self.status
                )
            raise InvalidStateError("Cannot send invoice without line items", self.status)

        self.status = InvoiceStatus.SENT
        self.mark_as_updated()

        self.add_event(InvoiceSent(
            invoice_id=self.id,
            customer_id=self.customer_id,
            invoice_number=self.invoice_number,
            total_amount=self.total_amount,
            due_date=self.due_date
        ))

    def apply_payment(self, amount: Any) -> Decimal:
        """
        Reduce the balance by ``amount`` and return the new balance.
        The invoice becomes Paid when the balance reaches zero.
        """
        if self.status != InvoiceStatus.SENT:
            raise InvoiceNotSentError(self.status, self.id)

        amount = to_decimal(amount, "amount")
        if amount <= 0:
            raise ValidationError("Payment amount must be positive", "amount")
        if amount != round_money(amount):
            raise ValidationError("Payment amount cannot have more than 2 decimal places", "amount")

        if amount > self.balance:
            raise PaymentExceedsBalanceError(amount, self.balance, self.id)

        self.balance = round_money(self.balance - amount)
        self.mark_as_updated()

        if self.balance == 0:
            self.status = InvoiceStatus.PAID
            self.add_event(InvoicePaid(
                invoice_id=self.id,
                customer_id=self.customer_id,
                invoice_number=self.invoice_number,
                total_amount=self.total_amount
            ))

        return self.balance

    def _ensure_draft(self, action: str) -> None:
        if self.status != InvoiceStatus.DRAFT:
            raise InvoiceImmutableError(
                f"Cannot {action} invoice in {self.status.value} status. "
                f"Only Draft invoices can be modified",
                self.status
            )

    def _sum_line_items(self) -> None:
        self.subtotal = sum((item.subtotal for item in self.line_items), ZERO)
        self.total_discount = sum((item.discount_amount for item in self.line_items), ZERO)
        self.total_tax = sum((item.tax_amount for item in self.line_items), ZERO)
        self.total_amount = sum((item.total for item in self.line_items), ZERO)

    def _recalculate_totals(self) -> None:
        """Recompute totals from line items, preserving the amount already paid."""
        paid = self.amount_paid
        self._sum_line_items()
        self.balance = self.total_amount - paid
