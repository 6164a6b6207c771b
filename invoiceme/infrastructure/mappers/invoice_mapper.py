"""
Invoice mapper for converting between domain entities and database models.
"""

from typing import List

from invoiceme.domain.models.base import as_utc
from invoiceme.domain.models.invoice import Invoice, InvoiceStatus
from invoiceme.domain.models.line_item import LineItem
from invoiceme.infrastructure.db.models import InvoiceModel, InvoiceLineItemModel


class InvoiceMapper:
    """Maps between Invoice domain entity and InvoiceModel database model."""

    def domain_to_model(self, invoice: Invoice) -> InvoiceModel:
        """Convert Invoice domain entity to a new InvoiceModel."""
        model = InvoiceModel(
            id=invoice.id,
            customer_id=invoice.customer_id,
            invoice_number=invoice.invoice_number,
            created_at=invoice.created_at
        )
        self.update_model(model, invoice)
        return model

    def update_model(self, model: InvoiceModel, invoice: Invoice) -> None:
        """
        Copy the invoice state onto an existing model.
        Line item rows are matched by id so unchanged rows are kept.
        """
        model.customer_id = invoice.customer_id
        model.invoice_number = invoice.invoice_number
        model.status = invoice.status.value
        model.payment_terms = invoice.payment_terms
        model.notes = invoice.notes
        model.issue_date = invoice.issue_date
        model.due_date = invoice.due_date
        model.subtotal = invoice.subtotal
        model.total_discount = invoice.total_discount
        model.total_tax = invoice.total_tax
        model.total_amount = invoice.total_amount
        model.balance = invoice.balance
        model.updated_at = invoice.updated_at

        existing = {row.id: row for row in model.line_items}
        rows: List[InvoiceLineItemModel] = []
        for position, item in enumerate(invoice.line_items):
            row = existing.get(item.id) or InvoiceLineItemModel(id=item.id)
            self._line_item_to_model(item, row, position)
            rows.append(row)
        model.line_items = rows

    def model_to_domain(self, model: InvoiceModel) -> Invoice:
        """Convert InvoiceModel to Invoice domain entity."""
        line_items = [self._line_item_model_to_domain(row) for row in model.line_items]

        return Invoice(
            id=model.id,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            version=model.version,
            customer_id=model.customer_id,
            invoice_number=model.invoice_number,
            issue_date=model.issue_date,
            due_date=model.due_date,
            status=InvoiceStatus(model.status),
            payment_terms=model.payment_terms or "",
            notes=model.notes,
            line_items=line_items,
            balance=model.balance
        )

    def _line_item_to_model(self, item: LineItem, row: InvoiceLineItemModel, position: int) -> None:
        row.position = position
        row.description = item.description
        row.quantity = item.quantity
        row.unit_price = item.unit_price
        row.discount_percent = item.discount_percent
        row.tax_rate = item.tax_rate
        row.subtotal = item.subtotal
        row.discount_amount = item.discount_amount
        row.tax_amount = item.tax_amount
        row.total = item.total

    def _line_item_model_to_domain(self, row: InvoiceLineItemModel) -> LineItem:
        return LineItem.create(
            description=row.description,
            quantity=row.quantity,
            unit_price=row.unit_price,
            discount_percent=row.discount_percent,
            tax_rate=row.tax_rate,
            line_item_id=row.id
        )
