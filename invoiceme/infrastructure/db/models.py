"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    Numeric, Date, ForeignKey, Uuid,
    Index, UniqueConstraint, CheckConstraint, text
)
from sqlalchemy.orm import relationship

from invoiceme.infrastructure.db.database import Base


class CustomerModel(Base):
    """Customer table"""
    __tablename__ = 'customers'

    id = Column(Uuid, primary_key=True)

    # Contact
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50))

    # Billing address; either all parts are set or none
    street = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    postal_code = Column(String(20))
    country = Column(String(100))

    # Soft delete
    status = Column(String(20), nullable=False, default='active')
    deleted_at = Column(DateTime(timezone=True))

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    version = Column(Integer, nullable=False)

    # Relationships
    invoices = relationship("InvoiceModel", back_populates="customer")

    __mapper_args__ = {"version_id_col": version}

    # Indexes
    __table_args__ = (
        Index('idx_customers_status', 'status'),
        Index('idx_customers_name', 'name'),
        # Emails are unique among active customers; a deleted customer frees its email
        Index(
            'uq_customers_active_email', 'email', unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'")
        ),
    )


class InvoiceModel(Base):
    """Invoice table"""
    __tablename__ = 'invoices'

    id = Column(Uuid, primary_key=True)
    customer_id = Column(Uuid, ForeignKey('customers.id'), nullable=False)

    # Invoice details
    invoice_number = Column(String(50), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default='Draft')
    payment_terms = Column(String(100), nullable=False, default='')
    notes = Column(Text)

    # Amounts, all derived from the line items except balance
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    total_discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_tax = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    # Dates
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("CustomerModel", back_populates="invoices")
    line_items = relationship(
        "InvoiceLineItemModel",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItemModel.position"
    )
    payments = relationship("PaymentModel", back_populates="invoice", order_by="PaymentModel.payment_date")

    __mapper_args__ = {"version_id_col": version}

    # Indexes
    __table_args__ = (
        Index('idx_invoices_customer', 'customer_id'),
        Index('idx_invoices_status', 'status'),
        Index('idx_invoices_due_date', 'due_date'),
        CheckConstraint('balance >= 0', name='check_invoice_balance_non_negative'),
        CheckConstraint('balance <= total_amount', name='check_invoice_balance_within_total'),
        CheckConstraint('due_date >= issue_date', name='check_invoice_due_after_issue'),
    )


class InvoiceLineItemModel(Base):
    """Invoice line item table"""
    __tablename__ = 'invoice_line_items'

    id = Column(String(36), primary_key=True)
    invoice_id = Column(Uuid, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_percent = Column(Numeric(9, 6), nullable=False, default=0)
    tax_rate = Column(Numeric(9, 6), nullable=False, default=0)

    # Calculated amounts, stored for reporting
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    # Relationships
    invoice = relationship("InvoiceModel", back_populates="line_items")

    __table_args__ = (
        Index('idx_line_items_invoice', 'invoice_id'),
        CheckConstraint('quantity > 0', name='check_line_item_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='check_line_item_unit_price_non_negative'),
    )


class PaymentModel(Base):
    """Payment table"""
    __tablename__ = 'payments'

    id = Column(Uuid, primary_key=True)
    invoice_id = Column(Uuid, ForeignKey('invoices.id'), nullable=False)

    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    reference = Column(String(255))
    notes = Column(Text)
    created_by = Column(String(255), nullable=False)
    idempotency_key = Column(String(255))

    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    invoice = relationship("InvoiceModel", back_populates="payments")

    __table_args__ = (
        Index('idx_payments_invoice', 'invoice_id'),
        Index('idx_payments_date', 'payment_date'),
        UniqueConstraint('invoice_id', 'idempotency_key', name='uq_payments_invoice_idempotency_key'),
        CheckConstraint('amount > 0', name='check_payment_amount_positive'),
    )


class InvoiceSequenceModel(Base):
    """Per-year invoice number counters"""
    __tablename__ = 'invoice_sequences'

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_sequence = Column(Integer, nullable=False, default=0)
