"""
Payment mapper for converting between domain entities and database models.
"""

from invoiceme.domain.models.base import as_utc
from invoiceme.domain.models.payment import Payment, PaymentMethod
from invoiceme.infrastructure.db.models import PaymentModel


class PaymentMapper:
    """Maps between Payment domain entity and PaymentModel database model."""

    def domain_to_model(self, payment: Payment) -> PaymentModel:
        return PaymentModel(
            id=payment.id,
            invoice_id=payment.invoice_id,
            payment_date=payment.payment_date,
            amount=payment.amount,
            payment_method=payment.method.value,
            reference=payment.reference,
            notes=payment.notes,
            created_by=payment.created_by,
            idempotency_key=payment.idempotency_key,
            created_at=payment.created_at
        )

    def model_to_domain(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            invoice_id=model.invoice_id,
            payment_date=model.payment_date,
            amount=model.amount,
            method=PaymentMethod(model.payment_method),
            created_by=model.created_by,
            reference=model.reference,
            notes=model.notes,
            idempotency_key=model.idempotency_key,
            created_at=as_utc(model.created_at)
        )
