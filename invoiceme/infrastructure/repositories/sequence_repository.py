"""
Invoice sequence repository implementation using SQLAlchemy.
"""

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoiceme.domain.models.base import ConcurrencyError
from invoiceme.domain.repositories.sequence_repository import InvoiceSequenceRepository as SequenceRepositoryInterface
from invoiceme.infrastructure.db.models import InvoiceSequenceModel


logger = logging.getLogger(__name__)


class SQLAlchemyInvoiceSequenceRepository(SequenceRepositoryInterface):
    """
    Per-year counters kept in ``invoice_sequences``.

    The increment is a single ``UPDATE ... SET last_sequence = last_sequence + 1``
    inside the caller's transaction, so the row stays locked until commit and a
    rolled back invoice does not burn a number.
    """

    def __init__(self, session: Session):
        self.session = session

    async def next_sequence(self, year: int) -> int:
        result = self.session.execute(
            update(InvoiceSequenceModel)
            .where(InvoiceSequenceModel.year == year)
            .values(last_sequence=InvoiceSequenceModel.last_sequence + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            # First invoice of the year
            self.session.add(InvoiceSequenceModel(year=year, last_sequence=1))
            try:
                self.session.flush()
            except IntegrityError as e:
                logger.warning(f"Invoice sequence for {year} was created concurrently")
                raise ConcurrencyError("InvoiceSequence", year, expected_version=0) from e
            return 1

        return self.session.query(InvoiceSequenceModel.last_sequence).filter_by(year=year).scalar()
