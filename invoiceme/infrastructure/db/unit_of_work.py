"""
SQLAlchemy unit of work.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from invoiceme.domain.models.base import BusinessRuleViolation, ConcurrencyError
from invoiceme.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Wraps one session. Repositories built on the same session flush into
    its transaction; ``commit`` makes their writes visible.
    """

    def __init__(self, session: Session):
        self.session = session

    async def commit(self) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            logger.warning(f"Concurrent modification detected on commit: {str(e)}")
            raise ConcurrencyError("Aggregate", None, expected_version=0) from e
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity error on commit: {str(e.orig)}")
            raise BusinessRuleViolation("The change conflicts with stored data") from e

    async def rollback(self) -> None:
        self.session.rollback()
