"""Numbering service for invoice numbers.
Handles number formatting, year rollover and parsing. Sequence storage and
its atomic increment belong to the persistence layer.
"""

from datetime import date
from typing import Optional
import logging

from invoiceme.domain.models.base import ValidationError
from invoiceme.domain.models.value_objects import InvoiceNumber
from invoiceme.domain.repositories.sequence_repository import InvoiceSequenceRepository
from invoiceme.domain.services.clock import Clock


logger = logging.getLogger(__name__)


class NumberingService:
    """
    Domain service for invoice numbers of the form ``INV-{year}-{sequence}``.
    Stateless: every method works on values handed in by the caller.
    """

    def __init__(self, prefix: str = "INV", width: int = 4):
        if width < 1:
            raise ValidationError("Sequence width must be positive", "width")
        self.prefix = prefix
        self.width = width

    def format_invoice_number(self, year: int, sequence: int) -> str:
        """Format a year and sequence, e.g. (2024, 7) -> ``INV-2024-0007``."""
        return str(InvoiceNumber(self.prefix, year, sequence, self.width))

    def next_invoice_number(self, today: date, last_sequence: Optional[int] = None) -> str:
        """
        Next number for ``today.year`` given the last sequence issued that year.
        ``None`` or 0 means nothing has been issued yet this year.
        """
        if last_sequence is not None and last_sequence < 0:
            raise ValidationError("Last sequence cannot be negative", "last_sequence")
        return self.format_invoice_number(today.year, (last_sequence or 0) + 1)

    def next_after(self, previous: Optional[str], today: date) -> str:
        """
        Number that follows ``previous``. The sequence restarts at 1 when
        ``today`` falls in a later year than ``previous``.
        """
        if not previous:
            return self.format_invoice_number(today.year, 1)

        current = self.parse(previous)
        if current.prefix != self.prefix:
            raise ValidationError(
                f"Invoice number {previous} does not use prefix {self.prefix}",
                "invoice_number"
            )
        return str(current.next(today.year))

    def parse(self, value: str) -> InvoiceNumber:
        return InvoiceNumber.from_string(value, self.width)

    def is_valid(self, value: str) -> bool:
        """True when ``value`` is a well-formed number in this service's prefix and padding."""
        try:
            number = self.parse(value)
        except ValidationError:
            return False
        return number.prefix == self.prefix and str(number) == value.strip()


class InvoiceNumberGenerator:
    """
    Issues the next invoice number.
    The per-year counter is advanced atomically by the sequence repository,
    so concurrent callers never receive the same number.
    """

    def __init__(
        self,
        sequence_repository: InvoiceSequenceRepository,
        clock: Clock,
        numbering_service: Optional[NumberingService] = None
    ):
        self.sequence_repository = sequence_repository
        self.clock = clock
        self.numbering_service = numbering_service or NumberingService()

    async def generate_next_invoice_number(self) -> str:
        year = self.clock.today().year
        sequence = await self.sequence_repository.next_sequence(year)
        invoice_number = self.numbering_service.format_invoice_number(year, sequence)
        logger.debug(f"Issued invoice number {invoice_number}")
        return invoice_number
