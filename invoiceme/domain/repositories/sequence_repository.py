"""Invoice sequence repository interface."""

from abc import ABC, abstractmethod


class InvoiceSequenceRepository(ABC):
    """Per-year invoice number counters."""

    @abstractmethod
    async def next_sequence(self, year: int) -> int:
        """
        Atomically advance the counter for ``year`` and return the new value.
        The first call for a year returns 1.
        """
        pass
