"""
Unit tests for invoice numbering.
"""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

from invoiceme.domain.models.base import ValidationError
from invoiceme.domain.models.value_objects import InvoiceNumber
from invoiceme.domain.services.clock import FixedClock
from invoiceme.domain.services.numbering_service import InvoiceNumberGenerator, NumberingService


class TestInvoiceNumber:
    """Test cases for the InvoiceNumber value object."""

    def test_format_pads_sequence(self):
        assert str(InvoiceNumber("INV", 2024, 7)) == "INV-2024-0007"

    def test_sequence_grows_past_padding(self):
        assert str(InvoiceNumber("INV", 2024, 12345)) == "INV-2024-12345"

    def test_parse(self):
        number = InvoiceNumber.from_string("INV-2024-0042")

        assert number.prefix == "INV"
        assert number.year == 2024
        assert number.sequence == 42

    @pytest.mark.parametrize("value", ["", "INV-24-0001", "INV-2024-", "2024-0001", "INV-2024-0000"])
    def test_parse_invalid(self, value):
        with pytest.raises(ValidationError):
            InvoiceNumber.from_string(value)

    def test_next_same_year(self):
        assert str(InvoiceNumber("INV", 2024, 41).next(2024)) == "INV-2024-0042"

    def test_next_rolls_over(self):
        assert str(InvoiceNumber("INV", 2024, 913).next(2025)) == "INV-2025-0001"

    def test_next_cannot_go_back(self):
        with pytest.raises(ValidationError):
            InvoiceNumber("INV", 2024, 3).next(2023)


class TestNumberingService:
    """Test cases for NumberingService domain service."""

    def setup_method(self):
        self.service = NumberingService()

    def test_first_number_of_year(self):
        assert self.service.next_invoice_number(date(2024, 1, 1)) == "INV-2024-0001"
        assert self.service.next_invoice_number(date(2024, 1, 1), 0) == "INV-2024-0001"

    def test_next_number(self):
        assert self.service.next_invoice_number(date(2024, 8, 1), 9) == "INV-2024-0010"

    def test_negative_last_sequence(self):
        with pytest.raises(ValidationError):
            self.service.next_invoice_number(date(2024, 8, 1), -1)

    def test_next_after(self):
        assert self.service.next_after("INV-2024-0009", date(2024, 12, 31)) == "INV-2024-0010"
        assert self.service.next_after("INV-2024-0009", date(2025, 1, 1)) == "INV-2025-0001"
        assert self.service.next_after(None, date(2025, 1, 1)) == "INV-2025-0001"

    def test_next_after_other_prefix(self):
        with pytest.raises(ValidationError, match="prefix"):
            self.service.next_after("BIL-2024-0001", date(2024, 1, 2))

    def test_custom_prefix_and_width(self):
        service = NumberingService(prefix="BIL", width=6)

        assert service.format_invoice_number(2024, 3) == "BIL-2024-000003"

    def test_is_valid(self):
        assert self.service.is_valid("INV-2024-0001")
        assert not self.service.is_valid("INV-2024-1")
        assert not self.service.is_valid("BIL-2024-0001")
        assert not self.service.is_valid("garbage")


class TestInvoiceNumberGenerator:
    """Test cases for the generator backed by the sequence repository."""

    @pytest.mark.asyncio
    async def test_uses_clock_year_and_repository_sequence(self):
        sequence_repository = AsyncMock()
        sequence_repository.next_sequence.return_value = 17
        clock = FixedClock(datetime(2024, 11, 5, 9, 30, tzinfo=timezone.utc))
        generator = InvoiceNumberGenerator(sequence_repository, clock)

        number = await generator.generate_next_invoice_number()

        assert number == "INV-2024-0017"
        sequence_repository.next_sequence.assert_awaited_once_with(2024)

    @pytest.mark.asyncio
    async def test_year_rollover(self):
        counters = {}

        async def next_sequence(year):
            counters[year] = counters.get(year, 0) + 1
            return counters[year]

        sequence_repository = AsyncMock()
        sequence_repository.next_sequence.side_effect = next_sequence
        clock = FixedClock.on(date(2024, 12, 31))
        generator = InvoiceNumberGenerator(sequence_repository, clock)

        assert await generator.generate_next_invoice_number() == "INV-2024-0001"
        assert await generator.generate_next_invoice_number() == "INV-2024-0002"

        clock.set(datetime(2025, 1, 1, 0, 0, 1))

        assert await generator.generate_next_invoice_number() == "INV-2025-0001"
