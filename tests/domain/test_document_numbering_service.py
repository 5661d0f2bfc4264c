"""Unit tests for DocumentNumberingService."""

from datetime import date

from stockledger.domain.service.document_numbering_service import (
    PURCHASE_ORDER_SEQUENCE,
    DocumentNumberingService,
)
from tests.fakes import FakeSequenceRepository


class TestInvoiceNumbers:

    def test_sequential_within_month(self):
        service = DocumentNumberingService(FakeSequenceRepository())
        assert service.next_invoice_number(date(2026, 3, 5)) == "INV26030001"
        assert service.next_invoice_number(date(2026, 3, 28)) == "INV26030002"

    def test_sequence_restarts_each_month(self):
        service = DocumentNumberingService(FakeSequenceRepository())
        service.next_invoice_number(date(2026, 3, 5))
        assert service.next_invoice_number(date(2026, 4, 1)) == "INV26040001"

    def test_same_month_different_year_is_separate(self):
        service = DocumentNumberingService(FakeSequenceRepository())
        service.next_invoice_number(date(2025, 3, 5))
        assert service.next_invoice_number(date(2026, 3, 5)) == "INV26030001"


class TestPurchaseOrderNumbers:

    def test_single_global_sequence(self):
        sequences = FakeSequenceRepository()
        service = DocumentNumberingService(sequences)
        assert service.next_purchase_order_number() == "PO000001"
        assert service.next_purchase_order_number() == "PO000002"
        assert sequences.current_value(PURCHASE_ORDER_SEQUENCE) == 2
