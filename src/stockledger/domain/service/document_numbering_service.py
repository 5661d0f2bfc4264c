"""Domain service: Document Numbering.

Generates human-readable, unique document numbers from atomic counters:

- invoices: ``INV{YY}{MM}{seq:04d}``, the sequence restarting every
  calendar month
- purchase orders: ``PO{seq:06d}``, one global sequence

Numbers come from ``SequenceRepository.next_value`` and never from
counting existing documents, which hands out duplicates as soon as two
documents are created at the same time.
"""

from __future__ import annotations

import logging
from datetime import date

from stockledger.domain.model.sale import utc_today
from stockledger.domain.repository.sequence_repository import SequenceRepository

logger = logging.getLogger(__name__)

PURCHASE_ORDER_SEQUENCE = "purchase_order"
_INVOICE_SEQUENCE_PREFIX = "invoice"


class DocumentNumberingService:

    def __init__(self, sequences: SequenceRepository) -> None:
        self._sequences = sequences

    def next_invoice_number(self, today: date | None = None) -> str:
        today = today or utc_today()
        period = f"{today.year % 100:02d}{today.month:02d}"
        seq = self._sequences.next_value(f"{_INVOICE_SEQUENCE_PREFIX}:{period}")
        number = f"INV{period}{seq:04d}"
        logger.debug("invoice_number_allocated", extra={"document_number": number})
        return number

    def next_purchase_order_number(self) -> str:
        seq = self._sequences.next_value(PURCHASE_ORDER_SEQUENCE)
        number = f"PO{seq:06d}"
        logger.debug("purchase_order_number_allocated", extra={"document_number": number})
        return number
