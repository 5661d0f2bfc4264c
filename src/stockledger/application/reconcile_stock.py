"""Application service: Reconcile Stock use case (query).

Every product's ``current_stock`` must equal the signed sum of its ledger
entries.  A mismatch means stock was changed outside the movement
service, or the state file was edited by hand.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockMismatchDTO:
    product_id: str
    product_name: str
    current_stock: Decimal
    ledger_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.current_stock - self.ledger_balance


class ReconcileStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[StockMismatchDTO]:
        """Return one record per product whose stock disagrees with its ledger."""
        with self._uow:
            products, entries = self._uow.stock_snapshot()

        balances: dict[str, Decimal] = defaultdict(Decimal)
        for entry in entries:
            balances[entry.product_id] += entry.signed_quantity

        mismatches = [
            StockMismatchDTO(
                product_id=p.id,
                product_name=p.name,
                current_stock=p.current_stock,
                ledger_balance=balances[p.id],
            )
            for p in products
            if p.current_stock != balances[p.id]
        ]
        for mismatch in mismatches:
            logger.error(
                "stock_ledger_mismatch",
                extra={"product_id": mismatch.product_id,
                       "current_stock": str(mismatch.current_stock),
                       "ledger_balance": str(mismatch.ledger_balance)},
            )
        return mismatches
