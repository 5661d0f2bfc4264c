"""Application service: Update Payment use case.

The only change a sale accepts after creation.  Stock is not touched.
"""

from __future__ import annotations

import logging

from stockledger.application.choices import parse_payment_status
from stockledger.application.dto import SaleDTO
from stockledger.application.mapping import sale_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.unit_of_work import UnitOfWork, sale_lock_key

logger = logging.getLogger(__name__)


class UpdatePaymentHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, sale_id: str, payment_status: str, paid_amount: str) -> SaleDTO:
        status = parse_payment_status(payment_status)
        amount = Money.of(paid_amount)

        with self._uow:
            self._uow.lock(sale_lock_key(sale_id))
            sale = self._uow.sales.get_by_id(sale_id)
            if sale is None:
                raise EntityNotFoundError("Sale", sale_id)
            sale.update_payment(status, amount)
            self._uow.sales.save(sale)
            self._uow.commit()

        logger.info(
            "payment_updated",
            extra={"sale_id": sale_id, "payment_status": status.value,
                   "paid_amount": str(amount.amount)},
        )
        return sale_to_dto(sale)
