"""Application service: Sales Summary use case (query).

Revenue, profit and payment breakdown over a range of business days.
Profit is taken from each line's cost snapshot, so later cost price
changes do not rewrite past figures.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal

from stockledger.application.dto import SalesSummaryDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.sale import PaymentMethod, PaymentStatus, utc_today
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.unit_of_work import UnitOfWork


class SalesSummaryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, start: date | None = None, end: date | None = None) -> SalesSummaryDTO:
        """Summarize sales from *start* to *end*; both default to today."""
        start = start or utc_today()
        end = end or start
        if start > end:
            raise ValidationError(f"Start date {start} is after end date {end}")

        with self._uow:
            sales = [
                s for s in self._uow.sales.list_all()
                if start <= s.sale_date.date() <= end
            ]

        revenue = Money.zero()
        outstanding = Money.zero()
        profit = Decimal("0")
        methods: Counter[str] = Counter({m.value: 0 for m in PaymentMethod})
        for sale in sales:
            revenue = revenue + sale.total_amount
            outstanding = outstanding + sale.balance_due
            profit += sale.profit
            methods[sale.payment_method.value] += 1

        return SalesSummaryDTO(
            start=start,
            end=end,
            sale_count=len(sales),
            total_revenue=str(revenue),
            total_profit=profit,
            amount_outstanding=str(outstanding),
            pending_payments=sum(1 for s in sales if s.payment_status == PaymentStatus.PENDING),
            by_payment_method=dict(methods),
        )
