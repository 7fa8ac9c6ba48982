# services/insight_service.py
"""
Default insight provider: derives the historical summary used by the
feasibility engine from the user's own transactions and budgets.
"""

import statistics
from decimal import Decimal

from configurations.config import INSIGHT_HISTORY_MONTHS
from configurations.logging_config import get_logger
from core.clock import Clock
from models.insight import InsightSummary
from models.transaction import TransactionType
from services.budget_service import budget_statuses
from services.utils import add_months, month_bounds, quantize_money
from storage.base import InsightProvider, StorageBackend

logger = get_logger("insight_service")


def volatility(values) -> float:
    """
    Coefficient of variation (population std / mean).
    0.0 when there is no data or the mean is zero.
    """
    values = [float(v) for v in values]
    if not values:
        return 0.0
    mean = statistics.fmean(values)
    if mean == 0:
        return 0.0
    return statistics.pstdev(values) / mean


class StorageInsightProvider(InsightProvider):
    def __init__(self, storage: StorageBackend, clock: Clock, history_months: int = INSIGHT_HISTORY_MONTHS):
        self.storage = storage
        self.clock = clock
        self.history_months = history_months

    async def get_summary(self, user_id: str) -> InsightSummary:
        now = self.clock.now()
        window_start = month_bounds(add_months(now, -(self.history_months - 1)))[0]

        income = await self.storage.sum_transactions(user_id, TransactionType.INCOME, window_start, now)
        expenses = await self.storage.sum_transactions(user_id, TransactionType.EXPENSE, window_start, now)

        # Spending pattern: monthly expense totals for months with activity
        monthly_expenses = []
        for offset in range(self.history_months):
            start, end = month_bounds(add_months(now, -offset))
            total = await self.storage.sum_transactions(user_id, TransactionType.EXPENSE, start, end)
            if total > 0:
                monthly_expenses.append(total)

        statuses = await budget_statuses(self.storage, user_id, now)
        over_limit = sum(1 for s in statuses if s.over_limit)

        savings = income - expenses
        summary = InsightSummary(
            monthly_average_savings=quantize_money(savings / Decimal(self.history_months)),
            budgets_over_limit=over_limit,
            volatility=volatility(monthly_expenses),
            income=income,
            expenses=expenses,
            savings_rate=float(savings / income * 100) if income > 0 else 0.0,
        )
        logger.info(
            f"[INSIGHT] user_id={user_id}, avg_savings={summary.monthly_average_savings}, "
            f"over_limit={over_limit}, volatility={summary.volatility:.3f}"
        )
        return summary
