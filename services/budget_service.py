# services/budget_service.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from configurations.config import BUDGET_WARNING_PERCENT
from models.transaction import Budget, BudgetStatus, TransactionType
from services.utils import month_bounds, quantize_money
from storage.base import StorageBackend


def budget_status(budget: Budget, spent: Decimal) -> BudgetStatus:
    percentage = float(spent / budget.amount * 100) if budget.amount else 0.0
    return BudgetStatus(
        category=budget.category,
        budgeted=budget.amount,
        spent=spent,
        remaining=quantize_money(budget.amount - spent),
        percentage=round(percentage, 2),
    )


def warning_level(status: BudgetStatus) -> Optional[str]:
    """'exceeded' at 100% or more, 'warning' from the warning threshold, else None."""
    if status.exceeded:
        return "exceeded"
    if status.reached(BUDGET_WARNING_PERCENT):
        return "warning"
    return None


def new_monthly_budget(user_id: str, category: str, amount: Decimal, now: datetime) -> Budget:
    start, end = month_bounds(now)
    return Budget(user_id=user_id, category=category, amount=amount, period_start=start, period_end=end)


async def budget_statuses(storage: StorageBackend, user_id: str, at: datetime) -> List[BudgetStatus]:
    statuses = []
    for budget in await storage.find_budgets(user_id, at):
        spent = await storage.sum_transactions(
            user_id, TransactionType.EXPENSE, budget.period_start, budget.period_end, budget.category
        )
        statuses.append(budget_status(budget, spent))
    return statuses
