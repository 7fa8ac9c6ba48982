# storage/memory.py
import asyncio
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from models.goal import Goal, GoalStatus
from models.transaction import Budget, Transaction, TransactionType
from storage.base import StorageBackend


class InMemoryStorage(StorageBackend):
    """
    Process-local storage. Default backend when no database is configured,
    and the backend every test runs against.
    Records are copied on the way in and out so callers never share state with the store.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._transactions: Dict[str, List[Transaction]] = defaultdict(list)
        self._budgets: Dict[str, List[Budget]] = defaultdict(list)
        self._goals: Dict[str, Dict[str, Goal]] = defaultdict(dict)

    # -----------------------------
    # Transactions
    # -----------------------------
    async def create_transaction(self, transaction: Transaction) -> Transaction:
        async with self._lock:
            self._transactions[transaction.user_id].append(transaction.model_copy(deep=True))
        return transaction

    def _matching(self, user_id, type=None, start=None, end=None, category=None) -> List[Transaction]:
        rows = []
        for t in self._transactions.get(user_id, []):
            if type is not None and t.type != type:
                continue
            if start is not None and t.date < start:
                continue
            if end is not None and t.date > end:
                continue
            if category is not None and t.category != category:
                continue
            rows.append(t)
        return rows

    async def find_transactions(
        self,
        user_id: str,
        *,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        async with self._lock:
            rows = self._matching(user_id, type, start, end)
        rows = sorted(rows, key=lambda t: (t.date, t.created_at), reverse=True)
        if limit:
            rows = rows[:limit]
        return [t.model_copy(deep=True) for t in rows]

    async def sum_transactions(
        self,
        user_id: str,
        type: TransactionType,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> Decimal:
        async with self._lock:
            rows = self._matching(user_id, type, start, end, category)
        return sum((t.amount for t in rows), Decimal("0"))

    async def sum_by_category(
        self, user_id: str, type: TransactionType, start: datetime, end: datetime
    ) -> Dict[str, Decimal]:
        async with self._lock:
            rows = self._matching(user_id, type, start, end)
        totals: Dict[str, Decimal] = {}
        for t in rows:
            totals[t.category] = totals.get(t.category, Decimal("0")) + t.amount
        return totals

    # -----------------------------
    # Budgets
    # -----------------------------
    async def upsert_budget(self, budget: Budget) -> Budget:
        async with self._lock:
            budgets = self._budgets[budget.user_id]
            for i, existing in enumerate(budgets):
                if existing.category == budget.category and existing.period_start == budget.period_start:
                    stored = budget.model_copy(update={"id": existing.id})
                    budgets[i] = stored
                    return stored.model_copy()
            budgets.append(budget.model_copy())
        return budget

    async def find_budgets(
        self, user_id: str, at: datetime, category: Optional[str] = None
    ) -> List[Budget]:
        async with self._lock:
            return [
                b.model_copy()
                for b in self._budgets.get(user_id, [])
                if b.period_start <= at <= b.period_end
                and (category is None or b.category == category)
            ]

    # -----------------------------
    # Goals
    # -----------------------------
    async def create_goal(self, goal: Goal) -> Goal:
        async with self._lock:
            self._goals[goal.user_id][goal.id] = goal.model_copy(deep=True)
        return goal

    async def find_goals(self, user_id: str, status: Optional[GoalStatus] = None) -> List[Goal]:
        async with self._lock:
            goals = [
                g.model_copy(deep=True)
                for g in self._goals.get(user_id, {}).values()
                if status is None or g.status == status
            ]
        return sorted(goals, key=lambda g: g.created_at)

    async def update_goal(self, goal: Goal) -> Goal:
        async with self._lock:
            if goal.id not in self._goals.get(goal.user_id, {}):
                raise KeyError(f"Goal {goal.id} not found")
            self._goals[goal.user_id][goal.id] = goal.model_copy(deep=True)
        return goal
