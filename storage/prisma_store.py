# storage/prisma_store.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from prisma import Json, Prisma

from models.goal import Goal, GoalStatus
from models.transaction import Budget, Transaction, TransactionType
from storage.base import StorageBackend
from storage.rows import to_budget, to_goal, to_transaction


def _date_range(start: Optional[datetime], end: Optional[datetime]) -> Optional[Dict[str, datetime]]:
    window: Dict[str, datetime] = {}
    if start is not None:
        window["gte"] = start
    if end is not None:
        window["lte"] = end
    return window or None


def _goal_data(goal: Goal) -> Dict[str, Any]:
    return {
        "user_id": goal.user_id,
        "type": goal.type.value,
        "name": goal.name,
        "target_amount": goal.target_amount,
        "current_amount": goal.current_amount,
        "target_date": goal.target_date,
        "monthly_target": goal.monthly_target,
        "feasibility_score": goal.feasibility_score,
        "milestones": Json([m.model_dump(mode="json") for m in goal.milestones]),
        "strategy": Json(goal.strategy.model_dump(mode="json")),
        "priority": goal.priority.value,
        "status": goal.status.value,
    }


class PrismaStorage(StorageBackend):
    """
    Storage on the Prisma client. Aggregates are computed Python-side
    over `find_many` results.
    """

    def __init__(self, db: Prisma):
        self.db = db

    # -----------------------------
    # Transactions
    # -----------------------------
    def _where(self, user_id, type=None, start=None, end=None, category=None) -> Dict[str, Any]:
        where: Dict[str, Any] = {"user_id": user_id}
        if type is not None:
            where["type"] = type.value
        window = _date_range(start, end)
        if window:
            where["date"] = window
        if category is not None:
            where["category"] = category
        return where

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        await self.db.financetransaction.create(
            data={
                "id": transaction.id,
                "user_id": transaction.user_id,
                "type": transaction.type.value,
                "amount": transaction.amount,
                "category": transaction.category,
                "description": transaction.description,
                "date": transaction.date,
                "created_at": transaction.created_at,
            }
        )
        return transaction

    async def find_transactions(
        self,
        user_id: str,
        *,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        find_kwargs: Dict[str, Any] = {
            "where": self._where(user_id, type, start, end),
            "order": [{"date": "desc"}, {"created_at": "desc"}],
        }
        if limit:
            find_kwargs["take"] = limit
        rows = await self.db.financetransaction.find_many(**find_kwargs)
        return [to_transaction(r) for r in rows]

    async def sum_transactions(
        self,
        user_id: str,
        type: TransactionType,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> Decimal:
        rows = await self.db.financetransaction.find_many(where=self._where(user_id, type, start, end, category))
        return sum((Decimal(str(r.amount)) for r in rows), Decimal("0"))

    async def sum_by_category(
        self, user_id: str, type: TransactionType, start: datetime, end: datetime
    ) -> Dict[str, Decimal]:
        rows = await self.db.financetransaction.find_many(where=self._where(user_id, type, start, end))
        totals: Dict[str, Decimal] = {}
        for r in rows:
            totals[r.category] = totals.get(r.category, Decimal("0")) + Decimal(str(r.amount))
        return totals

    # -----------------------------
    # Budgets
    # -----------------------------
    async def upsert_budget(self, budget: Budget) -> Budget:
        existing = await self.db.budget.find_first(
            where={"user_id": budget.user_id, "category": budget.category, "period_start": budget.period_start}
        )
        if existing:
            row = await self.db.budget.update(
                where={"id": existing.id},
                data={"amount": budget.amount, "period_end": budget.period_end},
            )
        else:
            row = await self.db.budget.create(
                data={
                    "id": budget.id,
                    "user_id": budget.user_id,
                    "category": budget.category,
                    "amount": budget.amount,
                    "period_start": budget.period_start,
                    "period_end": budget.period_end,
                }
            )
        return to_budget(row)

    async def find_budgets(
        self, user_id: str, at: datetime, category: Optional[str] = None
    ) -> List[Budget]:
        where: Dict[str, Any] = {
            "user_id": user_id,
            "period_start": {"lte": at},
            "period_end": {"gte": at},
        }
        if category is not None:
            where["category"] = category
        rows = await self.db.budget.find_many(where=where)
        return [to_budget(r) for r in rows]

    # -----------------------------
    # Goals
    # -----------------------------
    async def create_goal(self, goal: Goal) -> Goal:
        await self.db.goal.create(data={"id": goal.id, "created_at": goal.created_at, **_goal_data(goal)})
        return goal

    async def find_goals(self, user_id: str, status: Optional[GoalStatus] = None) -> List[Goal]:
        where: Dict[str, Any] = {"user_id": user_id}
        if status is not None:
            where["status"] = status.value
        rows = await self.db.goal.find_many(where=where, order={"created_at": "asc"})
        return [to_goal(r) for r in rows]

    async def update_goal(self, goal: Goal) -> Goal:
        row = await self.db.goal.update(where={"id": goal.id}, data=_goal_data(goal))
        if row is None:
            raise KeyError(f"Goal {goal.id} not found")
        return goal
