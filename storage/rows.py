# storage/rows.py
"""
Database rows -> domain models

Prisma hands datetimes back timezone-aware (UTC). The engine runs on
naive wall-clock values, which Prisma stores as UTC, so the tzinfo is
dropped without shifting the clock time.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from models.goal import Goal, GoalStatus, Milestone, Strategy
from models.transaction import Budget, Transaction, TransactionType


def naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def to_transaction(row) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        type=TransactionType(row.type),
        amount=Decimal(str(row.amount)),
        category=row.category,
        description=row.description or "",
        date=naive(row.date),
        created_at=naive(row.created_at),
    )


def to_budget(row) -> Budget:
    return Budget(
        id=row.id,
        user_id=row.user_id,
        category=row.category,
        amount=Decimal(str(row.amount)),
        period_start=naive(row.period_start),
        period_end=naive(row.period_end),
    )


def to_goal(row) -> Goal:
    milestones = [Milestone.model_validate(m) for m in (row.milestones or [])]
    return Goal(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        name=row.name,
        target_amount=Decimal(str(row.target_amount)),
        current_amount=Decimal(str(row.current_amount)),
        target_date=naive(row.target_date),
        monthly_target=Decimal(str(row.monthly_target)),
        feasibility_score=row.feasibility_score,
        milestones=[m.model_copy(update={"target_date": naive(m.target_date)}) for m in milestones],
        strategy=Strategy.model_validate(row.strategy or {}),
        priority=row.priority,
        status=GoalStatus(row.status),
        created_at=naive(row.created_at),
    )
