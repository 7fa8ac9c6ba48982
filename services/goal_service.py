# services/goal_service.py
"""
Goal lifecycle: validation, creation, progress and status changes.
Reads (insights, lookups) always happen before the single write of an operation.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from configurations.logging_config import get_logger
from core.clock import Clock
from core.errors import ValidationFailure
from models.goal import (
    FeasibilityResult,
    Goal,
    GoalProgress,
    GoalsSummary,
    GoalStatus,
    GoalType,
    Priority,
)
from services.date_resolver import days_until
from services.goal_feasibility import (
    FeasibilityEngine,
    generate_milestones,
    generate_strategy,
    monthly_target,
)
from services.utils import fractional_months, quantize_money
from storage.base import StorageBackend

logger = get_logger("goal_service")


def validate_goal(target_amount: Optional[Decimal], target_date: Optional[datetime], now: datetime) -> None:
    if target_amount is None or target_amount <= 0:
        raise ValidationFailure("Target nominal goal harus lebih dari Rp 0.", field="amount")
    if target_date is None or target_date <= now:
        raise ValidationFailure("Tanggal target goal harus di masa depan.", field="target_date")


def goal_progress(goal: Goal, now: datetime) -> GoalProgress:
    percentage = float(goal.current_amount / goal.target_amount * 100)
    remaining = max(Decimal("0"), goal.target_amount - goal.current_amount)
    return GoalProgress(
        percentage=round(percentage, 2),
        remaining=quantize_money(remaining),
        days_remaining=max(0, days_until(goal.target_date, now)),
        on_track=is_on_track(goal, now),
        next_milestone=next((m for m in goal.milestones if not m.achieved), None),
    )


def is_on_track(goal: Goal, now: datetime) -> bool:
    elapsed = max(0.0, fractional_months(goal.created_at, now))
    expected = goal.monthly_target * Decimal(str(elapsed))
    return goal.current_amount >= expected


def goals_summary(goals: List[Goal], now: datetime) -> GoalsSummary:
    if not goals:
        return GoalsSummary(total=0, on_track=0, average_progress=0.0)
    progresses = [goal_progress(g, now) for g in goals]
    return GoalsSummary(
        total=len(goals),
        on_track=sum(1 for p in progresses if p.on_track),
        average_progress=round(sum(p.percentage for p in progresses) / len(progresses), 2),
    )


def _matches(goal_name: str, fragment: str) -> bool:
    name, fragment = goal_name.lower(), fragment.lower()
    return fragment in name or name in fragment


class GoalService:
    def __init__(self, storage: StorageBackend, feasibility: FeasibilityEngine, clock: Clock):
        self.storage = storage
        self.feasibility = feasibility
        self.clock = clock

    async def create_goal(
        self,
        user_id: str,
        *,
        goal_type: GoalType,
        name: str,
        target_amount: Decimal,
        target_date: datetime,
        priority: Priority = Priority.MEDIUM,
    ) -> Tuple[Goal, FeasibilityResult]:
        now = self.clock.now()
        validate_goal(target_amount, target_date, now)

        monthly = monthly_target(target_amount, target_date, now)
        feasibility = await self.feasibility.assess(user_id, monthly)

        goal = Goal(
            user_id=user_id,
            type=goal_type,
            name=name,
            target_amount=target_amount,
            target_date=target_date,
            monthly_target=monthly,
            feasibility_score=feasibility.score,
            milestones=generate_milestones(target_amount, target_date, now),
            strategy=generate_strategy(goal_type, feasibility.score),
            priority=priority,
            created_at=now,
        )
        await self.storage.create_goal(goal)
        logger.info(f"[GOAL_CREATED] user_id={user_id}, goal_id={goal.id}, type={goal_type.value}")
        return goal, feasibility

    async def active_goals(self, user_id: str) -> List[Goal]:
        return await self.storage.find_goals(user_id, GoalStatus.ACTIVE)

    async def find_active_by_name(self, user_id: str, fragment: str) -> Optional[Goal]:
        """First active goal whose name contains the fragment (or is contained in it)."""
        for goal in await self.active_goals(user_id):
            if _matches(goal.name, fragment):
                return goal
        return None

    async def record_contribution(self, goal: Goal, amount: Decimal) -> Goal:
        if amount is None or amount <= 0:
            raise ValidationFailure("Jumlah progress harus lebih dari Rp 0.", field="amount")

        goal.current_amount = goal.current_amount + Decimal(amount)
        for milestone in goal.milestones:
            milestone.achieved = goal.current_amount >= milestone.target_amount
        if goal.current_amount >= goal.target_amount:
            goal.transition(GoalStatus.COMPLETED)

        await self.storage.update_goal(goal)
        logger.info(
            f"[GOAL_PROGRESS] user_id={goal.user_id}, goal_id={goal.id}, "
            f"current={goal.current_amount}, status={goal.status.value}"
        )
        return goal

    async def cancel(self, goal: Goal) -> Goal:
        goal.transition(GoalStatus.CANCELLED)
        await self.storage.update_goal(goal)
        logger.info(f"[GOAL_CANCELLED] user_id={goal.user_id}, goal_id={goal.id}")
        return goal
