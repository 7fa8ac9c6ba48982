from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from models.goal import GoalStatus
from services.goal_service import goal_progress, is_on_track
from storage.rows import naive, to_budget, to_goal, to_transaction

UTC = timezone.utc


def goal_row(now):
    return SimpleNamespace(
        id="g1",
        user_id="u1",
        type="savings",
        name="Liburan",
        target_amount=Decimal("12000000"),
        current_amount=Decimal("3000000"),
        target_date=(now + timedelta(days=365)).replace(tzinfo=UTC),
        monthly_target=Decimal("1000000"),
        feasibility_score=80,
        milestones=[{"label": "25% Target", "target_date": "2024-09-01T12:00:00+00:00", "target_amount": "3000000"}],
        strategy={"steps": ["Sisihkan di awal bulan"], "adjustments": []},
        priority="medium",
        status="active",
        created_at=(now - timedelta(days=30)).replace(tzinfo=UTC),
    )


def test_naive_keeps_wall_clock_time(now):
    assert naive(now.replace(tzinfo=UTC)) == now
    assert naive(now) is now
    assert naive(None) is None


def test_goal_rows_work_with_the_engine_clock(now):
    goal = to_goal(goal_row(now))

    assert goal.target_date.tzinfo is None
    assert goal.created_at.tzinfo is None
    assert goal.milestones[0].target_date == datetime(2024, 9, 1, 12, 0)
    assert goal.status is GoalStatus.ACTIVE

    progress = goal_progress(goal, now)
    assert progress.percentage == 25.0
    assert progress.days_remaining == 365
    assert is_on_track(goal, now)


def test_transaction_and_budget_rows_are_naive(now):
    tx = to_transaction(
        SimpleNamespace(
            id="t1",
            user_id="u1",
            type="expense",
            amount=Decimal("50000"),
            category="Makanan & Minuman",
            description=None,
            date=now.replace(tzinfo=UTC),
            created_at=now.replace(tzinfo=UTC),
        )
    )
    assert tx.date == now
    assert tx.description == ""

    budget = to_budget(
        SimpleNamespace(
            id="b1",
            user_id="u1",
            category="Belanja",
            amount=Decimal("100000"),
            period_start=now.replace(day=1, tzinfo=UTC),
            period_end=now.replace(day=30, tzinfo=UTC),
        )
    )
    assert budget.period_start <= now <= budget.period_end
