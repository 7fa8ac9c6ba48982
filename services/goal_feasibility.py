# services/goal_feasibility.py
"""
Goal Feasibility Engine

- Scores how achievable a monthly saving target is, given the user's history
- Penalty rules, thresholds and score bands are configuration constants
- Also derives the goal plan: monthly target, milestones and strategy
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from configurations.config import (
    BUDGET_VIOLATION_PENALTY,
    FEASIBILITY_HIGH,
    FEASIBILITY_LOW,
    FEASIBILITY_MEDIUM,
    MILESTONE_INTERVAL_MONTHS,
    SAVINGS_SHORTFALL_PENALTY,
    STRATEGY_ADJUSTMENT_BELOW,
    VOLATILITY_PENALTY,
    VOLATILITY_THRESHOLD,
)
from configurations.logging_config import get_logger
from models.goal import FeasibilityFactor, FeasibilityResult, GoalType, Milestone, Strategy
from models.insight import InsightSummary
from services.collaborator import call_with_timeout
from services.utils import add_months, months_between, quantize_money
from storage.base import InsightProvider

logger = get_logger("goal_feasibility")


# -----------------------------
# Plan
# -----------------------------
def monthly_target(target_amount: Decimal, target_date: datetime, now: datetime) -> Decimal:
    """target / whole months to the deadline, never dividing by less than one month."""
    months = max(1, months_between(now, target_date))
    return quantize_money(Decimal(target_amount) / months)


def generate_milestones(
    target_amount: Decimal,
    target_date: datetime,
    now: datetime,
    current_amount: Decimal = Decimal("0"),
    interval_months: int = MILESTONE_INTERVAL_MONTHS,
) -> List[Milestone]:
    """
    Checkpoints every `interval_months` strictly before the deadline,
    amounts interpolated linearly over elapsed time, then the final milestone.
    """
    target_amount = Decimal(target_amount)
    total = (target_date - now).total_seconds()
    milestones: List[Milestone] = []
    previous = Decimal(current_amount)

    months = interval_months
    while total > 0:
        checkpoint = add_months(now, months)
        if checkpoint >= target_date:
            break
        fraction = Decimal(str((checkpoint - now).total_seconds() / total))
        amount = quantize_money(Decimal(current_amount) + (target_amount - Decimal(current_amount)) * fraction)
        # Rounding must not break strict monotonicity
        if previous < amount < target_amount:
            milestones.append(
                Milestone(label=f"Target {months} Bulan", target_date=checkpoint, target_amount=amount)
            )
            previous = amount
        months += interval_months

    milestones.append(Milestone(label="Target Akhir", target_date=target_date, target_amount=target_amount))
    return milestones


STRATEGY_STEPS = {
    GoalType.SAVINGS: [
        "Atur auto-debit untuk tabungan rutin",
        "Alokasikan bonus dan pendapatan tidak terduga",
        "Review dan kurangi pengeluaran tidak penting",
    ],
    GoalType.INVESTMENT: [
        "Riset instrumen investasi yang sesuai",
        "Mulai dengan investasi rutin minimal",
        "Diversifikasi portofolio seiring waktu",
    ],
    GoalType.EMERGENCY_FUND: [
        "Prioritaskan dana darurat sebelum investasi",
        "Simpan di instrumen yang likuid",
        "Target minimal 3x pengeluaran bulanan",
    ],
    GoalType.PURCHASE: [
        "Bandingkan harga dan tentukan anggaran maksimal",
        "Sisihkan dana khusus pembelian setiap gajian",
        "Hindari membeli dengan cicilan berbunga",
    ],
    GoalType.EDUCATION: [
        "Hitung total biaya pendidikan termasuk kenaikan tahunan",
        "Pisahkan rekening khusus dana pendidikan",
        "Pertimbangkan instrumen jangka panjang seperti reksadana",
    ],
    GoalType.DEBT_PAYMENT: [
        "Daftar semua utang beserta bunganya",
        "Lunasi utang terkecil terlebih dahulu",
        "Hindari menambah utang baru",
    ],
}

STRATEGY_ADJUSTMENTS = [
    "Perpanjang jangka waktu goal",
    "Kurangi target nominal",
    "Cari sumber pendapatan tambahan",
]


def generate_strategy(goal_type: GoalType, score: int) -> Strategy:
    adjustments = list(STRATEGY_ADJUSTMENTS) if score < STRATEGY_ADJUSTMENT_BELOW else []
    return Strategy(steps=list(STRATEGY_STEPS.get(goal_type, [])), adjustments=adjustments)


# -----------------------------
# Feasibility
# -----------------------------
def recommendation(score: int) -> str:
    if score >= FEASIBILITY_HIGH:
        return "Goal ini sangat realistis untuk dicapai."
    if score >= FEASIBILITY_MEDIUM:
        return "Goal ini bisa dicapai dengan disiplin yang baik."
    if score >= FEASIBILITY_LOW:
        return "Goal ini menantang, perlu penyesuaian budget."
    return "Goal ini terlalu ambisius, pertimbangkan untuk merevisi target."


def evaluate(target: Decimal, summary: InsightSummary) -> FeasibilityResult:
    score = 100
    factors: List[FeasibilityFactor] = []

    if Decimal(target) > summary.monthly_average_savings:
        score -= SAVINGS_SHORTFALL_PENALTY
        factors.append(
            FeasibilityFactor(
                code="savings_shortfall",
                message="Target bulanan melebihi rata-rata tabungan Anda",
            )
        )

    if summary.budgets_over_limit > 0:
        score -= BUDGET_VIOLATION_PENALTY * summary.budgets_over_limit
        factors.append(
            FeasibilityFactor(
                code="budget_violations",
                message="Beberapa kategori budget Anda sering terlampaui",
            )
        )

    if summary.volatility > VOLATILITY_THRESHOLD:
        score -= VOLATILITY_PENALTY
        factors.append(
            FeasibilityFactor(
                code="volatility",
                message="Pola pemasukan/pengeluaran Anda cukup fluktuatif",
            )
        )

    score = max(0, min(100, score))
    return FeasibilityResult(score=score, factors=factors, recommendation=recommendation(score))


class FeasibilityEngine:
    def __init__(self, insights: InsightProvider, timeout: Optional[float] = None):
        self.insights = insights
        self.timeout = timeout

    async def assess(self, user_id: str, target: Decimal) -> FeasibilityResult:
        summary = await call_with_timeout(
            self.insights.get_summary(user_id),
            operation="get_insight_summary",
            timeout=self.timeout,
        )
        result = evaluate(target, summary)
        logger.info(f"[FEASIBILITY] user_id={user_id}, monthly_target={target}, score={result.score}")
        return result
