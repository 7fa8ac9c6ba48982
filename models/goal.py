# models/goal.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from core.errors import InternalInvariantViolation


class GoalType(str, Enum):
    SAVINGS = "savings"
    DEBT_PAYMENT = "debt_payment"
    INVESTMENT = "investment"
    PURCHASE = "purchase"
    EMERGENCY_FUND = "emergency_fund"
    EDUCATION = "education"

    def label(self) -> str:
        return GOAL_TYPE_LABELS[self]


GOAL_TYPE_LABELS = {
    GoalType.SAVINGS: "Tabungan",
    GoalType.EMERGENCY_FUND: "Dana Darurat",
    GoalType.INVESTMENT: "Investasi",
    GoalType.EDUCATION: "Pendidikan",
    GoalType.PURCHASE: "Pembelian",
    GoalType.DEBT_PAYMENT: "Pembayaran Utang",
}


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def label(self) -> str:
        return {"low": "Rendah", "medium": "Sedang", "high": "Tinggi"}[self.value]


class GoalStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "GoalStatus") -> bool:
        return target in _ALLOWED_TRANSITIONS.get(self, set())


_ALLOWED_TRANSITIONS = {
    GoalStatus.ACTIVE: {GoalStatus.COMPLETED, GoalStatus.CANCELLED, GoalStatus.PAUSED},
    GoalStatus.PAUSED: {GoalStatus.ACTIVE},
}


class Milestone(BaseModel):
    label: str
    target_date: datetime
    target_amount: Decimal = Field(..., ge=0)
    achieved: bool = False


class Strategy(BaseModel):
    steps: List[str] = Field(default_factory=list)
    adjustments: List[str] = Field(default_factory=list)


class FeasibilityFactor(BaseModel):
    type: str = "warning"
    code: str
    message: str


class FeasibilityResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    factors: List[FeasibilityFactor] = Field(default_factory=list)
    recommendation: str


class Goal(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    type: GoalType
    name: str
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_date: datetime
    monthly_target: Decimal
    feasibility_score: int = Field(..., ge=0, le=100)
    milestones: List[Milestone] = Field(default_factory=list)
    strategy: Strategy = Field(default_factory=Strategy)
    priority: Priority = Priority.MEDIUM
    status: GoalStatus = GoalStatus.ACTIVE
    created_at: datetime

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Goal name must not be empty")
        return v

    def transition(self, target: GoalStatus) -> None:
        if not self.status.can_transition_to(target):
            raise InternalInvariantViolation(
                f"Illegal goal status transition {self.status.value} -> {target.value}"
            )
        self.status = target


class GoalProgress(BaseModel):
    percentage: float
    remaining: Decimal
    days_remaining: int
    on_track: bool
    next_milestone: Optional[Milestone] = None


class GoalsSummary(BaseModel):
    total: int
    on_track: int
    average_progress: float
