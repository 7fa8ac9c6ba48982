# models/insight.py
from decimal import Decimal

from pydantic import BaseModel, Field


class InsightSummary(BaseModel):
    """
    Historical summary consumed by the goal feasibility engine.
    """

    monthly_average_savings: Decimal = Field(default=Decimal("0"))
    budgets_over_limit: int = Field(default=0, ge=0)
    volatility: float = Field(default=0.0, ge=0)

    # Informational
    income: Decimal = Field(default=Decimal("0"))
    expenses: Decimal = Field(default=Decimal("0"))
    savings_rate: float = Field(default=0.0)
