# models/transaction.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class Transaction(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    type: TransactionType
    amount: Decimal = Field(..., gt=0, description="The amount of the transaction")
    category: str = Field(default="Lainnya")
    description: str = Field(default="")
    date: datetime
    created_at: datetime


class Budget(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    category: str
    amount: Decimal = Field(..., gt=0)
    period_start: datetime
    period_end: datetime

    @model_validator(mode="after")
    def check_period(self):
        if self.period_end < self.period_start:
            raise ValueError("Budget period ends before it starts")
        return self


class BudgetStatus(BaseModel):
    category: str
    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    # Rounded for display; thresholds compare spent against budgeted exactly
    percentage: float

    @property
    def exceeded(self) -> bool:
        return self.spent >= self.budgeted

    @property
    def over_limit(self) -> bool:
        return self.spent > self.budgeted

    def reached(self, percent: float) -> bool:
        return self.spent * 100 >= self.budgeted * Decimal(str(percent))
