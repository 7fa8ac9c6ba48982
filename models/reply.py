# models/reply.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, Field

from models.transaction import BudgetStatus


class ReportSummary(BaseModel):
    period_start: datetime
    period_end: datetime
    income: Decimal
    expenses: Decimal
    balance: Decimal
    savings_rate: float
    transaction_count: int
    expenses_by_category: Dict[str, Decimal] = Field(default_factory=dict)
    budgets: List[BudgetStatus] = Field(default_factory=list)


class _ReplyBase(BaseModel):
    advisories: List[str] = Field(default_factory=list)
    # Quick replies for the state the conversation is left in
    suggestions: List[str] = Field(default_factory=list)


class TextReply(_ReplyBase):
    kind: Literal["text"] = "text"
    content: str


class ReportReply(_ReplyBase):
    kind: Literal["report"] = "report"
    summary_data: ReportSummary
    intro_message: str


class ConfirmationReply(_ReplyBase):
    kind: Literal["confirmation"] = "confirmation"
    prompt: str
    options: List[str] = Field(default_factory=lambda: ["ya", "tidak", "batal"])


Reply = Annotated[Union[TextReply, ReportReply, ConfirmationReply], Field(discriminator="kind")]
