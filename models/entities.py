# models/entities.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from models.goal import GoalType, Priority

DEFAULT_CATEGORY = "Lainnya"


class UpdateTarget(BaseModel):
    name: Optional[str] = None
    amount: Optional[Decimal] = None


class ExtractedEntities(BaseModel):
    amount: Optional[Decimal] = Field(None, description="Monetary amount, None when no number was found")
    date: datetime = Field(..., description="Transaction instant, defaults to now")
    category: str = Field(default=DEFAULT_CATEGORY, description="Category, catch-all when no keyword matched")
    goal_name: Optional[str] = Field(None, description="Goal name, None when unnamed")
    goal_type: Optional[GoalType] = Field(None)
    target_date: Optional[datetime] = Field(None, description="Goal deadline")
    priority: Priority = Field(default=Priority.MEDIUM)
    update_target: Optional[UpdateTarget] = Field(None)

    def has_category(self) -> bool:
        return self.category != DEFAULT_CATEGORY

    def with_amount(self, amount: Decimal) -> "ExtractedEntities":
        update = {"amount": amount}
        if self.update_target is not None:
            update["update_target"] = self.update_target.model_copy(update={"amount": amount})
        return self.model_copy(update=update)

    def without(self, field: str) -> "ExtractedEntities":
        """Drop a clarified entity so it is asked for again."""
        if field == "amount":
            return self.with_amount(None)
        if field == "category":
            return self.model_copy(update={"category": DEFAULT_CATEGORY})
        return self
