# storage/base.py
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from models.goal import Goal, GoalStatus
from models.insight import InsightSummary
from models.transaction import Budget, Transaction, TransactionType


class StorageBackend(ABC):
    """
    Persistence contract for transactions, budgets and goals.
    Implementations own no business rules; every method is a single read or write.
    """

    # -----------------------------
    # Transactions
    # -----------------------------
    @abstractmethod
    async def create_transaction(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def find_transactions(
        self,
        user_id: str,
        *,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Newest first by transaction date."""

    @abstractmethod
    async def sum_transactions(
        self,
        user_id: str,
        type: TransactionType,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> Decimal:
        pass

    @abstractmethod
    async def sum_by_category(
        self, user_id: str, type: TransactionType, start: datetime, end: datetime
    ) -> Dict[str, Decimal]:
        pass

    # -----------------------------
    # Budgets
    # -----------------------------
    @abstractmethod
    async def upsert_budget(self, budget: Budget) -> Budget:
        """Replace the budget of the same user, category and period start, or create it."""

    @abstractmethod
    async def find_budgets(
        self, user_id: str, at: datetime, category: Optional[str] = None
    ) -> List[Budget]:
        """Budgets whose period contains `at`."""

    # -----------------------------
    # Goals
    # -----------------------------
    @abstractmethod
    async def create_goal(self, goal: Goal) -> Goal:
        pass

    @abstractmethod
    async def find_goals(self, user_id: str, status: Optional[GoalStatus] = None) -> List[Goal]:
        """Oldest first by creation time."""

    @abstractmethod
    async def update_goal(self, goal: Goal) -> Goal:
        pass


class InsightProvider(ABC):
    """Historical summary of a user's finances, consumed by the feasibility engine."""

    @abstractmethod
    async def get_summary(self, user_id: str) -> InsightSummary:
        pass
