# services/collaborator.py
"""
Bounded calls to external collaborators (storage, insights).

Every call is wrapped in `asyncio.wait_for`; a timeout surfaces as
`CollaboratorTimeout`, any other failure as `CollaboratorUnavailable`.
"""

from asyncio import TimeoutError, wait_for
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Dict, List, Optional, TypeVar

from configurations.config import COLLABORATOR_TIMEOUT_SECONDS
from configurations.logging_config import get_logger
from core.errors import CollaboratorTimeout, CollaboratorUnavailable, FinanceBotError
from models.goal import Goal, GoalStatus
from models.transaction import Budget, Transaction, TransactionType
from storage.base import StorageBackend

logger = get_logger("collaborator")

T = TypeVar("T")


async def call_with_timeout(
    awaitable: Awaitable[T],
    *,
    operation: str,
    timeout: Optional[float] = None,
) -> T:
    timeout = COLLABORATOR_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        return await wait_for(awaitable, timeout=timeout)
    except TimeoutError:
        logger.error(f"[COLLABORATOR_TIMEOUT] operation={operation}, timeout={timeout}s")
        raise CollaboratorTimeout(operation, f"no answer within {timeout}s")
    except FinanceBotError:
        raise
    except Exception as e:
        logger.exception(f"[COLLABORATOR_ERROR] operation={operation}, exception={e}")
        raise CollaboratorUnavailable(operation, str(e)) from e


class GuardedStorage(StorageBackend):
    """Applies `call_with_timeout` to every call of the wrapped backend."""

    def __init__(self, backend: StorageBackend, timeout: Optional[float] = None):
        self.backend = backend
        self.timeout = timeout

    def _call(self, awaitable, operation):
        return call_with_timeout(awaitable, operation=operation, timeout=self.timeout)

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        return await self._call(self.backend.create_transaction(transaction), "create_transaction")

    async def find_transactions(
        self,
        user_id: str,
        *,
        type: Optional[TransactionType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        return await self._call(
            self.backend.find_transactions(user_id, type=type, start=start, end=end, limit=limit),
            "find_transactions",
        )

    async def sum_transactions(
        self,
        user_id: str,
        type: TransactionType,
        start: datetime,
        end: datetime,
        category: Optional[str] = None,
    ) -> Decimal:
        return await self._call(
            self.backend.sum_transactions(user_id, type, start, end, category), "sum_transactions"
        )

    async def sum_by_category(
        self, user_id: str, type: TransactionType, start: datetime, end: datetime
    ) -> Dict[str, Decimal]:
        return await self._call(self.backend.sum_by_category(user_id, type, start, end), "sum_by_category")

    async def upsert_budget(self, budget: Budget) -> Budget:
        return await self._call(self.backend.upsert_budget(budget), "upsert_budget")

    async def find_budgets(
        self, user_id: str, at: datetime, category: Optional[str] = None
    ) -> List[Budget]:
        return await self._call(self.backend.find_budgets(user_id, at, category), "find_budgets")

    async def create_goal(self, goal: Goal) -> Goal:
        return await self._call(self.backend.create_goal(goal), "create_goal")

    async def find_goals(self, user_id: str, status: Optional[GoalStatus] = None) -> List[Goal]:
        return await self._call(self.backend.find_goals(user_id, status), "find_goals")

    async def update_goal(self, goal: Goal) -> Goal:
        return await self._call(self.backend.update_goal(goal), "update_goal")

