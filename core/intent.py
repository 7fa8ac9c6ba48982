# core/intent.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from models.entities import ExtractedEntities
from services.sentiment import SentimentResult


class IntentType(str, Enum):
    """
    The closed vocabulary of user purposes.
    Goal intents keep their Indonesian command names as values.
    """

    ADD_EXPENSE = "add_expense"
    ADD_INCOME = "add_income"
    VIEW_REPORT = "view_report"
    SET_BUDGET = "set_budget"
    CHECK_BUDGET = "check_budget"
    TRANSACTION_HISTORY = "transaction_history"
    CREATE_GOAL = "tambah_goal"
    VIEW_GOAL = "lihat_goal"
    UPDATE_GOAL = "update_goal"
    DELETE_GOAL = "hapus_goal"
    TIPS = "tips"
    HELP = "help"
    UNKNOWN = "unknown"

    # -----------------------------
    # Semantic helpers (SAFE)
    # -----------------------------
    def is_known(self) -> bool:
        return self is not IntentType.UNKNOWN


class Command(BaseModel):
    """
    A passive container that represents what the user wants.
    This does NOT execute logic.
    This does NOT make decisions.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    user_id: str
    raw_input: str
    text: str

    # Decided by the intent classifier, or restored from a pending dialogue
    intent: IntentType
    entities: ExtractedEntities
    sentiment: Optional[SentimentResult] = None

    # Optional metadata (confidence, resumed-from-state, ...)
    meta: Optional[Dict[str, Any]] = None
