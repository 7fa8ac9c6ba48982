import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


# Optional vars (with defaults)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
PORT = _int_env("PORT", 8000)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Storage is in-memory unless a database is configured
DATABASE_URL = os.getenv("DATABASE_URL")

# -----------------------------
# Dialogue
# -----------------------------
CONTEXT_EXPIRY_SECONDS = _float_env("CONTEXT_EXPIRY_SECONDS", 5 * 60)
CONTEXT_SWEEP_INTERVAL_SECONDS = _float_env("CONTEXT_SWEEP_INTERVAL_SECONDS", 60)
MAX_CONVERSATION_HISTORY = _int_env("MAX_CONVERSATION_HISTORY", 10)

# -----------------------------
# NLP
# -----------------------------
INTENT_CONFIDENCE_THRESHOLD = _float_env("INTENT_CONFIDENCE_THRESHOLD", 0.7)

# -----------------------------
# Collaborators (storage / insight)
# -----------------------------
COLLABORATOR_TIMEOUT_SECONDS = _float_env("COLLABORATOR_TIMEOUT_SECONDS", 10)

# -----------------------------
# Goal feasibility rules
# -----------------------------
SAVINGS_SHORTFALL_PENALTY = 20
BUDGET_VIOLATION_PENALTY = 10
VOLATILITY_PENALTY = 15
VOLATILITY_THRESHOLD = 0.3
FEASIBILITY_HIGH = 80
FEASIBILITY_MEDIUM = 60
FEASIBILITY_LOW = 40
STRATEGY_ADJUSTMENT_BELOW = 60
MILESTONE_INTERVAL_MONTHS = 3
DEFAULT_GOAL_MONTHS = 1
INSIGHT_HISTORY_MONTHS = 6

# -----------------------------
# Budgets / history
# -----------------------------
BUDGET_WARNING_PERCENT = 80
TRANSACTION_HISTORY_LIMIT = 10
