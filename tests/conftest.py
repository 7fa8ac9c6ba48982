# tests/conftest.py
import sys
from datetime import datetime
from pathlib import Path

# ---------------------------------------------------------
# Ensure project root is on PYTHONPATH BEFORE app imports
# ---------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# ---------------------------------------------------------
# Now safe to import app + dependencies
# ---------------------------------------------------------
import pytest

from core.clock import FixedClock
from services.dispatcher import Dispatcher
from storage.memory import InMemoryStorage

NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def dispatcher(storage, clock):
    return Dispatcher(storage, clock=clock)
