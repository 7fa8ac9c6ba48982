# services/context_store.py
"""
Per-user dialogue contexts.

- One context per user, created lazily, never persisted
- `session(user_id)` holds that user's lock for the whole message, so a
  user's messages run strictly one after another (asyncio.Lock is FIFO)
- The user -> entry map is only touched under a short-lived map lock
- A background sweep evicts expired contexts and skips any that are in use
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from configurations.config import (
    CONTEXT_EXPIRY_SECONDS,
    CONTEXT_SWEEP_INTERVAL_SECONDS,
    MAX_CONVERSATION_HISTORY,
)
from configurations.logging_config import get_logger
from core.clock import Clock
from core.dialogue_state import DialogueState
from core.intent import IntentType
from models.entities import ExtractedEntities

logger = get_logger("context_store")


class StackEntry(BaseModel):
    state: DialogueState
    entered_at: datetime


class PendingAction(BaseModel):
    type: str = "clarification"
    intent: IntentType
    entity: Optional[str] = None
    created_at: datetime


class ScratchEntry(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any
    expires_at: datetime


class DialogueContext(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    user_id: str
    state: DialogueState = DialogueState.IDLE
    conversation_stack: List[StackEntry] = Field(default_factory=list)
    pending_actions: List[PendingAction] = Field(default_factory=list)
    scratch: Dict[str, ScratchEntry] = Field(default_factory=dict)
    last_intent: Optional[IntentType] = None
    last_entities: Optional[ExtractedEntities] = None
    session_started_at: datetime
    last_interaction_at: datetime
    expiry_seconds: float = CONTEXT_EXPIRY_SECONDS

    @classmethod
    def fresh(cls, user_id: str, now: datetime, expiry_seconds: float = CONTEXT_EXPIRY_SECONDS) -> "DialogueContext":
        return cls(
            user_id=user_id,
            session_started_at=now,
            last_interaction_at=now,
            expiry_seconds=expiry_seconds,
        )

    # -----------------------------
    # Lifetime
    # -----------------------------
    def touch(self, now: datetime) -> None:
        # Never moves backwards
        self.last_interaction_at = max(self.last_interaction_at, now)

    def is_expired(self, now: datetime) -> bool:
        return (now - self.last_interaction_at).total_seconds() > self.expiry_seconds

    def reset(self, now: datetime) -> None:
        self.state = DialogueState.IDLE
        self.conversation_stack = []
        self.pending_actions = []
        self.scratch = {}
        self.last_intent = None
        self.last_entities = None
        self.session_started_at = now
        self.last_interaction_at = now

    # -----------------------------
    # States
    # -----------------------------
    def push_state(self, state: DialogueState, now: datetime) -> None:
        self.conversation_stack.append(StackEntry(state=state, entered_at=now))
        del self.conversation_stack[:-MAX_CONVERSATION_HISTORY]
        self.state = state

    def pop_state(self) -> Optional[StackEntry]:
        popped = self.conversation_stack.pop() if self.conversation_stack else None
        self.state = self.conversation_stack[-1].state if self.conversation_stack else DialogueState.IDLE
        return popped

    def transition(self, state: DialogueState, now: datetime) -> None:
        logger.info(f"[TRANSITION] user_id={self.user_id}, {self.state.value} -> {state.value}")
        self.push_state(state, now)

    def return_to_idle(self) -> None:
        """Finish (or abandon) the pending command."""
        if self.state is not DialogueState.IDLE:
            logger.info(f"[TRANSITION] user_id={self.user_id}, {self.state.value} -> idle")
        self.state = DialogueState.IDLE
        self.conversation_stack = []
        self.pending_actions = []
        self.scratch = {}

    def fail(self, now: datetime) -> None:
        self.pending_actions = []
        self.scratch = {}
        self.transition(DialogueState.ERROR, now)

    # -----------------------------
    # Pending actions
    # -----------------------------
    def add_pending_action(self, action: PendingAction) -> None:
        self.pending_actions.append(action)

    def next_pending_action(self) -> Optional[PendingAction]:
        return self.pending_actions.pop(0) if self.pending_actions else None

    def needs_clarification(self) -> bool:
        return any(a.type == "clarification" for a in self.pending_actions)

    # -----------------------------
    # Scratch data
    # -----------------------------
    def set_scratch(self, key: str, value: Any, now: datetime, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.expiry_seconds if ttl_seconds is None else ttl_seconds
        self.scratch[key] = ScratchEntry(value=value, expires_at=now + timedelta(seconds=ttl))

    def get_scratch(self, key: str, now: datetime, default: Any = None) -> Any:
        entry = self.scratch.get(key)
        if entry is None:
            return default
        if now > entry.expires_at:
            del self.scratch[key]
            return default
        return entry.value

    def summary(self, now: datetime) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "conversation_depth": len(self.conversation_stack),
            "session_seconds": (now - self.session_started_at).total_seconds(),
            "pending_actions": len(self.pending_actions),
            "last_intent": self.last_intent.value if self.last_intent else None,
        }


@dataclass
class _Entry:
    context: DialogueContext
    lock: asyncio.Lock


class ContextStore:
    def __init__(
        self,
        clock: Clock,
        expiry_seconds: float = CONTEXT_EXPIRY_SECONDS,
        sweep_interval_seconds: float = CONTEXT_SWEEP_INTERVAL_SECONDS,
    ):
        self.clock = clock
        self.expiry_seconds = expiry_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._entries: Dict[str, _Entry] = {}
        self._map_lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._entries

    def peek(self, user_id: str) -> Optional[DialogueContext]:
        """Unlocked read, for diagnostics and tests."""
        entry = self._entries.get(user_id)
        return entry.context if entry else None

    async def _acquire(self, user_id: str) -> _Entry:
        while True:
            async with self._map_lock:
                entry = self._entries.get(user_id)
                if entry is None:
                    entry = _Entry(
                        DialogueContext.fresh(user_id, self.clock.now(), self.expiry_seconds),
                        asyncio.Lock(),
                    )
                    self._entries[user_id] = entry

            await entry.lock.acquire()
            # The sweep may have evicted the entry while we queued for its lock
            if self._entries.get(user_id) is entry:
                return entry
            entry.lock.release()

    @asynccontextmanager
    async def session(self, user_id: str) -> AsyncIterator[DialogueContext]:
        entry = await self._acquire(user_id)
        try:
            context = entry.context
            now = self.clock.now()
            if context.is_expired(now):
                logger.info(f"[CONTEXT_EXPIRED] user_id={user_id}, state={context.state.value}")
                context.reset(now)
            context.touch(now)
            yield context
        finally:
            entry.lock.release()

    # -----------------------------
    # Sweep
    # -----------------------------
    async def sweep(self) -> int:
        now = self.clock.now()
        evicted = 0
        for user_id, entry in list(self._entries.items()):
            if entry.lock.locked() or not entry.context.is_expired(now):
                continue
            async with self._map_lock:
                if self._entries.get(user_id) is entry and not entry.lock.locked():
                    del self._entries[user_id]
                    evicted += 1
                    logger.info(f"Cleaned up expired context for user {user_id}")
        return evicted

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                await self.sweep()
            except Exception:
                logger.exception("[SWEEP_ERROR] context sweep failed")

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
