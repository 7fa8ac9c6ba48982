import asyncio
from datetime import timedelta

from configurations.config import MAX_CONVERSATION_HISTORY
from core.clock import FixedClock
from core.dialogue_state import DialogueState
from core.intent import IntentType
from services.context_store import ContextStore, DialogueContext, PendingAction


# ---------------------------------------------------------------------
# DialogueContext
# ---------------------------------------------------------------------

def test_fresh_context_is_idle(now):
    ctx = DialogueContext.fresh("u1", now)
    assert ctx.state is DialogueState.IDLE
    assert ctx.conversation_stack == []
    assert not ctx.needs_clarification()
    assert ctx.summary(now)["state"] == "idle"


def test_expiry_is_strictly_after_window(now):
    ctx = DialogueContext.fresh("u1", now, expiry_seconds=300)
    assert not ctx.is_expired(now + timedelta(seconds=300))
    assert ctx.is_expired(now + timedelta(seconds=301))


def test_touch_never_moves_backwards(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.touch(now - timedelta(minutes=5))
    assert ctx.last_interaction_at == now


def test_stack_is_bounded(now):
    ctx = DialogueContext.fresh("u1", now)
    for _ in range(MAX_CONVERSATION_HISTORY + 5):
        ctx.push_state(DialogueState.AWAITING_AMOUNT, now)
    assert len(ctx.conversation_stack) == MAX_CONVERSATION_HISTORY


def test_pop_state_falls_back_to_idle(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.push_state(DialogueState.AWAITING_AMOUNT, now)
    ctx.push_state(DialogueState.AWAITING_CONFIRMATION, now)

    assert ctx.pop_state().state is DialogueState.AWAITING_CONFIRMATION
    assert ctx.state is DialogueState.AWAITING_AMOUNT
    ctx.pop_state()
    assert ctx.state is DialogueState.IDLE
    assert ctx.pop_state() is None


def test_scratch_entries_expire_lazily(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.set_scratch("draft", {"amount": 1}, now, ttl_seconds=10)

    assert ctx.get_scratch("draft", now + timedelta(seconds=5)) == {"amount": 1}
    assert ctx.get_scratch("draft", now + timedelta(seconds=11), default="gone") == "gone"
    assert "draft" not in ctx.scratch


def test_pending_actions_are_fifo(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.add_pending_action(PendingAction(intent=IntentType.SET_BUDGET, entity="amount", created_at=now))
    ctx.add_pending_action(PendingAction(intent=IntentType.SET_BUDGET, entity="category", created_at=now))

    assert ctx.needs_clarification()
    assert ctx.next_pending_action().entity == "amount"
    assert ctx.next_pending_action().entity == "category"
    assert ctx.next_pending_action() is None


def test_fail_and_return_to_idle_clear_dialogue_data(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.transition(DialogueState.AWAITING_AMOUNT, now)
    ctx.set_scratch("pending_command", "x", now)
    ctx.add_pending_action(PendingAction(intent=IntentType.ADD_EXPENSE, entity="amount", created_at=now))

    ctx.fail(now)
    assert ctx.state is DialogueState.ERROR
    assert ctx.scratch == {}
    assert ctx.pending_actions == []

    ctx.return_to_idle()
    assert ctx.state is DialogueState.IDLE
    assert ctx.conversation_stack == []


def test_reset_forgets_last_intent(now):
    ctx = DialogueContext.fresh("u1", now)
    ctx.last_intent = IntentType.HELP
    later = now + timedelta(hours=1)
    ctx.reset(later)
    assert ctx.last_intent is None
    assert ctx.session_started_at == later


# ---------------------------------------------------------------------
# ContextStore
# ---------------------------------------------------------------------

def test_session_creates_context_lazily(clock):
    store = ContextStore(clock)

    async def scenario():
        assert "u1" not in store
        async with store.session("u1") as ctx:
            assert ctx.user_id == "u1"
        assert "u1" in store
        assert len(store) == 1

    asyncio.run(scenario())


def test_expired_context_is_reset_on_next_message(clock):
    store = ContextStore(clock, expiry_seconds=300)

    async def scenario():
        async with store.session("u1") as ctx:
            ctx.transition(DialogueState.AWAITING_AMOUNT, clock.now())
            ctx.set_scratch("pending_command", "draft", clock.now(), ttl_seconds=3600)

        clock.advance(seconds=301)
        async with store.session("u1") as ctx:
            assert ctx.state is DialogueState.IDLE
            assert ctx.scratch == {}
            assert ctx.conversation_stack == []
            assert ctx.last_interaction_at == clock.now()

    asyncio.run(scenario())


def test_context_within_window_keeps_state(clock):
    store = ContextStore(clock, expiry_seconds=300)

    async def scenario():
        async with store.session("u1") as ctx:
            ctx.transition(DialogueState.AWAITING_AMOUNT, clock.now())

        clock.advance(seconds=200)
        async with store.session("u1") as ctx:
            assert ctx.state is DialogueState.AWAITING_AMOUNT

    asyncio.run(scenario())


def test_sweep_skips_contexts_in_use(clock):
    store = ContextStore(clock, expiry_seconds=300)

    async def scenario():
        async with store.session("idle-user"):
            pass

        async with store.session("busy-user"):
            clock.advance(seconds=301)
            assert await store.sweep() == 1
            assert "busy-user" in store
            assert "idle-user" not in store

        assert await store.sweep() == 1
        assert len(store) == 0

    asyncio.run(scenario())


def test_same_user_messages_run_one_after_another(clock):
    store = ContextStore(clock)
    events = []

    async def message(name, delay):
        async with store.session("u1"):
            events.append(f"{name}-in")
            await asyncio.sleep(delay)
            events.append(f"{name}-out")

    async def scenario():
        await asyncio.gather(message("first", 0.05), message("second", 0))

    asyncio.run(scenario())
    assert events == ["first-in", "first-out", "second-in", "second-out"]


def test_different_users_run_concurrently(clock):
    store = ContextStore(clock)
    events = []

    async def message(user_id, delay):
        async with store.session(user_id):
            events.append(f"{user_id}-in")
            await asyncio.sleep(delay)
            events.append(f"{user_id}-out")

    async def scenario():
        await asyncio.gather(message("u1", 0.05), message("u2", 0))

    asyncio.run(scenario())
    assert events.index("u2-out") < events.index("u1-out")


def test_background_sweeper_evicts_expired_contexts(now):
    clock = FixedClock(now)
    store = ContextStore(clock, expiry_seconds=1, sweep_interval_seconds=0.01)

    async def scenario():
        async with store.session("u1"):
            pass
        store.start_sweeper()
        clock.advance(seconds=5)
        await asyncio.sleep(0.1)
        await store.stop_sweeper()

    asyncio.run(scenario())
    assert len(store) == 0
