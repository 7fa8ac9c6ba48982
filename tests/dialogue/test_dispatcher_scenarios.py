import asyncio
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from core.dialogue_state import DialogueState
from core.errors import InternalInvariantViolation
from core.intent import IntentType
from executors.conversation import HELP_TEXT, UNKNOWN_TEXT, HelpExecutor
from models.transaction import Transaction, TransactionType
from services.dispatcher import APOLOGY, CANCELLED, GENERIC_ERROR, Dispatcher
from storage.memory import InMemoryStorage

USER = "user-1"


def converse(dispatcher, *messages, user_id=USER):
    """Send messages in order within one event loop, return every reply."""

    async def scenario():
        return [await dispatcher.handle(user_id, m) for m in messages]

    return asyncio.run(scenario())


def state_of(dispatcher, user_id=USER):
    return dispatcher.contexts.peek(user_id).state


def transactions(storage, user_id=USER):
    return asyncio.run(storage.find_transactions(user_id))


# ---------------------------------------------------------------------
# Single-turn commands
# ---------------------------------------------------------------------

def test_complete_expense_is_recorded_immediately(dispatcher, storage, now):
    [reply] = converse(dispatcher, "catat pengeluaran 50rb makan siang")

    assert reply.kind == "text"
    assert reply.content == (
        "✅ Pengeluaran sebesar Rp 50.000 untuk kategori Makanan & Minuman berhasil dicatat."
    )
    assert state_of(dispatcher) is DialogueState.IDLE

    [saved] = transactions(storage)
    assert saved.amount == Decimal("50000")
    assert saved.type is TransactionType.EXPENSE
    assert saved.date == now
    assert saved.description == "catat pengeluaran makan siang"


def test_income_is_recorded(dispatcher, storage):
    [reply] = converse(dispatcher, "catat pemasukan 5jt gaji")

    assert reply.content == "✅ Pemasukan sebesar Rp 5.000.000 dari kategori Pendapatan berhasil dicatat."
    [saved] = transactions(storage)
    assert saved.type is TransactionType.INCOME


def test_past_dated_expense(dispatcher, storage, now):
    converse(dispatcher, "bayar grab 25rb kemarin")
    [saved] = transactions(storage)
    assert saved.date == now - timedelta(days=1)
    assert saved.category == "Transportasi"


def test_unrecognized_text_gets_help_hint(dispatcher, storage):
    [reply] = converse(dispatcher, "asdkjasd")
    assert reply.content == UNKNOWN_TEXT
    assert transactions(storage) == []


def test_help(dispatcher):
    [reply] = converse(dispatcher, "bantuan")
    assert reply.content == HELP_TEXT


def test_tips_include_learning_plan(dispatcher):
    [reply] = converse(dispatcher, "tips keuangan")
    assert reply.content.startswith("💡 *Tips Keuangan*")
    assert "Rencana Belajar Minggu Ini" in reply.content


# ---------------------------------------------------------------------
# Clarification dialogue
# ---------------------------------------------------------------------

def test_missing_amount_is_asked_then_confirmed(dispatcher, storage):
    ask, confirm, done = converse(dispatcher, "bayar", "25rb", "ya")

    assert ask.kind == "text"
    assert ask.content.startswith("Berapa jumlah pengeluarannya?")

    assert confirm.kind == "confirmation"
    assert confirm.prompt == "Catat pengeluaran sebesar Rp 25.000 untuk kategori Lainnya pada 01/06/2024?"
    assert confirm.options == ["ya", "tidak", "batal"]

    assert done.content == "✅ Pengeluaran sebesar Rp 25.000 untuk kategori Lainnya berhasil dicatat."
    assert state_of(dispatcher) is DialogueState.IDLE
    assert [t.amount for t in transactions(storage)] == [Decimal("25000")]


def test_states_follow_the_dialogue(dispatcher):
    converse(dispatcher, "bayar")
    assert state_of(dispatcher) is DialogueState.AWAITING_AMOUNT
    converse(dispatcher, "25rb")
    assert state_of(dispatcher) is DialogueState.AWAITING_CONFIRMATION


def test_zero_amount_is_asked_for(dispatcher, storage):
    ask, confirm = converse(dispatcher, "bayar 0", "25rb")

    assert ask.content.startswith("Berapa jumlah pengeluarannya?")
    assert confirm.prompt.startswith("Catat pengeluaran sebesar Rp 25.000")
    assert transactions(storage) == []


def test_zero_budget_is_asked_for(dispatcher, storage, now):
    [ask] = converse(dispatcher, "atur budget makan 0")

    assert ask.content.startswith("Berapa jumlah budgetnya?")
    assert state_of(dispatcher) is DialogueState.AWAITING_AMOUNT
    assert asyncio.run(storage.find_budgets(USER, now)) == []


def test_rejected_confirmation_asks_again(dispatcher, storage):
    replies = converse(dispatcher, "bayar", "25rb", "tidak", "30rb", "ya")

    assert replies[2].content.startswith("Berapa jumlah pengeluarannya?")
    assert replies[3].prompt.startswith("Catat pengeluaran sebesar Rp 30.000")
    assert [t.amount for t in transactions(storage)] == [Decimal("30000")]


def test_cancel_discards_pending_command(dispatcher, storage):
    replies = converse(dispatcher, "bayar", "25rb", "batal")

    assert replies[-1].content == CANCELLED
    assert state_of(dispatcher) is DialogueState.IDLE
    assert transactions(storage) == []


def test_delete_goal_command_is_not_a_cancel(dispatcher, storage):
    replies = converse(
        dispatcher,
        "buat goal dana darurat 30jt 6 bulan",
        "bayar",
        "batalkan goal dana darurat",
    )

    assert replies[-1].content.startswith('✅ Goal "Dana Darurat Goal" berhasil dihapus.')
    assert state_of(dispatcher) is DialogueState.IDLE
    assert transactions(storage) == []


def test_lone_cancel_word_still_cancels(dispatcher):
    _, reply = converse(dispatcher, "bayar", "batalkan")
    assert reply.content == CANCELLED
    assert state_of(dispatcher) is DialogueState.IDLE


def test_replies_carry_quick_replies_for_the_next_state(dispatcher):
    ask, confirm, done = converse(dispatcher, "bayar", "25rb", "ya")

    assert ask.suggestions == DialogueState.AWAITING_AMOUNT.suggestions()
    assert confirm.suggestions == ["Ya, benar", "Tidak, ulangi", "Batal"]
    assert done.suggestions == DialogueState.IDLE.suggestions()


def test_non_answer_repeats_prompt(dispatcher):
    ask, again = converse(dispatcher, "bayar", "hmm")
    assert again.content == ask.content
    assert state_of(dispatcher) is DialogueState.AWAITING_AMOUNT


def test_new_command_abandons_pending_one(dispatcher, storage):
    _, reply = converse(dispatcher, "bayar", "lihat laporan")

    assert reply.kind == "report"
    assert state_of(dispatcher) is DialogueState.IDLE
    assert transactions(storage) == []


def test_budget_asks_for_category(dispatcher, storage, now):
    ask, confirm, done = converse(dispatcher, "atur budget 500rb", "transportasi", "ya")

    assert ask.content.startswith("Untuk kategori apa budget ini?")
    assert "- Transportasi" in ask.content
    assert "- Lainnya" not in ask.content
    assert confirm.prompt == "Atur budget kategori Transportasi bulan ini sebesar Rp 500.000?"
    assert done.content == "✅ Budget kategori Transportasi bulan ini diatur sebesar Rp 500.000."

    [budget] = asyncio.run(storage.find_budgets(USER, now))
    assert budget.category == "Transportasi"


def test_users_have_separate_dialogues(dispatcher, storage):
    async def scenario():
        await dispatcher.handle("alice", "bayar")
        await dispatcher.handle("bob", "bantuan")
        return await dispatcher.handle("alice", "25rb")

    reply = asyncio.run(scenario())
    assert reply.kind == "confirmation"
    assert state_of(dispatcher, "bob") is DialogueState.IDLE


# ---------------------------------------------------------------------
# Budgets, reports, history
# ---------------------------------------------------------------------

def test_budget_warning_then_exceeded(dispatcher):
    _, warn, over = converse(
        dispatcher,
        "atur budget makan 100rb",
        "catat pengeluaran 80rb makan",
        "catat pengeluaran 30rb makan",
    )
    assert warn.content.endswith("⚠️ Perhatian: Budget untuk kategori Makanan & Minuman sudah mencapai 80%")
    assert over.content.endswith("⚠️ Perhatian: Budget untuk kategori Makanan & Minuman sudah terlampaui!")


def test_expense_below_threshold_has_no_warning(dispatcher):
    _, reply = converse(dispatcher, "atur budget makan 100rb", "catat pengeluaran 10rb makan")
    assert "⚠️" not in reply.content


def test_check_budget(dispatcher):
    [empty] = converse(dispatcher, "cek budget")
    assert empty.content == "Anda belum mengatur budget untuk bulan ini."

    _, _, status = converse(dispatcher, "atur budget makan 100rb", "catat pengeluaran 25rb makan", "cek budget")
    assert status.content.startswith("Status Budget Bulan Ini:")
    assert "Makanan & Minuman:" in status.content
    assert "Terpakai: Rp 25.000 (25.0%)" in status.content
    assert "Sisa: Rp 75.000" in status.content


def test_monthly_report(dispatcher):
    replies = converse(
        dispatcher,
        "catat pemasukan 5jt gaji",
        "catat pengeluaran 50rb makan siang",
        "bayar grab 25rb",
        "lihat laporan",
    )
    report = replies[-1]

    assert report.kind == "report"
    assert report.intro_message == "Berikut laporan keuangan Anda:"
    summary = report.summary_data
    assert summary.income == Decimal("5000000.00")
    assert summary.expenses == Decimal("75000.00")
    assert summary.balance == Decimal("4925000.00")
    assert summary.savings_rate == 98.5
    assert summary.transaction_count == 3
    assert summary.expenses_by_category == {
        "Makanan & Minuman": Decimal("50000.00"),
        "Transportasi": Decimal("25000.00"),
    }


def test_history_is_newest_first_and_limited(dispatcher, storage, now):
    async def seed():
        for days_ago in range(12):
            await storage.create_transaction(
                Transaction(
                    user_id=USER,
                    type=TransactionType.EXPENSE,
                    amount=Decimal(1000 + days_ago),
                    category="Belanja",
                    description=f"belanja {days_ago}",
                    date=now - timedelta(days=days_ago),
                    created_at=now,
                )
            )

    asyncio.run(seed())
    [reply] = converse(dispatcher, "riwayat transaksi")

    assert reply.content.startswith("Riwayat Transaksi Terakhir:")
    assert reply.content.count("🔴") == 10
    assert reply.content.index("01/06/2024") < reply.content.index("31/05/2024")
    assert "belanja 9" in reply.content
    assert "belanja 10" not in reply.content


def test_empty_history(dispatcher):
    [reply] = converse(dispatcher, "riwayat transaksi")
    assert reply.content == "Belum ada transaksi yang tercatat."


# ---------------------------------------------------------------------
# Sentiment advisories
# ---------------------------------------------------------------------

def test_stressed_message_carries_advisories(dispatcher):
    [reply] = converse(dispatcher, "bayar tagihan telat 200rb")
    assert reply.content.startswith("✅ Pengeluaran sebesar Rp 200.000")
    assert len(reply.advisories) == 2
    assert reply.advisories[0].startswith("Terdeteksi indikasi stress keuangan.")


def test_neutral_message_has_no_advisories(dispatcher):
    [reply] = converse(dispatcher, "lihat laporan")
    assert reply.advisories == []


# ---------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------

class SlowStorage(InMemoryStorage):
    async def create_transaction(self, transaction):
        await asyncio.sleep(1)
        return await super().create_transaction(transaction)


def test_storage_failure_apologizes_and_recovers(dispatcher, storage):
    storage.create_transaction = AsyncMock(side_effect=ConnectionError("database is down"))

    failed, help_reply = converse(dispatcher, "catat pengeluaran 50rb makan", "bantuan")

    assert failed.content == APOLOGY
    assert help_reply.content == HELP_TEXT
    assert state_of(dispatcher) is DialogueState.IDLE


def test_error_state_after_failure(dispatcher, storage):
    storage.create_transaction = AsyncMock(side_effect=ConnectionError("database is down"))
    [reply] = converse(dispatcher, "catat pengeluaran 50rb makan")
    assert state_of(dispatcher) is DialogueState.ERROR
    assert reply.suggestions == ["Coba lagi", "Bantuan", "Kembali ke menu utama"]


def test_executor_crash_gets_generic_reply(dispatcher):
    executor = dispatcher.executors[IntentType.HELP]
    with patch.object(executor, "execute", new_callable=AsyncMock) as mock_execute:
        mock_execute.side_effect = RuntimeError("boom")
        [reply] = converse(dispatcher, "bantuan")

    assert reply.content == GENERIC_ERROR
    assert state_of(dispatcher) is DialogueState.ERROR


def test_failure_does_not_touch_other_users(dispatcher, storage):
    async def scenario():
        await dispatcher.handle("alice", "bayar")
        storage.create_transaction = AsyncMock(side_effect=ConnectionError("database is down"))
        await dispatcher.handle("bob", "catat pengeluaran 50rb makan")

    asyncio.run(scenario())
    assert state_of(dispatcher, "bob") is DialogueState.ERROR
    assert state_of(dispatcher, "alice") is DialogueState.AWAITING_AMOUNT


def test_storage_timeout_leaves_no_write(clock, monkeypatch):
    monkeypatch.setattr("services.collaborator.COLLABORATOR_TIMEOUT_SECONDS", 0.01)
    storage = SlowStorage()
    dispatcher = Dispatcher(storage, clock=clock)

    [reply] = converse(dispatcher, "catat pengeluaran 50rb makan")

    assert reply.content == APOLOGY
    assert state_of(dispatcher) is DialogueState.ERROR
    assert transactions(storage) == []


def test_malformed_context_is_reset(dispatcher):
    async def scenario():
        async with dispatcher.contexts.session(USER) as ctx:
            # Awaiting an answer with no pending command behind it
            ctx.transition(DialogueState.AWAITING_AMOUNT, ctx.last_interaction_at)
        return await dispatcher.handle(USER, "25rb")

    reply = asyncio.run(scenario())
    assert reply.content == GENERIC_ERROR
    assert state_of(dispatcher) is DialogueState.IDLE


def test_every_intent_needs_an_executor(storage, clock):
    with pytest.raises(InternalInvariantViolation):
        Dispatcher(storage, clock=clock, executors={IntentType.HELP: HelpExecutor()})
