from decimal import Decimal

from configurations.config import TRANSACTION_HISTORY_LIMIT
from core.clock import Clock
from core.intent import Command
from executors.base import BaseExecutor, text
from models.reply import Reply, ReportReply, ReportSummary
from models.transaction import TransactionType
from services.budget_service import budget_statuses
from services.utils import format_date, format_rupiah, month_bounds, quantize_money
from storage.base import StorageBackend


class ReportExecutor(BaseExecutor):
    """
    Monthly report: income, expenses, balance, savings rate,
    expenses by category and budget statuses.
    """

    def __init__(self, storage: StorageBackend, clock: Clock):
        self.storage = storage
        self.clock = clock

    async def execute(self, command: Command) -> Reply:
        now = self.clock.now()
        start, end = month_bounds(now)
        user_id = command.user_id

        income = await self.storage.sum_transactions(user_id, TransactionType.INCOME, start, end)
        expenses = await self.storage.sum_transactions(user_id, TransactionType.EXPENSE, start, end)
        by_category = await self.storage.sum_by_category(user_id, TransactionType.EXPENSE, start, end)
        transactions = await self.storage.find_transactions(user_id, start=start, end=end)
        budgets = await budget_statuses(self.storage, user_id, now)

        balance = income - expenses
        summary = ReportSummary(
            period_start=start,
            period_end=end,
            income=quantize_money(income),
            expenses=quantize_money(expenses),
            balance=quantize_money(balance),
            savings_rate=round(float(balance / income * 100), 2) if income > 0 else 0.0,
            transaction_count=len(transactions),
            expenses_by_category={k: quantize_money(v) for k, v in sorted(by_category.items())},
            budgets=budgets,
        )
        return ReportReply(summary_data=summary, intro_message="Berikut laporan keuangan Anda:")


class HistoryExecutor(BaseExecutor):
    def __init__(self, storage: StorageBackend, limit: int = TRANSACTION_HISTORY_LIMIT):
        self.storage = storage
        self.limit = limit

    async def execute(self, command: Command) -> Reply:
        transactions = await self.storage.find_transactions(command.user_id, limit=self.limit)
        if not transactions:
            return text("Belum ada transaksi yang tercatat.")

        lines = ["Riwayat Transaksi Terakhir:", ""]
        for t in transactions:
            marker = "🔴" if t.type is TransactionType.EXPENSE else "🟢"
            lines += [
                f"{marker} {format_date(t.date)} - {t.category}",
                t.description or "Tanpa keterangan",
                format_rupiah(Decimal(t.amount)),
                "",
            ]
        return text("\n".join(lines).strip())
