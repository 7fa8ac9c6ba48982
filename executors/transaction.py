from configurations.config import BUDGET_WARNING_PERCENT
from configurations.logging_config import get_logger
from core.clock import Clock
from core.intent import Command
from executors.base import BaseExecutor, text
from models.reply import Reply
from models.transaction import Transaction, TransactionType
from services.budget_service import budget_status, warning_level
from services.entity_extractor import strip_amounts
from services.utils import format_date, format_rupiah
from storage.base import StorageBackend

logger = get_logger("transaction_executor")

LABELS = {
    TransactionType.EXPENSE: "pengeluaran",
    TransactionType.INCOME: "pemasukan",
}

EXAMPLES = {
    TransactionType.EXPENSE: '"catat pengeluaran 50rb untuk makan"',
    TransactionType.INCOME: '"catat pemasukan 1jt gaji"',
}


class TransactionExecutor(BaseExecutor):
    """
    Records an expense or an income.
    Expenses are checked against the category budget of the transaction's month.
    """

    required_entities = ("amount",)

    def __init__(self, storage: StorageBackend, clock: Clock, type: TransactionType):
        self.storage = storage
        self.clock = clock
        self.type = type

    def prompt_for(self, entity: str, command: Command) -> str:
        return f"Berapa jumlah {LABELS[self.type]}nya? Contoh: {EXAMPLES[self.type]}"

    def describe(self, command: Command) -> str:
        e = command.entities
        return (
            f"Catat {LABELS[self.type]} sebesar {format_rupiah(e.amount)} "
            f"untuk kategori {e.category} pada {format_date(e.date)}?"
        )

    async def execute(self, command: Command) -> Reply:
        e = command.entities

        # Reads first: budget state before this expense
        budget = None
        spent_before = None
        if self.type is TransactionType.EXPENSE:
            budgets = await self.storage.find_budgets(command.user_id, e.date, e.category)
            if budgets:
                budget = budgets[0]
                spent_before = await self.storage.sum_transactions(
                    command.user_id, TransactionType.EXPENSE, budget.period_start, budget.period_end, budget.category
                )

        transaction = Transaction(
            user_id=command.user_id,
            type=self.type,
            amount=e.amount,
            category=e.category,
            description=strip_amounts(command.text),
            date=e.date,
            created_at=self.clock.now(),
        )
        await self.storage.create_transaction(transaction)
        logger.info(
            f"[TRANSACTION_CREATED] user_id={command.user_id}, type={self.type.value}, "
            f"amount={e.amount}, category={e.category}"
        )

        if self.type is TransactionType.INCOME:
            return text(
                f"✅ Pemasukan sebesar {format_rupiah(e.amount)} dari kategori {e.category} berhasil dicatat."
            )

        message = f"✅ Pengeluaran sebesar {format_rupiah(e.amount)} untuk kategori {e.category} berhasil dicatat."
        if budget is not None:
            level = warning_level(budget_status(budget, spent_before + e.amount))
            if level == "exceeded":
                message += f"\n⚠️ Perhatian: Budget untuk kategori {e.category} sudah terlampaui!"
            elif level == "warning":
                message += f"\n⚠️ Perhatian: Budget untuk kategori {e.category} sudah mencapai {BUDGET_WARNING_PERCENT}%"
        return text(message)
