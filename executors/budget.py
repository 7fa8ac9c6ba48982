from configurations.logging_config import get_logger
from core.clock import Clock
from core.intent import Command
from executors.base import BaseExecutor, text
from models.reply import Reply
from services.budget_service import budget_statuses, new_monthly_budget
from services.entity_extractor import CATEGORIES
from services.utils import format_rupiah
from storage.base import StorageBackend

logger = get_logger("budget_executor")


class SetBudgetExecutor(BaseExecutor):
    required_entities = ("amount", "category")

    def __init__(self, storage: StorageBackend, clock: Clock):
        self.storage = storage
        self.clock = clock

    def prompt_for(self, entity: str, command: Command) -> str:
        if entity == "category":
            options = "\n".join(f"- {c}" for c in CATEGORIES[:-1])
            return f"Untuk kategori apa budget ini?\n\nPilihan kategori:\n{options}"
        return 'Berapa jumlah budgetnya? Contoh: "atur budget makan 1,5jt"'

    def describe(self, command: Command) -> str:
        e = command.entities
        return f"Atur budget kategori {e.category} bulan ini sebesar {format_rupiah(e.amount)}?"

    async def execute(self, command: Command) -> Reply:
        e = command.entities
        budget = new_monthly_budget(command.user_id, e.category, e.amount, self.clock.now())
        await self.storage.upsert_budget(budget)
        logger.info(f"[BUDGET_SET] user_id={command.user_id}, category={e.category}, amount={e.amount}")
        return text(f"✅ Budget kategori {e.category} bulan ini diatur sebesar {format_rupiah(e.amount)}.")


class CheckBudgetExecutor(BaseExecutor):
    def __init__(self, storage: StorageBackend, clock: Clock):
        self.storage = storage
        self.clock = clock

    async def execute(self, command: Command) -> Reply:
        statuses = await budget_statuses(self.storage, command.user_id, self.clock.now())
        if not statuses:
            return text("Anda belum mengatur budget untuk bulan ini.")

        lines = ["Status Budget Bulan Ini:", ""]
        for status in statuses:
            lines += [
                f"{status.category}:",
                f"Budget: {format_rupiah(status.budgeted)}",
                f"Terpakai: {format_rupiah(status.spent)} ({status.percentage:.1f}%)",
                f"Sisa: {format_rupiah(status.remaining)}",
                "",
            ]
        return text("\n".join(lines).strip())
