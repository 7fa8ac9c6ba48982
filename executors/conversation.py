from core.clock import Clock
from core.intent import Command
from executors.base import BaseExecutor, text
from models.reply import Reply
from services.education import contextual_tip, quote_of_the_day, weekly_learning_plan
from services.goal_service import GoalService

HELP_TEXT = """Panduan Penggunaan Bot:

1. Catat Pengeluaran:
   "catat pengeluaran 50rb makan siang"
   "bayar grab 25rb"

2. Catat Pemasukan:
   "catat pemasukan 5jt gaji"
   "dapat uang 1juta dari proyek"

3. Lihat Laporan:
   "lihat laporan"
   "tampilkan laporan bulanan"

4. Budget:
   "atur budget makan 1,5jt"
   "cek budget"

5. Riwayat Transaksi:
   "lihat riwayat"
   "tampilkan mutasi"

6. Goal Keuangan:
   "tambah goal tabungan 10jt desember 2024"
   "lihat goal"
   "update goal tabungan 500rb"
   "hapus goal tabungan"

7. Tips Keuangan:
   "tips keuangan"

Catatan:
- Gunakan satuan rb/ribu atau jt/juta
- Bisa mencatat transaksi di masa lalu dengan menyebut tanggalnya
- Sebutkan kategori transaksi untuk pencatatan lebih detail"""

UNKNOWN_TEXT = 'Maaf, saya tidak memahami permintaan Anda. Ketik "bantuan" untuk melihat panduan penggunaan.'


class HelpExecutor(BaseExecutor):
    async def execute(self, command: Command) -> Reply:
        return text(HELP_TEXT)


class UnknownExecutor(BaseExecutor):
    async def execute(self, command: Command) -> Reply:
        return text(UNKNOWN_TEXT)


class TipsExecutor(BaseExecutor):
    """
    Tip of the day, chosen from the shelf matching the user's active goals,
    with a weekly learning plan and a quote.
    """

    def __init__(self, goals: GoalService, clock: Clock):
        self.goals = goals
        self.clock = clock

    async def execute(self, command: Command) -> Reply:
        now = self.clock.now()
        goals = await self.goals.active_goals(command.user_id)
        tip = contextual_tip([g.type for g in goals], now)
        quote = quote_of_the_day(now)
        plan = weekly_learning_plan("intermediate" if goals else "basic")

        topics = "\n\n".join(f"{t.day}: {t.topic}\n{t.activity}" for t in plan)
        return text(
            "💡 *Tips Keuangan*\n\n"
            f"{tip.title}\n{tip.content}\n\n"
            f"📝 *Detail:*\n{tip.detail}\n\n"
            f"📚 *Rencana Belajar Minggu Ini:*\n{topics}\n\n"
            f"💭 *Quote of the Day:*\n\"{quote.text}\"\n- {quote.author}"
        )
