from typing import List, Optional

from configurations.logging_config import get_logger
from core.clock import Clock
from core.intent import Command
from executors.base import BaseExecutor, text
from models.goal import Goal, GoalProgress, GoalStatus, GoalType
from models.reply import Reply
from services.education import contextual_tip
from services.goal_service import GoalService, goal_progress, goals_summary
from services.utils import format_long_date, format_rupiah

logger = get_logger("goal_executor")

NOT_FOUND = 'Goal tidak ditemukan. Ketik "lihat goal" untuk melihat daftar goal Anda.'

CREATE_USAGE = (
    "Untuk menambah goal, gunakan format:\n"
    '"tambah goal [jenis] [target] [tanggal]"\n\n'
    "Contoh:\n"
    '"tambah goal tabungan 10jt desember 2024"\n'
    '"buat goal dana darurat 30jt 6 bulan"\n\n'
    "Jenis goal yang tersedia:\n"
    + "\n".join(f"- {t.label()}" for t in GoalType)
)

UPDATE_USAGE = (
    "Untuk update goal, gunakan format:\n"
    '"update goal [nama goal] [jumlah]"\n\n'
    "Contoh:\n"
    '"update goal tabungan rumah 5jt"\n'
    '"progress goal dana darurat 2.5jt"'
)

DELETE_USAGE = (
    "Untuk menghapus goal, gunakan format:\n"
    '"hapus goal [nama goal]"\n\n'
    "Contoh:\n"
    '"hapus goal tabungan rumah"'
)


def format_goal(goal: Goal) -> str:
    return "\n".join(
        [
            f"Jenis: {goal.type.label()}",
            f"Target: {format_rupiah(goal.target_amount)}",
            f"Tenggat: {format_long_date(goal.target_date)}",
            f"Prioritas: {goal.priority.label()}",
        ]
    )


def format_progress(progress: GoalProgress) -> str:
    return (
        f"Progress: {progress.percentage:.1f}%\n"
        f"Sisa Target: {format_rupiah(progress.remaining)}"
    )


def motivation(percentage: float) -> str:
    if percentage >= 75:
        return "💪 Hampir sampai! Tetap semangat!"
    if percentage >= 50:
        return "👏 Sudah setengah jalan! Pertahankan!"
    if percentage >= 25:
        return "🌟 Progress yang bagus! Terus konsisten!"
    return "🚀 Langkah awal yang baik! Tetap fokus!"


class CreateGoalExecutor(BaseExecutor):
    required_entities = ("amount",)

    def __init__(self, goals: GoalService, clock: Clock):
        self.goals = goals
        self.clock = clock

    def usage(self, command: Command) -> Optional[Reply]:
        if command.entities.goal_type is None:
            return text(CREATE_USAGE)
        return None

    def prompt_for(self, entity: str, command: Command) -> str:
        return 'Berapa target nominal goal ini? Contoh: "10jt"'

    def describe(self, command: Command) -> str:
        e = command.entities
        return (
            f"Buat goal {self._name(command)} dengan target {format_rupiah(e.amount)} "
            f"sampai {format_long_date(e.target_date)}?"
        )

    @staticmethod
    def _name(command: Command) -> str:
        e = command.entities
        return e.goal_name or f"{e.goal_type.label()} Goal"

    async def execute(self, command: Command) -> Reply:
        e = command.entities
        goal, feasibility = await self.goals.create_goal(
            command.user_id,
            goal_type=e.goal_type,
            name=self._name(command),
            target_amount=e.amount,
            target_date=e.target_date,
            priority=e.priority,
        )
        tip = contextual_tip([goal.type], self.clock.now())

        lines = [
            "✅ Goal berhasil dibuat!",
            "",
            f"🎯 *{goal.name}*",
            format_goal(goal),
            "",
            f"💰 Target Bulanan: {format_rupiah(goal.monthly_target)}",
            f"📊 Skor Kelayakan: {feasibility.score}/100",
            feasibility.recommendation,
        ]
        lines += [f"⚠️ {factor.message}" for factor in feasibility.factors]
        lines += ["", f"📍 Milestone: {len(goal.milestones)} (pertama: {goal.milestones[0].label}, "
                      f"{format_rupiah(goal.milestones[0].target_amount)})"]
        if goal.strategy.steps:
            lines += ["", "🧭 *Strategi:*"] + [f"- {step}" for step in goal.strategy.steps]
        if goal.strategy.adjustments:
            lines += ["", "🔧 *Penyesuaian:*"] + [f"- {adj}" for adj in goal.strategy.adjustments]
        lines += ["", f"💡 Tips: {tip.content}"]
        return text("\n".join(lines))


class ViewGoalExecutor(BaseExecutor):
    def __init__(self, goals: GoalService, clock: Clock):
        self.goals = goals
        self.clock = clock

    async def execute(self, command: Command) -> Reply:
        goals: List[Goal] = await self.goals.active_goals(command.user_id)
        if not goals:
            return text('Anda belum memiliki goal aktif. Ketik "tambah goal" untuk membuat goal baru.')

        now = self.clock.now()
        lines = ["📊 *Progress Goal Anda*", ""]
        for goal in goals:
            progress = goal_progress(goal, now)
            lines += [
                f"🎯 *{goal.name}*",
                format_goal(goal),
                format_progress(progress),
                f"Waktu: {progress.days_remaining} hari lagi",
                f"Status: {'✅ On Track' if progress.on_track else '⚠️ Behind Schedule'}",
            ]
            if progress.next_milestone:
                lines += [
                    "📍 *Milestone Berikutnya:*",
                    f"{progress.next_milestone.label}: {format_rupiah(progress.next_milestone.target_amount)}",
                ]
            lines.append("")

        summary = goals_summary(goals, now)
        lines += [
            "📈 *Ringkasan:*",
            f"Total Goal: {summary.total}",
            f"On Track: {summary.on_track}",
            f"Progress Rata-rata: {summary.average_progress:.1f}%",
        ]
        return text("\n".join(lines))


class UpdateGoalExecutor(BaseExecutor):
    required_entities = ("amount",)

    def __init__(self, goals: GoalService, clock: Clock):
        self.goals = goals
        self.clock = clock

    def usage(self, command: Command) -> Optional[Reply]:
        if not command.entities.goal_name:
            return text(UPDATE_USAGE)
        return None

    def prompt_for(self, entity: str, command: Command) -> str:
        return f'Berapa jumlah yang ingin ditambahkan ke goal "{command.entities.goal_name}"?'

    def describe(self, command: Command) -> str:
        e = command.entities
        return f'Tambahkan {format_rupiah(e.amount)} ke goal "{e.goal_name}"?'

    async def execute(self, command: Command) -> Reply:
        e = command.entities
        goal = await self.goals.find_active_by_name(command.user_id, e.goal_name)
        if goal is None:
            return text(NOT_FOUND)

        goal = await self.goals.record_contribution(goal, e.amount)
        progress = goal_progress(goal, self.clock.now())

        lines = [
            f'✅ Progress goal "{goal.name}" berhasil diperbarui!',
            "",
            format_goal(goal),
            format_progress(progress),
        ]
        if goal.status is GoalStatus.COMPLETED:
            lines += ["", "🎉 Selamat! Goal Anda sudah tercapai!"]
        else:
            if progress.next_milestone:
                lines += [
                    "",
                    "🎯 Milestone berikutnya:",
                    f"{progress.next_milestone.label}: {format_rupiah(progress.next_milestone.target_amount)}",
                ]
            lines += ["", motivation(progress.percentage)]
        return text("\n".join(lines))


class DeleteGoalExecutor(BaseExecutor):
    def __init__(self, goals: GoalService):
        self.goals = goals

    def usage(self, command: Command) -> Optional[Reply]:
        if not command.entities.goal_name:
            return text(DELETE_USAGE)
        return None

    async def execute(self, command: Command) -> Reply:
        goal = await self.goals.find_active_by_name(command.user_id, command.entities.goal_name)
        if goal is None:
            return text(NOT_FOUND)

        goal = await self.goals.cancel(goal)
        return text(f'✅ Goal "{goal.name}" berhasil dihapus.\n\nRingkasan goal:\n{format_goal(goal)}')
