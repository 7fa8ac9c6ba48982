# services/education.py
"""
Financial tips, quotes and weekly learning plans.
Selection is deterministic per day so a user sees the same tip all day.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from models.goal import GoalType


class Tip(BaseModel):
    title: str
    content: str
    detail: str


class Quote(BaseModel):
    text: str
    author: str


class LearningTopic(BaseModel):
    day: str
    topic: str
    activity: str


FINANCIAL_TIPS: Dict[str, List[Tip]] = {
    "budgeting": [
        Tip(
            title="Aturan 50/30/20",
            content="Bagi pengeluaran Anda: 50% kebutuhan, 30% keinginan, dan 20% tabungan.",
            detail="Kebutuhan meliputi: sewa, listrik, makan\nKeinginan meliputi: hiburan, hobi\nTabungan untuk: dana darurat, investasi",
        ),
        Tip(
            title="Tracking Harian",
            content="Catat setiap pengeluaran, sekecil apapun. Pengeluaran kecil bisa jadi besar jika terakumulasi.",
            detail="Gunakan fitur catat transaksi bot ini untuk memudahkan tracking pengeluaran Anda.",
        ),
    ],
    "saving": [
        Tip(
            title="Dana Darurat",
            content="Siapkan dana darurat minimal 3-6 kali pengeluaran bulanan.",
            detail="Dana darurat penting untuk menghadapi situasi tidak terduga seperti kehilangan pekerjaan atau sakit.",
        ),
        Tip(
            title="Automasi Tabungan",
            content="Atur auto-debit untuk tabungan begitu gajian, perlakukan seperti tagihan.",
            detail="Dengan auto-debit, Anda tidak perlu khawatir lupa menabung dan terhindar dari godaan menggunakan uang tersebut.",
        ),
    ],
    "investment": [
        Tip(
            title="Diversifikasi",
            content="Jangan taruh semua telur dalam satu keranjang. Diversifikasi investasi Anda.",
            detail="Contoh diversifikasi:\n- Deposito\n- Reksadana\n- Saham\n- Emas\n- Properti",
        ),
        Tip(
            title="Investasi Berkala",
            content="Terapkan Dollar Cost Averaging (DCA) untuk mengurangi risiko timing market.",
            detail="Investasi rutin dengan jumlah tetap setiap bulan lebih baik daripada investasi sekaligus dalam jumlah besar.",
        ),
    ],
    "debt": [
        Tip(
            title="Hindari Utang Konsumtif",
            content="Gunakan utang hanya untuk hal produktif, hindari utang untuk konsumsi.",
            detail="Utang produktif: pendidikan, modal usaha\nUtang konsumtif: gadget, liburan",
        ),
        Tip(
            title="Debt Snowball Method",
            content="Fokus melunasi utang terkecil dulu sambil membayar minimum payment untuk utang lain.",
            detail="Metode ini memberi motivasi karena Anda bisa melihat progress pelunasan utang lebih cepat.",
        ),
    ],
    "income": [
        Tip(
            title="Multiple Income Streams",
            content="Kembangkan beberapa sumber pendapatan untuk keamanan finansial.",
            detail="Contoh side income:\n- Freelance\n- Online shop\n- Investasi\n- Sewa properti",
        ),
        Tip(
            title="Upgrade Skills",
            content="Investasi dalam pengembangan diri untuk meningkatkan nilai di pasar kerja.",
            detail="Ikuti kursus, sertifikasi, atau pendidikan lanjutan yang relevan dengan karir Anda.",
        ),
    ],
}

# Which tip shelf fits a goal
GOAL_TIP_CATEGORY: Dict[GoalType, str] = {
    GoalType.SAVINGS: "saving",
    GoalType.EMERGENCY_FUND: "saving",
    GoalType.INVESTMENT: "investment",
    GoalType.DEBT_PAYMENT: "debt",
    GoalType.PURCHASE: "budgeting",
    GoalType.EDUCATION: "income",
}

QUOTES = [
    Quote(text="Jangan menabung dari sisa pengeluaran, tapi keluarkan dari sisa tabungan.", author="Warren Buffett"),
    Quote(text="Kebebasan finansial adalah ketika aset pasif menghasilkan lebih dari pengeluaran.", author="Robert Kiyosaki"),
    Quote(text="Investasi dalam diri sendiri membayar dividen terbaik.", author="Benjamin Franklin"),
]

LEARNING_PLANS: Dict[str, List[LearningTopic]] = {
    "basic": [
        LearningTopic(day="Senin", topic="Pencatatan Keuangan Harian", activity="Praktek mencatat pengeluaran"),
        LearningTopic(day="Rabu", topic="Membuat Anggaran", activity="Menyusun anggaran bulanan"),
        LearningTopic(day="Jumat", topic="Review Mingguan", activity="Evaluasi pengeluaran minggu ini"),
    ],
    "intermediate": [
        LearningTopic(day="Senin", topic="Analisis Arus Kas", activity="Identifikasi pola pengeluaran"),
        LearningTopic(day="Rabu", topic="Strategi Menabung", activity="Setup auto-debit tabungan"),
        LearningTopic(day="Jumat", topic="Perencanaan Investasi", activity="Research instrumen investasi"),
    ],
    "advanced": [
        LearningTopic(day="Senin", topic="Analisis Portfolio", activity="Review dan rebalancing portfolio"),
        LearningTopic(day="Rabu", topic="Tax Planning", activity="Optimasi pajak investasi"),
        LearningTopic(day="Jumat", topic="Risk Management", activity="Setup proteksi aset"),
    ],
}


def _pick(items: list, now: datetime):
    return items[now.toordinal() % len(items)]


def tips_for(category: Optional[str]) -> List[Tip]:
    if category and category in FINANCIAL_TIPS:
        return FINANCIAL_TIPS[category]
    return [tip for tips in FINANCIAL_TIPS.values() for tip in tips]


def contextual_tip(goal_types: Iterable[GoalType], now: datetime) -> Tip:
    """The first goal type decides the shelf; without goals any tip may be picked."""
    category = next((GOAL_TIP_CATEGORY[t] for t in goal_types if t in GOAL_TIP_CATEGORY), None)
    return _pick(tips_for(category), now)


def quote_of_the_day(now: datetime) -> Quote:
    return _pick(QUOTES, now)


def weekly_learning_plan(level: str = "basic") -> List[LearningTopic]:
    return LEARNING_PLANS.get(level, LEARNING_PLANS["basic"])
