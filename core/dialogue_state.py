from enum import Enum
from typing import List, Optional


class DialogueState(str, Enum):
    """
    The state of a user's conversation.
    """

    IDLE = "idle"
    AWAITING_AMOUNT = "awaiting_amount"
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    ERROR = "error"

    # -----------------------------
    # Semantic helpers (SAFE)
    # -----------------------------
    def is_awaiting(self) -> bool:
        return self in {
            DialogueState.AWAITING_AMOUNT,
            DialogueState.AWAITING_CATEGORY,
            DialogueState.AWAITING_CONFIRMATION,
        }

    def awaited_entity(self) -> Optional[str]:
        if self is DialogueState.AWAITING_AMOUNT:
            return "amount"
        if self is DialogueState.AWAITING_CATEGORY:
            return "category"
        return None

    @classmethod
    def awaiting(cls, entity: str) -> "DialogueState":
        try:
            return cls(f"awaiting_{entity}")
        except ValueError:
            raise ValueError(f"No awaiting state for entity '{entity}'") from None

    def suggestions(self) -> List[str]:
        """Quick replies offered to the user in this state."""
        return list(_SUGGESTIONS.get(self, _SUGGESTIONS[DialogueState.IDLE]))


_SUGGESTIONS = {
    DialogueState.IDLE: ["Catat pengeluaran", "Lihat laporan", "Cek budget", "Bantuan"],
    DialogueState.AWAITING_AMOUNT: ["Berapa nominalnya?", "Masukkan jumlah transaksi"],
    DialogueState.AWAITING_CATEGORY: ["Untuk kategori apa?", "Pilih kategori transaksi"],
    DialogueState.AWAITING_CONFIRMATION: ["Ya, benar", "Tidak, ulangi", "Batal"],
    DialogueState.ERROR: ["Coba lagi", "Bantuan", "Kembali ke menu utama"],
}
