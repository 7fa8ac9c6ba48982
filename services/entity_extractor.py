# FILE: services/entity_extractor.py
"""
Entity extraction from normalized text.

Every extractor is pure and total: it returns a "not found" value
(None or a documented default) instead of raising.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from core.intent import IntentType
from models.entities import DEFAULT_CATEGORY, ExtractedEntities, UpdateTarget
from models.goal import GoalType, Priority
from services.date_resolver import (
    DURATION_RE,
    EXPLICIT_DATE_RE,
    FUTURE_KEYWORDS,
    MONTH_YEAR_RE,
    RELATIVE_KEYWORDS,
    resolve_target_date,
    resolve_transaction_date,
)
from services.normalizer import normalize

# -----------------------------
# Amounts
# -----------------------------
MAGNITUDES = {
    "ribu": Decimal("1000"),
    "rb": Decimal("1000"),
    "k": Decimal("1000"),
    "juta": Decimal("1000000"),
    "jt": Decimal("1000000"),
    "m": Decimal("1000000"),
}

_NUMBER = r"\d{1,3}(?:\.\d{3})+(?:,\d+)?|\d+(?:[.,]\d+)?"
_magnitude_re = re.compile(r"(?<![\w.,])(" + _NUMBER + r")\s*(ribu|rb|juta|jt|k|m)\b")
_number_re = re.compile(r"(?<![\w.,])(" + _NUMBER + r")(?![\w])")


def _parse_number(token: str) -> Optional[Decimal]:
    """
    "50.000" -> 50000 (Indonesian grouping), "2.5" / "2,5" -> 2.5,
    "1.250.000,50" -> 1250000.50
    """
    if re.fullmatch(r"\d{1,3}(?:\.\d{3})+(?:,\d+)?", token):
        token = token.replace(".", "").replace(",", ".")
    else:
        token = token.replace(",", ".")
    try:
        return Decimal(token)
    except InvalidOperation:
        return None


def _mask_dates(text: str) -> str:
    for pattern in (EXPLICIT_DATE_RE, MONTH_YEAR_RE, DURATION_RE):
        text = pattern.sub(lambda m: " " * len(m.group(0)), text)
    return text


def extract_amount(text: str) -> Optional[Decimal]:
    """
    Magnitude words win over bare literals; None when no number is present.
    """
    scan = _mask_dates(normalize(text))

    match = _magnitude_re.search(scan)
    if match:
        value = _parse_number(match.group(1))
        if value is not None:
            return value * MAGNITUDES[match.group(2)]

    for match in _number_re.finditer(scan):
        value = _parse_number(match.group(1))
        if value is not None:
            return value
    return None


_amount_span_re = re.compile(
    r"(?<![\w.,])(?:" + _NUMBER + r")\s*(?:ribu|rb|juta|jt|k|m)\b|(?<![\w.,])(?:" + _NUMBER + r")(?![\w])"
)


# -----------------------------
# Dates
# -----------------------------
def extract_date(text: str, now: datetime) -> datetime:
    return resolve_transaction_date(normalize(text), now)


def extract_target_date(text: str, now: datetime) -> datetime:
    return resolve_target_date(normalize(text), now)


# -----------------------------
# Categories
# -----------------------------
CATEGORY_KEYWORDS: Dict[str, str] = {
    "makan": "Makanan & Minuman",
    "minum": "Makanan & Minuman",
    "makanan": "Makanan & Minuman",
    "minuman": "Makanan & Minuman",
    "sarapan": "Makanan & Minuman",
    "jajan": "Makanan & Minuman",
    "kopi": "Makanan & Minuman",
    "transportasi": "Transportasi",
    "bensin": "Transportasi",
    "gojek": "Transportasi",
    "grab": "Transportasi",
    "ojek": "Transportasi",
    "parkir": "Transportasi",
    "tol": "Transportasi",
    "listrik": "Utilitas",
    "air": "Utilitas",
    "internet": "Utilitas",
    "utilitas": "Utilitas",
    "pulsa": "Komunikasi",
    "paket data": "Komunikasi",
    "komunikasi": "Komunikasi",
    "belanja": "Belanja",
    "gaji": "Pendapatan",
    "bonus": "Pendapatan",
    "pendapatan": "Pendapatan",
    "investasi": "Investasi",
    "kesehatan": "Kesehatan",
    "obat": "Kesehatan",
    "dokter": "Kesehatan",
    "hiburan": "Hiburan",
    "bioskop": "Hiburan",
    "nonton": "Hiburan",
}

CATEGORIES: List[str] = sorted(set(CATEGORY_KEYWORDS.values())) + [DEFAULT_CATEGORY]


def extract_category(text: str) -> str:
    """
    One left-to-right pass; at each position a two-word keyword
    is tried before the single word. First hit wins.
    """
    words = normalize(text).split()
    for i, word in enumerate(words):
        if i + 1 < len(words):
            pair = f"{word} {words[i + 1]}"
            if pair in CATEGORY_KEYWORDS:
                return CATEGORY_KEYWORDS[pair]
        if word in CATEGORY_KEYWORDS:
            return CATEGORY_KEYWORDS[word]
    return DEFAULT_CATEGORY


# -----------------------------
# Goals
# -----------------------------
GOAL_TYPE_KEYWORDS: Dict[str, GoalType] = {
    "tabungan": GoalType.SAVINGS,
    "nabung": GoalType.SAVINGS,
    "menabung": GoalType.SAVINGS,
    "simpan": GoalType.SAVINGS,
    "dana darurat": GoalType.EMERGENCY_FUND,
    "emergency": GoalType.EMERGENCY_FUND,
    "darurat": GoalType.EMERGENCY_FUND,
    "investasi": GoalType.INVESTMENT,
    "invest": GoalType.INVESTMENT,
    "saham": GoalType.INVESTMENT,
    "reksadana": GoalType.INVESTMENT,
    "pendidikan": GoalType.EDUCATION,
    "sekolah": GoalType.EDUCATION,
    "kuliah": GoalType.EDUCATION,
    "beli": GoalType.PURCHASE,
    "pembelian": GoalType.PURCHASE,
    "cicilan": GoalType.DEBT_PAYMENT,
    "utang": GoalType.DEBT_PAYMENT,
    "hutang": GoalType.DEBT_PAYMENT,
    "bayar": GoalType.DEBT_PAYMENT,
}

PRIORITY_KEYWORDS: Dict[str, Priority] = {
    "tidak penting": Priority.LOW,
    "penting": Priority.HIGH,
    "urgent": Priority.HIGH,
    "prioritas": Priority.HIGH,
    "utama": Priority.HIGH,
    "sedang": Priority.MEDIUM,
    "biasa": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "rendah": Priority.LOW,
    "santai": Priority.LOW,
}

GOAL_CREATE_VERBS = ["tambah goal", "buat goal", "goal baru", "target baru", "target"]
GOAL_UPDATE_VERBS = ["update goal", "perbarui goal", "progress goal", "tambah progress"]
GOAL_DELETE_VERBS = ["hapus goal", "batalkan goal", "batal goal", "selesai goal"]
FILLER_WORDS = {"untuk", "sebesar", "dengan", "pada", "dalam", "di", "ke", "yang", "goal", "rp"}


def _keyword_re(keywords) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(sorted((re.escape(k) for k in keywords), key=len, reverse=True)) + r")\b")


_goal_type_re = _keyword_re(GOAL_TYPE_KEYWORDS)
_priority_re = _keyword_re(PRIORITY_KEYWORDS)
_time_keyword_re = _keyword_re(list(FUTURE_KEYWORDS) + list(RELATIVE_KEYWORDS) + ["hari", "minggu", "bulan", "tahun"])


def extract_goal_type(text: str) -> Optional[GoalType]:
    match = _goal_type_re.search(normalize(text))
    return GOAL_TYPE_KEYWORDS[match.group(1)] if match else None


def extract_priority(text: str) -> Priority:
    match = _priority_re.search(normalize(text))
    return PRIORITY_KEYWORDS[match.group(1)] if match else Priority.MEDIUM


def _strip_to_name(text: str, verbs: List[str], *, strip_goal_types: bool) -> Optional[str]:
    clean = _keyword_re(verbs).sub(" ", text)
    for pattern in (EXPLICIT_DATE_RE, MONTH_YEAR_RE, DURATION_RE, _amount_span_re, _time_keyword_re, _priority_re):
        clean = pattern.sub(" ", clean)
    if strip_goal_types:
        clean = _goal_type_re.sub(" ", clean)
    words = [w for w in clean.split() if w not in FILLER_WORDS]
    name = " ".join(words).strip()
    return name or None


def extract_goal_name(text: str) -> Optional[str]:
    """
    Whatever is left after removing commands, amounts, dates and keywords.
    None means the goal is unnamed.
    """
    return _strip_to_name(normalize(text), GOAL_CREATE_VERBS, strip_goal_types=True)


def extract_goal_reference(text: str) -> Optional[str]:
    """Goal name fragment in a delete/cancel command."""
    return _strip_to_name(normalize(text), GOAL_DELETE_VERBS, strip_goal_types=False)


def extract_update_target(text: str) -> UpdateTarget:
    normalized = normalize(text)
    return UpdateTarget(
        name=_strip_to_name(normalized, GOAL_UPDATE_VERBS, strip_goal_types=False),
        amount=extract_amount(normalized),
    )


# -----------------------------
# Aggregate
# -----------------------------
def extract_entities(text: str, intent: IntentType, now: datetime) -> ExtractedEntities:
    """
    Run every extractor. Goal-specific fields are only filled for goal intents.
    """
    normalized = normalize(text)
    entities = ExtractedEntities(
        amount=extract_amount(normalized),
        date=extract_date(normalized, now),
        category=extract_category(normalized),
        priority=extract_priority(normalized),
    )

    if intent is IntentType.CREATE_GOAL:
        entities.goal_type = extract_goal_type(normalized)
        entities.goal_name = extract_goal_name(normalized)
        entities.target_date = extract_target_date(normalized, now)
    elif intent is IntentType.UPDATE_GOAL:
        entities.update_target = extract_update_target(normalized)
        entities.goal_name = entities.update_target.name
    elif intent is IntentType.DELETE_GOAL:
        entities.goal_name = extract_goal_reference(normalized)

    return entities


def strip_amounts(text: str) -> str:
    """Text with every amount removed, used as a transaction description."""
    return " ".join(_amount_span_re.sub(" ", normalize(text)).split())
