"""
Financial-tone scoring.

Advisory only: the result enriches replies and never changes
which command runs.
"""

import re
from typing import List, Literal

from pydantic import BaseModel, Field

FINANCIAL_TERMS = {
    "positive": {
        "untung", "laba", "profit", "hemat", "tabungan", "investasi",
        "bonus", "diskon", "cashback", "pendapatan", "gajian",
    },
    "negative": {
        "rugi", "hutang", "utang", "cicilan", "tagihan", "denda", "telat",
        "mahal", "boros", "defisit", "bangkrut", "kridit",
    },
    "neutral": {
        "transfer", "saldo", "rekening", "transaksi", "mutasi",
        "anggaran", "budget", "biaya", "dana", "uang",
    },
}

# General valence lexicon (-5..5), Indonesian
GENERAL_LEXICON = {
    "senang": 3, "bahagia": 3, "bagus": 2, "baik": 2, "mantap": 3, "lega": 2,
    "syukur": 2, "alhamdulillah": 2, "puas": 2, "hebat": 3, "aman": 1, "untung": 2,
    "sedih": -2, "susah": -2, "sulit": -2, "pusing": -2, "stres": -3, "stress": -3,
    "bingung": -1, "kesal": -2, "capek": -2, "takut": -2, "khawatir": -2, "cemas": -2,
    "parah": -3, "buruk": -3, "rugi": -2, "bangkrut": -4, "boros": -2, "mahal": -1,
    "telat": -1, "kurang": -1, "habis": -2, "tekor": -3, "bokek": -3,
}

_token_re = re.compile(r"[a-z]+")

SentimentCategory = Literal["very_positive", "positive", "neutral", "negative", "very_negative"]


class FinancialTerm(BaseModel):
    term: str
    type: Literal["positive", "negative", "neutral"]


class Advisory(BaseModel):
    type: str
    message: str
    suggestion: str


class SentimentResult(BaseModel):
    score: int
    general_score: float
    category: SentimentCategory
    financial_terms: List[FinancialTerm] = Field(default_factory=list)
    advisories: List[Advisory] = Field(default_factory=list)


def tokenize(text: str) -> List[str]:
    return _token_re.findall(text.lower())


def categorize(score: int) -> SentimentCategory:
    if score > 1:
        return "very_positive"
    if score > 0:
        return "positive"
    if score == 0:
        return "neutral"
    if score > -2:
        return "negative"
    return "very_negative"


def general_sentiment(tokens: List[str]) -> float:
    """Mean lexicon valence over all tokens, 0.0 for empty input."""
    if not tokens:
        return 0.0
    return sum(GENERAL_LEXICON.get(t, 0) for t in tokens) / len(tokens)


def build_advisories(score: int, general: float) -> List[Advisory]:
    advisories = []
    if score < -1:
        advisories.append(
            Advisory(
                type="financial_stress",
                message="Terdeteksi indikasi stress keuangan. Mungkin Anda perlu memeriksa anggaran dan pengeluaran.",
                suggestion="Coba periksa budget Anda atau konsultasikan dengan kami untuk saran pengelolaan keuangan.",
            )
        )
    if score < 0 and general < 0:
        advisories.append(
            Advisory(
                type="spending_behavior",
                message="Pola pengeluaran menunjukkan kecenderungan negatif.",
                suggestion="Pertimbangkan untuk membuat rencana penghematan atau anggaran yang lebih ketat.",
            )
        )
    return advisories


def score(text: str) -> SentimentResult:
    tokens = tokenize(text)
    total = 0
    terms: List[FinancialTerm] = []

    for token in tokens:
        if token in FINANCIAL_TERMS["positive"]:
            total += 1
            terms.append(FinancialTerm(term=token, type="positive"))
        elif token in FINANCIAL_TERMS["negative"]:
            total -= 1
            terms.append(FinancialTerm(term=token, type="negative"))
        elif token in FINANCIAL_TERMS["neutral"]:
            terms.append(FinancialTerm(term=token, type="neutral"))

    general = general_sentiment(tokens)
    return SentimentResult(
        score=total,
        general_score=general,
        category=categorize(total),
        financial_terms=terms,
        advisories=build_advisories(total, general),
    )
