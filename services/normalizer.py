# FILE: services/normalizer.py
"""
Lexical normalization

- Canonicalizes raw chat text before any NLP runs
- Stage order is part of the contract:
  slang must run before numeric shorthand (slang introduces "ribu"/"juta"
  tokens the amount extractor keys on) and shorthand must run before
  amount extraction
- Currency and decimal-comma stages run before shorthand; a second pass
  over normalized text is a no-op
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Tuple

from configurations.logging_config import get_logger

logger = get_logger("normalizer")


class NormalizedText(str):
    """Output of `normalize`. Never normalized twice."""


# -----------------------------
# Dictionaries
# -----------------------------
REGIONAL_VARIATIONS: Dict[str, str] = {
    "duid": "uang",    # Javanese
    "pipis": "uang",   # Sundanese
    "fulus": "uang",   # Betawi
    "kepeng": "uang",  # Balinese
    "pitis": "uang",   # Minang
}

SLANG_DICTIONARY: Dict[str, str] = {
    # Money-related
    "duit": "uang",
    "doku": "uang",
    "cepek": "100",
    "gopek": "500",
    "seceng": "1000",
    "goceng": "5000",
    "ceban": "10000",
    "sejuta": "1000000",

    # Transaction-related
    "tf": "transfer",
    "trf": "transfer",
    "trx": "transaksi",
    "byr": "bayar",

    # Amount-related
    "rb": "ribu",
    "jt": "juta",

    # Time-related
    "hr": "hari",
    "bln": "bulan",
    "thn": "tahun",
    "kmrn": "kemarin",
    "bsk": "besok",
    "skrg": "sekarang",

    # Common words
    "yg": "yang",
    "dgn": "dengan",
    "utk": "untuk",
    "dr": "dari",
    "krn": "karena",
    "tdk": "tidak",
    "gk": "tidak",
    "ga": "tidak",
    "gak": "tidak",
    "bgt": "banget",
    "sdh": "sudah",
    "udh": "sudah",
    "blm": "belum",

    # Financial terms
    "rek": "rekening",
    "cc": "kartu kredit",
    "dp": "uang muka",
    "cicil": "cicilan",
    "bnga": "bunga",
    "thr": "tunjangan hari raya",
}

_MULTIPLIERS = {"k": Decimal("1000"), "jt": Decimal("1000000"), "m": Decimal("1000000")}

_shorthand_re = re.compile(r"(?<![\w.,])(\d+(?:[.,]\d+)?)\s*(k|jt|m)(?!\w|[.,]\d|\s*(?:k|jt|m)\b)")
_grouped_decimal_re = re.compile(r"(?<![\w,])(?<!\d\.)(\d{1,3}(?:\.\d{3})+),(\d+)\b")
_decimal_comma_re = re.compile(r"(?<=\d),(?=\d)")
_currency_re = re.compile(r"\b(?:rp|idr)(?=[\d\s.]|$)\.?\s*")
_whitespace_re = re.compile(r"\s+")


def _word_pattern(words) -> re.Pattern:
    # Longest first so multi-word keys win over their prefixes
    alternatives = sorted((re.escape(w) for w in words), key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(alternatives) + r")\b")


def _replace_words(text: str, table: Dict[str, str]) -> str:
    if not table:
        return text
    return _word_pattern(table).sub(lambda m: table[m.group(1)], text)


# -----------------------------
# Stages
# -----------------------------
def lowercase(text: str) -> str:
    return text.lower()


def fold_regional_variations(text: str) -> str:
    return _replace_words(text, REGIONAL_VARIATIONS)


def replace_slang(text: str) -> str:
    return _replace_words(text, SLANG_DICTIONARY)


def _scale(match: re.Match) -> str:
    raw, suffix = match.group(1), match.group(2)
    try:
        value = Decimal(raw.replace(",", ".")) * _MULTIPLIERS[suffix]
    except InvalidOperation:
        return match.group(0)
    # Plain digits only, never exponent notation
    digits = format(value, "f")
    if "." in digits:
        digits = digits.rstrip("0").rstrip(".")
    return digits


def expand_numeric_shorthand(text: str) -> str:
    """50k -> 50000, 10jt / 10m -> 10000000, 2,5jt -> 2500000."""
    return _shorthand_re.sub(_scale, text)


def convert_decimal_comma(text: str) -> str:
    """1.250.000,50 -> 1250000.50 and 12,5 -> 12.5"""
    text = _grouped_decimal_re.sub(lambda m: m.group(1).replace(".", "") + "." + m.group(2), text)
    return _decimal_comma_re.sub(".", text)


def strip_currency(text: str) -> str:
    text = _currency_re.sub("", text)
    return _whitespace_re.sub(" ", text).strip()


PIPELINE: List[Tuple[str, Callable[[str], str]]] = [
    ("lowercase", lowercase),
    ("regional_variations", fold_regional_variations),
    ("slang", replace_slang),
    ("currency", strip_currency),
    ("decimal_comma", convert_decimal_comma),
    ("numeric_shorthand", expand_numeric_shorthand),
]


def normalize(raw: str) -> NormalizedText:
    """
    Run every stage in order. Total: any string (including empty) is accepted.
    """
    if isinstance(raw, NormalizedText):
        return raw
    text = raw or ""
    for _name, stage in PIPELINE:
        text = stage(text)
    return NormalizedText(text)


# -----------------------------
# Extension (startup only)
# -----------------------------
def register_slang(slang: str, formal: str) -> None:
    slang, formal = slang.lower(), formal.lower()
    if formal in SLANG_DICTIONARY or slang in SLANG_DICTIONARY.values():
        raise ValueError(f"Slang mapping {slang!r} -> {formal!r} would chain with an existing entry")
    SLANG_DICTIONARY[slang] = formal
    logger.info(f"Added new slang term: {slang} -> {formal}")


def register_regional_variant(variation: str, standard: str) -> None:
    REGIONAL_VARIATIONS[variation.lower()] = standard.lower()
    logger.info(f"Added new regional variation: {variation} -> {standard}")
