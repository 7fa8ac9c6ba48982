import pytest
from hypothesis import given
from hypothesis import strategies as st

from services.normalizer import (
    PIPELINE,
    SLANG_DICTIONARY,
    NormalizedText,
    normalize,
    register_regional_variant,
    register_slang,
)


# ---------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------

def test_pipeline_stage_order_is_fixed():
    assert [name for name, _ in PIPELINE] == [
        "lowercase",
        "regional_variations",
        "slang",
        "currency",
        "decimal_comma",
        "numeric_shorthand",
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Bayar DUIT listrik", "bayar uang listrik"),
        ("kasih fulus ke adik", "kasih uang ke adik"),
        ("tf ke rek mama", "transfer ke rekening mama"),
        ("beli pulsa goceng", "beli pulsa 5000"),
        ("seceng buat parkir", "1000 buat parkir"),
        ("makan 50k", "makan 50000"),
        ("gaji 10jt", "gaji 10000000"),
        ("bonus 2,5jt", "bonus 2500000"),
        ("bonus 1.5jt", "bonus 1500000"),
        ("Rp 50.000 untuk makan", "50.000 untuk makan"),
        ("rp.25000 bensin", "25000 bensin"),
        ("IDR 100000", "100000"),
        ("Rp 1.250.000,50 buat cicil motor", "1250000.50 buat cicilan motor"),
        ("kopi 12,5 ribu", "kopi 12.5 ribu"),
        ("harga 0,5k", "harga 500"),
        ("rp 5 k", "5000"),
        ("makan   siang\t 20 rb", "makan siang 20 ribu"),
        ("", ""),
    ],
)
def test_normalize_examples(raw, expected):
    assert normalize(raw) == expected


def test_slang_only_on_token_boundaries():
    # "ga" inside "gaji" must not become "tidak"
    assert normalize("gaji ga masuk") == "gaji tidak masuk"


def test_normalize_returns_marker_type():
    result = normalize("Makan 50k")
    assert isinstance(result, NormalizedText)
    assert normalize(result) is result


@pytest.mark.parametrize(
    "raw",
    [
        "Catat pengeluaran 50rb makan siang",
        "tf 2,5jt ke rek bca kmrn",
        "Rp. 1.250.000,50 buat cicil motor",
        "gopek cepek seceng goceng ceban sejuta",
        "udh gajian blm? thr 3jt",
        "byr listrik 350k idr",
    ],
)
def test_normalize_is_idempotent_on_examples(raw):
    once = normalize(raw)
    assert normalize(str(once)) == once


# Digits, separators, magnitudes, currency prefixes and slang glued together
chat_fragments = st.sampled_from(
    ["0", "1", "5", "12", "000", ",", ".", " ", "\t", "k", "jt", "m", "rb", "ribu",
     "rp", "Rp", "rp.", "IDR", "ga", "duit", "gaji"]
)


@given(st.lists(chat_fragments, max_size=16).map("".join))
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(str(once)) == once


@pytest.mark.parametrize("raw", ["0,Rp0", "1.000,5k", "1,5k,5", "5k k", "0.0000000001k"])
def test_normalize_is_idempotent_on_stage_boundaries(raw):
    once = normalize(raw)
    assert normalize(str(once)) == once


def test_no_slang_output_is_itself_a_key():
    outputs = {word for value in SLANG_DICTIONARY.values() for word in value.split()}
    assert not outputs & set(SLANG_DICTIONARY)


# ---------------------------------------------------------------------
# Extension
# ---------------------------------------------------------------------

def test_register_slang_extends_dictionary():
    register_slang("cuan", "untung")
    try:
        assert normalize("lagi cuan") == "lagi untung"
    finally:
        SLANG_DICTIONARY.pop("cuan", None)


def test_register_slang_rejects_chaining():
    with pytest.raises(ValueError):
        register_slang("gpp", "ga")


def test_register_regional_variant():
    from services.normalizer import REGIONAL_VARIATIONS

    register_regional_variant("Piti", "uang")
    try:
        assert normalize("piti habis") == "uang habis"
    finally:
        REGIONAL_VARIATIONS.pop("piti", None)
