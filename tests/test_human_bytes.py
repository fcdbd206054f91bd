import pytest
from hypothesis import given
from hypothesis import strategies as st

from heapsize.human_bytes import HumanBytes


def test_half_kibibyte_past_one():
    assert str(HumanBytes(1536)) == "1.50 KiB"


def test_exactly_one_kibibyte_stays_in_bytes():
    assert str(HumanBytes(1024)) == "1024 B"


def test_default_is_zero():
    assert HumanBytes() == HumanBytes(0)
    assert str(HumanBytes()) == "0 B"


@given(st.integers(min_value=0, max_value=1024))
def test_small_values_print_in_bytes(n):
    assert str(HumanBytes(n)) == f"{n} B"


@given(st.integers(min_value=1025, max_value=2**64 - 1))
def test_large_values_use_binary_unit(n):
    text = str(HumanBytes(n))
    number, unit = text.split(" ")
    assert unit in {"KiB", "MiB", "GiB", "TiB", "PiB", "EiB"}
    assert len(number.split(".")[1]) == 2
    assert float(number) >= 1.0


@given(st.integers(min_value=2, max_value=1000))
def test_exact_mebibytes(n):
    assert str(HumanBytes(n * 1024 * 1024)) == f"{n}.00 MiB"


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_int_round_trip(n):
    assert int(HumanBytes(n)) == n
    assert HumanBytes(int(HumanBytes(n))) == HumanBytes(n)


@given(st.integers(min_value=0, max_value=2**64 - 1), st.integers(min_value=0, max_value=2**64 - 1))
def test_ordering_follows_bytes(a, b):
    assert (HumanBytes(a) < HumanBytes(b)) == (a < b)


def test_negative_rejected():
    with pytest.raises(ValueError):
        HumanBytes(-1)


def test_above_u64_rejected():
    with pytest.raises(ValueError):
        HumanBytes(2**64)


def test_non_int_rejected():
    with pytest.raises(TypeError):
        HumanBytes(1.0)