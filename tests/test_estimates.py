import pytest
from hypothesis import given
from hypothesis import strategies as st

from heapsize.estimates import (
    GROUP_WIDTH,
    calculate_layout_for,
    capacity_to_buckets,
    estimate_btree_size,
    estimate_hashmap_size,
)


@pytest.mark.parametrize(
    ("capacity", "buckets"),
    [(0, 0), (1, 4), (3, 4), (4, 8), (7, 8), (8, 16), (14, 16), (15, 32), (1024, 2048)],
)
def test_capacity_to_buckets(capacity, buckets):
    assert capacity_to_buckets(capacity) == buckets


@given(st.integers(min_value=8, max_value=10**9))
def test_buckets_are_power_of_two_and_roomy(capacity):
    buckets = capacity_to_buckets(capacity)
    assert buckets & (buckets - 1) == 0
    assert buckets * 7 >= capacity * 8 - 7


def test_empty_layout_is_one_group():
    assert calculate_layout_for(4, 4, 0) == GROUP_WIDTH


def test_layout_rejects_bad_alignment():
    with pytest.raises(ValueError):
        calculate_layout_for(4, 3, 16)


def test_hashset_u32_with_capacity_1024():
    assert estimate_hashmap_size(4, 4, 0, 1024) == (10248, 8)


def test_hashmap_u32_u32_with_capacity_1024():
    assert estimate_hashmap_size(8, 4, 0, 1024) == (18440, 8)


def test_empty_hashmap_has_no_table():
    assert estimate_hashmap_size(8, 4, 0, 0) == (0, 0)


@given(st.integers(min_value=1, max_value=10**6), st.sampled_from([1, 2, 4, 8, 16]))
def test_used_never_exceeds_allocated(capacity, align):
    total, used = estimate_hashmap_size(align * 2, align, capacity, capacity)
    assert used <= total


def test_btree_set_of_ten_u32():
    assert estimate_btree_size(4, 0, 10) == 70


def test_btree_map_of_ten_u32_pairs():
    assert estimate_btree_size(4, 4, 10) == 130


def test_empty_btree_is_zero():
    assert estimate_btree_size(4, 4, 0) == 0


@given(st.integers(min_value=0, max_value=10**6), st.integers(min_value=0, max_value=10**6))
def test_btree_grows_with_length(a, b):
    low, high = sorted((a, b))
    assert estimate_btree_size(8, 8, low) <= estimate_btree_size(8, 8, high)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        estimate_btree_size(4, 4, -1)