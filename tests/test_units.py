import pytest
from hypothesis import given
from hypothesis import strategies as st

from ethkit.units import ether, gwei


def test_one_ether_has_eighteen_decimals():
    assert ether(1) == 10**18


def test_one_gwei_has_nine_decimals():
    assert gwei(1) == 10**9


def test_zero():
    assert ether(0) == 0
    assert gwei(0) == 0


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_ether_is_a_billion_gwei(value):
    assert ether(value) == gwei(value) * gwei(1)


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_scaling_is_linear(value):
    assert gwei(value) == value * gwei(1)


def test_negative_rejected():
    with pytest.raises(ValueError):
        ether(-1)


def test_non_integer_rejected():
    with pytest.raises(TypeError):
        gwei(1.5)