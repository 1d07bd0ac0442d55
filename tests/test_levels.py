"""Tests for the Quartz level code <-> index mapping."""

from __future__ import annotations

import pytest

from pymagnum._constants import LEVEL_CODES
from pymagnum.exceptions import MagnumLevelMappingError
from pymagnum.levels import index_to_level, level_to_index, levels_to_codes


def test_video_level_is_index_zero() -> None:
    assert level_to_index("V") == 0
    assert index_to_level(0) == "V"
    assert level_to_index("A") == 1
    assert level_to_index("U") == 21
    assert level_to_index("W") == 22
    assert index_to_level(25) == "Z"


def test_round_trip_over_whole_alphabet() -> None:
    for code in LEVEL_CODES:
        assert index_to_level(level_to_index(code)) == code
    for index in range(len(LEVEL_CODES)):
        assert level_to_index(index_to_level(index)) == index


@pytest.mark.parametrize("code", ["v", "a", "", "VA", "1", ".", None, 0])
def test_unknown_code_raises_mapping_error(code: object) -> None:
    with pytest.raises(MagnumLevelMappingError) as excinfo:
        level_to_index(code)  # type: ignore[arg-type]
    assert excinfo.value.value == code


@pytest.mark.parametrize("index", [-1, 26, 100, True, 1.0, "0"])
def test_out_of_range_index_raises_mapping_error(index: object) -> None:
    with pytest.raises(MagnumLevelMappingError):
        index_to_level(index)  # type: ignore[arg-type]


def test_mapping_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        level_to_index("?")


def test_levels_to_codes_keeps_order_and_drops_duplicates() -> None:
    assert levels_to_codes([2, 0, 2, 1]) == ("B", "V", "A")
    assert levels_to_codes([]) == ()


def test_levels_to_codes_rejects_bad_index() -> None:
    with pytest.raises(MagnumLevelMappingError):
        levels_to_codes([0, 26])
