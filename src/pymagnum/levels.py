"""Mapping between Quartz level codes and dense local level indexes.

The router addresses levels by a single character (``V`` for video, then
``A``-``Z`` minus ``V``). Locally every level is a zero-based index into the
route table. Both directions raise :class:`MagnumLevelMappingError` instead of
returning an out-of-range value.
"""

from __future__ import annotations

from collections.abc import Iterable

from pymagnum._constants import LEVEL_CODES, MAX_LEVEL_COUNT
from pymagnum.exceptions import MagnumLevelMappingError

_INDEX_BY_CODE: dict[str, int] = {code: index for index, code in enumerate(LEVEL_CODES)}


def level_to_index(code: str) -> int:
    """Return the local index of Quartz level *code*.

    Raises :class:`MagnumLevelMappingError` if *code* is not a level code.
    """
    index = _INDEX_BY_CODE.get(code) if isinstance(code, str) else None
    if index is None:
        raise MagnumLevelMappingError(f"unknown level code {code!r}", value=code)
    return index


def index_to_level(index: int) -> str:
    """Return the Quartz level code for local level *index*.

    Raises :class:`MagnumLevelMappingError` if *index* is outside ``0..25``.
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < MAX_LEVEL_COUNT:
        raise MagnumLevelMappingError(
            f"level index must be between 0 and {MAX_LEVEL_COUNT - 1}, got {index!r}",
            value=index,
        )
    return LEVEL_CODES[index]


def levels_to_codes(indexes: Iterable[int]) -> tuple[str, ...]:
    """Map level indexes to codes, keeping the first occurrence of each."""
    codes: list[str] = []
    for index in indexes:
        code = index_to_level(index)
        if code not in codes:
            codes.append(code)
    return tuple(codes)
