from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .errors import EntryError


class Condition(str, Enum):
    CONDITION1 = "condition1"
    CONDITION2 = "condition2"
    CONDITION3 = "condition3"
    CONDITION4 = "condition4"


@dataclass(frozen=True)
class TableNames:
    posts: str
    comments: str


CONDITION_TABLES: Mapping[Condition, TableNames] = {
    Condition.CONDITION1: TableNames(posts="Posts1", comments="Comments1"),
    Condition.CONDITION2: TableNames(posts="Posts2", comments="Comments2"),
    Condition.CONDITION3: TableNames(posts="Posts3", comments="Comments3"),
    Condition.CONDITION4: TableNames(posts="Posts4", comments="Comments4"),
}

ENTRY_CODES: Mapping[str, Condition] = {
    "235": Condition.CONDITION1,
    "254": Condition.CONDITION2,
    "275": Condition.CONDITION3,
    "295": Condition.CONDITION4,
}

INVALID_CODE_MESSAGE = "Invalid code. Please try again."


def condition_for_code(code: str) -> Condition:
    key = (code or "").strip()
    condition = ENTRY_CODES.get(key)
    if condition is None:
        raise EntryError(INVALID_CODE_MESSAGE)
    return condition


def tables_for(condition: Condition) -> TableNames:
    return CONDITION_TABLES[Condition(condition)]
