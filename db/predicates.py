"""Typed filters for sketch_items queries.

Predicates compile to a parameterised SQL WHERE fragment, so callers never
build filter strings by hand:

    Equals("center_word", "faith", case_insensitive=True) & IsNull("shared_drawing_id")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple
from uuid import UUID

from .schema import SKETCH_COLUMNS


def _column(field: str) -> str:
    if field not in SKETCH_COLUMNS:
        raise ValueError(f"Unknown sketch field: {field!r}")
    return field


def _sql_value(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


class Predicate:
    def to_sql(self) -> Tuple[str, List[Any]]:
        raise NotImplementedError

    def __and__(self, other: "Predicate") -> "And":
        return And(self, other)


@dataclass(frozen=True)
class Everything(Predicate):
    def to_sql(self) -> Tuple[str, List[Any]]:
        return "1 = 1", []


@dataclass(frozen=True)
class Equals(Predicate):
    field: str
    value: Any
    case_insensitive: bool = False

    def to_sql(self) -> Tuple[str, List[Any]]:
        column = _column(self.field)
        if self.value is None:
            raise ValueError("Use IsNull to match missing values")
        collate = " COLLATE NOCASE" if self.case_insensitive else ""
        return f"{column} = ?{collate}", [_sql_value(self.value)]


@dataclass(frozen=True)
class IsNull(Predicate):
    field: str

    def to_sql(self) -> Tuple[str, List[Any]]:
        return f"{_column(self.field)} IS NULL", []


@dataclass(frozen=True)
class IsNotNull(Predicate):
    field: str

    def to_sql(self) -> Tuple[str, List[Any]]:
        return f"{_column(self.field)} IS NOT NULL", []


class And(Predicate):
    def __init__(self, *clauses: Predicate):
        if not clauses:
            raise ValueError("And needs at least one clause")
        flat: List[Predicate] = []
        for clause in clauses:
            if isinstance(clause, And):
                flat.extend(clause.clauses)
            else:
                flat.append(clause)
        self.clauses = tuple(flat)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, And) and self.clauses == other.clauses

    def __hash__(self) -> int:
        return hash(self.clauses)

    def __repr__(self) -> str:
        return f"And{self.clauses!r}"

    def to_sql(self) -> Tuple[str, List[Any]]:
        parts: List[str] = []
        params: List[Any] = []
        for clause in self.clauses:
            sql, clause_params = clause.to_sql()
            parts.append(f"({sql})")
            params.extend(clause_params)
        return " AND ".join(parts), params
