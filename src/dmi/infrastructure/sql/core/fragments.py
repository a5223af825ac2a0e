"""
Statement fragment storage.

Holds the literal pieces of a SQL statement (tables, fields, values, where
predicates, ORDER BY clauses and joins) in insertion order. Nothing here
validates identifiers; callers supply well-formed SQL text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class JoinType(str, Enum):
    INNER = "INNER JOIN"
    LEFT = "LEFT JOIN"
    RIGHT = "RIGHT JOIN"


@dataclass(frozen=True)
class Join:
    table: str
    on: str
    join_type: JoinType = JoinType.INNER


@dataclass
class StatementFragments:
    """Ordered, append-only fragment lists shared by every statement verb."""

    tables: List[str] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    where_clauses: List[str] = field(default_factory=list)
    order_by: List[str] = field(default_factory=list)
    joins: List[Join] = field(default_factory=list)
    autonumber_fields: List[str] = field(default_factory=list)

    def add_table(self, table: str) -> None:
        self.tables.append(table)

    def add_field(self, name: str) -> None:
        self.fields.append(name)

    def add_value(self, value: Any) -> None:
        self.values.append(value)

    def add_where_clause(self, clause: str) -> None:
        self.where_clauses.append(clause)

    def add_order_by(self, clause: str) -> None:
        # ORDER BY clauses are unique ignoring case; repeats are dropped
        if any(existing.lower() == clause.lower() for existing in self.order_by):
            return
        self.order_by.append(clause)

    def add_join(self, table: str, on: str, join_type: JoinType) -> None:
        self.joins.append(Join(table, on, join_type))

    def remove_field(self, name: str) -> None:
        if name in self.fields:
            self.fields.remove(name)

    def table(self, index: int) -> str:
        return self.tables[index]

    def field_name(self, index: int) -> str:
        return self.fields[index]

    def where_clause(self, index: int) -> str:
        return self.where_clauses[index]
