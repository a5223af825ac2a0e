"""SELECT statement rendering."""

from typing import Any, List

from dmi.exceptions import InvalidOperationError

from ..core.identifier import escape_field
from ..dialects import DatabaseEngine
from .statement import Statement


class SelectStatement(Statement):
    """
    SELECT builder.

    Rendered as::

        SELECT [TOP n] [DISTINCT] f0, f1 FROM t0, t1 [joins]
            WHERE w0 AND (w1) [ORDER BY | GROUP BY ...] [LIMIT n]

    Where clauses after the first are parenthesised. The order-by list
    renders as GROUP BY instead when ``group_by`` is set. Row limiting is
    spelled by the dialect.
    """

    verb = "SELECT"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.distinct = False
        self.group_by = False
        self.top = 0

    def select_distinct(self, distinct: bool = True) -> None:
        self.distinct = distinct

    def set_group_by(self, group_by: bool = True) -> None:
        self.group_by = group_by

    def set_top(self, top: int) -> None:
        """Limit the number of rows returned; 0 means no limit."""
        self.top = max(top, 0)

    def execute_stored_procedure_query(self) -> List[Any]:
        """
        Run the bound stored procedure and return its rows.

        Raises:
            InvalidOperationError: If no stored procedure is bound
        """
        if not self.is_stored_procedure():
            raise InvalidOperationError(
                "Cannot use execute_stored_procedure_query() to execute a "
                "SELECT statement that is not a stored procedure."
            )
        rows = self.execute_stored_procedure()
        return list(rows) if rows is not None else []

    def to_statement_text(self) -> str:
        if self.dialect.engine is DatabaseEngine.ACCESS:
            return self._to_access_text()

        fragments = self.fragments
        parts = ["SELECT "]
        if self.top > 0:
            parts.append(self.dialect.apply_top_prefix(self.top))
        if self.distinct:
            parts.append("DISTINCT ")
        parts.append(", ".join(escape_field(f, self.dialect) for f in fragments.fields))

        if fragments.tables:
            parts.append(" FROM " + ", ".join(fragments.tables))
        for join in fragments.joins:
            parts.append(f" {join.join_type.value} {join.table} ON {join.on}")

        where = list(fragments.where_clauses)
        top_where = self.dialect.apply_top_where(self.top) if self.top > 0 else None
        if where:
            parts.append(self._render_where(where))
            if top_where:
                parts.append(f" AND {top_where}")
        elif top_where:
            parts.append(f" WHERE {top_where}")

        parts.append(self._render_order_by())

        if self.top > 0:
            parts.append(self.dialect.apply_top_suffix(self.top))

        text = "".join(parts)
        end = self.dialect.statement_end
        if end and not text.endswith(end):
            text += end
        return text

    def _render_where(self, where: List[str]) -> str:
        text = " WHERE " + where[0]
        for clause in where[1:]:
            text += f" AND ({clause})"
        return text

    def _render_order_by(self) -> str:
        if not self.fragments.order_by:
            return ""
        keyword = " GROUP BY " if self.group_by else " ORDER BY "
        return keyword + ", ".join(self.fragments.order_by)

    def _to_access_text(self) -> str:
        # Access needs every join but the last wrapped in parentheses
        fragments = self.fragments
        parts = ["SELECT "]
        if self.distinct:
            parts.append("DISTINCT ")
        parts.append(", ".join(fragments.fields))

        joins = fragments.joins
        if fragments.tables and not joins:
            parts.append(" FROM " + ", ".join(fragments.tables))
        if joins:
            parts.append(" FROM " + "(" * (len(joins) - 1))
            parts.append(fragments.tables[0] if fragments.tables else "")
            for i, join in enumerate(joins):
                parts.append(f" {join.join_type.value} {join.table} ON {join.on}")
                if i < len(joins) - 1:
                    parts.append(")")

        if fragments.where_clauses:
            parts.append(self._render_where(fragments.where_clauses))
        parts.append(self._render_order_by())
        return "".join(parts)


def count_statement_text(select: SelectStatement) -> str:
    """
    Rewrite a SELECT as ``SELECT COUNT(*) FROM ...``.

    The projection, ORDER BY and GROUP BY are dropped; tables, joins and
    where clauses are kept.
    """
    count = SelectStatement(select.dialect)
    for table in select.fragments.tables:
        count.add_table(table)
    count.fragments.joins.extend(select.fragments.joins)
    count.fragments.where_clauses.extend(select.fragments.where_clauses)
    count.fragments.fields.append("COUNT(*)")
    return count.to_statement_text()


def count_sql_text(sql: str) -> str:
    """Rewrite raw SELECT text as a count by replacing everything before FROM."""
    sql = sql.strip()
    upper = sql.upper()
    if upper.startswith("SELECT COUNT"):
        return sql
    from_pos = upper.find(" FROM ")
    if from_pos == -1:
        raise ValueError(f"Cannot build a count query from SQL without FROM: {sql!r}")
    tail = sql[from_pos:]
    order_pos = tail.upper().find(" ORDER BY ")
    if order_pos != -1:
        tail = tail[:order_pos]
    return "SELECT COUNT(*)" + tail


__all__ = ["SelectStatement", "count_sql_text", "count_statement_text"]
