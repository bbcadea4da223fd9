"""
Date-range filters for report queries.

A filter is a SQL predicate with ``?`` placeholders plus the ordered values
to bind to them. Values are never interpolated into the SQL text.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from shopledger.schemas.common import parse_input
from shopledger.schemas.report import DateFilterRequest

FILTER_TODAY = "today"
FILTER_MONTH = "month"

DEFAULT_COLUMN = "created_at"


@dataclass(frozen=True)
class DateFilter:
    predicate_expression: str
    parameters: list = field(default_factory=list)

    def as_clause(self, prefix: str = "df") -> TextClause:
        """SQLAlchemy clause with the placeholders turned into named binds."""
        parts = self.predicate_expression.split("?")
        if len(parts) - 1 != len(self.parameters):
            raise ValueError("placeholder count does not match parameters")

        sql = parts[0]
        binds = {}
        for index, (value, tail) in enumerate(zip(self.parameters, parts[1:])):
            name = f"{prefix}{index}"
            sql += f":{name}{tail}"
            binds[name] = value
        return text(sql).bindparams(**binds)


def build_date_filter(
    request: Union[DateFilterRequest, dict, None] = None,
    column: str = DEFAULT_COLUMN,
    now: Optional[datetime] = None,
) -> DateFilter:
    """
    Build the predicate for a named filter (``today``/``month``) or an
    inclusive ``from``..``to`` range. Anything else matches every row.
    """
    request = parse_input(DateFilterRequest, request or {})
    now = now or datetime.now()

    target = f"{request.column_alias}.{column}" if request.column_alias else column

    if request.filter == FILTER_TODAY:
        return DateFilter(f"date({target}) = date(?)", [now.date().isoformat()])

    if request.filter == FILTER_MONTH:
        return DateFilter(f"strftime('%Y-%m', {target}) = ?", [now.strftime("%Y-%m")])

    if request.date_from and request.date_to:
        return DateFilter(
            f"date({target}) BETWEEN date(?) AND date(?)",
            [request.date_from.isoformat(), request.date_to.isoformat()],
        )

    return DateFilter("1=1", [])


def date_range_filter(start: date, end: date, column_alias: Optional[str] = None) -> DateFilter:
    """Inclusive range filter, e.g. for a computed fiscal period."""
    return build_date_filter({"from": start, "to": end, "alias": column_alias})
