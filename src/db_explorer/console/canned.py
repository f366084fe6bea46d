"""Predefined queries offered for a selected table."""
from dataclasses import dataclass
from typing import Callable


def quote_identifier(name: str) -> str:
    """Quote `name` as a Postgres identifier (`"a""b"` for `a"b`)."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


@dataclass(frozen=True)
class CannedQuery:
    label: str
    sql: str


CANNED_TEMPLATES: dict[str, Callable[[str], str]] = {
    "Show all": lambda table: f"SELECT * FROM {quote_identifier(table)} LIMIT 10",
    "Count": lambda table: f"SELECT COUNT(*) AS total FROM {quote_identifier(table)}",
    "Describe structure": lambda table: (
        "SELECT column_name, data_type, is_nullable, column_default "
        "FROM information_schema.columns "
        f"WHERE table_schema = current_schema() AND table_name = {quote_literal(table)} "
        "ORDER BY ordinal_position"
    ),
}


def canned_queries(table: str) -> list[CannedQuery]:
    """The canned actions for `table`, in display order."""
    return [CannedQuery(label=label, sql=template(table)) for label, template in CANNED_TEMPLATES.items()]
