"""Foreign key constraint descriptors, catalog query and index.

Descriptors are loaded once per run from ``information_schema`` and indexed
by constraint name, owning table and referenced table.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from fkfixer.datasources.base import SQLConnection
from fkfixer.exceptions import CatalogQueryError, DuplicateConstraintError, QueryError

logger = logging.getLogger(__name__)


FK_CONSTRAINTS_QUERY = """
    SELECT
        k.CONSTRAINT_NAME,
        k.CONSTRAINT_SCHEMA,
        k.TABLE_NAME,
        k.COLUMN_NAME,
        k.REFERENCED_TABLE_NAME,
        k.REFERENCED_COLUMN_NAME
    FROM information_schema.KEY_COLUMN_USAGE k
    JOIN information_schema.TABLE_CONSTRAINTS c
        ON k.CONSTRAINT_NAME = c.CONSTRAINT_NAME
        AND c.CONSTRAINT_SCHEMA = k.CONSTRAINT_SCHEMA
        AND c.TABLE_NAME = k.TABLE_NAME
    WHERE c.CONSTRAINT_TYPE = 'FOREIGN KEY'"""


@dataclass(frozen=True)
class ConstraintDescriptor:
    """All the needed info to check one foreign key column pair.

    Attributes:
        name: Constraint name, unique within the loaded scope.
        schema: Schema owning the constraint.
        table: Referencing table.
        column: Referencing column.
        ref_table: Referenced table.
        ref_column: Referenced column.
    """

    name: str
    schema: str
    table: str
    column: str
    ref_table: str
    ref_column: str

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "ConstraintDescriptor":
        """Create from a catalog row in ``FK_CONSTRAINTS_QUERY`` column order."""
        name, schema, table, column, ref_table, ref_column = (_text(v) for v in row)
        return cls(
            name=name,
            schema=schema,
            table=table,
            column=column,
            ref_table=ref_table,
            ref_column=ref_column,
        )

    @property
    def is_self_referential(self) -> bool:
        return self.table == self.ref_table

    def __str__(self) -> str:
        return (
            f"{self.name} in schema {self.schema} on table {self.table} "
            f"column {self.column} referencing table {self.ref_table} column {self.ref_column}"
        )


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


def query_fk_constraints(
    conn: SQLConnection,
    schema: str | None = None,
) -> list[ConstraintDescriptor]:
    """Get all foreign key constraints visible to the connection.

    Args:
        conn: Open connection; any default database will do since the
            query names ``information_schema`` explicitly.
        schema: Only load constraints of this schema.

    Returns:
        One descriptor per constraint column, in catalog order. Columns of a
        multi-column constraint are named ``<constraint>.<column>``.

    Raises:
        CatalogQueryError: If the metadata query fails.
    """
    sql = FK_CONSTRAINTS_QUERY
    params: tuple[Any, ...] | None = None
    if schema is not None:
        sql = f"{sql} AND k.CONSTRAINT_SCHEMA = {conn.placeholder}"
        params = (schema,)
    sql = f"{sql} ORDER BY k.CONSTRAINT_SCHEMA, k.TABLE_NAME, k.CONSTRAINT_NAME, k.ORDINAL_POSITION"

    try:
        result = conn.query(sql, params)
    except QueryError as e:
        raise CatalogQueryError(schema, str(e)) from e

    descriptors = [ConstraintDescriptor.from_row(row) for row in result]
    return _split_composite(descriptors)


def _split_composite(descriptors: list[ConstraintDescriptor]) -> list[ConstraintDescriptor]:
    counts = Counter((d.schema, d.table, d.name) for d in descriptors)
    res = []
    for d in descriptors:
        if counts[(d.schema, d.table, d.name)] > 1:
            d = ConstraintDescriptor(
                name=f"{d.name}.{d.column}",
                schema=d.schema,
                table=d.table,
                column=d.column,
                ref_table=d.ref_table,
                ref_column=d.ref_column,
            )
        res.append(d)
    return res


class ConstraintIndex:
    """Pre-indexed, read-only list of constraint descriptors.

    Example:
        >>> index = ConstraintIndex(query_fk_constraints(conn, "shop"))
        >>> index.get("orders_ibfk_1").ref_table
        'customers'
        >>> [fk.name for fk in index.on_table("orders")]
        ['orders_ibfk_1', 'orders_ibfk_2']
    """

    def __init__(self, descriptors: Iterable[ConstraintDescriptor]) -> None:
        """Index descriptors by name, owning table and referenced table.

        Raises:
            DuplicateConstraintError: If two descriptors share a name.
        """
        fks = tuple(descriptors)
        by_name: dict[str, ConstraintDescriptor] = {}
        by_table: dict[str, list[ConstraintDescriptor]] = {}
        by_ref_table: dict[str, list[ConstraintDescriptor]] = {}

        for fk in fks:
            if fk.name in by_name:
                raise DuplicateConstraintError(fk.name)
            by_name[fk.name] = fk
            by_table.setdefault(fk.table, []).append(fk)
            by_ref_table.setdefault(fk.ref_table, []).append(fk)

        self._fks = fks
        self._by_name = MappingProxyType(by_name)
        self._by_table = MappingProxyType({k: tuple(v) for k, v in by_table.items()})
        self._by_ref_table = MappingProxyType({k: tuple(v) for k, v in by_ref_table.items()})

    @property
    def fks(self) -> tuple[ConstraintDescriptor, ...]:
        return self._fks

    @property
    def by_name(self) -> Mapping[str, ConstraintDescriptor]:
        return self._by_name

    @property
    def by_table(self) -> Mapping[str, tuple[ConstraintDescriptor, ...]]:
        return self._by_table

    @property
    def by_ref_table(self) -> Mapping[str, tuple[ConstraintDescriptor, ...]]:
        return self._by_ref_table

    def get(self, name: str) -> ConstraintDescriptor | None:
        return self._by_name.get(name)

    def on_table(self, table: str) -> tuple[ConstraintDescriptor, ...]:
        """Get the constraints declared on ``table``."""
        return self._by_table.get(table, ())

    def referencing(self, ref_table: str) -> tuple[ConstraintDescriptor, ...]:
        """Get the constraints pointing at ``ref_table``."""
        return self._by_ref_table.get(ref_table, ())

    def __len__(self) -> int:
        return len(self._fks)

    def __iter__(self):
        return iter(self._fks)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
