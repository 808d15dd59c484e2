"""Foreign key constraint checker.

Finds rows whose foreign key column references a missing row, optionally
exports them as CSV and optionally deletes them.

Example:
    >>> checker = IntegrityChecker(CheckerConfig(dump_invalid_rows=True, dump_location=Path("dumps")))
    >>> for fk in index:
    ...     invalid = checker.check(fk, index, conn)
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Sequence, TextIO

from fkfixer.constraints import ConstraintDescriptor, ConstraintIndex
from fkfixer.datasources.base import SQLConnection, qualified_name, quote_identifier
from fkfixer.exceptions import (
    ConstraintCheckError,
    DumpLocationError,
    DumpWriteError,
    QueryError,
)
from fkfixer.writer import TableWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckerConfig:
    """Configuration for ``IntegrityChecker.check``.

    Attributes:
        auto_delete: Delete the rows holding invalid references.
        dump_invalid_rows: Export the rows holding invalid references.
        dump_location: Directory for the exports, standard output if None.
    """

    auto_delete: bool = False
    dump_invalid_rows: bool = False
    dump_location: Path | None = None


def prepare_dump_location(path: Path) -> Path:
    """Create the dump directory if missing and check it can be written to.

    Raises:
        DumpLocationError: If the path is not a writable directory.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError:
        raise DumpLocationError(path, "is not a directory")
    except OSError as e:
        raise DumpLocationError(path, f"could not be created: {e.strerror or e}")

    if not path.is_dir():
        raise DumpLocationError(path, "is not a directory")
    if not os.access(path, os.W_OK | os.X_OK):
        raise DumpLocationError(path, "is not writable")
    return path


class IntegrityChecker:
    """Checks foreign key constraints one at a time.

    The dump location is validated when the checker is built, so an unusable
    directory is reported before any constraint is checked.
    """

    def __init__(self, config: CheckerConfig | None = None) -> None:
        self.config = config or CheckerConfig()
        if self.config.dump_location is not None:
            prepare_dump_location(self.config.dump_location)

    @property
    def auto_delete(self) -> bool:
        return self.config.auto_delete

    @property
    def dump_invalid_rows(self) -> bool:
        return self.config.dump_invalid_rows

    @property
    def dump_location(self) -> Path | None:
        return self.config.dump_location

    def check(
        self,
        fk: ConstraintDescriptor,
        index: ConstraintIndex,
        conn: SQLConnection,
    ) -> list[Any]:
        """Return the values of ``fk.column`` that reference no row.

        NULL references are valid. Rows are exported before they are
        deleted when both are enabled.

        Raises:
            ConstraintCheckError: If a query for this constraint fails.
            DumpWriteError: If the export cannot be written; nothing is
                deleted for this constraint then.
        """
        query = build_detection_query(fk)
        try:
            ids = conn.query(query).scalars()
        except QueryError as e:
            raise ConstraintCheckError(fk, "detect", str(e)) from e

        if ids and self.dump_invalid_rows:
            self.dump_rows(fk, ids, index, conn)

        if ids and self.auto_delete:
            self.delete_all(fk, ids, conn)

        return ids

    def delete_all(
        self,
        fk: ConstraintDescriptor,
        ids: Sequence[Any],
        conn: SQLConnection,
    ) -> int:
        """Delete all rows having an invalid foreign reference in one batch.

        The batch is one transaction: if it fails part way, or the commit
        fails, the rows already deleted are rolled back.
        """
        query = (
            f"DELETE FROM {qualified_name(fk.schema, fk.table)} "
            f"WHERE {quote_identifier(fk.column)} = {conn.placeholder}"
        )
        try:
            deleted = conn.execute_batch(query, [(id_,) for id_ in _unique(ids)])
            conn.commit()
        except QueryError as e:
            _rollback(fk, conn)
            raise ConstraintCheckError(fk, "delete", str(e)) from e

        logger.info(f"Deleted {deleted} rows from {fk.schema}.{fk.table} ({fk.name})")
        return deleted

    def dump_rows(
        self,
        fk: ConstraintDescriptor,
        ids: Sequence[Any],
        index: ConstraintIndex,
        conn: SQLConnection,
    ) -> int:
        """Export the rows holding each invalid id, as CSV.

        Returns:
            Number of data rows written.
        """
        query = build_dump_query(fk, index, conn.placeholder)

        with self._open_sink(fk) as out:
            writer = TableWriter(out, flush_lines=self.dump_location is None)
            header_written = False
            try:
                for id_ in _unique(ids):
                    result = conn.query(query, (id_,))
                    if not header_written:
                        writer.dump_columns(result.columns)
                        header_written = True
                    writer.dump_rows(result.rows, result.columns)
            except QueryError as e:
                raise ConstraintCheckError(fk, "dump", str(e)) from e
            except OSError as e:
                raise DumpWriteError(fk, str(e)) from e

        return writer.rows_written

    @contextmanager
    def _open_sink(self, fk: ConstraintDescriptor) -> Iterator[TextIO]:
        if self.dump_location is None:
            yield sys.stdout
            return

        path = self.dump_location / f"{fk.name}.csv"
        try:
            out = open(path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise DumpWriteError(fk, f"cannot open {path}: {e.strerror or e}") from e
        try:
            yield out
        finally:
            try:
                out.close()
            except OSError as e:
                raise DumpWriteError(fk, f"cannot write {path}: {e.strerror or e}") from e
        logger.info(f"Invalid rows of {fk.name} written to {path}")


def build_detection_query(fk: ConstraintDescriptor) -> str:
    """Anti-join selecting referencing values with no referenced row."""
    col = quote_identifier(fk.column)
    ref_col = quote_identifier(fk.ref_column)
    return (
        f"SELECT a.{col} "
        f"FROM {qualified_name(fk.schema, fk.table)} a "
        f"LEFT JOIN {qualified_name(fk.schema, fk.ref_table)} b ON a.{col} = b.{ref_col} "
        f"WHERE a.{col} IS NOT NULL AND b.{ref_col} IS NULL"
    )


def build_dump_query(fk: ConstraintDescriptor, index: ConstraintIndex, placeholder: str) -> str:
    """Select full rows for one invalid id.

    The other foreign keys of the owning table are LEFT JOINed in so the
    export shows the rows they resolve to. Self references are not joined.
    """
    joins = []
    others = [
        other for other in index.on_table(fk.table)
        if other.schema == fk.schema and other.name != fk.name and not other.is_self_referential
    ]
    for i, other in enumerate(others):
        alias = f"j{i}"
        joins.append(
            f" LEFT JOIN {qualified_name(other.schema, other.ref_table)} {alias}"
            f" ON a.{quote_identifier(other.column)} = {alias}.{quote_identifier(other.ref_column)}"
        )
    return (
        f"SELECT * FROM {qualified_name(fk.schema, fk.table)} a"
        + "".join(joins)
        + f" WHERE a.{quote_identifier(fk.column)} = {placeholder}"
    )


def _rollback(fk: ConstraintDescriptor, conn: SQLConnection) -> None:
    try:
        conn.rollback()
    except QueryError as e:
        logger.error(f"Rollback after failed delete for {fk.name} failed: {e}")


def _unique(ids: Sequence[Any]) -> list[Any]:
    return list(dict.fromkeys(ids))
