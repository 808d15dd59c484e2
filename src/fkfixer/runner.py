"""Run every constraint check and collect the outcome.

``run_checks`` goes through the constraints one by one on a single
connection. ``run_checks_parallel`` runs one task per constraint, each task
holding a pooled connection from detection to deletion. In both cases a
failing constraint is logged and recorded, and the others still run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

import polars as pl

from fkfixer.checker import IntegrityChecker
from fkfixer.constraints import ConstraintDescriptor, ConstraintIndex
from fkfixer.datasources.base import SQLConnection, SQLConnectionPool
from fkfixer.exceptions import ConstraintCheckError, DataSourceConnectionError

logger = logging.getLogger(__name__)


@dataclass
class ConstraintResult:
    """Outcome of checking one constraint."""

    descriptor: ConstraintDescriptor
    invalid_ids: list[Any] = field(default_factory=list)
    error: str | None = None

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_ids)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    """Per-constraint results of a run, in constraint order."""

    results: list[ConstraintResult] = field(default_factory=list)

    @property
    def invalid_total(self) -> int:
        return sum(r.invalid_count for r in self.results)

    @property
    def failed(self) -> list[ConstraintResult]:
        return [r for r in self.results if not r.ok]

    @property
    def with_invalid_rows(self) -> list[ConstraintResult]:
        return [r for r in self.results if r.invalid_count > 0]

    @property
    def has_issues(self) -> bool:
        return self.invalid_total > 0 or bool(self.failed)

    def to_polars(self) -> pl.DataFrame:
        """Get the report as one row per constraint."""
        return pl.DataFrame(
            {
                "constraint": [r.descriptor.name for r in self.results],
                "schema": [r.descriptor.schema for r in self.results],
                "table": [r.descriptor.table for r in self.results],
                "column": [r.descriptor.column for r in self.results],
                "ref_table": [r.descriptor.ref_table for r in self.results],
                "ref_column": [r.descriptor.ref_column for r in self.results],
                "invalid_count": [r.invalid_count for r in self.results],
                "error": [r.error for r in self.results],
            },
            schema={
                "constraint": pl.Utf8,
                "schema": pl.Utf8,
                "table": pl.Utf8,
                "column": pl.Utf8,
                "ref_table": pl.Utf8,
                "ref_column": pl.Utf8,
                "invalid_count": pl.Int64,
                "error": pl.Utf8,
            },
        )


def check_one(
    checker: IntegrityChecker,
    fk: ConstraintDescriptor,
    index: ConstraintIndex,
    conn: SQLConnection,
) -> ConstraintResult:
    """Check one constraint, turning a per-constraint failure into a result."""
    logger.info(f"Checking Foreign Key constraint {fk}")
    try:
        ids = checker.check(fk, index, conn)
    except ConstraintCheckError as e:
        logger.error(f"Could not check Foreign Key Constraint: {e}")
        return ConstraintResult(fk, error=str(e))

    if ids:
        logger.warning(
            f"{len(ids)} invalid foreign references found in table {fk.table} column {fk.column}"
        )
    return ConstraintResult(fk, invalid_ids=ids)


def run_checks(
    checker: IntegrityChecker,
    index: ConstraintIndex,
    conn: SQLConnection,
) -> RunReport:
    """Check all constraints sequentially over one connection."""
    logger.info(f"Found {len(index)} Foreign Key Constraints to check...")
    return RunReport([check_one(checker, fk, index, conn) for fk in index])


def run_checks_parallel(
    checker: IntegrityChecker,
    index: ConstraintIndex,
    pool: SQLConnectionPool,
    max_workers: int | None = None,
) -> RunReport:
    """Check all constraints concurrently, one pooled connection per task.

    Args:
        checker: Shared checker; it holds no per-check state.
        index: Read-only constraint index shared by all tasks.
        pool: Bounds the number of connections in use at once.
        max_workers: Thread count, defaults to the pool size.
    """
    logger.info(
        f"Found {len(index)} Foreign Key Constraints to check "
        f"with {max_workers or pool.size} workers..."
    )

    def task(fk: ConstraintDescriptor) -> ConstraintResult:
        with pool.acquire() as conn:
            return check_one(checker, fk, index, conn)

    results: dict[str, ConstraintResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers or pool.size) as executor:
        futures = {executor.submit(task, fk): fk for fk in index}
        for future in as_completed(futures):
            fk = futures[future]
            try:
                results[fk.name] = future.result()
            except DataSourceConnectionError as e:
                logger.error(f"No connection available for constraint {fk.name}: {e}")
                results[fk.name] = ConstraintResult(fk, error=str(e))

    return RunReport([results[fk.name] for fk in index])
