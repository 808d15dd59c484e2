"""Schema sampler: one small CSV per table.

Each table dump holds a handful of rows plus, for every column that was NULL
in all of them, one row where that column is set (when such a row exists).
"""

from __future__ import annotations

import logging
from pathlib import Path

from fkfixer.datasources.base import ResultSet, SQLConnection, qualified_name, quote_identifier
from fkfixer.exceptions import CatalogQueryError, QueryError
from fkfixer.writer import TableWriter

logger = logging.getLogger(__name__)

DEFAULT_DUMP_DIR = Path("dumps")
SAMPLE_OFFSET = 1
SAMPLE_SIZE = 10

BASE_TABLES_QUERY = """
    SELECT TABLE_NAME
    FROM information_schema.TABLES
    WHERE TABLE_SCHEMA = {placeholder} AND TABLE_TYPE = 'BASE TABLE'
    ORDER BY TABLE_NAME"""


class SchemaDumper:
    """Writes sample rows of tables to ``<dump_dir>/<schema>_<table>.csv``."""

    def __init__(self, conn: SQLConnection, dump_dir: Path = DEFAULT_DUMP_DIR) -> None:
        self._conn = conn
        self.dump_dir = dump_dir

    def list_tables(self, schema: str) -> list[str]:
        """Get the base table names of a schema."""
        sql = BASE_TABLES_QUERY.format(placeholder=self._conn.placeholder)
        try:
            result = self._conn.query(sql, (schema,))
        except QueryError as e:
            raise CatalogQueryError(schema, str(e)) from e
        return [str(name) for name in result.scalars()]

    def dump_all_tables(self, schema: str) -> list[Path]:
        """Dump every base table of ``schema``, stopping at the first error."""
        paths = []
        tables = self.list_tables(schema)
        logger.info(f"Dumping {len(tables)} tables of schema {schema} to {self.dump_dir}")
        for table in tables:
            paths.append(self.dump_table(schema, table))
        return paths

    def dump_table(self, schema: str, table: str) -> Path:
        """Dump sample rows of one table.

        Returns:
            Path of the CSV file written.
        """
        source = qualified_name(schema, table)
        sample = self._conn.query(
            f"SELECT * FROM {source} LIMIT {SAMPLE_SIZE} OFFSET {SAMPLE_OFFSET}"
        )
        extra = self._probe_null_columns(source, sample)

        self.dump_dir.mkdir(parents=True, exist_ok=True)
        path = self.dump_dir / f"{schema}_{table}.csv"
        with open(path, "w", encoding="utf-8", newline="") as out:
            writer = TableWriter(out)
            writer.dump_columns(sample.columns)
            writer.dump_rows(sample.rows, sample.columns)
            writer.dump_rows(extra, sample.columns)

        logger.debug(f"{schema}.{table}: {writer.rows_written} rows written to {path}")
        return path

    def _probe_null_columns(self, source: str, sample: ResultSet) -> list[tuple]:
        """Find one row with a value for each column NULL throughout the sample."""
        null_idx = [
            i for i in range(len(sample.columns))
            if all(row[i] is None for row in sample.rows)
        ]
        extra: list[tuple] = []
        for i in null_idx:
            if any(row[i] is not None for row in extra):
                continue
            col = quote_identifier(sample.columns[i].name)
            found = self._conn.query(f"SELECT * FROM {source} WHERE {col} IS NOT NULL LIMIT 1")
            if found.rows:
                extra.append(found.rows[0])
        return extra
