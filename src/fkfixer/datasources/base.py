"""Base classes for SQL connections.

This module defines the narrow connection interface the integrity engine
runs on, the result set it returns, and a thread-safe connection pool used
when constraints are checked in parallel.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from queue import Empty, Queue
from threading import Lock
from typing import Any, Callable, Iterable, Iterator, Protocol, Sequence, runtime_checkable

from fkfixer.exceptions import DataSourceConnectionError
from fkfixer.types import ColumnDescriptor

logger = logging.getLogger(__name__)


# =============================================================================
# Result Set
# =============================================================================


@dataclass
class ResultSet:
    """Rows of one query along with their column descriptors.

    Attributes:
        columns: One descriptor per column, in select order.
        rows: Row tuples, values in column order.
    """

    columns: list[ColumnDescriptor] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return iter(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)

    def scalars(self) -> list[Any]:
        """Get the first value of every row."""
        return [row[0] for row in self.rows]


# =============================================================================
# Connection Protocol
# =============================================================================


@runtime_checkable
class SQLConnection(Protocol):
    """What the integrity engine needs from a database connection.

    Implementations translate driver failures into ``QueryError``.
    """

    placeholder: str

    def query(self, sql: str, params: Sequence[Any] | None = None) -> ResultSet:
        """Run a statement and return its rows."""
        ...

    def execute_batch(self, sql: str, param_seq: Iterable[Sequence[Any]]) -> int:
        """Run one statement over many parameter tuples, return affected rows."""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        """Discard the uncommitted changes of the current transaction."""
        ...

    def close(self) -> None:
        ...


# =============================================================================
# Identifier Helpers
# =============================================================================


def quote_identifier(identifier: str) -> str:
    """Quote a table or column name with backticks."""
    escaped = identifier.replace("`", "``")
    return f"`{escaped}`"


def qualified_name(schema: str, table: str) -> str:
    """Get the quoted ``schema.table`` name."""
    return f"{quote_identifier(schema)}.{quote_identifier(table)}"


# =============================================================================
# Connection Pool
# =============================================================================


class SQLConnectionPool:
    """Thread-safe connection pool.

    Connections are created lazily up to ``size``. A caller that finds the
    pool exhausted waits up to ``timeout`` seconds for a connection to be
    returned.

    Example:
        >>> pool = SQLConnectionPool(lambda: MySQLConnection(config), size=4)
        >>> with pool.acquire() as conn:
        ...     conn.query("SELECT 1")
    """

    def __init__(
        self,
        connection_factory: Callable[[], SQLConnection],
        size: int = 5,
        timeout: float = 30.0,
    ) -> None:
        """Initialize connection pool.

        Args:
            connection_factory: Callable that opens a new connection.
            size: Maximum number of connections.
            timeout: Seconds to wait for a connection when the pool is full.
        """
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")
        self._factory = connection_factory
        self._size = size
        self._timeout = timeout
        self._pool: Queue = Queue(maxsize=size)
        self._lock = Lock()
        self._created = 0
        self._closed = False

    def _create_connection(self) -> SQLConnection | None:
        with self._lock:
            if self._created >= self._size:
                return None
            self._created += 1
        try:
            return self._factory()
        except Exception:
            with self._lock:
                self._created -= 1
            raise

    @contextmanager
    def acquire(self) -> Iterator[SQLConnection]:
        """Check a connection out for the duration of the block.

        Raises:
            DataSourceConnectionError: If the pool is closed or no connection
                became available in time.
        """
        if self._closed:
            raise DataSourceConnectionError("pool", "Connection pool is closed")

        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()
            if conn is None:
                try:
                    conn = self._pool.get(timeout=self._timeout)
                except Empty:
                    raise DataSourceConnectionError(
                        "pool",
                        f"Timeout waiting for connection after {self._timeout}s",
                    )

        try:
            yield conn
        finally:
            if self._closed:
                conn.close()
            else:
                self._pool.put_nowait(conn)

    def close(self) -> None:
        """Close every idle connection and refuse further checkouts."""
        self._closed = True
        while True:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                break
            try:
                conn.close()
            except Exception as e:
                logger.warning(f"Error closing pooled connection: {e}")

    @property
    def size(self) -> int:
        """Get pool size."""
        return self._size

    @property
    def available(self) -> int:
        """Get number of idle connections."""
        return self._pool.qsize()
