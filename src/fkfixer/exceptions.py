"""Exception hierarchy for fkfixer.

Fatal errors (catalog, duplicate constraint, dump location, connection,
configuration) stop a run before or instead of checking constraints.
``ConstraintCheckError`` and its subclass ``DumpWriteError`` are scoped to a
single constraint: the run logs them and moves on to the next constraint.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fkfixer.constraints import ConstraintDescriptor


class FKFixerError(Exception):
    """Base exception for all fkfixer errors."""

    pass


# =============================================================================
# Data Source Errors
# =============================================================================


class DataSourceConnectionError(FKFixerError):
    """Raised when a database connection cannot be opened."""

    def __init__(self, source_type: str, message: str) -> None:
        self.source_type = source_type
        super().__init__(f"Failed to connect to {source_type}: {message}")


class QueryError(FKFixerError):
    """Raised when the database driver rejects or fails a statement."""

    def __init__(self, sql: str, message: str) -> None:
        self.sql = sql
        super().__init__(message)


# =============================================================================
# Catalog Errors
# =============================================================================


class CatalogQueryError(FKFixerError):
    """Raised when foreign key metadata cannot be loaded."""

    def __init__(self, schema: str | None, message: str) -> None:
        self.schema = schema
        scope = f"schema '{schema}'" if schema else "all schemas"
        super().__init__(f"Could not load foreign key constraints for {scope}: {message}")


class DuplicateConstraintError(FKFixerError):
    """Raised when two descriptors share a constraint name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Constraint name '{name}' appears more than once in the catalog. "
            "Constraint names are only unique per schema, restrict the run with --schema."
        )


# =============================================================================
# Checker Errors
# =============================================================================


class DumpLocationError(FKFixerError):
    """Raised when the configured dump directory cannot be used."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Dump location {path} {reason}")


class ConstraintCheckError(FKFixerError):
    """Raised when checking a single constraint fails.

    Attributes:
        descriptor: The constraint being checked.
        stage: Which step failed: ``detect``, ``dump`` or ``delete``.
    """

    def __init__(
        self,
        descriptor: "ConstraintDescriptor",
        stage: str,
        message: str,
    ) -> None:
        self.descriptor = descriptor
        self.stage = stage
        super().__init__(
            f"{stage} failed for constraint {descriptor.name} "
            f"(table {descriptor.schema}.{descriptor.table} column {descriptor.column}): {message}"
        )


class DumpWriteError(ConstraintCheckError):
    """Raised when invalid rows cannot be written to their CSV sink."""

    def __init__(self, descriptor: "ConstraintDescriptor", message: str) -> None:
        super().__init__(descriptor, "dump", message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(FKFixerError):
    """Raised for invalid or incomplete configuration."""

    pass
