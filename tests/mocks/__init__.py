"""Connection test doubles.

These implement the SQLConnection protocol so the engine can be exercised
without a MySQL server.
"""

from tests.mocks.database_mocks import (
    FK_FIXTURE_SQL,
    ScriptedConnection,
    SQLiteConnection,
    create_fk_database,
)

__all__ = [
    "FK_FIXTURE_SQL",
    "ScriptedConnection",
    "SQLiteConnection",
    "create_fk_database",
]
