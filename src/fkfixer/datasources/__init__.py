"""Database connections for fkfixer.

Example:
    >>> from fkfixer.datasources import MySQLConnection, SQLConnectionPool
    >>> pool = SQLConnectionPool(lambda: MySQLConnection.from_url(url), size=4)
"""

from fkfixer.datasources.base import (
    ResultSet,
    SQLConnection,
    SQLConnectionPool,
    qualified_name,
    quote_identifier,
)
from fkfixer.datasources.mysql import (
    MySQLConnection,
    MySQLConnectionConfig,
    redact_url,
)

__all__ = [
    "ResultSet",
    "SQLConnection",
    "SQLConnectionPool",
    "qualified_name",
    "quote_identifier",
    "MySQLConnection",
    "MySQLConnectionConfig",
    "redact_url",
]
