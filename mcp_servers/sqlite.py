"""
Read-only SQLite backend.

Tools: read_query(), list_tables(), describe_table(), update()

The database is opened read-only once at startup and shared by all
requests. update() accepts its arguments and does nothing, so a policy
layer in front of the server has a mutation tool to block.
"""

import json
import sqlite3
from pathlib import Path
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from .backend import BackendServer
from .config import SQLITE_MAX_RESULT_SIZE
from .context import Extractor
from .errors import ConfigError
from .logger import get_logger
from .results import error_result, text_result

log = get_logger("sqlite")

LIST_TABLES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
)
INVALID_TABLE_CHARS = set("';-")


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _convert(value: Any) -> Any:
    if isinstance(value, bytes):
        # Avoid sending large blobs directly
        return f"BLOB data (length {len(value)})"
    return value


def _truncate(text: str) -> str:
    if len(text) > SQLITE_MAX_RESULT_SIZE:
        return text[:SQLITE_MAX_RESULT_SIZE] + "\n... (results truncated)"
    return text


class DatabaseService:
    """Holds the shared read-only connection and implements the tools."""

    def __init__(self, db_file: str):
        if not db_file:
            raise ConfigError("DB_FILE environment variable not set")
        if not Path(db_file).exists():
            raise ConfigError(f"database {db_file} does not exist")

        uri = Path(db_file).resolve().as_uri() + "?mode=ro"
        try:
            self.conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
            self.conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise ConfigError(f"failed to connect to database {db_file}: {e}") from e

        log.info(f"Successfully connected to database: {db_file}")

    async def close(self) -> None:
        log.info("Closing database connection...")
        self.conn.close()

    def read_query(self, query: str) -> CallToolResult:
        if not query.strip().upper().startswith("SELECT"):
            return error_result("Only SELECT queries are allowed for read-only access.")

        try:
            return self._rows_result(self.conn.execute(query))
        except sqlite3.Error as e:
            log.error(f"Error executing query: {e}, Query: {query}")
            return error_result(f"Error executing query: {e}")

    def list_tables(self) -> CallToolResult:
        try:
            tables = [row[0] for row in self.conn.execute(LIST_TABLES_SQL)]
        except sqlite3.Error as e:
            log.error(f"Error listing tables: {e}")
            return error_result(f"Error listing tables: {e}")
        return text_result(_to_json(tables))

    def describe_table(self, table_name: str) -> CallToolResult:
        if INVALID_TABLE_CHARS.intersection(table_name):
            return error_result("Invalid characters in table name.")

        quoted = '"' + table_name.replace('"', '""') + '"'
        try:
            return self._rows_result(self.conn.execute(f"PRAGMA table_info({quoted})"))
        except sqlite3.Error as e:
            log.error(f"Error describing table {table_name}: {e}")
            return error_result(f"Error describing table '{table_name}': {e}")

    def update(self, table_name: str, set_clause: str, where_clause: str) -> CallToolResult:
        log.info(f"Ignoring update on {table_name} (read-only mode)")
        return text_result("Update command received but not executed (read-only mode)")

    def _rows_result(self, cursor: sqlite3.Cursor) -> CallToolResult:
        columns = [col[0] for col in cursor.description or []]
        rows = [
            {name: _convert(value) for name, value in zip(columns, row)}
            for row in cursor.fetchall()
        ]
        return text_result(_truncate(_to_json(rows)))


def build_server(db: DatabaseService) -> FastMCP:
    mcp = FastMCP("sqlite-readonly", host="0.0.0.0", stateless_http=True, streamable_http_path="/")
    read_only = ToolAnnotations(readOnlyHint=True)

    @mcp.tool(annotations=read_only, structured_output=False)
    def read_query(
        query: Annotated[str, Field(description="The SELECT SQL query to execute")],
    ) -> CallToolResult:
        """Execute a read-only SELECT query on the SQLite database"""
        return db.read_query(query)

    @mcp.tool(annotations=read_only, structured_output=False)
    def list_tables() -> CallToolResult:
        """List all user tables in the SQLite database"""
        return db.list_tables()

    @mcp.tool(annotations=read_only, structured_output=False)
    def describe_table(
        table_name: Annotated[str, Field(description="Name of the table to describe")],
    ) -> CallToolResult:
        """Get the schema information (columns, types) for a specific table"""
        return db.describe_table(table_name)

    @mcp.tool(structured_output=False)
    def update(
        table_name: Annotated[str, Field(description="Name of the table to update")],
        set_clause: Annotated[str, Field(description="SET clause for the update (e.g. 'name=John, age=30')")],
        where_clause: Annotated[str, Field(description="WHERE clause to filter which records to update (e.g. 'id=1')")],
    ) -> CallToolResult:
        """Update records in a table"""
        return db.update(table_name, set_clause, where_clause)

    return mcp


def new_server(env: dict[str, str], context_func: Extractor | None = None) -> BackendServer:
    """Backend factory; reads SQLITE_DB_FILE."""
    db = DatabaseService(env.get("DB_FILE", ""))
    return BackendServer(mcp=build_server(db), shutdown=db.close)
