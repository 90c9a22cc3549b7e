"""
ODBC Page Output - Transactional Record Loading

Writes extracted pages into one database table over a single pyodbc
connection. Each input file's records are committed together at its
checkpoint; an abort rolls back everything since the last checkpoint, so a
failed file never leaves partial rows behind.
"""

import logging
import pyodbc

from typing import List, Optional, Tuple

from ..exceptions import DatabaseConnectionError, OutputError
from ..interfaces import PageOutputInterface
from ..models import Page, Schema
from ..utils import StringUtils
from .bulk_insert_strategy import BulkInsertStrategy


class OdbcPageOutput(PageOutputInterface):
    """
    Paged output inserting records into [target_schema].[table_name].

    Column names map to SQL columns by replacing '/' with '_'
    (e.g. 'revision/text' -> [revision_text]). The table must already exist.
    """

    def __init__(self, connection_string: str, table_name: str, schema: Schema,
                 target_schema: str = "dbo", batch_size: int = 500, connection_timeout: int = 30):
        """
        Initialize the ODBC output.

        Args:
            connection_string: pyodbc connection string
            table_name: Unqualified target table name
            schema: Schema of the records being written
            target_schema: Database schema of the target table
            batch_size: Records per executemany call
            connection_timeout: Connection timeout in seconds
        """
        if not connection_string:
            raise DatabaseConnectionError("No database connection string configured")
        if not table_name:
            raise OutputError("Target table name cannot be empty")

        self.logger = logging.getLogger(__name__)
        self.connection_string = connection_string
        self.table_name = table_name
        self.target_schema = target_schema
        self.connection_timeout = connection_timeout
        self.column_map: List[Tuple[str, str]] = [
            (column.name, StringUtils.sql_column_name(column.name)) for column in schema
        ]
        self.insert_strategy = BulkInsertStrategy(batch_size=batch_size, logger=self.logger)

        self._connection = None
        self.records_pending = 0
        self.records_committed = 0

    @property
    def qualified_table_name(self) -> str:
        return f"[{self.target_schema}].[{self.table_name}]"

    def _get_connection(self):
        if self._connection is None:
            try:
                connection = pyodbc.connect(
                    self.connection_string,
                    autocommit=False,  # Explicit transaction per checkpoint
                    timeout=self.connection_timeout
                )
                connection.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
                connection.setdecoding(pyodbc.SQL_WCHAR, encoding='utf-8')
                connection.setencoding(encoding='utf-8')
            except pyodbc.Error as e:
                raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e
            self._connection = connection
            self.logger.info(f"Connected to database for output table {self.qualified_table_name}")
        return self._connection

    def add(self, page: Page) -> None:
        connection = self._get_connection()
        cursor = connection.cursor()
        try:
            count = self.insert_strategy.insert(
                cursor=cursor,
                records=page.records,
                table_name=self.table_name,
                qualified_table_name=self.qualified_table_name,
                column_map=self.column_map
            )
        finally:
            cursor.close()
        self.records_pending += count

    def checkpoint(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.commit()
        except pyodbc.Error as e:
            raise OutputError(f"Failed to commit records to {self.qualified_table_name}: {e}") from e
        self.records_committed += self.records_pending
        self.records_pending = 0

    def finish(self) -> None:
        self.checkpoint()
        self.logger.info(f"Committed {self.records_committed} records to {self.qualified_table_name}")

    def abort(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.rollback()
            self.logger.warning(
                f"Rolled back {self.records_pending} uncommitted records in {self.qualified_table_name}"
            )
        except pyodbc.Error as e:
            # abort() runs while another error propagates; report instead of masking it
            self.logger.error(f"Rollback failed for {self.qualified_table_name}: {e}")
        self.records_pending = 0

    def close(self) -> None:
        connection: Optional[object] = self._connection
        self._connection = None
        if connection is not None:
            connection.close()
