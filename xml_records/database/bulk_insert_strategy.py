"""
Bulk Insert Strategy - Page Loading for ODBC Outputs

Encapsulates the strategy for inserting a page of records with automatic
fallback from fast_executemany to individual inserts, and translates driver
errors into the extraction system's exception types.
"""

import logging
import pyodbc

from typing import Any, Dict, List, Sequence, Tuple

from ..exceptions import DatabaseConstraintError, OutputError


class BulkInsertStrategy:
    """
    Strategy for bulk inserting records into a database table.

    Implements two-tier insertion strategy:
    1. Fast path: executemany for optimal performance
    2. Fallback path: individual executes when the driver cannot convert a batch

    Constraint violations are never skipped: a rejected record fails the page.
    """

    def __init__(self, batch_size: int = 500, logger: logging.Logger = None):
        """
        Initialize bulk insert strategy.

        Args:
            batch_size: Records per executemany call
            logger: Optional logger instance
        """
        self.batch_size = batch_size
        self.logger = logger or logging.getLogger(__name__)

    def insert(
        self,
        cursor,
        records: List[Dict[str, Any]],
        table_name: str,
        qualified_table_name: str,
        column_map: Sequence[Tuple[str, str]]
    ) -> int:
        """
        Insert records using optimized strategy with automatic fallback.

        Args:
            cursor: Active database cursor
            records: Records keyed by column name
            table_name: Unqualified table name (for error messages)
            qualified_table_name: Schema-qualified table name ([schema].[table])
            column_map: (record key, SQL column name) pairs in insert order

        Returns:
            Number of records inserted

        Raises:
            DatabaseConstraintError: For PK, FK, CHECK, NOT NULL violations
            OutputError: On other database errors
        """
        if not records:
            return 0

        inserted_count = 0

        try:
            data_tuples, sql = self._prepare_data_tuples(records, qualified_table_name, column_map)

            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(f"SQL: {sql}")

            cursor.fast_executemany = True

            batch_start = 0
            while batch_start < len(data_tuples):
                batch_end = min(batch_start + self.batch_size, len(data_tuples))
                batch_data = data_tuples[batch_start:batch_end]

                batch_inserted, used_fast_path = self._try_fast_insert(cursor, sql, batch_data)
                if not used_fast_path:
                    batch_inserted = self._fallback_individual_insert(cursor, sql, batch_data)

                inserted_count += batch_inserted
                batch_start = batch_end

            self.logger.debug(f"Inserted {inserted_count} records into {table_name}")

        except pyodbc.Error as e:
            self._handle_database_error(e, table_name)

        return inserted_count

    def _prepare_data_tuples(self, records: List[Dict[str, Any]], qualified_table_name: str,
                             column_map: Sequence[Tuple[str, str]]) -> Tuple[List[Tuple], str]:
        """
        Build parameter tuples and the INSERT statement.

        Returns:
            (data_tuples, sql_statement)
        """
        column_list = ', '.join(f"[{sql_column}]" for _, sql_column in column_map)
        placeholders = ', '.join('?' * len(column_map))
        sql = f"INSERT INTO {qualified_table_name} ({column_list}) VALUES ({placeholders})"

        data_tuples = [
            tuple(record.get(key) for key, _ in column_map)
            for record in records
        ]
        return data_tuples, sql

    def _try_fast_insert(self, cursor, sql: str, batch_data: List[Tuple]) -> Tuple[int, bool]:
        """
        Attempt bulk insert using executemany.

        Returns:
            (batch_inserted, success) where success=True if fast path worked
        """
        if len(batch_data) <= 1:
            return 0, False

        try:
            cursor.executemany(sql, batch_data)
            return len(batch_data), True
        except pyodbc.Error as e:
            error_str = str(e).lower()
            if "cast specification" in error_str or "converting" in error_str:
                self.logger.debug(f"executemany failed with type error, using individual inserts: {e}")
                return 0, False
            raise

    def _fallback_individual_insert(self, cursor, sql: str, batch_data: List[Tuple]) -> int:
        batch_inserted = 0
        for record_values in batch_data:
            cursor.execute(sql, record_values)
            batch_inserted += 1
        return batch_inserted

    def _handle_database_error(self, e: Exception, table_name: str) -> None:
        """
        Categorize and re-raise database errors with proper exception types.

        Raises:
            DatabaseConstraintError: For PK, FK, CHECK, NOT NULL violations
            OutputError: For other database errors
        """
        error_str = str(e).lower()

        if 'primary key constraint' in error_str or 'duplicate key' in error_str:
            error_msg = f"Primary key violation in {table_name}: {e}"
            category = "primary_key_violation"
        elif 'foreign key constraint' in error_str:
            error_msg = f"Foreign key violation in {table_name}: {e}"
            category = "foreign_key_violation"
        elif 'check constraint' in error_str:
            error_msg = f"Check constraint violation in {table_name}: {e}"
            category = "check_constraint_violation"
        elif 'cannot insert null' in error_str or 'not null constraint' in error_str:
            error_msg = f"NULL constraint violation in {table_name}: {e}"
            category = "not_null_violation"
        else:
            error_msg = f"Database error during bulk insert into {table_name}: {e}"
            self.logger.error(error_msg)
            raise OutputError(error_msg, error_category="database_error") from e

        self.logger.error(error_msg)
        raise DatabaseConstraintError(error_msg, error_category=category) from e
