"""
Database output for the XML record extraction system.

Requires pyodbc and an ODBC driver. Import from the specific modules
(odbc_page_output, bulk_insert_strategy) so the rest of the package stays
usable where pyodbc is unavailable.
"""
