"""
Custom exceptions for the XML record extraction system.

This module defines specific exception types for the error conditions that can
occur while tokenizing XML, coercing extracted text and writing records out.
Every error is fatal to the current run; there is no per-record skip policy.
"""


class XMLExtractionError(Exception):
    """Base exception for all XML extraction related errors."""

    def __init__(self, message: str, source_name: str = None, error_category: str = None):
        """
        Initialize XML extraction error.

        Args:
            message: Error description
            source_name: Optional name of the input file that caused the error
            error_category: Optional machine-readable category for reporting
        """
        super().__init__(message)
        self.source_name = source_name
        self.error_category = error_category


class XMLParsingError(XMLExtractionError):
    """Exception raised when the XML tokenizer rejects a document."""

    def __init__(self, message: str, xml_content: str = None, source_name: str = None):
        """
        Initialize XML parsing error.

        Args:
            message: Error description
            xml_content: Optional XML content that failed to parse (truncated for logging)
            source_name: Optional name of the input file
        """
        super().__init__(message, source_name, error_category="parsing_error")
        # Store truncated XML content for debugging (first 500 chars)
        self.xml_content = xml_content[:500] + "..." if xml_content and len(xml_content) > 500 else xml_content


class CoercionError(XMLExtractionError):
    """Exception raised when extracted text cannot be represented in a column's type."""

    def __init__(self, message: str, column_name: str = None, source_value: str = None,
                 target_type: str = None, source_name: str = None):
        """
        Initialize coercion error.

        Args:
            message: Error description
            column_name: Name of the column whose value failed coercion
            source_value: Raw text that failed coercion
            target_type: Declared type of the column
            source_name: Optional name of the input file
        """
        super().__init__(message, source_name, error_category="coercion_error")
        self.column_name = column_name
        self.source_value = source_value
        self.target_type = target_type


class InvalidNumberError(CoercionError):
    """Raised when text for a long or double column is not a valid number."""
    pass


class InvalidTimestampError(CoercionError):
    """Raised when text for a timestamp column is rejected by its timestamp parser."""
    pass


class ConfigurationError(XMLExtractionError):
    """Exception raised when configuration is invalid or missing."""
    pass


class OutputError(XMLExtractionError):
    """Exception raised when records cannot be delivered to the output."""
    pass


class DatabaseConnectionError(OutputError):
    """Exception raised when database connection fails."""
    pass


class DatabaseConstraintError(OutputError):
    """Exception raised when a database constraint rejects inserted records."""
    pass
