"""Custom exceptions for the application."""


class ProviderUnavailable(Exception):
    """Raised when the model provider has no usable credential."""

    pass


class ProviderError(Exception):
    """Raised when an embedding or generation call fails."""

    pass


class CitationParseFailure(Exception):
    """Raised when a citation block is missing or malformed."""

    pass


class DatabaseError(Exception):
    """Raised when database operations fail."""

    pass


class DocumentNotFoundError(Exception):
    """Raised when a referenced document does not exist."""

    pass
