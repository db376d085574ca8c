class ValidationError(ValueError):
    """Raised when user input is incomplete or invalid. Nothing is written."""


class PersistenceError(Exception):
    """Raised when the record store cannot be reached or rejects an operation."""


class AIServiceError(Exception):
    """Raised when the text-generation endpoint cannot be reached or answers with an error."""
