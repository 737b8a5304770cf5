"""Usage oracle exceptions."""


class UsageError(Exception):
    """Base exception for all usage oracle operations."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize usage error.

        Args:
            message: Human-readable error description
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.cause = cause


class OracleQueryError(UsageError):
    """A usage lookup could not be answered.

    Raised when the backend is unreachable, times out, or returns something
    that cannot be interpreted. The validation engine treats it as NO_DATA.
    """

    pass


class UsageDataError(UsageError):
    """Usage records could not be loaded or parsed."""

    pass


class UsageConfigurationError(UsageError):
    """Oracle configuration is invalid or names an unsupported backend."""

    pass
