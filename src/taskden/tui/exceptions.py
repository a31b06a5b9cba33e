"""Custom exception classes for taskden TUI components.

Exception Hierarchy:
    TUIError (base)
    └── TUIDataError (repository or editor failures surfaced in the UI)
"""


class TUIError(Exception):
    """Base exception for all TUI-specific errors."""

    def __init__(self, message: str) -> None:
        """Initialize TUIError with a message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class TUIDataError(TUIError):
    """Raised when loading or changing data from the TUI fails.

    Wraps the repository error so screens only have to catch one type and
    can show ``str(error)`` in a notification.

    Examples:
        >>> try:
        ...     await repository.delete(task_id)
        ... except TaskdenError as e:
        ...     raise TUIDataError("Failed to delete task", original_exception=e) from e
    """

    def __init__(
        self,
        message: str,
        original_exception: Exception | None = None,
    ) -> None:
        """Initialize TUIDataError with message and optional original exception.

        Args:
            message: Human-readable error description
            original_exception: The underlying exception that caused this error
        """
        super().__init__(message)
        self.original_exception = original_exception

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (caused by: {self.original_exception})"
        return self.message
