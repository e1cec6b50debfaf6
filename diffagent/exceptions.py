"""Custom exceptions for DiffAgent."""


class DiffAgentError(Exception):
    """Base exception for all DiffAgent errors."""


class DiffTooLargeError(DiffAgentError):
    """Raised when diff text exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Diff is {size_bytes} bytes, limit is {limit_bytes} bytes. "
            f"Raise MAX_DIFF_SIZE_BYTES to analyze it."
        )
