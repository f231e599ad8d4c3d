"""Exceptions raised while reading launcher manifest files."""


class ManifestError(Exception):
    """Base exception for all manifest-related errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: The main error message.
            details: Optional additional details about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        """Return a string representation of the error."""
        if self.details:
            return f"{self.message}. Details: {self.details}"
        return self.message


class ManifestParseError(ManifestError):
    """A single manifest entry could not be read or parsed."""

    def __init__(self, path: str, details: str | None = None) -> None:
        """Initialize the parse error.

        Args:
            path: Path of the manifest entry that failed.
            details: Optional description of the underlying failure.
        """
        self.path = path
        super().__init__(f"Failed to parse manifest entry {path}", details)
