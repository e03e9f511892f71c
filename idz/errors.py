"""Exception hierarchy for identity disk operations."""


class DiskError(Exception):
    """Base class for every error raised by an identity disk."""

    prefix = "Identity disk error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class InvalidDataError(DiskError):
    """Raised when supplied or stored data cannot be used."""

    prefix = "Invalid data"


class NotFoundError(DiskError):
    """Raised when a chunk or other resource does not exist."""

    prefix = "Chunk or resource not found"


class StorageError(DiskError):
    """Raised when the underlying database or file system fails."""

    prefix = "Storage error"