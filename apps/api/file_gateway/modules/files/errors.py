from __future__ import annotations


class StorageError(Exception):
    """
    Base for every failure the gateway reports.

    kind is the stable machine-readable code surfaced as the envelope "error".
    client_error separates bad input from server/storage failure.
    """
    kind = "storage_error"
    client_error = False

    def __init__(self, detail: str, *, filename: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.filename = filename


class InvalidPathError(StorageError):
    kind = "invalid_path"
    client_error = True


class NotFoundError(StorageError):
    kind = "not_found"
    client_error = True


class StorageIOError(StorageError):
    kind = "io_error"


class EmptyBatchError(StorageError):
    kind = "empty_batch"
    client_error = True


class InvalidContentError(StorageError):
    kind = "invalid_content"
    client_error = True
