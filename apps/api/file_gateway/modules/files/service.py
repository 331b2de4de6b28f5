"""
Storage gateway: untrusted filename + content -> confined filesystem effect.

- every operation resolves names through core.storage.resolve_under_root
- create and edit are the same write (create-or-overwrite)
- upload is best-effort: each entry is independent, no rollback
- no locking: concurrent writes/deletes on one name are last-writer-wins
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from ...core.observability import emit
from ...core.storage import PathEscapeError, ensure_storage_root, get_storage_root, resolve_under_root
from .errors import EmptyBatchError, InvalidContentError, InvalidPathError, NotFoundError, StorageError, StorageIOError
from .results import Failure, OperationResult, Success

Content = Union[str, bytes]
UploadBatch = Sequence[Tuple[str, bytes]]


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, bytes):
        return content
    return content.encode("utf-8")


def _failure(err: StorageError, **details: Any) -> Failure:
    if err.filename is not None:
        details.setdefault("filename", err.filename)
    return Failure(kind=err.kind, detail=err.detail, client_error=err.client_error, details=details)


class StorageGateway:
    def __init__(self, root: Path) -> None:
        self.root = ensure_storage_root(Path(root)).resolve()

    def _log_failure(self, err: StorageError, op: str, request_id: Optional[str]) -> None:
        level = "warning" if err.client_error else "error"
        emit(level, "files.failed", err.detail, request_id, __name__, kind=err.kind, op=op, filename=err.filename)

    # ---------- raising primitives ----------

    def resolve(self, filename: str, *, request_id: Optional[str] = None) -> Path:
        try:
            return resolve_under_root(self.root, filename)
        except PathEscapeError as e:
            emit("warning", "files.rejected", str(e), request_id, __name__, filename=filename)
            raise InvalidPathError(str(e), filename=filename) from e

    def write_file(self, filename: str, content: Content, *, request_id: Optional[str] = None) -> Path:
        target = self.resolve(filename, request_id=request_id)
        try:
            data = _as_bytes(content)
        except UnicodeEncodeError as e:
            # lone surrogates survive JSON decoding but have no UTF-8 form
            raise InvalidContentError(f"content is not valid UTF-8 text: {e.reason}", filename=filename) from e
        try:
            if target.is_symlink():
                # replace the link itself, never write through it
                target.unlink()
            with target.open("wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageIOError(f"write failed: {e.strerror or e}", filename=filename) from e
        emit("info", "files.write", f"wrote {filename}", request_id, __name__, filename=filename, size_bytes=len(data))
        return target

    def remove_file(self, filename: str, *, request_id: Optional[str] = None) -> Path:
        target = self.resolve(filename, request_id=request_id)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"file not found: {filename}", filename=filename) from e
        except OSError as e:
            # directories, permissions
            raise StorageIOError(f"delete failed: {e.strerror or e}", filename=filename) from e
        emit("info", "files.delete", f"deleted {filename}", request_id, __name__, filename=filename)
        return target

    # ---------- operations ----------

    def _write_op(self, filename: str, content: Content, verb: str, request_id: Optional[str]) -> OperationResult:
        try:
            self.write_file(filename, content, request_id=request_id)
        except StorageError as e:
            self._log_failure(e, verb, request_id)
            return _failure(e)
        return Success(message=f"File {verb} successfully!", details={"filename": filename})

    def create(self, filename: str, content: Content, *, request_id: Optional[str] = None) -> OperationResult:
        # create-or-overwrite: an existing file is replaced, not refused
        return self._write_op(filename, content, "created", request_id)

    def edit(self, filename: str, content: Content, *, request_id: Optional[str] = None) -> OperationResult:
        return self._write_op(filename, content, "edited", request_id)

    def delete(self, filename: str, *, request_id: Optional[str] = None) -> OperationResult:
        try:
            self.remove_file(filename, request_id=request_id)
        except StorageError as e:
            self._log_failure(e, "deleted", request_id)
            return _failure(e)
        return Success(message="File deleted successfully!", details={"filename": filename})

    def upload(self, batch: Iterable[Tuple[str, bytes]], *, request_id: Optional[str] = None) -> OperationResult:
        """
        Write every entry independently.

        - at least one written -> Success; failed entries listed in details
        - none written -> Failure carrying the first entry's error kind
        - empty batch -> Failure(empty_batch)
        """
        entries = list(batch)
        if not entries:
            err = EmptyBatchError("no files in upload")
            self._log_failure(err, "uploaded", request_id)
            return _failure(err)

        written: List[str] = []
        failed: List[dict] = []
        first_err: Optional[StorageError] = None
        for name, data in entries:
            try:
                self.write_file(name, data, request_id=request_id)
                written.append(name)
            except StorageError as e:
                first_err = first_err or e
                self._log_failure(e, "uploaded", request_id)
                failed.append({"filename": name, "error": e.kind, "message": e.detail})

        emit(
            "info", "files.upload", f"upload wrote {len(written)}/{len(entries)}", request_id, __name__,
            written=len(written), failed=len(failed),
        )
        if first_err is not None and not written:
            return Failure(
                kind=first_err.kind,
                detail=f"no files uploaded: {first_err.detail}",
                client_error=first_err.client_error,
                details={"written": [], "failed": failed},
            )
        noun = "file" if len(written) == 1 else "files"
        return Success(
            message=f"{len(written)} {noun} uploaded successfully!",
            details={"count": len(written), "written": written, "failed": failed},
        )


_gateway: Optional[StorageGateway] = None


def get_gateway() -> StorageGateway:
    """Process-wide gateway; the storage root is created on first use."""
    global _gateway
    if _gateway is not None:
        return _gateway
    _gateway = StorageGateway(get_storage_root())
    return _gateway


def reset_gateway() -> None:
    global _gateway
    _gateway = None
