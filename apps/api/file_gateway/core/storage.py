"""
Local filesystem storage root.

Defaults:
- STORAGE_ROOT: ./data/storage (relative paths resolve against the repo root)

resolve_under_root() is the only place an untrusted filename becomes a path.
Every gateway operation goes through it.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict


class PathEscapeError(ValueError):
    """Raised when a name does not resolve to an entry strictly inside the root."""


def _repo_root() -> Path:
    # apps/api/file_gateway/core/storage.py -> repo root = parents[4]
    return Path(__file__).resolve().parents[4]


def get_storage_root() -> Path:
    raw = os.getenv("STORAGE_ROOT", "./data/storage")
    p = Path(raw)
    return (_repo_root() / p).resolve() if not p.is_absolute() else p.resolve()


def ensure_storage_root(root: Path | None = None) -> Path:
    root = root if root is not None else get_storage_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def resolve_under_root(root: Path, name: str) -> Path:
    """
    Join an untrusted name to root and return the normalized absolute path.

    Validation follows symlinks; the returned path does not, so callers act
    on the entry the client named rather than on a link target.

    Rejects (never rewrites):
    - names that normalize outside root ("../x", "a/../../x")
    - absolute names ("/etc/passwd"), which replace root when joined
    - names that resolve to root itself ("", ".", "a/..")
    - symlinks leading out of root
    - NUL bytes
    """
    if not isinstance(name, str):
        raise PathEscapeError("filename must be a string")
    if "\x00" in name:
        raise PathEscapeError(f"invalid filename: {name!r}")

    base = root.resolve()
    try:
        candidate = (base / name).resolve()
    except (OSError, RuntimeError, ValueError) as e:
        # symlink loops, overlong names
        raise PathEscapeError(f"unresolvable filename: {name!r}") from e
    lexical = Path(os.path.normpath(base / name))
    # both forms must stay inside: "link/../../x" can resolve inside yet point outside as written
    if base not in candidate.parents or base not in lexical.parents:
        raise PathEscapeError(f"path escapes storage root: {name!r}")
    return lexical


def storage_health(root: Path | None = None) -> Dict[str, Any]:
    root = root if root is not None else get_storage_root()
    try:
        root = ensure_storage_root(root)
        # unique name so no stored client file is ever touched
        with tempfile.NamedTemporaryFile(dir=root, prefix=".health-") as probe:
            probe.write(b"ok")
        return {"status": "ok", "kind": "local_fs", "root": str(root.as_posix())}
    except Exception as e:
        return {"status": "error", "kind": "local_fs", "root": str(root.as_posix()), "error": str(e)}
