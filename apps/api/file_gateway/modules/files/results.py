from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class Success:
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    ok = True


@dataclass(frozen=True)
class Failure:
    """
    kind matches StorageError.kind ("invalid_path", "not_found", "io_error", "empty_batch").
    """
    kind: str
    detail: str
    client_error: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    ok = False


OperationResult = Union[Success, Failure]
