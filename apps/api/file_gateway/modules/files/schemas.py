from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FileWriteIn(BaseModel):
    filename: str
    content: str


class FileDeleteIn(BaseModel):
    filename: str


class FileOpOut(BaseModel):
    message: str
    filename: Optional[str] = None


class UploadFailureOut(BaseModel):
    filename: str
    error: str
    message: str


class UploadOut(BaseModel):
    message: str
    count: int
    written: List[str] = Field(default_factory=list)
    failed: List[UploadFailureOut] = Field(default_factory=list)


class ErrorOut(BaseModel):
    error: str
    message: str
    request_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
