from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile

from ...core.observability import err_envelope, get_request_id
from .results import Failure, OperationResult
from .schemas import ErrorOut, FileDeleteIn, FileOpOut, FileWriteIn, UploadOut
from .service import StorageGateway, get_gateway


router = APIRouter(tags=["files"])

# gateway kind -> HTTP status (the gateway itself never picks status codes)
_STATUS_BY_KIND = {
    "invalid_path": 400,
    "empty_batch": 400,
    "invalid_content": 400,
    "not_found": 404,
    "io_error": 500,
}

_ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    500: {"model": ErrorOut},
}


def _status_for(failure: Failure) -> int:
    if failure.kind in _STATUS_BY_KIND:
        return _STATUS_BY_KIND[failure.kind]
    return 400 if failure.client_error else 500


def _respond(request: Request, result: OperationResult):
    if isinstance(result, Failure):
        return err_envelope(result.kind, result.detail, get_request_id(request), result.details, _status_for(result))
    return FileOpOut(message=result.message, filename=result.details.get("filename"))


@router.post("/upload", response_model=UploadOut, responses=_ERROR_RESPONSES)
def upload_files(
    request: Request,
    files: List[UploadFile] = File(..., description="One or more files, stored under their original names"),
    gateway: StorageGateway = Depends(get_gateway),
):
    batch = [(f.filename or "", f.file.read()) for f in files]
    result = gateway.upload(batch, request_id=get_request_id(request))
    if isinstance(result, Failure):
        return _respond(request, result)
    return UploadOut(message=result.message, **{k: result.details[k] for k in ("count", "written", "failed")})


@router.post("/create", response_model=FileOpOut, responses=_ERROR_RESPONSES)
def create_file(payload: FileWriteIn, request: Request, gateway: StorageGateway = Depends(get_gateway)):
    return _respond(request, gateway.create(payload.filename, payload.content, request_id=get_request_id(request)))


@router.post("/edit", response_model=FileOpOut, responses=_ERROR_RESPONSES)
def edit_file(payload: FileWriteIn, request: Request, gateway: StorageGateway = Depends(get_gateway)):
    return _respond(request, gateway.edit(payload.filename, payload.content, request_id=get_request_id(request)))


@router.post("/delete", response_model=FileOpOut, responses=_ERROR_RESPONSES)
def delete_file(payload: FileDeleteIn, request: Request, gateway: StorageGateway = Depends(get_gateway)):
    return _respond(request, gateway.delete(payload.filename, request_id=get_request_id(request)))
