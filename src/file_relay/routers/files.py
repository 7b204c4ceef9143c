from typing import List, Optional, Tuple

import anyio.from_thread
from fastapi import APIRouter, Depends, Path, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from file_relay.adapters.remote_store import DEFAULT_MIME_TYPE, LONG_TERM_CACHE_CONTROL
from file_relay.config.settings import Settings
from file_relay.coordinator import IncomingFile, UploadCoordinator
from file_relay.dependencies import (
    get_app_settings,
    get_request_host,
    get_storage_adapter,
    get_upload_coordinator,
)
from file_relay.schemas import (
    FileNotFoundResponse,
    UploadedFile,
    UploadErrorResponse,
    UploadResponse,
)
from file_relay.storage_adapter import StorageAdapter

router = APIRouter()

FILE_NOT_FOUND_MESSAGE = "File not found"


@router.post(
    "/api/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "model": UploadErrorResponse,
            "description": "No input, too many items, an oversized file, or a malformed URL.",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": UploadErrorResponse,
            "description": "A file could not be stored or a URL could not be fetched.",
        },
    },
)
async def upload_files(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator),
    request_host: Optional[str] = Depends(get_request_host),
) -> UploadResponse:
    """
    Upload up to three files, given as `files` parts and/or `urls` fields.

    Files are stored before URLs and the response lists them in that order.
    A failing item aborts the request; items stored before it are kept.
    """
    async with request.form(max_part_size=settings.max_field_size_bytes) as form:
        incoming, urls = await _collect_items(form)

    def client_gone() -> bool:
        return anyio.from_thread.run(request.is_disconnected)

    results = await run_in_threadpool(coordinator.process, incoming, urls, request_host, client_gone)
    return UploadResponse(files=[UploadedFile.from_result(result) for result in results])


async def _collect_items(form: FormData) -> Tuple[List[IncomingFile], List[str]]:
    incoming = []
    for part in form.getlist("files"):
        # Empty file inputs arrive as parts without a filename
        if not isinstance(part, UploadFile) or (not part.filename and not part.size):
            continue
        data = await part.read()
        incoming.append(
            IncomingFile(
                original_name=part.filename or "file",
                data=data,
                mime_type=part.content_type or DEFAULT_MIME_TYPE,
                size=len(data),
            )
        )

    urls = [
        value.strip()
        for value in form.getlist("urls")
        if isinstance(value, str) and value.strip()
    ]
    return incoming, urls


@router.get(
    "/files/{filename}",
    responses={
        status.HTTP_404_NOT_FOUND: {
            "model": FileNotFoundResponse,
            "description": "No file is stored under `filename`.",
        },
        status.HTTP_200_OK: {
            "description": "The file content, served with its recorded MIME type.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
    },
)
async def get_file(
    filename: str = Path(..., description="Generated filename returned by the upload endpoint"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Response:
    """Serve a stored file from the local cache, falling back to the remote store."""
    stored = await run_in_threadpool(adapter.retrieve, filename)
    if stored is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": FILE_NOT_FOUND_MESSAGE})

    return Response(
        content=stored.data,
        headers={
            "Content-Type": stored.mime_type,
            "Cache-Control": LONG_TERM_CACHE_CONTROL,
        },
    )


@router.head(
    "/files/{filename}",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "No file is stored under `filename`."},
        status.HTTP_200_OK: {
            "headers": {
                "Content-Type": {
                    "description": "The recorded MIME type of the file.",
                    "schema": {"type": "string"},
                },
                "Content-Length": {
                    "description": "The size of the file in bytes.",
                    "schema": {"type": "integer"},
                },
            }
        },
    },
)
async def get_file_metadata(
    filename: str = Path(..., description="Generated filename returned by the upload endpoint"),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> Response:
    """
    Retrieve file metadata.

    Note: by convention, HEAD requests MUST NOT return a body in the response.
    """
    stored = await run_in_threadpool(adapter.retrieve, filename)
    if stored is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    return Response(
        headers={
            "Content-Type": stored.mime_type,
            "Content-Length": str(len(stored.data)),
            "Cache-Control": LONG_TERM_CACHE_CONTROL,
        },
    )
