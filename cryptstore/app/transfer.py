"""Translation between HTTP multipart uploads / attachment downloads and FileDescriptor."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import Response
from starlette.datastructures import UploadFile

from cryptstore.domain.models import FileDescriptor

DOWNLOAD_MEDIA_TYPE = "application/download"
DEFAULT_TRANSFER_ENCODING = "7bit"


async def _descriptor_from_upload(upload: UploadFile, fields: dict[str, Any]) -> FileDescriptor:
    data = await upload.read()
    await upload.close()
    return FileDescriptor(
        file_name=upload.filename or "",
        file_encoding=upload.headers.get("content-transfer-encoding", DEFAULT_TRANSFER_ENCODING),
        file_mime=upload.content_type,
        file_size=len(data),
        file_data=data,
        fields=fields,
    )


async def parse_upload(request: Request) -> list[FileDescriptor]:
    """
    Extract every file attached to a multipart request.

    The whole request body is buffered; each descriptor carries the plain form
    fields sent alongside the files.
    """
    form = await request.form()
    fields: dict[str, Any] = {}
    uploads: list[UploadFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            uploads.append(value)
        else:
            fields[key] = value
    return [await _descriptor_from_upload(upload, dict(fields)) for upload in uploads]


def content_disposition(filename: str) -> str:
    """Attachment header value; names outside latin-1 get an RFC 6266 filename* form."""
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment;filename={fallback};filename*=UTF-8''{quote(filename)}"
    return f"attachment;filename={filename}"


def write_download_response(filename: str, data: bytes) -> Response:
    """Build a single-shot attachment response for decrypted file bytes."""
    headers = {
        "Content-Disposition": content_disposition(filename),
        "Content-Transfer-Encoding": "binary",
    }
    return Response(content=bytes(data), media_type=DOWNLOAD_MEDIA_TYPE, headers=headers)
