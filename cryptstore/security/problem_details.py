"""RFC 7807 problem responses returned by the storage HTTP endpoints."""

from __future__ import annotations

from typing import Any, Mapping
from uuid import uuid4

from fastapi.responses import JSONResponse

from cryptstore.security.uploads import UploadError

DEFAULT_TYPE = "about:blank"

UPLOAD_TITLES: dict[int, str] = {
    412: "Upload refused",
    413: "Payload too large",
    500: "Storage failure",
}


def problem_response(
    *,
    status: int,
    title: str,
    detail: str,
    code: str,
    type_: str = DEFAULT_TYPE,
    instance: str | None = None,
    extras: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    correlation_id: str | None = None,
) -> JSONResponse:
    """
    Produce a problem-details JSON response.

    The correlation id is mirrored in the `X-Correlation-ID` header.
    """
    cid = correlation_id or str(uuid4())
    # Extras never override the standard members.
    payload: dict[str, Any] = dict(extras or {})
    payload.update(
        {
            "type": type_,
            "title": title,
            "status": status,
            "detail": detail,
            "code": code,
            "correlation_id": cid,
        }
    )
    if instance:
        payload["instance"] = instance

    response_headers = dict(headers or {})
    # Keep a correlation id set by the caller's headers.
    response_headers.setdefault("X-Correlation-ID", cid)
    return JSONResponse(status_code=status, content=payload, headers=response_headers)


def upload_problem(
    exc: UploadError, *, instance: str | None = None, correlation_id: str | None = None
) -> JSONResponse:
    """Map an upload rejection to its problem response."""
    return problem_response(
        status=exc.status,
        title=UPLOAD_TITLES.get(exc.status, "Invalid upload"),
        detail=exc.message,
        code=exc.code,
        instance=instance,
        correlation_id=correlation_id,
    )


def read_failure_problem(
    filename: str, error: Exception, *, instance: str | None = None
) -> JSONResponse:
    """Client error for a file that could not be read back for download."""
    return problem_response(
        status=400,
        title="Download failed",
        detail=f"File {filename!r} could not be read",
        code="read_failed",
        instance=instance,
        extras={"error": type(error).__name__},
    )
