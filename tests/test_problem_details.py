import json

from cryptstore.security.problem_details import problem_response, upload_problem
from cryptstore.security.uploads import RejectionKind, UploadError


def test_problem_response_shape():
    response = problem_response(
        status=412, title="Upload refused", detail="nope", code="file_count", instance="/x"
    )
    payload = json.loads(response.body)
    assert response.status_code == 412
    assert payload["type"] == "about:blank"
    assert payload["instance"] == "/x"
    assert response.headers["X-Correlation-ID"] == payload["correlation_id"]


def test_extras_cannot_override_standard_members():
    response = problem_response(
        status=400,
        title="Download failed",
        detail="missing",
        code="read_failed",
        correlation_id="cid-1",
        extras={"status": 200, "code": "ok", "error": "FileNotFoundError"},
    )
    payload = json.loads(response.body)
    assert payload["status"] == 400
    assert payload["code"] == "read_failed"
    assert payload["error"] == "FileNotFoundError"
    assert payload["correlation_id"] == "cid-1"


def test_existing_correlation_header_is_kept():
    response = problem_response(
        status=500,
        title="Storage failure",
        detail="x",
        code="storage_failure",
        headers={"X-Correlation-ID": "from-caller"},
    )
    assert response.headers["X-Correlation-ID"] == "from-caller"


def test_upload_problem_titles():
    exc = UploadError(RejectionKind.TOO_LARGE, "Maximum upload size is 10 bytes", status=413)
    payload = json.loads(upload_problem(exc, correlation_id="c").body)
    assert payload["title"] == "Payload too large"
    assert payload["code"] == "payload_too_large"
    assert payload["detail"] == "Maximum upload size is 10 bytes"
