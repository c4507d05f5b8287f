#!/usr/bin/env python3
"""
Smoke checks against a running storage service: upload, download, rejection, delete.
"""

import json
import sys
from typing import Any, Dict, Optional

import requests

SAMPLE_DATA = b"Hello world, some data to write!"


class StorageChecker:
    """Runs end-to-end checks of the storage HTTP API."""

    def __init__(self, base_url: str = "http://localhost:8000", session: Optional[Any] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.uploaded_name: Optional[str] = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def check_upload(self) -> Dict[str, Any]:
        """Upload a text file and expect a renamed descriptor back."""
        response = self.session.post(
            self._url("/api/v1/files"),
            files={"file": ("check.txt", SAMPLE_DATA, "text/plain")},
        )
        body = response.json()
        ok = response.status_code == 201 and body.get("originalFileName") == "check.txt"
        if ok:
            self.uploaded_name = body["fileName"]
        return {
            "check": "upload",
            "status": "PASS" if ok else "FAIL",
            "details": {"status_code": response.status_code, "fileName": body.get("fileName")},
        }

    def check_download(self) -> Dict[str, Any]:
        """Download the uploaded file and compare bytes and headers."""
        if not self.uploaded_name:
            return {"check": "download", "status": "SKIP", "details": {}}
        response = self.session.get(self._url(f"/api/v1/files/{self.uploaded_name}"))
        ok = (
            response.status_code == 200
            and response.content == SAMPLE_DATA
            and response.headers.get("content-disposition", "").startswith("attachment")
        )
        return {
            "check": "download",
            "status": "PASS" if ok else "FAIL",
            "details": {
                "status_code": response.status_code,
                "content_type": response.headers.get("content-type", ""),
            },
        }

    def check_rejection(self) -> Dict[str, Any]:
        """A disallowed extension must be refused with a problem body."""
        response = self.session.post(
            self._url("/api/v1/files"),
            files={"file": ("check.exe", SAMPLE_DATA, "text/plain")},
        )
        body = response.json()
        ok = response.status_code == 412 and "correlation_id" in body
        return {
            "check": "rejection",
            "status": "PASS" if ok else "FAIL",
            "details": {"status_code": response.status_code, "code": body.get("code")},
        }

    def check_delete(self) -> Dict[str, Any]:
        if not self.uploaded_name:
            return {"check": "delete", "status": "SKIP", "details": {}}
        response = self.session.delete(self._url(f"/api/v1/files/{self.uploaded_name}"))
        return {
            "check": "delete",
            "status": "PASS" if response.status_code == 204 else "FAIL",
            "details": {"status_code": response.status_code},
        }

    def run_all_checks(self) -> Dict[str, Any]:
        results = []
        checks = (self.check_upload, self.check_download, self.check_rejection, self.check_delete)
        for check in checks:
            try:
                results.append(check())
            except (requests.RequestException, ValueError) as exc:
                results.append({"check": check.__name__, "status": "ERROR", "details": str(exc)})
        return {
            "results": results,
            "failed": sum(1 for r in results if r["status"] == "FAIL"),
            "errors": sum(1 for r in results if r["status"] == "ERROR"),
        }


def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    results = StorageChecker(base_url).run_all_checks()
    print(json.dumps(results, indent=2))

    if results["failed"] > 0 or results["errors"] > 0:
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
