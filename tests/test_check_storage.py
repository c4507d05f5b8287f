from fastapi.testclient import TestClient

from cryptstore.app.api import create_app
from scripts.check_storage import StorageChecker


def test_smoke_checks_pass_against_app(storage):
    with TestClient(create_app(storage)) as client:
        results = StorageChecker(base_url="", session=client).run_all_checks()

    assert results["failed"] == 0
    assert results["errors"] == 0
    assert [r["check"] for r in results["results"]] == ["upload", "download", "rejection", "delete"]
    assert all(r["status"] == "PASS" for r in results["results"])


def test_download_and_delete_are_skipped_without_upload(storage):
    with TestClient(create_app(storage)) as client:
        checker = StorageChecker(base_url="", session=client)
        assert checker.check_download()["status"] == "SKIP"
        assert checker.check_delete()["status"] == "SKIP"
