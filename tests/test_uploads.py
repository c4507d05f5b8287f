"""Tests for the upload validation pipeline."""

import re

import pytest

from cryptstore.domain.models import FileDescriptor, StorageConfig
from cryptstore.security.uploads import (
    RejectionKind,
    UploadError,
    generate_unique_name,
    validate_upload,
)

UUID_NAME = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}")


def make_file(name="upload.txt", mime="text/plain", data=b"12345"):
    return FileDescriptor(file_name=name, file_mime=mime, file_size=len(data), file_data=data)


def make_config(**overrides):
    values = {
        "root": "container",
        "nameMakeUnique": True,
        "maxFileSize": 10,
        "allowedContentTypes": ["text/plain"],
        "allowedExtensions": ["txt"],
    }
    values.update(overrides)
    return StorageConfig(**values)


def test_accepts_valid_file_and_renames_it():
    file = validate_upload([make_file()], make_config())
    assert file.original_file_name == "upload.txt"
    assert file.file_name != "upload.txt"
    assert file.file_name.endswith(".txt")
    assert UUID_NAME.match(file.file_name)


def test_keeps_name_when_unique_names_disabled():
    file = validate_upload([make_file()], make_config(nameMakeUnique=False))
    assert file.file_name == "upload.txt"
    assert file.original_file_name == "upload.txt"


@pytest.mark.parametrize("count", [0, 2])
def test_rejects_wrong_file_count(count):
    with pytest.raises(UploadError) as exc_info:
        validate_upload([make_file() for _ in range(count)], make_config())
    assert exc_info.value.kind is RejectionKind.FILE_COUNT
    assert exc_info.value.status == 412


def test_rejects_disallowed_mime():
    with pytest.raises(UploadError) as exc_info:
        validate_upload([make_file(mime="application/zip")], make_config())
    assert exc_info.value.code == "disallowed_mime"
    assert exc_info.value.status == 412


def test_rejects_disallowed_extension():
    with pytest.raises(UploadError) as exc_info:
        validate_upload([make_file(name="upload.exe")], make_config())
    assert exc_info.value.code == "disallowed_extension"
    assert exc_info.value.status == 412


def test_extension_match_is_case_sensitive():
    with pytest.raises(UploadError):
        validate_upload([make_file(name="UPLOAD.TXT")], make_config())


def test_rejects_oversized_file():
    with pytest.raises(UploadError) as exc_info:
        validate_upload([make_file(data=b"x" * 33)], make_config())
    assert exc_info.value.code == "payload_too_large"
    assert exc_info.value.status == 413


def test_file_at_size_limit_is_accepted():
    assert validate_upload([make_file(data=b"x" * 10)], make_config()).file_size == 10


def test_first_failure_wins():
    bad = make_file(name="upload.exe", mime="application/zip", data=b"x" * 100)
    with pytest.raises(UploadError) as exc_info:
        validate_upload([bad], make_config())
    assert exc_info.value.kind is RejectionKind.DISALLOWED_MIME


def test_unset_constraints_accept_anything():
    config = StorageConfig(root="container")
    file = validate_upload([make_file(name="a.bin", mime="x/y", data=b"x" * 1000)], config)
    assert file.file_name == "a.bin"


def test_empty_whitelist_accepts_nothing():
    with pytest.raises(UploadError):
        validate_upload([make_file()], make_config(allowedContentTypes=[]))


def test_rejection_leaves_name_untouched():
    file = make_file(data=b"x" * 33)
    with pytest.raises(UploadError):
        validate_upload([file], make_config())
    assert file.file_name == "upload.txt"
    assert file.original_file_name is None


def test_unique_name_preserves_extension():
    assert generate_unique_name("archive.tar.gz").endswith(".gz")
    assert "." not in generate_unique_name("README")
    assert generate_unique_name("a.txt") != generate_unique_name("a.txt")


def test_configured_extensions_may_carry_a_dot():
    config = make_config(allowedExtensions=[".txt"])
    assert validate_upload([make_file()], config).original_file_name == "upload.txt"
