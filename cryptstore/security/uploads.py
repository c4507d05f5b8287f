"""Upload validation helpers used before anything is written to disk."""

from __future__ import annotations

import enum
import os
import uuid
from typing import Sequence

from cryptstore.domain.models import FileDescriptor, StorageConfig


class RejectionKind(str, enum.Enum):
    """Why an upload was refused."""

    FILE_COUNT = "file_count"
    DISALLOWED_MIME = "disallowed_mime"
    DISALLOWED_EXTENSION = "disallowed_extension"
    TOO_LARGE = "payload_too_large"
    STORAGE_FAILURE = "storage_failure"


class UploadError(Exception):
    """Domain exception for upload validation and persistence errors."""

    def __init__(self, kind: RejectionKind, message: str, status: int):
        self.kind = kind
        self.code = kind.value
        self.message = message
        self.status = status
        super().__init__(message)


def generate_unique_name(file_name: str) -> str:
    """Return a random UUID-based name keeping the original extension (with its dot).

    Existing files are not checked; a UUID4 collision is treated as impossible.
    """
    return f"{uuid.uuid4()}{os.path.splitext(file_name)[1]}"


def validate_upload(files: Sequence[FileDescriptor], config: StorageConfig) -> FileDescriptor:
    """
    Check an upload against the storage constraints and return the accepted file.

    Checks run in order and the first failure wins: file count, mime type,
    extension, size. The returned descriptor has ``original_file_name`` set and,
    when the config asks for it, a freshly generated ``file_name``.
    """
    if len(files) != 1:
        raise UploadError(
            RejectionKind.FILE_COUNT,
            f"Exactly one file must be uploaded, got {len(files)}",
            status=412,
        )
    file = files[0]

    allowed_types = config.allowed_content_types
    if allowed_types is not None and file.file_mime not in allowed_types:
        raise UploadError(
            RejectionKind.DISALLOWED_MIME,
            f"Content type {file.file_mime!r} is not allowed",
            status=412,
        )

    if config.allowed_extensions is not None and file.extension not in config.allowed_extensions:
        raise UploadError(
            RejectionKind.DISALLOWED_EXTENSION,
            f"Extension {file.extension!r} is not allowed",
            status=412,
        )

    if config.max_file_size and file.file_size > config.max_file_size:
        raise UploadError(
            RejectionKind.TOO_LARGE,
            f"Maximum upload size is {config.max_file_size} bytes",
            status=413,
        )

    file.original_file_name = file.file_name
    if config.name_make_unique:
        file.file_name = generate_unique_name(file.file_name)
    return file
