"""
Domain models for the encrypted storage layer.
"""

import os
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

KIB = 2**10
MIB = 2**20
GIB = 2**30


def as_kib(value: int) -> int:
    """Convert a number of kibibytes to bytes."""
    return value * KIB


def as_mib(value: int) -> int:
    """Convert a number of mebibytes to bytes."""
    return value * MIB


def as_gib(value: int) -> int:
    """Convert a number of gibibytes to bytes."""
    return value * GIB


class StorageConfig(BaseModel):
    """Storage settings, fixed once the engine is initialised.

    Accepts the camelCase keys used in the JSON configuration files as well as
    the Python field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    root: str = Field(..., min_length=1)
    name_make_unique: bool = Field(False, alias="nameMakeUnique")
    max_file_size: Optional[int] = Field(None, alias="maxFileSize", ge=0)
    allowed_content_types: Optional[FrozenSet[str]] = Field(None, alias="allowedContentTypes")
    allowed_extensions: Optional[FrozenSet[str]] = Field(None, alias="allowedExtensions")
    sys_key: Optional[str] = Field(None, alias="sysKey", repr=False)

    @field_validator("allowed_extensions")
    @classmethod
    def strip_leading_dot(cls, v):
        if v is None:
            return v
        return frozenset(ext[1:] if ext.startswith(".") else ext for ext in v)


class FileDescriptor(BaseModel):
    """One uploaded or stored file."""

    file_name: str
    original_file_name: Optional[str] = None
    file_encoding: Optional[str] = None
    file_mime: Optional[str] = None
    file_size: int = Field(0, ge=0)
    file_data: bytes = Field(b"", repr=False)
    fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def extension(self) -> str:
        """Extension after the last dot, without the dot, case preserved."""
        return extension_of(self.file_name)


def extension_of(file_name: str) -> str:
    return os.path.splitext(file_name)[1][1:]


class UploadResult(BaseModel):
    """Response model for a persisted upload (file bytes are not echoed)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: str
    original_file_name: str
    file_encoding: Optional[str] = None
    file_mime: Optional[str] = None
    file_size: int
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "UploadResult":
        return cls(
            file_name=descriptor.file_name,
            original_file_name=descriptor.original_file_name or descriptor.file_name,
            file_encoding=descriptor.file_encoding,
            file_mime=descriptor.file_mime,
            file_size=descriptor.file_size,
            fields=descriptor.fields,
        )
