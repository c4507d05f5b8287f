"""
Filesystem adapter for the encrypted storage layer.
Stores opaque bytes under <base_dir>/<container>/<name>; knows nothing about encryption.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class FileSystemStore:
    """Directory-scoped raw file store."""

    def __init__(self, base_dir: Optional[PathLike] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def container_path(self, container: str) -> Path:
        """Resolve a container (absolute roots are used as-is)."""
        return (self.base_dir / container).resolve()

    def file_path(self, container: str, name: str) -> Path:
        """Resolve a file path, refusing names that escape the container."""
        container_root = self.container_path(container)
        path = (container_root / name).resolve()
        if path.parent != container_root:
            raise PermissionError(f"Invalid storage path for {name!r}")
        return path

    async def ensure_directory(self, container: str) -> Path:
        path = self.container_path(container)
        await aiofiles.os.makedirs(path, exist_ok=True)
        return path

    async def exists(self, container: str, name: str) -> bool:
        try:
            path = self.file_path(container, name)
        except PermissionError:
            return False
        return await aiofiles.os.path.isfile(path)

    async def read(self, container: str, name: str) -> bytes:
        async with aiofiles.open(self.file_path(container, name), "rb") as fh:
            return await fh.read()

    async def write(self, container: str, name: str, data: bytes) -> None:
        async with aiofiles.open(self.file_path(container, name), "wb") as fh:
            await fh.write(data)

    async def delete(self, container: str, name: str) -> bool:
        """Delete a file; returns False instead of raising when nothing was removed."""
        try:
            await aiofiles.os.remove(self.file_path(container, name))
        except OSError as exc:
            logger.debug("Delete of %s/%s failed: %s", container, name, exc)
            return False
        return True
