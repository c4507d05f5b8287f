"""
Secure storage service: encrypt-before-write and decrypt-after-read over a raw file store.

Encryption is AES-CTR without authentication. Ciphertext integrity is not
verified; reading a file with the wrong key returns garbage, not an error.
"""

import logging
from typing import Optional, Sequence, Union

from fastapi import Request
from fastapi.responses import Response

from cryptstore.adapters.config_loader import ConfigError, load_storage_config
from cryptstore.adapters.filesystem import FileSystemStore
from cryptstore.app.transfer import parse_upload, write_download_response
from cryptstore.domain.models import FileDescriptor, StorageConfig
from cryptstore.security import cipher
from cryptstore.security.cipher import Key
from cryptstore.security.problem_details import read_failure_problem
from cryptstore.security.uploads import RejectionKind, UploadError, validate_upload

logger = logging.getLogger(__name__)


def get_random_key() -> Key:
    """Generate a key suitable for the ``sysKey`` configuration value."""
    return cipher.generate_key()


class SecureStorage:
    """Encrypted file storage bound to one configuration and key."""

    def __init__(self, store: Optional[FileSystemStore] = None):
        self.store = store or FileSystemStore()
        self.config: Optional[StorageConfig] = None
        self._key: Optional[Key] = None

    @property
    def ready(self) -> bool:
        return self.config is not None and self._key is not None

    async def init(
        self,
        config: Union[StorageConfig, dict, str],
        config_dir: Optional[str] = None,
        env: Optional[str] = None,
    ) -> bool:
        """Bind the engine to a configuration.

        ``config`` is a StorageConfig, a mapping of config values, or the name of
        an entry in the configuration file. Returns False (and logs) when no
        configuration can be resolved. Raises CryptoError for a bad key.
        """
        try:
            if isinstance(config, str):
                resolved = load_storage_config(config, config_dir=config_dir, env=env)
            elif isinstance(config, StorageConfig):
                resolved = config
            else:
                resolved = StorageConfig.model_validate(config)
        except (ConfigError, ValueError) as exc:
            logger.error("Secure storage configuration could not be resolved: %s", exc)
            return False

        try:
            path = await self.store.ensure_directory(resolved.root)
            logger.info("Secure storage root: %s", path)
        except OSError as exc:
            logger.warning("Could not create storage root %s: %s", resolved.root, exc)

        key = cipher.key_from_hex(resolved.sys_key)
        self.config = resolved
        self._key = key
        return True

    def _require_ready(self) -> StorageConfig:
        if not self.ready:
            raise ConfigError("Secure storage has not been initialised")
        return self.config

    async def exists(self, filename: str) -> bool:
        config = self._require_ready()
        return await self.store.exists(config.root, filename)

    async def write_file(self, filename: str, data: Union[bytes, str]) -> None:
        """Encrypt ``data`` and write it as ``filename``; OSError propagates."""
        config = self._require_ready()
        if isinstance(data, str):
            data = cipher.string_to_bytes(data)
        ciphertext = cipher.encrypt(self._key.bytes, data)
        await self.store.write(config.root, filename, ciphertext)

    async def read_file(self, filename: str) -> bytes:
        """Read and decrypt ``filename``; OSError (e.g. not found) propagates."""
        config = self._require_ready()
        ciphertext = await self.store.read(config.root, filename)
        return cipher.decrypt(self._key.bytes, ciphertext)

    async def delete_file(self, filename: str) -> bool:
        """Delete ``filename``. Returns False when nothing was deleted."""
        config = self._require_ready()
        # TODO: overwrite the file contents before unlinking for a secure wipe.
        deleted = await self.store.delete(config.root, filename)
        if deleted:
            logger.info("Deleted %s", filename)
        return deleted

    async def store_upload(self, files: Sequence[FileDescriptor]) -> FileDescriptor:
        """Validate parsed upload files and persist the accepted one."""
        config = self._require_ready()
        try:
            file = validate_upload(files, config)
        except UploadError as exc:
            logger.warning("Upload rejected (%s): %s", exc.code, exc.message)
            raise

        try:
            await self.write_file(file.file_name, file.file_data)
        except OSError as exc:
            logger.error("Could not persist upload %s: %s", file.file_name, exc)
            raise UploadError(
                RejectionKind.STORAGE_FAILURE, "File could not be stored", status=500
            ) from exc

        logger.info("Stored upload %s as %s", file.original_file_name, file.file_name)
        return file

    async def upload_file(self, request: Request) -> FileDescriptor:
        """Parse a multipart request and store its single file."""
        self._require_ready()
        files = await parse_upload(request)
        return await self.store_upload(files)

    async def download_file(self, filename: str, instance: Optional[str] = None) -> Response:
        """Return the decrypted file as an attachment, or a 400 problem response."""
        try:
            data = await self.read_file(filename)
        except OSError as exc:
            logger.warning("Download of %s failed: %s", filename, exc)
            return read_failure_problem(filename, exc, instance=instance)
        logger.info("Serving %s (%d bytes)", filename, len(data))
        return write_download_response(filename, data)
