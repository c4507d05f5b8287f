# tests/conftest.py
import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]  # repository root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cryptstore.adapters.filesystem import FileSystemStore  # noqa: E402
from cryptstore.domain.models import StorageConfig, as_mib  # noqa: E402
from cryptstore.services.storage_service import SecureStorage, get_random_key  # noqa: E402


@pytest.fixture()
def key():
    return get_random_key()


@pytest.fixture()
def storage_config(key):
    return StorageConfig(
        root="container",
        nameMakeUnique=True,
        maxFileSize=as_mib(50),
        allowedContentTypes=["text/plain"],
        allowedExtensions=["txt"],
        sysKey=key.hex,
    )


@pytest.fixture()
def file_store(tmp_path):
    return FileSystemStore(base_dir=tmp_path / "storage")


@pytest.fixture()
def container_dir(tmp_path):
    return tmp_path / "storage" / "container"


@pytest.fixture()
def storage(file_store, storage_config):
    engine = SecureStorage(store=file_store)
    assert asyncio.run(engine.init(storage_config)) is True
    return engine
