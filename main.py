"""
Main entry point for the encrypted storage service.
"""

import asyncio
import os

import uvicorn

from cryptstore.app.api import create_app
from cryptstore.services.storage_service import SecureStorage

CONFIG_NAME = os.getenv("CRYPTSTORE_CONFIG_NAME", "secureStorageConfig")


def build_app():
    storage = SecureStorage()
    asyncio.run(storage.init(CONFIG_NAME))
    return create_app(storage)


if __name__ == "__main__":
    uvicorn.run(build_app(), host="0.0.0.0", port=8000)
