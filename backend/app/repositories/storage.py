"""Object store selection and the in-memory fallback."""

from __future__ import annotations

import structlog

from app.repositories.base import ObjectStore
from app.utils.r2 import R2ObjectStore, r2_configured

logger = structlog.get_logger()


class InMemoryObjectStore:
    """Keeps uploaded bytes in a dict. URLs use the ``memory://`` scheme."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        self.objects[key] = (data, content_type)
        return key

    def url_for(self, key: str) -> str:
        return f"memory://{key}"

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        for key in [k for k in self.objects if k.startswith(prefix)]:
            del self.objects[key]


def build_object_store() -> ObjectStore:
    if r2_configured():
        return R2ObjectStore()
    logger.warning("r2_not_configured_using_memory_store")
    return InMemoryObjectStore()
