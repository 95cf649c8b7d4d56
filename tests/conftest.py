"""
Shared fixtures: an in-memory document store and a context builder whose
HTTP clients are backed by httpx.MockTransport.
"""

import logging
from typing import Callable

import httpx
import pytest

from congresso_etl.api_client import SenadoApiClient
from congresso_etl.camara_client import CamaraApiClient
from congresso_etl.config import Settings
from congresso_etl.context import EtlContext
from congresso_etl.legislatura import LegislaturaResolver
from congresso_etl.retry import RetryPolicy
from congresso_etl.storage import Batch, DocumentStore


class MemoryBatch(Batch):
    def __init__(self, store: "MemoryStore") -> None:
        self.store = store
        self.ops: list[tuple[str, dict]] = []

    def set(self, path: str, data: dict) -> None:
        self.ops.append((path, data))

    async def commit(self) -> None:
        self.store.docs.update(self.ops)
        self.store.commits.append(len(self.ops))
        self.ops = []


class MemoryStore(DocumentStore):
    """Dict-backed store that records commit sizes and existence lookups."""

    def __init__(self, existing: dict[str, dict] | None = None) -> None:
        self.docs: dict[str, dict] = dict(existing or {})
        self.commits: list[int] = []
        self.exists_calls: list[str] = []

    async def exists(self, path: str) -> bool:
        self.exists_calls.append(path)
        return path in self.docs

    def batch(self) -> Batch:
        return MemoryBatch(self)


def build_context(
    handler: Callable[[httpx.Request], httpx.Response],
    store: DocumentStore | None = None,
    **overrides,
) -> EtlContext:
    """EtlContext with zero delays and MockTransport-backed clients."""
    settings = Settings(
        senado_delay=0.0,
        camara_delay=0.0,
        retry_delay=0.0,
        **overrides,
    )
    retry = RetryPolicy(settings.retry_attempts, settings.retry_delay)
    transport = httpx.MockTransport(handler)
    logger = logging.getLogger("congresso_etl.tests")
    return EtlContext(
        settings=settings,
        logger=logger,
        senado=SenadoApiClient(settings.senado_base_url, delay=0.0, retry=retry, transport=transport),
        camara=CamaraApiClient(settings.camara_base_url, delay=0.0, retry=retry, transport=transport),
        store=store if store is not None else MemoryStore(),
        resolver=LegislaturaResolver.default(),
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
