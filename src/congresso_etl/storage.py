"""
Document-store capability used by the loaders.

Two implementations:
  FirestoreStore — google-cloud-firestore AsyncClient (production)
  LocalStore     — JSON files mirroring document paths on disk (--pc)

Paths are slash-separated document paths, e.g. ``comissoes/38`` or
``comissoes_historico/57/capturas/20250301T120000000000Z``.

Writes go through a BatchWriter, which commits every ``max_operacoes``
operations and flushes the remainder at the end. Each commit is atomic on
its own; committed batches are never rolled back.
"""

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .config import MAX_BATCH_OPERATIONS


class Batch(ABC):
    """A group of set-operations committed together."""

    @abstractmethod
    def set(self, path: str, data: dict) -> None: ...

    @abstractmethod
    async def commit(self) -> None: ...


class DocumentStore(ABC):
    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @abstractmethod
    def batch(self) -> Batch: ...

    async def close(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Firestore
# ---------------------------------------------------------------------------

class _FirestoreBatch(Batch):
    def __init__(self, db: Any) -> None:
        self._db = db
        self._batch = db.batch()

    def set(self, path: str, data: dict) -> None:
        self._batch.set(self._db.document(path), data)

    async def commit(self) -> None:
        await self._batch.commit()


class FirestoreStore(DocumentStore):
    """
    Firestore-backed store.

    Parameters
    ----------
    projeto : str, optional
        GCP project id. When omitted, the ambient Google credentials decide.
        ``FIRESTORE_EMULATOR_HOST`` is honoured by the client library itself.
    """

    def __init__(self, projeto: str | None = None) -> None:
        # Heavy import only needed when writing to Firestore
        from google.cloud import firestore

        self._db = firestore.AsyncClient(project=projeto)

    async def exists(self, path: str) -> bool:
        snapshot = await self._db.document(path).get()
        return snapshot.exists

    def batch(self) -> Batch:
        return _FirestoreBatch(self._db)

    async def close(self) -> None:
        result = self._db.close()
        if inspect.isawaitable(result):
            await result


# ---------------------------------------------------------------------------
# Local disk
# ---------------------------------------------------------------------------

class _LocalBatch(Batch):
    def __init__(self, store: "LocalStore") -> None:
        self._store = store
        self._ops: list[tuple[str, dict]] = []

    def set(self, path: str, data: dict) -> None:
        self._ops.append((path, data))

    async def commit(self) -> None:
        ops, self._ops = self._ops, []
        await asyncio.to_thread(self._store.write_many, ops)


class LocalStore(DocumentStore):
    """Writes each document to ``<root>/<path>.json``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def file_for(self, path: str) -> Path:
        parts = [p for p in path.split("/") if p]
        if not parts:
            raise ValueError(f"Caminho de documento inválido: {path!r}")
        return self.root.joinpath(*parts[:-1], f"{parts[-1]}.json")

    async def exists(self, path: str) -> bool:
        return self.file_for(path).exists()

    def batch(self) -> Batch:
        return _LocalBatch(self)

    def write_many(self, ops: list[tuple[str, dict]]) -> None:
        for path, data in ops:
            file = self.file_for(path)
            file.parent.mkdir(parents=True, exist_ok=True)
            file.write_text(
                json.dumps(data, ensure_ascii=False, indent=2, default=str),
                encoding="utf-8",
            )


# ---------------------------------------------------------------------------
# Batch writer
# ---------------------------------------------------------------------------

class BatchWriter:
    """Accumulates set-operations and commits them in bounded batches.

    The pending counter resets after every commit; ``commits`` records the
    size of each committed batch.
    """

    def __init__(
        self,
        store: DocumentStore,
        max_operacoes: int = MAX_BATCH_OPERATIONS,
        logger: logging.Logger | None = None,
    ) -> None:
        if max_operacoes <= 0:
            raise ValueError("max_operacoes deve ser maior que zero")
        self._store = store
        self.max_operacoes = max_operacoes
        self._log = logger or logging.getLogger(__name__)
        self._batch = store.batch()
        self._pendentes = 0
        self.commits: list[int] = []

    @property
    def pendentes(self) -> int:
        return self._pendentes

    async def set(self, path: str, data: dict) -> None:
        self._batch.set(path, data)
        self._pendentes += 1
        if self._pendentes >= self.max_operacoes:
            await self._commit()

    async def flush(self) -> None:
        if self._pendentes:
            await self._commit()

    async def _commit(self) -> None:
        n = self._pendentes
        await self._batch.commit()
        self.commits.append(n)
        self._log.debug("Lote %d confirmado com %d operações", len(self.commits), n)
        self._batch = self._store.batch()
        self._pendentes = 0
