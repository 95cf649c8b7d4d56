"""
Generic document loader.

    <colecao>/<id>                                   current documents (upsert)
    <colecao>_historico/<leg>/capturas/<ts-id>       write-once snapshots

Usage:
    loader = DocumentLoader(store, "comissoes", "codigo", logger=log)
    resultado = await loader.save(result.records, legislatura=57)
    doc_id = await loader.save_historico(result, legislatura=57)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import MAX_BATCH_OPERATIONS
from .storage import BatchWriter, DocumentStore
from .utils import timestamp_id, utc_now_iso

if TYPE_CHECKING:
    from .context import EtlContext
    from .processor import TransformResult


@dataclass
class PersistenceResult:
    total_salvos: int = 0
    total_atualizados: int = 0

    @property
    def total(self) -> int:
        return self.total_salvos + self.total_atualizados


class DocumentLoader:
    """
    Persists normalized records of one entity type.

    Parameters
    ----------
    store : DocumentStore
        Target store (Firestore or local disk).
    colecao : str
        Collection name, e.g. ``"comissoes"``.
    id_field : str
        Record field holding the document id, e.g. ``"codigo"``.
    max_operacoes : int
        Batch ceiling; the writer commits each time it is reached.
    """

    def __init__(
        self,
        store: DocumentStore,
        colecao: str,
        id_field: str,
        *,
        max_operacoes: int = MAX_BATCH_OPERATIONS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.colecao = colecao
        self.id_field = id_field
        self.max_operacoes = max_operacoes
        self._log = logger or logging.getLogger(__name__)
        self.commits: list[int] = []

    def doc_path(self, doc_id: object) -> str:
        return f"{self.colecao}/{doc_id}"

    def historico_path(self, legislatura: int, doc_id: str) -> str:
        return f"{self.colecao}_historico/{legislatura}/capturas/{doc_id}"

    async def save(self, records: list[dict], legislatura: int) -> PersistenceResult:
        """Upsert every record; counts new documents separately from updates."""
        resultado = PersistenceResult()
        writer = BatchWriter(self.store, self.max_operacoes, self._log)
        atualizado_em = utc_now_iso()

        for rec in records:
            doc_id = rec.get(self.id_field)
            if doc_id in (None, ""):
                self._log.warning("%s: registro sem %s ignorado", self.colecao, self.id_field)
                continue
            path = self.doc_path(doc_id)
            if await self.store.exists(path):
                resultado.total_atualizados += 1
            else:
                resultado.total_salvos += 1
            await writer.set(path, {**rec, "legislatura": legislatura, "atualizado_em": atualizado_em})

        await writer.flush()
        self.commits = writer.commits
        self._log.info(
            "%s: %d novos, %d atualizados em %d lote(s)",
            self.colecao, resultado.total_salvos, resultado.total_atualizados, len(writer.commits),
        )
        return resultado

    async def save_historico(self, result: TransformResult, legislatura: int) -> str:
        """Write a new snapshot of the whole run and return its document id."""
        capturado_em = utc_now_iso()
        doc_id = timestamp_id(capturado_em)
        writer = BatchWriter(self.store, self.max_operacoes, self._log)
        await writer.set(
            self.historico_path(legislatura, doc_id),
            {
                "legislatura":  legislatura,
                "capturado_em": capturado_em,
                "total":        result.total,
                "resumo":       result.resumo,
                "registros":    result.records,
            },
        )
        await writer.flush()
        self._log.info("%s: histórico salvo em %s", self.colecao, doc_id)
        return doc_id


def document_loader(colecao: str, id_field: str):
    """Return a loader factory bound to one collection, for EntityPipeline.load."""

    def factory(ctx: EtlContext) -> DocumentLoader:
        return DocumentLoader(
            ctx.store,
            colecao,
            id_field,
            max_operacoes=ctx.settings.max_batch_operations,
            logger=ctx.logger.getChild(f"{colecao}.load"),
        )

    return factory
