"""
ETL contract types and the template processor that drives one entity run.

    precondition (resolve legislature)   → PreconditionError, run never starts
    INICIADO → EXTRAINDO → TRANSFORMANDO → CARREGANDO → FINALIZADO
                    └──────────┴──────────────┴──→ ERRO (StageError) / CANCELADO

Each entity supplies an EntityPipeline: an async extractor, a pure
transformer and a loader factory. Stages run strictly in sequence.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol

from .errors import PreconditionError, StageError
from .exporter import export_result
from .loader import PersistenceResult

if TYPE_CHECKING:
    from .config import RunOptions
    from .context import EtlContext
    from .legislatura import Legislatura


class ProcessingStatus(str, Enum):
    INICIADO = "iniciado"
    EXTRAINDO = "extraindo"
    TRANSFORMANDO = "transformando"
    CARREGANDO = "carregando"
    FINALIZADO = "finalizado"
    ERRO = "erro"
    CANCELADO = "cancelado"


@dataclass(frozen=True)
class ExtractionBundle:
    """Named raw sections returned by an extractor plus the extraction time."""

    sections: dict[str, Any]
    timestamp: str

    def get(self, name: str, default: Any = None) -> Any:
        value = self.sections.get(name)
        return default if value is None else value


@dataclass(frozen=True)
class TransformResult:
    records: list[dict]
    total: int
    resumo: dict


class Loader(Protocol):
    async def save(self, records: list[dict], legislatura: int) -> PersistenceResult: ...

    async def save_historico(self, result: TransformResult, legislatura: int) -> str: ...


Extract = Callable[["EtlContext", "Legislatura", "RunOptions"], Awaitable[ExtractionBundle]]
Transform = Callable[[ExtractionBundle], TransformResult]
LoaderFactory = Callable[["EtlContext"], Loader]


@dataclass(frozen=True)
class EntityPipeline:
    name: str
    description: str
    extract: Extract
    transform: Transform
    load: LoaderFactory


@dataclass
class PipelineRun:
    entity: str
    legislatura: int
    status: ProcessingStatus = ProcessingStatus.INICIADO
    historico: list[ProcessingStatus] = field(default_factory=list)
    extraidos: int = 0
    transformados: int = 0
    salvos: int = 0
    atualizados: int = 0
    historico_id: str | None = None
    exportados: list[str] = field(default_factory=list)
    duracoes: dict[str, float] = field(default_factory=dict)
    erro: str | None = None
    observer: Callable[["PipelineRun"], None] | None = field(default=None, repr=False, compare=False)

    def transition(self, status: ProcessingStatus) -> None:
        self.status = status
        self.historico.append(status)
        if self.observer is not None:
            self.observer(self)


# ---------------------------------------------------------------------------
# Template processor
# ---------------------------------------------------------------------------

def _resolve_legislatura(ctx: EtlContext, options: RunOptions) -> Legislatura:
    if options.legislatura is not None:
        leg = ctx.resolver.get(options.legislatura)
        if leg is None:
            raise PreconditionError(
                f"Legislatura {options.legislatura} não consta da lista de referência "
                f"(disponíveis: {ctx.resolver.numeros})"
            )
        return leg
    leg = ctx.resolver.resolve_current()
    if leg is None:
        raise PreconditionError("Não foi possível determinar a legislatura atual")
    return leg


def _count_bundle(bundle: ExtractionBundle) -> int:
    principal = bundle.sections.get("lista")
    return len(principal) if isinstance(principal, list) else 0


async def _run_stage(
    run: PipelineRun,
    stage: ProcessingStatus,
    log,
    fn: Callable[[], Any],
) -> Any:
    run.transition(stage)
    log.info("[%s] etapa %s", run.entity, stage.name)
    started = time.perf_counter()
    try:
        value = fn()
        if inspect.isawaitable(value):
            value = await value
        return value
    except (asyncio.CancelledError, KeyboardInterrupt):
        run.transition(ProcessingStatus.CANCELADO)
        log.warning("[%s] execução cancelada na etapa %s", run.entity, stage.name)
        raise
    except Exception as exc:
        run.erro = str(exc)
        run.transition(ProcessingStatus.ERRO)
        log.error("[%s] falha na etapa %s: %s", run.entity, stage.name, exc)
        raise StageError(stage.name, run.entity, exc) from exc
    finally:
        run.duracoes[stage.value] = round(time.perf_counter() - started, 3)


async def run_pipeline(
    entity: EntityPipeline,
    ctx: EtlContext,
    options: RunOptions,
    *,
    on_status: Callable[[PipelineRun], None] | None = None,
) -> PipelineRun:
    """Run one entity through extract → transform → load.

    ``on_status`` is called after every status transition, including the
    final ERRO or CANCELADO of a failed run.

    Raises
    ------
    PreconditionError
        The legislature could not be resolved; no stage was entered.
    StageError
        A stage failed; ``.stage`` names it and ``__cause__`` is the original.
    """
    log = ctx.logger.getChild(entity.name)
    legislatura = _resolve_legislatura(ctx, options)

    run = PipelineRun(entity=entity.name, legislatura=legislatura.numero, observer=on_status)
    run.transition(ProcessingStatus.INICIADO)
    log.info(
        "[%s] início: legislatura %d%s",
        entity.name, legislatura.numero,
        f", limite {options.limite}" if options.limite else "",
    )

    bundle: ExtractionBundle = await _run_stage(
        run, ProcessingStatus.EXTRAINDO, log,
        lambda: entity.extract(ctx, legislatura, options),
    )
    run.extraidos = _count_bundle(bundle)
    log.info("[%s] %d registros extraídos", entity.name, run.extraidos)

    result: TransformResult = await _run_stage(
        run, ProcessingStatus.TRANSFORMANDO, log,
        lambda: entity.transform(bundle),
    )
    run.transformados = result.total
    log.info("[%s] %d registros transformados", entity.name, run.transformados)

    async def carregar() -> None:
        if options.exportar:
            paths = await asyncio.to_thread(
                export_result, result, entity.name, legislatura.numero, ctx.settings.export_dir
            )
            run.exportados = [str(p) for p in paths]
        loader = entity.load(ctx)
        persistencia = await loader.save(result.records, legislatura.numero)
        run.salvos = persistencia.total_salvos
        run.atualizados = persistencia.total_atualizados
        run.historico_id = await loader.save_historico(result, legislatura.numero)

    await _run_stage(run, ProcessingStatus.CARREGANDO, log, carregar)

    run.transition(ProcessingStatus.FINALIZADO)
    log.info("=" * 60)
    log.info("[%s] resumo da execução", entity.name)
    log.info("  legislatura:   %d", run.legislatura)
    log.info("  extraídos:     %d", run.extraidos)
    log.info("  transformados: %d", run.transformados)
    log.info("  novos:         %d", run.salvos)
    log.info("  atualizados:   %d", run.atualizados)
    log.info("  histórico:     %s", run.historico_id)
    for path in run.exportados:
        log.info("  exportado:     %s", path)
    log.info("  durações (s):  %s", run.duracoes)
    log.info("=" * 60)
    return run
