"""
Extract nominal voting records from the Brazilian Senate Open Data API.

Endpoint used:
  GET /votacao?dataInicio=YYYY-MM-DD&dataFim=YYYY-MM-DD
  -- Returns all plenary voting sessions in the date range, with all senator votes
     nested inside each session object. No .json suffix on this endpoint.

Strategy:
  - Queries month-by-month across the legislature's term, capped at today.
  - Windows are fetched sequentially to respect the LEGIS rate limit.
  - A window that still fails after its retries aborts the extraction, so a
    run never stores a term with a missing month.
"""

from datetime import date

from .config import RunOptions
from .context import EtlContext
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.votacoes import transform_votacoes
from .utils import month_date_windows, utc_now_iso

VOTACAO = "/votacao"


def _sessions(data) -> list[dict]:
    # The endpoint returns a plain JSON array for date-range queries
    if isinstance(data, list):
        return data
    # v=1 wraps the result
    if isinstance(data, dict) and "votacoes" in data:
        return data["votacoes"] or []
    return [data] if data else []


async def extract_votacoes(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
    today: date | None = None,
) -> ExtractionBundle:
    log = ctx.logger.getChild("votacoes.extract")
    timestamp = utc_now_iso()

    windows = month_date_windows(legislatura.data_inicio, legislatura.data_fim, today)
    log.info(
        "%d janelas mensais de %s a %s",
        len(windows), legislatura.data_inicio, windows[-1][1] if windows else legislatura.data_inicio,
    )

    sessoes: list[dict] = []
    for i, (w_start, w_end) in enumerate(windows, 1):
        data = await ctx.senado.get(
            VOTACAO,
            {"dataInicio": w_start.isoformat(), "dataFim": w_end.isoformat()},
            suffix="",
        )
        window_sessions = _sessions(data)
        sessoes.extend(window_sessions)
        log.debug("[%3d/%d] %s → %s  sessões=%d", i, len(windows), w_start, w_end, len(window_sessions))
        if options.limite and len(sessoes) >= options.limite:
            sessoes = sessoes[: options.limite]
            break

    log.info("%d sessões de votação", len(sessoes))

    return ExtractionBundle(sections={"lista": sessoes}, timestamp=timestamp)


PIPELINE = EntityPipeline(
    name="votacoes",
    description="Votações nominais do Plenário do Senado, por janelas mensais (LEGIS)",
    extract=extract_votacoes,
    transform=transform_votacoes,
    load=document_loader("votacoes", "codigo_sessao_votacao"),
)
