"""
Extract plenary speeches of the senators who served in a legislature.

Endpoints used:
  GET /senador/lista/legislatura/{leg}.json           -> senators of the legislature
  GET /senador/{code}/discursos.json?dataInicio&dataFim
      -> speeches of one senator; dates as YYYYMMDD

The speech window is the legislature's term capped at today, so a future
legislature issues no speech requests. A failed speech request for one
senator is logged and recorded as None; siblings continue.
"""

import asyncio
from datetime import date

from .api_client import replace_path
from .config import RunOptions
from .context import EtlContext
from .errors import ApiError
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.discursos import transform_discursos
from .utils import dig, unwrap_list, utc_now_iso

LISTA = "/senador/lista/legislatura/{legislatura}"
DISCURSOS = "/senador/{codigo}/discursos"


async def extract_discursos(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
    today: date | None = None,
) -> ExtractionBundle:
    log = ctx.logger.getChild("discursos.extract")
    timestamp = utc_now_iso()

    data = await ctx.senado.get(replace_path(LISTA, legislatura=legislatura.numero))
    lista = unwrap_list(dig(data, "ListaParlamentarLegislatura", "Parlamentares", "Parlamentar"))
    if options.limite:
        lista = lista[: options.limite]
    codigos = [
        str(dig(s, "IdentificacaoParlamentar", "CodigoParlamentar"))
        for s in lista
        if dig(s, "IdentificacaoParlamentar", "CodigoParlamentar")
    ]

    inicio = legislatura.data_inicio
    fim = min(legislatura.data_fim, today or date.today())
    if fim < inicio:
        log.info("Legislatura %d ainda não começou; nenhum discurso a extrair", legislatura.numero)
        return ExtractionBundle(sections={"lista": lista, "discursos": {}}, timestamp=timestamp)

    params = {"dataInicio": inicio.strftime("%Y%m%d"), "dataFim": fim.strftime("%Y%m%d")}
    log.info("%d senadores, discursos de %s a %s", len(codigos), inicio, fim)

    sem = asyncio.Semaphore(ctx.settings.concorrencia)

    async def discursos(code: str) -> dict | None:
        async with sem:
            try:
                data = await ctx.senado.get(replace_path(DISCURSOS, codigo=code), params)
            except ApiError as exc:
                log.warning("Senador %s: discursos indisponíveis (%s)", code, exc)
                return None
        # A senator without speeches in the window has no Pronunciamentos block
        return dig(data, "DiscursosParlamentar", "Parlamentar") or {}

    todos = await asyncio.gather(*(discursos(c) for c in codigos))

    return ExtractionBundle(
        sections={"lista": lista, "discursos": dict(zip(codigos, todos))},
        timestamp=timestamp,
    )


PIPELINE = EntityPipeline(
    name="discursos",
    description="Pronunciamentos dos senadores da legislatura (LEGIS)",
    extract=extract_discursos,
    transform=transform_discursos,
    load=document_loader("discursos", "codigo_pronunciamento"),
)
