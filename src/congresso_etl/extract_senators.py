"""
Extract senator biographical data from the Brazilian Senate Open Data API.

Endpoints used:
  GET /senador/lista/legislatura/{leg}.json -> senators who served in the legislature
  GET /senador/{code}.json                  -> biographical detail per senator
  GET /senador/{code}/mandatos.json         -> mandate period history per senator

A failed detail or mandate request for one senator is logged and recorded as
None; the list entry still yields a record.
"""

import asyncio

from .api_client import replace_path
from .config import RunOptions
from .context import EtlContext
from .errors import ApiError
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.senators import transform_senators
from .utils import dig, unwrap_list, utc_now_iso

LISTA = "/senador/lista/legislatura/{legislatura}"
DETALHE = "/senador/{codigo}"
MANDATOS = "/senador/{codigo}/mandatos"


async def extract_senators(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
) -> ExtractionBundle:
    log = ctx.logger.getChild("senadores.extract")
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
    log.info("%d senadores na legislatura %d", len(codigos), legislatura.numero)

    sem = asyncio.Semaphore(ctx.settings.concorrencia)

    async def detalhe(code: str) -> dict | None:
        async with sem:
            try:
                data = await ctx.senado.get(replace_path(DETALHE, codigo=code))
            except ApiError as exc:
                log.warning("Senador %s: detalhes indisponíveis (%s)", code, exc)
                return None
        return dig(data, "DetalheParlamentar", "Parlamentar")

    async def mandatos(code: str) -> list | None:
        async with sem:
            try:
                data = await ctx.senado.get(replace_path(MANDATOS, codigo=code))
            except ApiError as exc:
                log.warning("Senador %s: mandatos indisponíveis (%s)", code, exc)
                return None
        # API returns a single dict (not a list) when senator has only one mandate
        return unwrap_list(dig(data, "MandatoParlamentar", "Parlamentar", "Mandatos", "Mandato"))

    detalhes = await asyncio.gather(*(detalhe(c) for c in codigos))
    todos_mandatos = await asyncio.gather(*(mandatos(c) for c in codigos))

    return ExtractionBundle(
        sections={
            "lista":    lista,
            "detalhes": dict(zip(codigos, detalhes)),
            "mandatos": dict(zip(codigos, todos_mandatos)),
        },
        timestamp=timestamp,
    )


PIPELINE = EntityPipeline(
    name="senadores",
    description="Senadores da legislatura com dados biográficos e mandatos (LEGIS)",
    extract=extract_senators,
    transform=transform_senators,
    load=document_loader("senadores", "senador_id"),
)
