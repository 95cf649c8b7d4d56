"""
Extract deputy biographical data from the Brazilian Chamber of Deputies API.

Endpoints used:
  GET /deputados?idLegislatura={n}&itens=100   — list of deputies per legislature
  GET /deputados/{id}                          — biographical detail per deputy

Strategy:
  - Fetch the paginated deputy list for the resolved legislature.
  - Fetch biographical detail for each unique ID with bounded concurrency;
    a failed detail is logged and recorded as None.
"""

import asyncio

from .api_client import replace_path
from .camara_client import CamaraApiClient
from .config import RunOptions
from .context import EtlContext
from .errors import ApiError
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.camara_deputados import transform_deputados
from .utils import utc_now_iso

DEPUTADOS = "/deputados"
DETALHE = "/deputados/{id}"


async def _fetch_detail(client: CamaraApiClient, deputado_id: str) -> dict | None:
    return await client.get_dados(replace_path(DETALHE, id=deputado_id)) or None


async def extract_deputados(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
) -> ExtractionBundle:
    log = ctx.logger.getChild("deputados.extract")
    timestamp = utc_now_iso()

    lista = await ctx.camara.get_all(
        DEPUTADOS,
        params={"idLegislatura": legislatura.numero},
        limit=options.limite,
    )

    # Get unique deputy IDs for detail fetch
    seen: set[str] = set()
    unique_ids: list[str] = []
    for rec in lista:
        did = str(rec.get("id") or "")
        if did and did not in seen:
            seen.add(did)
            unique_ids.append(did)
    log.info("%d deputados na legislatura %d", len(unique_ids), legislatura.numero)

    sem = asyncio.Semaphore(ctx.settings.concorrencia)

    async def detalhe(did: str) -> dict | None:
        async with sem:
            try:
                return await _fetch_detail(ctx.camara, did)
            except ApiError as exc:
                log.warning("Deputado %s: detalhes indisponíveis (%s)", did, exc)
                return None

    detalhes = await asyncio.gather(*(detalhe(d) for d in unique_ids))

    return ExtractionBundle(
        sections={
            "lista":       lista,
            "legislatura": legislatura.numero,
            "detalhes":    dict(zip(unique_ids, detalhes)),
        },
        timestamp=timestamp,
    )


PIPELINE = EntityPipeline(
    name="deputados",
    description="Deputados federais da legislatura com dados biográficos (Câmara)",
    extract=extract_deputados,
    transform=transform_deputados,
    load=document_loader("deputados", "deputado_id"),
)
