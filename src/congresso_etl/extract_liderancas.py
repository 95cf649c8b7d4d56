"""
Extract current leadership positions from the Brazilian Senate LEGIS API.

Endpoint used:
  GET /composicao/lideranca.json
  -- Returns a flat JSON array of leadership records.
  -- Each record identifies a senator/deputy in a government, party, or bloc
     leadership role (Líder or Vice-Líder).

Single API call — no pagination or date windowing needed. The endpoint only
knows the current composition, so the resolved legislature is used solely to
tag the stored documents.
"""

from .config import RunOptions
from .context import EtlContext
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.liderancas import transform_liderancas
from .utils import unwrap_list, utc_now_iso

LIDERANCAS = "/composicao/lideranca"


async def extract_liderancas(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
) -> ExtractionBundle:
    log = ctx.logger.getChild("liderancas.extract")
    timestamp = utc_now_iso()

    data = await ctx.senado.get(LIDERANCAS)
    # Response is a flat JSON array; a single record may arrive as a dict
    lista = unwrap_list(data) if data else []
    if options.limite:
        lista = lista[: options.limite]
    log.info("%d registros de liderança", len(lista))

    return ExtractionBundle(sections={"lista": lista}, timestamp=timestamp)


PIPELINE = EntityPipeline(
    name="liderancas",
    description="Lideranças partidárias, de bloco e de governo (LEGIS)",
    extract=extract_liderancas,
    transform=transform_liderancas,
    load=document_loader("liderancas", "codigo"),
)
