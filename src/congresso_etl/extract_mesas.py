"""
Extract the governing boards (Mesas Diretoras) from the Brazilian Senate LEGIS API.

Endpoints used:
  GET /composicao/mesaSF.json  -> Mesa do Senado Federal
  GET /composicao/mesaCN.json  -> Mesa do Congresso Nacional

Both are single calls returning the current composition. As with leaderships,
the resolved legislature only tags the stored documents.
"""

import asyncio

from .config import RunOptions
from .context import EtlContext
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.mesas import transform_mesas
from .utils import utc_now_iso

MESA_SENADO = "/composicao/mesaSF"
MESA_CONGRESSO = "/composicao/mesaCN"


async def extract_mesas(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
) -> ExtractionBundle:
    log = ctx.logger.getChild("mesas.extract")
    timestamp = utc_now_iso()

    senado, congresso = await asyncio.gather(
        ctx.senado.get(MESA_SENADO),
        ctx.senado.get(MESA_CONGRESSO),
    )
    log.info("Mesas do Senado e do Congresso extraídas")

    return ExtractionBundle(
        sections={"lista": [{"casa": "SF", "dados": senado}, {"casa": "CN", "dados": congresso}]},
        timestamp=timestamp,
    )


PIPELINE = EntityPipeline(
    name="mesas",
    description="Mesas Diretoras do Senado Federal e do Congresso Nacional (LEGIS)",
    extract=extract_mesas,
    transform=transform_mesas,
    load=document_loader("mesas", "codigo"),
)
