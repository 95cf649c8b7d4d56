"""
Extract committees (comissões) from the Senate LEGIS API.

Master list endpoints:

  GET /comissao/lista/colegiados
  -- Returns ALL active committees across the National Congress (SF + CN + CD).
  -- Shape: ListaColegiados.Colegiados.Colegiado[]

  GET /comissao/lista/mistas
  -- Returns joint Congress (CN) committees with member-count breakdown.
  -- Shape: ComissoesMistasCongresso.Colegiados.Colegiado[]

  GET /comissao/lista/tiposColegiado
  -- Reference list of committee types. Optional: a failure here is logged
     and the run continues with the types seen on the master list.

Per-committee endpoints (bounded concurrency, failures isolated per code):

  GET /comissao/{codigo}                      — details
  GET /composicao/comissao/{codigo}           — Senate composition
  GET /composicao/comissao/atual/mista/{codigo} — joint committee composition
"""

import asyncio

from .api_client import replace_path
from .config import RunOptions
from .context import EtlContext
from .errors import ApiError
from .legislatura import Legislatura
from .loader import document_loader
from .processor import EntityPipeline, ExtractionBundle
from .transforms.comissoes import transform_comissoes
from .utils import dig, unwrap_list, utc_now_iso

LISTA_COLEGIADOS = "/comissao/lista/colegiados"
LISTA_MISTAS = "/comissao/lista/mistas"
LISTA_TIPOS = "/comissao/lista/tiposColegiado"
DETALHE = "/comissao/{codigo}"
COMPOSICAO_SF = "/composicao/comissao/{codigo}"
COMPOSICAO_CN = "/composicao/comissao/atual/mista/{codigo}"


def _codigo(c: dict) -> str:
    return str(c.get("Codigo") or c.get("CodigoColegiado") or "")


def _unwrap_detalhe(raw: dict, codigo: str) -> dict | None:
    """Pick the committee object out of either detail response shape."""
    if dig(raw, "DetalheComissao", "Comissao"):
        return raw["DetalheComissao"]["Comissao"]
    for c in unwrap_list(dig(raw, "ComissoesCongressoNacional", "Colegiados", "Colegiado")):
        if str(c.get("CodigoColegiado")) == codigo:
            return c
    return raw or None


def _unwrap_composicao(raw: dict) -> dict | None:
    return raw.get("ComposicaoComissao") or raw.get("ComposicaoComissaoMista") or raw or None


async def extract_comissoes(
    ctx: EtlContext,
    legislatura: Legislatura,
    options: RunOptions,
) -> ExtractionBundle:
    log = ctx.logger.getChild("comissoes.extract")
    timestamp = utc_now_iso()

    # --- 1. Reference types (optional) ---
    try:
        tipos = await ctx.senado.get(LISTA_TIPOS)
    except ApiError as exc:
        log.warning("Tipos de comissão indisponíveis: %s", exc)
        tipos = {}

    # --- 2. Master lists ---
    raw = await ctx.senado.get(LISTA_COLEGIADOS)
    colegiados = unwrap_list(dig(raw, "ListaColegiados", "Colegiados", "Colegiado"))
    raw = await ctx.senado.get(LISTA_MISTAS)
    mistas = unwrap_list(dig(raw, "ComissoesMistasCongresso", "Colegiados", "Colegiado"))
    log.info("%d colegiados e %d comissões mistas", len(colegiados), len(mistas))

    casas: dict[str, str] = {}
    for c in colegiados:
        casas.setdefault(_codigo(c), c.get("SiglaCasa") or "SF")
    for c in mistas:
        casas.setdefault(_codigo(c), "CN")
    casas.pop("", None)

    codigos = list(casas)
    if options.limite:
        codigos = codigos[: options.limite]
        selecionados = set(codigos)
        colegiados = [c for c in colegiados if _codigo(c) in selecionados]
        mistas = [c for c in mistas if _codigo(c) in selecionados]
        log.info("Limite aplicado: %d comissões", len(codigos))

    # --- 3. Details and compositions per committee ---
    sem = asyncio.Semaphore(ctx.settings.concorrencia)

    async def fetch(path: str, what: str, codigo: str):
        async with sem:
            try:
                return await ctx.senado.get(path)
            except ApiError as exc:
                log.warning("Comissão %s: %s indisponível (%s)", codigo, what, exc)
                return None

    async def detalhe(codigo: str) -> dict | None:
        raw = await fetch(replace_path(DETALHE, codigo=codigo), "detalhes", codigo)
        return _unwrap_detalhe(raw, codigo) if raw else None

    async def composicao(codigo: str) -> dict | None:
        template = COMPOSICAO_CN if casas[codigo] == "CN" else COMPOSICAO_SF
        raw = await fetch(replace_path(template, codigo=codigo), "composição", codigo)
        return _unwrap_composicao(raw) if raw else None

    detalhes = await asyncio.gather(*(detalhe(c) for c in codigos))
    composicoes = await asyncio.gather(*(composicao(c) for c in codigos))

    falhas = sum(1 for d in detalhes if d is None) + sum(1 for c in composicoes if c is None)
    log.info(
        "Detalhes/composições de %d comissões obtidos (%d indisponíveis)",
        len(codigos), falhas,
    )

    return ExtractionBundle(
        sections={
            "lista":       colegiados,
            "mistas":      mistas,
            "tipos":       tipos,
            "detalhes":    dict(zip(codigos, detalhes)),
            "composicoes": dict(zip(codigos, composicoes)),
        },
        timestamp=timestamp,
    )


PIPELINE = EntityPipeline(
    name="comissoes",
    description="Comissões do Senado e do Congresso com composição (LEGIS)",
    extract=extract_comissoes,
    transform=transform_comissoes,
    load=document_loader("comissoes", "codigo"),
)
