"""Flatten functions for the Senate and Congress governing boards.

Key quirks:
  - Both payloads wrap the board as ``Colegiados/Colegiado``, a list with a
    single entry (or a bare object).
  - The Senate board lists ``Cargo`` as the office name (sometimes a list) and
    the member code under ``Http``; the Congress board uses ``TipoCargo`` and
    ``CodigoParlamentar``.
  - Party and state come packed in ``Bancada`` as "(PARTIDO-UF)".
  - Congress board members are deputies or senators; the house is read from
    the "Deputado"/"Senador" prefix of the name.
"""

import re

from ..processor import ExtractionBundle, TransformResult
from ..utils import dig, unwrap_list

_BANCADA = re.compile(r"\(([^-]+)-([^)]+)\)")

# casa -> (payload root, default code, default name, default sigla)
_MESAS = {
    "SF": ("MesaSenado", "MSF", "Mesa do Senado Federal", "MSF"),
    "CN": ("MesaCongresso", "MCN", "Mesa do Congresso Nacional", "MCN"),
}


def _bancada(texto: str | None) -> tuple[str | None, str | None]:
    match = _BANCADA.search(texto or "")
    if not match:
        return None, None
    return match.group(1).strip(), match.group(2).strip()


def _origem(nome: str | None, casa: str) -> str | None:
    if casa == "SF":
        return "SF"
    nome = nome or ""
    if "Deputad" in nome:
        return "CD"
    if "Senador" in nome:
        return "SF"
    return None


def flatten_cargo(cargo: dict, casa: str) -> dict:
    """Flatten one office of a board; vacant offices keep empty member fields."""
    if casa == "SF":
        descricao = cargo.get("Cargo")
        if isinstance(descricao, list):
            descricao = descricao[0] if descricao else None
        codigo_cargo = cargo.get("NumeroOrdemImpressao")
        codigo_parlamentar = cargo.get("Http")
    else:
        descricao = cargo.get("TipoCargo")
        codigo_cargo = cargo.get("CodigoCargo")
        codigo_parlamentar = cargo.get("CodigoParlamentar")

    nome = cargo.get("NomeParlamentar")
    partido, uf = _bancada(cargo.get("Bancada"))
    origem = _origem(nome, casa) if nome else None
    return {
        "codigo_cargo":       str(codigo_cargo or ""),
        "descricao_cargo":    descricao,
        "codigo_parlamentar": str(codigo_parlamentar or "") if nome else "",
        "nome_parlamentar":   nome,
        "partido":            partido,
        "uf":                 uf,
        "origem":             origem,
        "codigo_deputado_camara": (
            str(cargo.get("CodigoDeputadoNaCamara") or "") if origem == "CD" else None
        ),
    }


def flatten_mesa(payload: dict | None, casa: str) -> dict | None:
    """Flatten the board payload of one house; None when the payload is empty."""
    root, codigo_padrao, nome_padrao, sigla_padrao = _MESAS[casa]
    colegiados = unwrap_list(dig(payload, root, "Colegiados", "Colegiado"))
    if not colegiados:
        return None
    mesa = colegiados[0]

    cargos = [flatten_cargo(c, casa) for c in unwrap_list(dig(mesa, "Cargos", "Cargo")) if c]
    return {
        "codigo":       str(mesa.get("CodigoColegiado") or codigo_padrao),
        "sigla":        mesa.get("SiglaColegiado") or sigla_padrao,
        "nome":         mesa.get("NomeColegiado") or nome_padrao,
        "casa":         casa,
        "cargos":       cargos,
        "total_cargos": len(cargos),
        "cargos_vagos": sum(1 for c in cargos if not c["nome_parlamentar"]),
    }


def transform_mesas(bundle: ExtractionBundle) -> TransformResult:
    records = [
        mesa
        for mesa in (flatten_mesa(item.get("dados"), item["casa"]) for item in bundle.get("lista", []))
        if mesa is not None
    ]

    # member code -> offices held across both boards
    por_parlamentar: dict[str, list[dict]] = {}
    for mesa in records:
        for cargo in mesa["cargos"]:
            if cargo["codigo_parlamentar"]:
                por_parlamentar.setdefault(cargo["codigo_parlamentar"], []).append(
                    {"mesa": mesa["codigo"], "cargo": cargo["descricao_cargo"]}
                )

    resumo = {
        "por_casa":        {m["casa"]: m["total_cargos"] for m in records},
        "cargos_vagos":    sum(m["cargos_vagos"] for m in records),
        "por_parlamentar": dict(sorted(por_parlamentar.items())),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
