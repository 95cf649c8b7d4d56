"""Flatten and normalize committee lists, details and compositions.

Input bundle sections (see extract_comissoes):
  lista        — /comissao/lista/colegiados records
  mistas       — /comissao/lista/mistas records
  tipos        — /comissao/lista/tiposColegiado payload
  detalhes     — {codigo: detail dict | None}
  composicoes  — {codigo: composition dict | None}
"""

import unicodedata
from collections import Counter

from ..processor import ExtractionBundle, TransformResult
from ..utils import dig, unwrap_list

TIPOS_SF = ("permanente", "cpi", "temporaria", "subcomissao", "orgaos")
TIPOS_CN = ("mista", "cpmi", "veto", "mpv", "especial", "permanente")


def _int(val: str | None) -> int | None:
    """Safely convert a string to int; return None on failure."""
    try:
        return int(val) if val else None
    except (ValueError, TypeError):
        return None


def _plain(text: str | None) -> str:
    """Lowercase and strip accents so 'Inquérito' matches 'inquerito'."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def _sort_key(codigo: str) -> tuple:
    return (0, int(codigo), "") if codigo.isdigit() else (1, 0, codigo)


# ---------------------------------------------------------------------------
# Flatten helpers
# ---------------------------------------------------------------------------

def flatten_colegiado(c: dict) -> dict:
    """Flatten one record from GET /comissao/lista/colegiados.

    Fields are flat PascalCase — no nested tipo sub-object.
    The ``Publica`` flag is ``'S'``/``'N'``; converted to bool.
    The three mistas-only member-count fields are always None for this source
    and may be augmented later by ``flatten_mista``.
    """
    return {
        "codigo":                    str(c.get("Codigo") or ""),
        "sigla":                     c.get("Sigla"),
        "nome":                      c.get("Nome"),
        "casa":                      c.get("SiglaCasa") or "SF",
        "sigla_tipo":                c.get("SiglaTipoColegiado"),
        "descricao_tipo":            c.get("DescricaoTipoColegiado"),
        "finalidade":                c.get("Finalidade"),
        "data_inicio":               c.get("DataInicio"),
        "data_fim":                  c.get("DataFim") or c.get("DataExtincao"),
        "publica":                   c.get("Publica") == "S" if c.get("Publica") else None,
        "qtd_titulares":             None,
        "qtd_senadores_titulares":   None,
        "qtd_deputados_titulares":   None,
        "fonte":                     "colegiados",
    }


def flatten_mista(c: dict) -> dict:
    """Flatten one record from GET /comissao/lista/mistas.

    Uses ``CodigoColegiado`` / ``NomeColegiado`` / ``SiglaColegiado`` keys
    (not ``Codigo`` / ``Nome`` / ``Sigla`` as in colegiados).
    Member counts are strings in the API — cast to int.
    """
    qtd = c.get("QuantidadesMembros") or {}
    return {
        "codigo":                    str(c.get("CodigoColegiado") or ""),
        "sigla":                     c.get("SiglaColegiado"),
        "nome":                      c.get("NomeColegiado"),
        "casa":                      "CN",
        "sigla_tipo":                "MISTA",
        "descricao_tipo":            dig(c, "TipoColegiado", "TipoColegiado") or "Comissão Mista",
        "finalidade":                c.get("Finalidade"),
        "data_inicio":               c.get("DataInicio"),
        "data_fim":                  None,
        "publica":                   None,
        "qtd_titulares":             _int(qtd.get("Titulares")),
        "qtd_senadores_titulares":   _int(qtd.get("SenadoresTitulares")),
        "qtd_deputados_titulares":   _int(qtd.get("DeputadosTitulares")),
        "fonte":                     "mistas",
    }


def flatten_membro(m: dict, casa: str | None = None) -> dict:
    """Flatten one member from any of the composition structures.

    Senate compositions nest the identity under ``IdentificacaoParlamentar``;
    joint-committee blocks carry it flat on the member.
    """
    ident = m.get("IdentificacaoParlamentar") or {}
    participacao = m.get("DescricaoParticipacao") or m.get("TipoVaga") or ""
    return {
        "codigo":          str(ident.get("CodigoParlamentar") or m.get("CodigoParlamentar") or ""),
        "nome":            ident.get("NomeParlamentar") or m.get("NomeParlamentar") or "",
        "nome_completo":   ident.get("NomeCompletoParlamentar"),
        "partido":         ident.get("SiglaPartidoParlamentar") or m.get("SiglaPartido") or m.get("Partido"),
        "uf":              ident.get("UfParlamentar") or m.get("SiglaUf") or m.get("UfParlamentar"),
        "casa":            casa,
        "participacao":    participacao,
        "titular":         "titular" in participacao.lower(),
        "cargo":           m.get("DescricaoCargo") or m.get("TipoCargo") or m.get("ProprietarioVaga"),
        "data_designacao": m.get("DataDesignacao") or m.get("DataInicioMembroVaga"),
        "data_fim":        m.get("DataFim"),
        "motivo_fim":      m.get("DescricaoMotivo"),
    }


def flatten_composicao(composicao: dict | None) -> list[dict]:
    """Return the member list of a composition payload; [] when absent.

    Handles three shapes:
      Membros/Membro
      MembrosBlocoSF/PartidoBloco/MembrosSF/Membro
      MembrosBlocoCD/Membro/MembrosCD/Membro
    """
    if not composicao:
        return []

    if dig(composicao, "Membros", "Membro"):
        return [flatten_membro(m) for m in unwrap_list(composicao["Membros"]["Membro"])]

    membros: list[dict] = []
    for bloco in unwrap_list(dig(composicao, "MembrosBlocoSF", "PartidoBloco")):
        membros += [flatten_membro(m, "SF") for m in unwrap_list(dig(bloco, "MembrosSF", "Membro"))]
    for bloco in unwrap_list(dig(composicao, "MembrosBlocoCD", "Membro")):
        membros += [flatten_membro(m, "CD") for m in unwrap_list(dig(bloco, "MembrosCD", "Membro"))]
    if membros:
        return membros

    # Some responses wrap everything in a Comissao object
    if isinstance(composicao.get("Comissao"), dict):
        return flatten_composicao(composicao["Comissao"])
    return []


def flatten_tipos(payload: dict | None, colegiados: list[dict]) -> dict[str, dict]:
    """Reference committee types keyed by type code."""
    tipos: dict[str, dict] = {}
    raw = dig(payload, "ListaTiposColegiado", "TiposColegiado", "TipoColegiado") or dig(
        payload, "ListaTipoColegiado", "TiposColegiado", "TipoColegiado"
    )
    for t in unwrap_list(raw):
        codigo = str(t.get("Codigo") or "")
        if codigo and t.get("Sigla"):
            tipos[codigo] = {
                "codigo":    codigo,
                "sigla":     t.get("Sigla"),
                "nome":      t.get("Nome") or t.get("Descricao") or t.get("Sigla"),
                "descricao": t.get("Descricao"),
            }
    # Fall back to the types seen on the committee list itself
    for c in colegiados:
        codigo = str(c.get("CodigoTipoColegiado") or "")
        if codigo and codigo not in tipos and c.get("SiglaTipoColegiado"):
            tipos[codigo] = {
                "codigo":    codigo,
                "sigla":     c.get("SiglaTipoColegiado"),
                "nome":      c.get("DescricaoTipoColegiado") or c.get("SiglaTipoColegiado"),
                "descricao": c.get("DescricaoTipoColegiado"),
            }
    return dict(sorted(tipos.items(), key=lambda kv: _sort_key(kv[0])))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_tipo(rec: dict) -> str:
    """Map a committee to one of TIPOS_SF (Senate) or TIPOS_CN (Congress)."""
    texto = _plain(" ".join(filter(None, [rec.get("sigla_tipo"), rec.get("descricao_tipo")])))
    sigla = _plain(rec.get("sigla"))

    if rec.get("casa") == "CN":
        if texto:
            if "cpmi" in texto or "cpi" in texto or "inquerito" in texto:
                return "cpmi"
            if "veto" in texto:
                return "veto"
            if "mpv" in texto or "medida provisoria" in texto:
                return "mpv"
            if "especial" in texto:
                return "especial"
            if "perm" in texto:
                return "permanente"
        if sigla.startswith(("cpmi", "cpi")):
            return "cpmi"
        if "veto" in sigla:
            return "veto"
        if "mpv" in sigla:
            return "mpv"
        return "mista"

    if texto:
        if "cpi" in texto or "inquerito" in texto:
            return "cpi"
        if "subcomissao" in texto or "sub" in texto:
            return "subcomissao"
        if "temp" in texto:
            return "temporaria"
        if any(k in texto for k in ("orgao", "conselho", "mesa", "cons")):
            return "orgaos"
        return "permanente"

    if sigla.startswith(("cpi", "cpmi")):
        return "cpi"
    if "sub" in sigla:
        return "subcomissao"
    if sigla.startswith(("ce", "ct")):
        return "temporaria"
    if sigla in ("cdir", "mesa") or sigla.startswith(("cd", "co")):
        return "orgaos"
    return "permanente"


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------

def merge_comissoes(colegiados: list[dict], mistas: list[dict]) -> dict[str, dict]:
    """One record per committee code: colegiados augmented by mistas."""
    comissoes: dict[str, dict] = {}
    for c in colegiados:
        flat = flatten_colegiado(c)
        if flat["codigo"]:
            comissoes[flat["codigo"]] = flat

    for c in mistas:
        flat = flatten_mista(c)
        codigo = flat["codigo"]
        if not codigo:
            continue
        if codigo in comissoes:
            # Augment existing colegiados record with member-count data
            comissoes[codigo]["qtd_titulares"]           = flat["qtd_titulares"]
            comissoes[codigo]["qtd_senadores_titulares"] = flat["qtd_senadores_titulares"]
            comissoes[codigo]["qtd_deputados_titulares"] = flat["qtd_deputados_titulares"]
            comissoes[codigo]["fonte"] = "colegiados+mistas"
        else:
            comissoes[codigo] = flat
    return comissoes


def _por_parlamentar(records: list[dict]) -> dict[str, dict]:
    indice: dict[str, dict] = {}
    for rec in records:
        for membro in rec["composicao"]:
            codigo = membro["codigo"]
            if not codigo:
                continue
            entrada = indice.setdefault(codigo, {
                "nome":     membro["nome"],
                "partido":  membro["partido"] or "",
                "uf":       membro["uf"] or "",
                "comissoes": [],
            })
            entrada["comissoes"].append({
                "codigo":  rec["codigo"],
                "sigla":   rec["sigla"],
                "nome":    rec["nome"],
                "casa":    rec["casa"],
                "tipo":    rec["tipo"],
                "cargo":   membro["cargo"] or "",
                "titular": membro["titular"],
            })
    return dict(sorted(indice.items(), key=lambda kv: _sort_key(kv[0])))


def transform_comissoes(bundle: ExtractionBundle) -> TransformResult:
    colegiados = bundle.get("lista", [])
    detalhes: dict = bundle.get("detalhes", {})
    composicoes: dict = bundle.get("composicoes", {})

    comissoes = merge_comissoes(colegiados, bundle.get("mistas", []))

    records: list[dict] = []
    for codigo in sorted(comissoes, key=_sort_key):
        rec = comissoes[codigo]
        detalhe = detalhes.get(codigo) or {}

        rec["sigla"] = rec["sigla"] or detalhe.get("Sigla") or detalhe.get("SiglaColegiado") or ""
        rec["nome"] = rec["nome"] or detalhe.get("Nome") or detalhe.get("NomeColegiado") or ""
        rec["finalidade"] = rec["finalidade"] or detalhe.get("Finalidade")
        rec["data_inicio"] = rec["data_inicio"] or detalhe.get("DataCriacao") or detalhe.get("DataInicio")
        rec["data_fim"] = rec["data_fim"] or detalhe.get("DataExtincao") or detalhe.get("DataFim")
        rec["tipo"] = classify_tipo(rec)
        rec["ativa"] = rec["publica"] is not False and not rec["data_fim"]
        rec["detalhes_disponiveis"] = bool(detalhe)

        membros = flatten_composicao(composicoes.get(codigo))
        rec["composicao"] = membros
        rec["total_membros"] = len(membros)
        records.append(rec)

    ativas = sum(1 for r in records if r["ativa"])
    resumo = {
        "por_tipo":        dict(sorted(Counter(r["tipo"] for r in records).items())),
        "por_casa":        dict(sorted(Counter(r["casa"] for r in records).items())),
        "ativas":          ativas,
        "inativas":        len(records) - ativas,
        "total_membros":   sum(r["total_membros"] for r in records),
        "tipos":           flatten_tipos(bundle.get("tipos"), colegiados),
        "por_parlamentar": _por_parlamentar(records),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
