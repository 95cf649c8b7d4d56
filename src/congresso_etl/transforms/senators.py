"""Flatten functions for senator biographical and mandate data."""

from collections import Counter

from ..processor import ExtractionBundle, TransformResult
from ..utils import unwrap_list


def flatten_senator(raw: dict) -> dict:
    """Flatten one senator record from GET /senador/{code}.json.

    The list endpoint (/senador/lista/legislatura/{leg}) has the same
    ``IdentificacaoParlamentar`` block, so it serves as a fallback when the
    detail request failed; ``DadosBasicosParlamentar`` is then absent.
    """
    ident = raw.get("IdentificacaoParlamentar") or {}
    dados = raw.get("DadosBasicosParlamentar") or {}
    return {
        "senador_id":       str(ident.get("CodigoParlamentar", "")),
        "nome_parlamentar": ident.get("NomeParlamentar"),
        "nome_completo":    ident.get("NomeCompletoParlamentar"),
        "sexo":             ident.get("SexoParlamentar"),
        "foto_url":         ident.get("UrlFotoParlamentar"),
        "pagina_url":       ident.get("UrlPaginaParlamentar"),
        "email":            ident.get("EmailParlamentar"),
        "partido_sigla":    ident.get("SiglaPartidoParlamentar"),
        "estado_sigla":     ident.get("UfParlamentar"),
        "data_nascimento":  dados.get("DataNascimento"),
        "naturalidade":     dados.get("Naturalidade"),
        "uf_naturalidade":  dados.get("UfNaturalidade"),
    }


def flatten_mandate(senador_id: str, mandato: dict) -> dict:
    """Flatten one mandate record from GET /senador/{code}/mandatos.json.

    Each 8-year mandate spans two 4-year legislaturas:
      mandato_inicio = PrimeiraLegislatura.DataInicio
      mandato_fim    = SegundaLegislatura.DataFim
    """
    leg1 = mandato.get("PrimeiraLegislaturaDoMandato") or {}
    leg2 = mandato.get("SegundaLegislaturaDoMandato") or {}
    return {
        "senador_id":             senador_id,
        "mandato_id":             str(mandato.get("CodigoMandato", "")),
        "estado_sigla":           mandato.get("UfParlamentar"),
        "data_inicio":            leg1.get("DataInicio"),
        "data_fim":               leg2.get("DataFim"),
        "legislatura_inicio":     str(leg1.get("NumeroLegislatura", "")),
        "legislatura_fim":        str(leg2.get("NumeroLegislatura", "")),
        "descricao_participacao": mandato.get("DescricaoParticipacao"),
    }


def _codigo(raw: dict) -> str:
    return str((raw.get("IdentificacaoParlamentar") or {}).get("CodigoParlamentar") or "")


def transform_senators(bundle: ExtractionBundle) -> TransformResult:
    detalhes: dict = bundle.get("detalhes", {})
    mandatos: dict = bundle.get("mandatos", {})

    por_codigo: dict[str, dict] = {}
    for item in bundle.get("lista", []):
        codigo = _codigo(item)
        if not codigo or codigo in por_codigo:
            continue
        rec = flatten_senator(detalhes.get(codigo) or item)
        rec["senador_id"] = codigo
        rec["detalhes_disponiveis"] = bool(detalhes.get(codigo))
        rec["mandatos"] = [flatten_mandate(codigo, m) for m in unwrap_list(mandatos.get(codigo))]
        rec["total_mandatos"] = len(rec["mandatos"])
        por_codigo[codigo] = rec

    records = [por_codigo[c] for c in sorted(por_codigo, key=lambda c: (len(c), c))]
    resumo = {
        "por_partido": dict(sorted(Counter(r["partido_sigla"] or "" for r in records).items())),
        "por_uf":      dict(sorted(Counter(r["estado_sigla"] or "" for r in records).items())),
        "por_sexo":    dict(sorted(Counter(r["sexo"] or "" for r in records).items())),
        "sem_detalhes": sum(1 for r in records if not r["detalhes_disponiveis"]),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
