"""Flatten functions for Chamber deputy list and biographical data.

Two-stage extraction:
  1. flatten_deputado_list()   — from GET /deputados?idLegislatura={n}
  2. flatten_deputado_detail() — from GET /deputados/{id}

The list entry says which legislature the deputy belongs to; the detail
adds biographical data (nomeCivil, sexo, dataNascimento, etc.) from the
``ultimoStatus`` sub-object. A deputy whose detail request failed keeps the
list fields only.
"""

from collections import Counter

from ..processor import ExtractionBundle, TransformResult


def flatten_deputado_list(rec: dict, legislatura_id: int) -> dict:
    """Flatten one record from GET /deputados?idLegislatura={n}."""
    return {
        "deputado_id":    str(rec.get("id") or ""),
        "nome":           rec.get("nome"),
        "sigla_partido":  rec.get("siglaPartido"),
        "sigla_uf":       rec.get("siglaUf"),
        "id_legislatura": int(rec.get("idLegislatura") or legislatura_id),
        "url_foto":       rec.get("urlFoto"),
        "email":          rec.get("email"),
    }


def flatten_deputado_detail(rec: dict) -> dict:
    """Flatten one record from GET /deputados/{id}.

    Uses the ``ultimoStatus`` sub-object for current-status fields (party,
    state, situation). Falls back to top-level fields for biography.
    """
    status = rec.get("ultimoStatus") or {}
    gabinete = status.get("gabinete") or {}
    return {
        "nome_civil":           rec.get("nomeCivil"),
        "nome_eleitoral":       status.get("nomeEleitoral"),
        "situacao":             status.get("situacao"),
        "condicao_eleitoral":   status.get("condicaoEleitoral"),
        "data_status":          status.get("data"),
        "sexo":                 rec.get("sexo"),
        "data_nascimento":      rec.get("dataNascimento"),
        "uf_nascimento":        rec.get("ufNascimento"),
        "municipio_nascimento": rec.get("municipioNascimento"),
        "escolaridade":         rec.get("escolaridade"),
        "telefone_gabinete":    gabinete.get("telefone"),
    }


_DETAIL_FIELDS = tuple(flatten_deputado_detail({}).keys())


def transform_deputados(bundle: ExtractionBundle) -> TransformResult:
    legislatura_id = int(bundle.get("legislatura", 0))
    detalhes: dict = bundle.get("detalhes", {})

    por_id: dict[str, dict] = {}
    for raw in bundle.get("lista", []):
        rec = flatten_deputado_list(raw, legislatura_id)
        did = rec["deputado_id"]
        if not did or did in por_id:
            continue
        detalhe = detalhes.get(did)
        if detalhe:
            rec.update(flatten_deputado_detail(detalhe))
        else:
            rec.update(dict.fromkeys(_DETAIL_FIELDS))
        rec["detalhes_disponiveis"] = bool(detalhe)
        por_id[did] = rec

    records = [por_id[d] for d in sorted(por_id, key=lambda d: (len(d), d))]
    resumo = {
        "por_partido":  dict(sorted(Counter(r["sigla_partido"] or "" for r in records).items())),
        "por_uf":       dict(sorted(Counter(r["sigla_uf"] or "" for r in records).items())),
        "por_sexo":     dict(sorted(Counter(r["sexo"] or "" for r in records).items())),
        "sem_detalhes": sum(1 for r in records if not r["detalhes_disponiveis"]),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
