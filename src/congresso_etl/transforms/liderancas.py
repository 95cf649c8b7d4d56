"""Flatten function for Senate leadership position records.

Key quirks:
  - ``codigoParlamentar`` is an integer — stored as string for FK join to senadores.
  - ``codigoPartido`` is optional (None for government leaders who are identified
    by ``codigoPartidoFiliacao`` instead).
  - ``numeroOrdemViceLider`` is optional (None for primary leaders).
"""

from collections import Counter

from ..processor import ExtractionBundle, TransformResult


def flatten_lideranca_record(rec: dict) -> dict:
    """Flatten one leadership record from GET /composicao/lideranca.json."""
    return {
        "codigo":                       str(rec.get("codigo") or ""),
        "casa":                         rec.get("casa"),
        "sigla_tipo_unidade_lideranca": rec.get("siglaTipoUnidadeLideranca"),
        "descricao_tipo_unidade":       rec.get("descricaoTipoUnidadeLideranca"),
        "codigo_parlamentar":           str(rec.get("codigoParlamentar") or ""),
        "nome_parlamentar":             rec.get("nomeParlamentar"),
        "data_designacao":              rec.get("dataDesignacao"),
        "sigla_tipo_lideranca":         rec.get("siglaTipoLideranca"),
        "descricao_tipo_lideranca":     rec.get("descricaoTipoLideranca"),
        "numero_ordem_vice_lider":      rec.get("numeroOrdemViceLider"),
        # Party or bloc leadership only
        "codigo_partido":               str(rec.get("codigoPartido") or ""),
        "sigla_partido":                rec.get("siglaPartido"),
        # Parliamentarian's own party affiliation
        "sigla_partido_filiacao":       rec.get("siglaPartidoFiliacao"),
    }


def transform_liderancas(bundle: ExtractionBundle) -> TransformResult:
    por_codigo: dict[str, dict] = {}
    for raw in bundle.get("lista", []):
        if not raw or not raw.get("codigo"):
            continue
        flat = flatten_lideranca_record(raw)
        por_codigo.setdefault(flat["codigo"], flat)

    records = [por_codigo[c] for c in sorted(por_codigo, key=lambda c: (len(c), c))]
    resumo = {
        "por_casa":          dict(sorted(Counter(r["casa"] or "" for r in records).items())),
        "por_tipo_lideranca": dict(sorted(Counter(r["sigla_tipo_lideranca"] or "" for r in records).items())),
        "por_tipo_unidade":  dict(sorted(Counter(r["sigla_tipo_unidade_lideranca"] or "" for r in records).items())),
        "parlamentares":     len({r["codigo_parlamentar"] for r in records if r["codigo_parlamentar"]}),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
