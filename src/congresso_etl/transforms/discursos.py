"""Flatten functions for senator speeches (pronunciamentos).

Key quirks:
  - ``Pronunciamentos/Pronunciamento`` is a bare object when a senator made
    a single speech in the window.
  - Dates arrive as ``YYYY-MM-DD``, ``DD/MM/YYYY`` or ``YYYYMMDD`` depending
    on the API version; all are normalised to ISO.
  - The author block lives on the parent ``Parlamentar``, not on each speech,
    so it is passed down when flattening.
"""

from collections import Counter

from dateutil import parser as date_parser

from ..processor import ExtractionBundle, TransformResult
from ..utils import dig, parse_date, unwrap_list


def iso_date(value: str | None) -> str | None:
    """Normalise a LEGIS date string to ``YYYY-MM-DD``; unknown formats pass through."""
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.isoformat()
    try:
        return date_parser.parse(str(value), dayfirst=True).date().isoformat()
    except (ValueError, OverflowError):
        return str(value)


def flatten_discurso(rec: dict, autor: dict) -> dict:
    """Flatten one speech from GET /senador/{code}/discursos.json."""
    sessao = rec.get("SessaoPlenaria") or {}
    return {
        "codigo_pronunciamento": str(rec.get("CodigoPronunciamento") or ""),
        "codigo_parlamentar":    str(autor.get("CodigoParlamentar") or ""),
        "nome_parlamentar":      autor.get("NomeParlamentar"),
        "partido_sigla":         rec.get("SiglaPartidoParlamentarNaData") or autor.get("SiglaPartidoParlamentar"),
        "uf":                    rec.get("UfParlamentarNaData") or autor.get("UfParlamentar"),
        "data":                  iso_date(rec.get("DataPronunciamento")),
        "tipo_uso_palavra":      dig(rec, "TipoUsoPalavra", "Descricao"),
        "sigla_tipo_uso_palavra": dig(rec, "TipoUsoPalavra", "Sigla"),
        "resumo":                rec.get("TextoResumo"),
        "indexacao":             rec.get("Indexacao"),
        "url_texto":             rec.get("UrlTexto"),
        "casa":                  rec.get("SiglaCasaPronunciamento") or sessao.get("SiglaCasaSessao"),
        "codigo_sessao":         str(sessao.get("CodigoSessao") or "") or None,
        "data_sessao":           iso_date(sessao.get("DataSessao")),
    }


def transform_discursos(bundle: ExtractionBundle) -> TransformResult:
    por_codigo: dict[str, dict] = {}
    sem_dados: list[str] = []

    for senador, parlamentar in bundle.get("discursos", {}).items():
        if parlamentar is None:
            sem_dados.append(senador)
            continue
        autor = parlamentar.get("IdentificacaoParlamentar") or {"CodigoParlamentar": senador}
        for raw in unwrap_list(dig(parlamentar, "Pronunciamentos", "Pronunciamento")):
            if not raw or not raw.get("CodigoPronunciamento"):
                continue
            flat = flatten_discurso(raw, autor)
            por_codigo.setdefault(flat["codigo_pronunciamento"], flat)

    records = [por_codigo[c] for c in sorted(por_codigo, key=lambda c: (len(c), c))]
    resumo = {
        "por_tipo":        dict(sorted(Counter(r["sigla_tipo_uso_palavra"] or "" for r in records).items())),
        "por_ano":         dict(sorted(Counter((r["data"] or "")[:4] for r in records).items())),
        "por_parlamentar": dict(sorted(Counter(r["codigo_parlamentar"] for r in records).items())),
        "senadores_sem_dados": sorted(sem_dados, key=lambda c: (len(c), c)),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
