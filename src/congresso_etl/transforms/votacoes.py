"""Flatten functions for voting session and individual senator vote data."""

from collections import Counter

from ..processor import ExtractionBundle, TransformResult


def flatten_votacao(v: dict) -> dict:
    """Extract session-level fields from one voting session object.

    The nested ``informeLegislativo`` sub-object is collapsed to a single
    ``informe_texto`` string. The ``votos`` array is intentionally discarded
    here — it is exploded separately via ``flatten_voto``.
    """
    inf = v.get("informeLegislativo") or {}
    return {
        "codigo_sessao_votacao":     str(v.get("codigoSessaoVotacao") or ""),
        "codigo_votacao_sve":        v.get("codigoVotacaoSve"),
        "codigo_sessao":             v.get("codigoSessao"),
        "codigo_sessao_legislativa": v.get("codigoSessaoLegislativa"),
        "sigla_tipo_sessao":         v.get("siglaTipoSessao"),
        "numero_sessao":             v.get("numeroSessao"),
        "data_sessao":               v.get("dataSessao"),
        "id_processo":               v.get("idProcesso"),
        "codigo_materia":            v.get("codigoMateria"),
        "identificacao":             v.get("identificacao"),
        "sigla_materia":             v.get("sigla"),
        "numero_materia":            str(v.get("numero") or ""),
        "ano_materia":               v.get("ano"),
        "ementa":                    v.get("ementa"),
        "votacao_secreta":           v.get("votacaoSecreta"),
        "descricao_votacao":         v.get("descricaoVotacao"),
        "resultado_votacao":         v.get("resultadoVotacao"),
        "total_votos_sim":           v.get("totalVotosSim"),
        "total_votos_nao":           v.get("totalVotosNao"),
        "total_votos_abstencao":     v.get("totalVotosAbstencao"),
        "informe_texto":             inf.get("texto"),
    }


def flatten_voto(voto: dict) -> dict:
    """Extract one senator's vote from the nested ``votos`` array."""
    return {
        "codigo_parlamentar": str(voto.get("codigoParlamentar") or ""),
        "nome_parlamentar":   voto.get("nomeParlamentar"),
        "sigla_partido":      voto.get("siglaPartidoParlamentar"),
        "sigla_uf":           voto.get("siglaUFParlamentar"),
        "sigla_voto":         voto.get("siglaVotoParlamentar"),
        "descricao_voto":     voto.get("descricaoVotoParlamentar"),
    }


def transform_votacoes(bundle: ExtractionBundle) -> TransformResult:
    por_codigo: dict[str, dict] = {}
    for session in bundle.get("lista", []):
        if not isinstance(session, dict) or session.get("codigoSessaoVotacao") is None:
            continue
        rec = flatten_votacao(session)
        # Adjacent monthly windows can both return a session on the boundary day
        if rec["codigo_sessao_votacao"] in por_codigo:
            continue
        votos = sorted(
            (flatten_voto(v) for v in session.get("votos") or []),
            key=lambda v: v["codigo_parlamentar"],
        )
        rec["votos"] = votos
        rec["total_votos"] = len(votos)
        por_codigo[rec["codigo_sessao_votacao"]] = rec

    records = [por_codigo[c] for c in sorted(por_codigo, key=lambda c: (len(c), c))]
    resumo = {
        "por_resultado":   dict(sorted(Counter(r["resultado_votacao"] or "" for r in records).items())),
        "por_ano":         dict(sorted(Counter((r["data_sessao"] or "")[:4] for r in records).items())),
        "secretas":        sum(1 for r in records if r["votacao_secreta"] in ("S", True)),
        "total_votos":     sum(r["total_votos"] for r in records),
    }
    return TransformResult(records=records, total=len(records), resumo=resumo)
