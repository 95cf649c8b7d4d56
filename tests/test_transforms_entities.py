"""Tests for the senator, leadership, board, vote, speech and deputy transforms."""

from congresso_etl.processor import ExtractionBundle
from congresso_etl.transforms import (
    iso_date,
    transform_deputados,
    transform_discursos,
    transform_liderancas,
    transform_mesas,
    transform_senators,
    transform_votacoes,
)

TS = "2025-03-01T12:00:00+00:00"


# ---------------------------------------------------------------------------
# Senators
# ---------------------------------------------------------------------------

def _senador(codigo: str, nome: str, partido: str, uf: str, sexo: str = "Masculino") -> dict:
    return {
        "IdentificacaoParlamentar": {
            "CodigoParlamentar": codigo,
            "NomeParlamentar": nome,
            "SiglaPartidoParlamentar": partido,
            "UfParlamentar": uf,
            "SexoParlamentar": sexo,
        }
    }


def test_senators_merge_detail_and_mandates():
    detalhe = _senador("5012", "Senadora A", "PT", "BA", "Feminino")
    detalhe["DadosBasicosParlamentar"] = {"DataNascimento": "1960-01-01", "Naturalidade": "Salvador"}
    bundle = ExtractionBundle(
        {
            "lista": [
                _senador("5012", "Senadora A", "PT", "BA", "Feminino"),
                _senador("945", "Senador B", "PL", "SP"),
                _senador("945", "Senador B", "PL", "SP"),
            ],
            "detalhes": {"5012": detalhe, "945": None},
            "mandatos": {
                "5012": [
                    {
                        "CodigoMandato": "600",
                        "UfParlamentar": "BA",
                        "PrimeiraLegislaturaDoMandato": {"NumeroLegislatura": "57", "DataInicio": "2023-02-01"},
                        "SegundaLegislaturaDoMandato": {"NumeroLegislatura": "58", "DataFim": "2031-01-31"},
                    }
                ],
                "945": None,
            },
        },
        TS,
    )

    result = transform_senators(bundle)

    assert [r["senador_id"] for r in result.records] == ["945", "5012"]
    b, a = result.records
    assert a["naturalidade"] == "Salvador"
    assert a["detalhes_disponiveis"] is True
    assert a["mandatos"][0]["data_inicio"] == "2023-02-01"
    assert a["mandatos"][0]["legislatura_fim"] == "58"
    assert a["total_mandatos"] == 1
    # list entry is the fallback when detail failed
    assert b["nome_parlamentar"] == "Senador B"
    assert b["detalhes_disponiveis"] is False
    assert b["mandatos"] == []
    assert result.resumo == {
        "por_partido": {"PL": 1, "PT": 1},
        "por_uf": {"BA": 1, "SP": 1},
        "por_sexo": {"Feminino": 1, "Masculino": 1},
        "sem_detalhes": 1,
    }


# ---------------------------------------------------------------------------
# Leaderships
# ---------------------------------------------------------------------------

def test_liderancas_dedupe_and_string_codes():
    lista = [
        {"codigo": 12, "casa": "SF", "codigoParlamentar": 5012, "siglaTipoLideranca": "L",
         "siglaTipoUnidadeLideranca": "G"},
        {"codigo": 12, "casa": "SF", "codigoParlamentar": 5012, "siglaTipoLideranca": "L"},
        {"codigo": 3, "casa": "CN", "codigoParlamentar": 945, "siglaTipoLideranca": "V",
         "siglaTipoUnidadeLideranca": "P", "codigoPartido": 36, "numeroOrdemViceLider": 1},
        {"codigo": None},
    ]

    result = transform_liderancas(ExtractionBundle({"lista": lista}, TS))

    assert [r["codigo"] for r in result.records] == ["3", "12"]
    vice = result.records[0]
    assert vice["codigo_parlamentar"] == "945"
    assert vice["codigo_partido"] == "36"
    assert vice["numero_ordem_vice_lider"] == 1
    assert result.records[1]["codigo_partido"] == ""
    assert result.resumo["por_casa"] == {"CN": 1, "SF": 1}
    assert result.resumo["por_tipo_lideranca"] == {"L": 1, "V": 1}
    assert result.resumo["parlamentares"] == 2


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------

def test_votacoes_dedupe_boundary_sessions_and_nest_votes():
    sessao = {
        "codigoSessaoVotacao": 7001,
        "dataSessao": "2023-03-31T14:00:00",
        "resultadoVotacao": "A",
        "votacaoSecreta": "N",
        "informeLegislativo": {"texto": "Aprovado"},
        "votos": [
            {"codigoParlamentar": 945, "siglaVotoParlamentar": "Não"},
            {"codigoParlamentar": 5012, "siglaVotoParlamentar": "Sim"},
        ],
    }
    secreta = {"codigoSessaoVotacao": 7002, "dataSessao": "2024-05-02", "votacaoSecreta": "S", "votos": []}
    bundle = ExtractionBundle(
        {"lista": [sessao, dict(sessao), secreta, {"sem": "codigo"}]},
        TS,
    )

    result = transform_votacoes(bundle)

    assert [r["codigo_sessao_votacao"] for r in result.records] == ["7001", "7002"]
    first = result.records[0]
    assert first["informe_texto"] == "Aprovado"
    assert [v["codigo_parlamentar"] for v in first["votos"]] == ["5012", "945"]
    assert first["total_votos"] == 2
    assert result.resumo == {
        "por_resultado": {"": 1, "A": 1},
        "por_ano": {"2023": 1, "2024": 1},
        "secretas": 1,
        "total_votos": 2,
    }


# ---------------------------------------------------------------------------
# Deputies
# ---------------------------------------------------------------------------

def test_deputados_merge_detail_or_null_fields():
    lista = [
        {"id": 204554, "nome": "Deputado C", "siglaPartido": "MDB", "siglaUf": "RS", "idLegislatura": 57},
        {"id": 74646, "nome": "Deputada D", "siglaPartido": "PSOL", "siglaUf": "SP"},
        {"id": 204554, "nome": "Deputado C"},
    ]
    detalhes = {
        "204554": {
            "nomeCivil": "Fulano de Tal",
            "sexo": "M",
            "ultimoStatus": {"situacao": "Exercício", "gabinete": {"telefone": "3215-5000"}},
        },
        "74646": None,
    }

    result = transform_deputados(ExtractionBundle({"lista": lista, "legislatura": 57, "detalhes": detalhes}, TS))

    assert [r["deputado_id"] for r in result.records] == ["74646", "204554"]
    sem_detalhe, com_detalhe = result.records
    assert com_detalhe["nome_civil"] == "Fulano de Tal"
    assert com_detalhe["telefone_gabinete"] == "3215-5000"
    assert com_detalhe["detalhes_disponiveis"] is True
    assert sem_detalhe["id_legislatura"] == 57
    assert sem_detalhe["nome_civil"] is None
    assert sem_detalhe["situacao"] is None
    assert sem_detalhe["detalhes_disponiveis"] is False
    assert result.resumo["sem_detalhes"] == 1
    assert result.resumo["por_sexo"] == {"": 1, "M": 1}


# ---------------------------------------------------------------------------
# Governing boards
# ---------------------------------------------------------------------------

def test_mesas_flatten_both_boards_and_index_members():
    senado = {
        "MesaSenado": {"Colegiados": {"Colegiado": [{
            "CodigoColegiado": 1998,
            "SiglaColegiado": "MSF",
            "NomeColegiado": "Mesa do Senado Federal",
            "Cargos": {"Cargo": [
                {"Cargo": ["Presidente"], "NumeroOrdemImpressao": 1, "NomeParlamentar": "Senador A",
                 "Bancada": "(PSD-MG)", "Http": 5012},
                {"Cargo": "4º Suplente", "NumeroOrdemImpressao": 11},
            ]},
        }]}}
    }
    congresso = {
        "MesaCongresso": {"Colegiados": {"Colegiado": {
            "Cargos": {"Cargo": {
                "CodigoCargo": 3, "TipoCargo": "1º Vice-Presidente", "NomeParlamentar": "Deputado B",
                "CodigoParlamentar": 77, "Bancada": "(PL-SP)", "CodigoDeputadoNaCamara": 204554,
            }},
        }}}
    }
    bundle = ExtractionBundle(
        {"lista": [{"casa": "SF", "dados": senado}, {"casa": "CN", "dados": congresso}]}, TS,
    )

    result = transform_mesas(bundle)

    assert [m["codigo"] for m in result.records] == ["1998", "MCN"]
    sf, cn = result.records
    assert sf["cargos"][0] == {
        "codigo_cargo": "1",
        "descricao_cargo": "Presidente",
        "codigo_parlamentar": "5012",
        "nome_parlamentar": "Senador A",
        "partido": "PSD",
        "uf": "MG",
        "origem": "SF",
        "codigo_deputado_camara": None,
    }
    assert sf["cargos_vagos"] == 1
    assert sf["cargos"][1]["codigo_parlamentar"] == ""
    assert cn["nome"] == "Mesa do Congresso Nacional"
    assert cn["cargos"][0]["origem"] == "CD"
    assert cn["cargos"][0]["codigo_deputado_camara"] == "204554"
    assert result.resumo == {
        "por_casa": {"SF": 2, "CN": 1},
        "cargos_vagos": 1,
        "por_parlamentar": {
            "5012": [{"mesa": "1998", "cargo": "Presidente"}],
            "77": [{"mesa": "MCN", "cargo": "1º Vice-Presidente"}],
        },
    }


def test_mesas_empty_payload_yields_no_record():
    bundle = ExtractionBundle({"lista": [{"casa": "SF", "dados": {}}, {"casa": "CN", "dados": None}]}, TS)

    result = transform_mesas(bundle)

    assert result.records == []
    assert result.total == 0


# ---------------------------------------------------------------------------
# Speeches
# ---------------------------------------------------------------------------

def test_iso_date_accepts_legis_formats():
    assert iso_date("2023-03-08") == "2023-03-08"
    assert iso_date("2023-03-08T14:00:00") == "2023-03-08"
    assert iso_date("08/03/2023") == "2023-03-08"
    assert iso_date("20230308") == "2023-03-08"
    assert iso_date("") is None
    assert iso_date("sem data") == "sem data"


def test_discursos_flatten_dedupe_and_report_missing_senators():
    pronunciamento = {
        "CodigoPronunciamento": 500123,
        "DataPronunciamento": "2023-03-08",
        "TipoUsoPalavra": {"Sigla": "DIS", "Descricao": "Discurso"},
        "TextoResumo": "Defende a reforma.",
        "UrlTexto": "https://www25.senado.leg.br/web/atividade/pronunciamentos/-/p/texto/500123",
        "SessaoPlenaria": {"CodigoSessao": 9001, "DataSessao": "08/03/2023", "SiglaCasaSessao": "SF"},
    }
    bundle = ExtractionBundle(
        {
            "lista": [],
            "discursos": {
                "5012": {
                    "IdentificacaoParlamentar": {
                        "CodigoParlamentar": "5012", "NomeParlamentar": "Senador A",
                        "SiglaPartidoParlamentar": "PSD", "UfParlamentar": "MG",
                    },
                    "Pronunciamentos": {"Pronunciamento": [pronunciamento, dict(pronunciamento), {"sem": "codigo"}]},
                },
                # Single speech arrives as a bare object
                "945": {"Pronunciamentos": {"Pronunciamento": {
                    "CodigoPronunciamento": 77, "DataPronunciamento": "20240202",
                    "TipoUsoPalavra": {"Sigla": "APT"},
                }}},
                "81": {},
                "13": None,
            },
        },
        TS,
    )

    result = transform_discursos(bundle)

    assert [r["codigo_pronunciamento"] for r in result.records] == ["77", "500123"]
    aparte, discurso = result.records
    assert aparte["codigo_parlamentar"] == "945"
    assert aparte["data"] == "2024-02-02"
    assert discurso["nome_parlamentar"] == "Senador A"
    assert discurso["partido_sigla"] == "PSD"
    assert discurso["casa"] == "SF"
    assert discurso["codigo_sessao"] == "9001"
    assert discurso["data_sessao"] == "2023-03-08"
    assert result.resumo == {
        "por_tipo": {"APT": 1, "DIS": 1},
        "por_ano": {"2023": 1, "2024": 1},
        "por_parlamentar": {"5012": 1, "945": 1},
        "senadores_sem_dados": ["13"],
    }
