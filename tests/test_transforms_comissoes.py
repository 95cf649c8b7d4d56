"""Tests for the committee transform: merge, classification, composition and summary."""

import copy
import json

import pytest

from congresso_etl.processor import ExtractionBundle
from congresso_etl.transforms.comissoes import (
    classify_tipo,
    flatten_composicao,
    flatten_tipos,
    merge_comissoes,
    transform_comissoes,
)

COLEGIADOS = [
    {
        "Codigo": "38",
        "Sigla": "CAE",
        "Nome": "Comissão de Assuntos Econômicos",
        "SiglaCasa": "SF",
        "CodigoTipoColegiado": "21",
        "SiglaTipoColegiado": "PERMANENTE",
        "DescricaoTipoColegiado": "Comissão Permanente",
        "DataInicio": "1995-02-01",
        "Publica": "S",
    },
    {
        "Codigo": "2606",
        "Sigla": "CPIPANDEMIA",
        "Nome": "CPI da Pandemia",
        "SiglaCasa": "SF",
        "CodigoTipoColegiado": "122",
        "SiglaTipoColegiado": "CPI",
        "DescricaoTipoColegiado": "Comissão Parlamentar de Inquérito",
        "DataInicio": "2021-04-13",
        "DataFim": "2021-10-26",
        "Publica": "S",
    },
    {
        "Codigo": "1450",
        "Sigla": "CMO",
        "Nome": "Comissão Mista de Planos, Orçamentos Públicos e Fiscalização",
        "SiglaCasa": "CN",
        "SiglaTipoColegiado": "MISTA",
        "DescricaoTipoColegiado": "Comissão Mista",
        "Publica": "S",
    },
]

MISTAS = [
    {
        "CodigoColegiado": "1450",
        "SiglaColegiado": "CMO",
        "NomeColegiado": "Comissão Mista de Planos, Orçamentos Públicos e Fiscalização",
        "QuantidadesMembros": {"Titulares": "40", "SenadoresTitulares": "10", "DeputadosTitulares": "30"},
    },
    {
        "CodigoColegiado": "2700",
        "SiglaColegiado": "MPV 1200/2024",
        "NomeColegiado": "Comissão Mista da Medida Provisória nº 1200, de 2024",
        "QuantidadesMembros": {"Titulares": "24"},
    },
]

COMPOSICAO_CAE = {
    "Membros": {
        "Membro": [
            {
                "IdentificacaoParlamentar": {
                    "CodigoParlamentar": "5012",
                    "NomeParlamentar": "Senadora A",
                    "SiglaPartidoParlamentar": "PT",
                    "UfParlamentar": "BA",
                },
                "DescricaoParticipacao": "Titular",
                "DescricaoCargo": "Presidente",
                "DataDesignacao": "2023-03-01",
            },
            {
                "IdentificacaoParlamentar": {
                    "CodigoParlamentar": "4981",
                    "NomeParlamentar": "Senador B",
                    "SiglaPartidoParlamentar": "PL",
                    "UfParlamentar": "SP",
                },
                "DescricaoParticipacao": "Suplente",
            },
        ]
    }
}

COMPOSICAO_CMO = {
    "MembrosBlocoSF": {
        "PartidoBloco": {
            "MembrosSF": {
                "Membro": {
                    "CodigoParlamentar": "5012",
                    "NomeParlamentar": "Senadora A",
                    "SiglaPartido": "PT",
                    "SiglaUf": "BA",
                    "TipoVaga": "Titular",
                }
            }
        }
    },
    "MembrosBlocoCD": {
        "Membro": [
            {
                "MembrosCD": {
                    "Membro": [
                        {
                            "CodigoParlamentar": "204554",
                            "NomeParlamentar": "Deputado C",
                            "SiglaPartido": "MDB",
                            "SiglaUf": "RS",
                            "TipoVaga": "Titular",
                        }
                    ]
                }
            }
        ]
    },
}

TIPOS = {
    "ListaTiposColegiado": {
        "TiposColegiado": {
            "TipoColegiado": [
                {"Codigo": "21", "Sigla": "PERMANENTE", "Descricao": "Comissão Permanente"},
                {"Codigo": "122", "Sigla": "CPI", "Descricao": "Comissão Parlamentar de Inquérito"},
            ]
        }
    }
}


@pytest.fixture
def bundle() -> ExtractionBundle:
    return ExtractionBundle(
        sections={
            "lista": copy.deepcopy(COLEGIADOS),
            "mistas": copy.deepcopy(MISTAS),
            "tipos": copy.deepcopy(TIPOS),
            "detalhes": {
                "38": {"Finalidade": "Assuntos econômicos e financeiros"},
                "2606": None,
                "1450": None,
                "2700": {"DataInicio": "2024-01-10"},
            },
            "composicoes": {
                "38": copy.deepcopy(COMPOSICAO_CAE),
                "2606": {},
                "1450": copy.deepcopy(COMPOSICAO_CMO),
                "2700": None,
            },
        },
        timestamp="2025-03-01T12:00:00+00:00",
    )


def test_records_are_sorted_and_merged(bundle):
    result = transform_comissoes(bundle)

    assert [r["codigo"] for r in result.records] == ["38", "1450", "2606", "2700"]
    assert result.total == 4

    cmo = next(r for r in result.records if r["codigo"] == "1450")
    assert cmo["fonte"] == "colegiados+mistas"
    assert cmo["qtd_titulares"] == 40
    assert cmo["qtd_deputados_titulares"] == 30

    mpv = next(r for r in result.records if r["codigo"] == "2700")
    assert mpv["fonte"] == "mistas"
    assert mpv["casa"] == "CN"
    assert mpv["data_inicio"] == "2024-01-10"


def test_classification(bundle):
    tipos = {r["codigo"]: r["tipo"] for r in transform_comissoes(bundle).records}
    assert tipos == {"38": "permanente", "2606": "cpi", "1450": "mista", "2700": "mpv"}


def test_composition_and_details(bundle):
    records = {r["codigo"]: r for r in transform_comissoes(bundle).records}

    cae = records["38"]
    assert cae["detalhes_disponiveis"] is True
    assert cae["finalidade"] == "Assuntos econômicos e financeiros"
    assert cae["total_membros"] == 2
    presidente = cae["composicao"][0]
    assert presidente["codigo"] == "5012"
    assert presidente["titular"] is True
    assert presidente["cargo"] == "Presidente"
    assert cae["composicao"][1]["titular"] is False

    # Empty composition keeps the committee with no members
    assert records["2606"]["composicao"] == []
    assert records["2606"]["total_membros"] == 0
    assert records["2606"]["detalhes_disponiveis"] is False

    cmo = records["1450"]
    assert [(m["codigo"], m["casa"]) for m in cmo["composicao"]] == [("5012", "SF"), ("204554", "CD")]


def test_summary(bundle):
    resumo = transform_comissoes(bundle).resumo

    assert resumo["por_tipo"] == {"cpi": 1, "mista": 1, "mpv": 1, "permanente": 1}
    assert resumo["por_casa"] == {"CN": 2, "SF": 2}
    assert resumo["ativas"] == 3
    assert resumo["inativas"] == 1
    assert resumo["total_membros"] == 4
    assert list(resumo["tipos"]) == ["21", "122"]

    senadora = resumo["por_parlamentar"]["5012"]
    assert senadora["nome"] == "Senadora A"
    assert [c["codigo"] for c in senadora["comissoes"]] == ["38", "1450"]
    assert list(resumo["por_parlamentar"]) == ["4981", "5012", "204554"]


def test_transform_is_deterministic_and_leaves_bundle_untouched(bundle):
    before = copy.deepcopy(bundle.sections)

    first = transform_comissoes(bundle)
    second = transform_comissoes(bundle)

    assert json.dumps(first.records, sort_keys=True) == json.dumps(second.records, sort_keys=True)
    assert json.dumps(first.resumo, sort_keys=True) == json.dumps(second.resumo, sort_keys=True)
    assert bundle.sections == before


def test_non_public_committee_is_inactive():
    colegiado = dict(COLEGIADOS[0], Publica="N")
    result = transform_comissoes(ExtractionBundle({"lista": [colegiado]}, "2025-03-01T12:00:00+00:00"))
    assert result.records[0]["ativa"] is False
    assert result.records[0]["composicao"] == []


def test_empty_bundle():
    result = transform_comissoes(ExtractionBundle({}, "2025-03-01T12:00:00+00:00"))
    assert result.records == []
    assert result.resumo["ativas"] == 0
    assert result.resumo["por_parlamentar"] == {}


def test_merge_skips_records_without_code():
    merged = merge_comissoes([{"Sigla": "X"}], [{"SiglaColegiado": "Y"}])
    assert merged == {}


@pytest.mark.parametrize(
    "rec, expected",
    [
        ({"casa": "SF", "sigla_tipo": "SUBCOMISSAO", "descricao_tipo": "Subcomissão Permanente"}, "subcomissao"),
        ({"casa": "SF", "sigla_tipo": "TEMPORARIA", "descricao_tipo": "Comissão Temporária"}, "temporaria"),
        ({"casa": "SF", "sigla_tipo": "CONSELHO", "descricao_tipo": "Conselho de Ética"}, "orgaos"),
        ({"casa": "SF", "sigla": "CPIBETS"}, "cpi"),
        ({"casa": "SF", "sigla": "CAS"}, "permanente"),
        ({"casa": "CN", "sigla_tipo": "CPMI", "descricao_tipo": "Comissão Parlamentar Mista de Inquérito"}, "cpmi"),
        ({"casa": "CN", "descricao_tipo": "Comissão Mista de Veto"}, "veto"),
        ({"casa": "CN", "descricao_tipo": "Comissão Especial"}, "especial"),
        ({"casa": "CN", "sigla": "CPMI8JAN"}, "cpmi"),
        ({"casa": "CN", "sigla": "CMMC"}, "mista"),
    ],
)
def test_classify_tipo(rec, expected):
    assert classify_tipo(rec) == expected


def test_composition_wrapped_in_comissao_object():
    membros = flatten_composicao({"Comissao": COMPOSICAO_CAE})
    assert [m["codigo"] for m in membros] == ["5012", "4981"]
    assert flatten_composicao(None) == []
    assert flatten_composicao({"Comissao": {}}) == []


def test_tipos_fall_back_to_master_list():
    tipos = flatten_tipos(None, COLEGIADOS)
    assert tipos == {
        "21": {"codigo": "21", "sigla": "PERMANENTE", "nome": "Comissão Permanente", "descricao": "Comissão Permanente"},
        "122": {
            "codigo": "122",
            "sigla": "CPI",
            "nome": "Comissão Parlamentar de Inquérito",
            "descricao": "Comissão Parlamentar de Inquérito",
        },
    }
