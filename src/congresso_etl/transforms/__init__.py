"""
Transformers for every entity pipeline.

Re-exports every public transform so callers can import from the package
without knowing which submodule a function lives in:

    from congresso_etl.transforms import transform_comissoes
    # equivalent to:
    from congresso_etl.transforms.comissoes import transform_comissoes

Each submodule corresponds to one data domain and contains only pure
functions — no I/O, no API calls, no clock reads.
"""

from .comissoes import (
    classify_tipo,
    flatten_colegiado,
    flatten_composicao,
    flatten_mista,
    transform_comissoes,
)
from .senators import flatten_senator, flatten_mandate, transform_senators
from .liderancas import flatten_lideranca_record, transform_liderancas
from .mesas import flatten_cargo, flatten_mesa, transform_mesas
from .votacoes import flatten_votacao, flatten_voto, transform_votacoes
from .discursos import flatten_discurso, iso_date, transform_discursos

# Chamber of Deputies (Câmara dos Deputados)
from .camara_deputados import flatten_deputado_list, flatten_deputado_detail, transform_deputados

__all__ = [
    "classify_tipo",
    "flatten_colegiado",
    "flatten_composicao",
    "flatten_mista",
    "transform_comissoes",
    "flatten_senator",
    "flatten_mandate",
    "transform_senators",
    "flatten_lideranca_record",
    "transform_liderancas",
    "flatten_cargo",
    "flatten_mesa",
    "transform_mesas",
    "flatten_votacao",
    "flatten_voto",
    "transform_votacoes",
    "flatten_discurso",
    "iso_date",
    "transform_discursos",
    # Chamber
    "flatten_deputado_list",
    "flatten_deputado_detail",
    "transform_deputados",
]
