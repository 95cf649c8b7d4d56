"""
Legislative period resolution.

Maps a calendar date to the legislature (4-year term) in force, using a
reference list shaped like the Senate ``/legislatura`` payload:

    ListaLegislatura/Legislaturas/Legislatura
        NumeroLegislatura, DataInicio, DataFim, DataEleicao
        SessoesLegislativas/SessaoLegislativa
            NumeroSessaoLegislativa, TipoSessaoLegislativa, DataInicio,
            DataFim, DataInicioIntervalo, DataFimIntervalo

A copy of that list ships with the package (data/ListaLegislatura.xml) so
resolution never needs the network.

Usage:
    resolver = LegislaturaResolver.default()
    leg = resolver.resolve_current()             # today
    leg = resolver.resolve_current(date(2020, 5, 1))
    inicio, fim = resolver.resolve_period_window(57)
"""

import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .config import LEGISLATURAS_FILE
from .utils import parse_date, unwrap_list

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessaoLegislativa:
    numero: int
    tipo: str
    data_inicio: date
    data_fim: date
    data_inicio_intervalo: date | None = None
    data_fim_intervalo: date | None = None

    def contem(self, d: date) -> bool:
        return self.data_inicio <= d <= self.data_fim

    def em_intervalo(self, d: date) -> bool:
        if self.data_inicio_intervalo is None or self.data_fim_intervalo is None:
            return False
        return self.data_inicio_intervalo <= d <= self.data_fim_intervalo


@dataclass(frozen=True)
class Legislatura:
    numero: int
    data_inicio: date
    data_fim: date
    data_eleicao: date | None = None
    sessoes: tuple[SessaoLegislativa, ...] = ()

    def contem(self, d: date) -> bool:
        return self.data_inicio <= d <= self.data_fim

    def sessao_em(self, d: date) -> SessaoLegislativa | None:
        """Return the legislative session that contains ``d``, if any."""
        return next((s for s in self.sessoes if s.contem(d)), None)

    def em_recesso(self, d: date) -> bool:
        """True when ``d`` is inside the term but outside working session time.

        Covers both the gap between sessions and the mid-year interval of a
        session.
        """
        if not self.contem(d) or not self.sessoes:
            return False
        sessao = self.sessao_em(d)
        return sessao is None or sessao.em_intervalo(d)

    def as_dict(self) -> dict:
        return {
            "numero":      self.numero,
            "data_inicio": self.data_inicio.isoformat(),
            "data_fim":    self.data_fim.isoformat(),
        }


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _required_date(raw: dict, key: str) -> date:
    value = parse_date(raw.get(key))
    if value is None:
        raise ValueError(f"Campo {key} ausente ou inválido: {raw.get(key)!r}")
    return value


def _parse_sessao(raw: dict) -> SessaoLegislativa:
    return SessaoLegislativa(
        numero=int(raw["NumeroSessaoLegislativa"]),
        tipo=raw.get("TipoSessaoLegislativa") or "O",
        data_inicio=_required_date(raw, "DataInicio"),
        data_fim=_required_date(raw, "DataFim"),
        data_inicio_intervalo=parse_date(raw.get("DataInicioIntervalo")),
        data_fim_intervalo=parse_date(raw.get("DataFimIntervalo")),
    )


def parse_legislatura(raw: dict) -> Legislatura:
    """Build a Legislatura from one ``Legislatura`` object of the payload."""
    sessoes_raw = unwrap_list((raw.get("SessoesLegislativas") or {}).get("SessaoLegislativa"))
    sessoes = sorted((_parse_sessao(s) for s in sessoes_raw), key=lambda s: s.numero)
    return Legislatura(
        numero=int(raw["NumeroLegislatura"]),
        data_inicio=_required_date(raw, "DataInicio"),
        data_fim=_required_date(raw, "DataFim"),
        data_eleicao=parse_date(raw.get("DataEleicao")),
        sessoes=tuple(sessoes),
    )


def _element_to_dict(elem: ET.Element) -> Any:
    """Convert an XML element into the nested dict form the JSON API uses."""
    children = list(elem)
    if not children:
        return (elem.text or "").strip() or None
    out: dict[str, Any] = {}
    for child in children:
        value = _element_to_dict(child)
        if child.tag in out:
            existing = out[child.tag]
            if not isinstance(existing, list):
                out[child.tag] = [existing]
            out[child.tag].append(value)
        else:
            out[child.tag] = value
    return out


def _legislaturas_from_payload(payload: Any) -> list[Legislatura]:
    if isinstance(payload, list):
        raw_items = payload
    else:
        raw_items = unwrap_list(
            ((payload.get("ListaLegislatura") or payload).get("Legislaturas") or {}).get("Legislatura")
        )
    return [parse_legislatura(item) for item in raw_items]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class LegislaturaResolver:
    """Date → legislature lookup over an ordered reference sequence."""

    def __init__(self, legislaturas: list[Legislatura]) -> None:
        self._legislaturas = sorted(legislaturas, key=lambda leg: leg.numero)
        self._por_numero = {leg.numero: leg for leg in self._legislaturas}

    @classmethod
    def from_xml(cls, path: Path) -> "LegislaturaResolver":
        root = ET.parse(path).getroot()
        payload = {root.tag: _element_to_dict(root)}
        return cls(_legislaturas_from_payload(payload))

    @classmethod
    def from_json(cls, path: Path) -> "LegislaturaResolver":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(_legislaturas_from_payload(payload))

    @classmethod
    def from_file(cls, path: Path) -> "LegislaturaResolver":
        path = Path(path)
        if path.suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_xml(path)

    @classmethod
    def default(cls) -> "LegislaturaResolver":
        return cls.from_xml(LEGISLATURAS_FILE)

    @property
    def numeros(self) -> list[int]:
        return [leg.numero for leg in self._legislaturas]

    def get(self, numero: int) -> Legislatura | None:
        return self._por_numero.get(numero)

    def resolve_current(self, reference_date: date | None = None) -> Legislatura | None:
        """Return the legislature whose term contains ``reference_date`` (default: today).

        A ``datetime`` is reduced to its calendar date.
        """
        d = reference_date or date.today()
        if isinstance(d, datetime):
            d = d.date()
        for leg in self._legislaturas:
            if leg.contem(d):
                logger.info(
                    "Legislatura atual: %d (%s a %s)",
                    leg.numero, leg.data_inicio.isoformat(), leg.data_fim.isoformat(),
                )
                return leg
        logger.warning("Nenhuma legislatura encontrada para a data %s", d.isoformat())
        return None

    def resolve_current_number(self, reference_date: date | None = None) -> int | None:
        leg = self.resolve_current(reference_date)
        return leg.numero if leg else None

    def resolve_period_window(self, numero: int) -> tuple[date, date] | None:
        leg = self.get(numero)
        if leg is None:
            return None
        return leg.data_inicio, leg.data_fim
