# commission_hub/sales_commission/calculator.py
"""
Commission Calculator

Pure, total functions turning one sale record into its derived figures:
- credito (cotas x valor_unit, clamped to LIMIT_CREDITO)
- comissao_total (taxa_pct over the selected base)
- parcela_valor (straight 1/6 split, unrounded - rounding is display)
- installment status counts

Works on any mapping (stored row dict, pandas Series) or on a
CanonicalSale. Never raises: missing numbers count as 0 and a missing
or malformed parcelas list counts as six "Pendente".
"""

import math
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Tuple

from .constants import (
    NUM_PARCELAS,
    PARCELA_STATUSES,
    STATUS_PENDENTE,
    STATUS_PAGO,
    STATUS_ATRASADO,
    STATUS_CYCLE,
    BASE_VENDA,
)
from .parsing import parse_number, clamp_credito

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedFigures:
    """Derived financial figures of one sale."""
    credito_raw: float
    credito: float
    base: float
    comissao_total: float
    parcela_valor: float
    pago_n: int
    pendente_n: int
    atrasado_n: int

    def count_for(self, status: str) -> int:
        return {
            STATUS_PAGO: self.pago_n,
            STATUS_PENDENTE: self.pendente_n,
            STATUS_ATRASADO: self.atrasado_n,
        }.get(status, 0)

    def amount_for(self, status: str) -> float:
        """Commission amount currently in the given status."""
        return self.parcela_valor * self.count_for(status)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_parcelas(parcelas: Any) -> List[str]:
    """
    Read-repair an installment status list to exactly six valid entries.

    Longer lists are truncated, shorter ones padded, unknown statuses
    become "Pendente". Anything that is not a list/tuple yields six
    "Pendente".
    """
    if not isinstance(parcelas, (list, tuple)):
        return [STATUS_PENDENTE] * NUM_PARCELAS

    repaired = [
        status if status in PARCELA_STATUSES else STATUS_PENDENTE
        for status in list(parcelas)[:NUM_PARCELAS]
    ]
    repaired.extend([STATUS_PENDENTE] * (NUM_PARCELAS - len(repaired)))
    return repaired


def next_status(current: Any) -> str:
    """Pendente -> Pago -> Atrasado -> Pendente."""
    if not isinstance(current, str) or current not in STATUS_CYCLE:
        current = STATUS_PENDENTE
    return STATUS_CYCLE[current]


def _field(sale: Any, name: str) -> Any:
    if hasattr(sale, "get"):
        return sale.get(name)
    return getattr(sale, name, None)


def coerce_quantities(sale: Any) -> Tuple[int, float, float, float]:
    """
    Numeric fields as they are stored: (cotas, valor_unit, valor_venda, taxa_pct).

    cotas is floored and non-negative, values are non-negative, taxa_pct
    keeps its sign. Previews and the normalizer both go through here.
    """
    cotas = max(0, int(math.floor(parse_number(_field(sale, "cotas")))))
    valor_unit = float(max(0, parse_number(_field(sale, "valor_unit"))))
    valor_venda = float(max(0, parse_number(_field(sale, "valor_venda"))))
    taxa_pct = float(parse_number(_field(sale, "taxa_pct")))
    return cotas, valor_unit, valor_venda, taxa_pct


def commission_amounts(cotas, valor_unit, valor_venda, base_comissao, taxa_pct) -> Dict[str, float]:
    """Monetary part of the calculation, shared with the normalizer."""
    credito_raw = cotas * valor_unit
    credito = clamp_credito(credito_raw)
    base = valor_venda if base_comissao == BASE_VENDA else credito
    comissao_total = base * (taxa_pct / 100)
    return {
        'credito_raw': credito_raw,
        'credito': credito,
        'base': base,
        'comissao_total': comissao_total,
        'parcela_valor': comissao_total / NUM_PARCELAS,
    }


def compute_derived(sale: Any) -> DerivedFigures:
    """
    Compute derived figures for one sale.

    Args:
        sale: Mapping / pandas Series / CanonicalSale with the sale fields

    Returns:
        DerivedFigures
    """
    cotas, valor_unit, valor_venda, taxa_pct = coerce_quantities(sale)
    amounts = commission_amounts(
        cotas=cotas,
        valor_unit=valor_unit,
        valor_venda=valor_venda,
        base_comissao=_field(sale, "base_comissao"),
        taxa_pct=taxa_pct,
    )

    parcelas = normalize_parcelas(_field(sale, "parcelas"))

    return DerivedFigures(
        credito_raw=amounts['credito_raw'],
        credito=amounts['credito'],
        base=amounts['base'],
        comissao_total=amounts['comissao_total'],
        parcela_valor=amounts['parcela_valor'],
        pago_n=parcelas.count(STATUS_PAGO),
        pendente_n=parcelas.count(STATUS_PENDENTE),
        atrasado_n=parcelas.count(STATUS_ATRASADO),
    )
