# commission_hub/sales_commission/normalizer.py
"""
Sale Record Normalizer

Turns raw form fields into a CanonicalSale with every derived money
field attached, or raises SaleValidationError without producing anything.

Coercion rules:
- cliente / produto / data: trimmed, required
- cotas: parse -> floor -> max(0)
- valor_unit / valor_venda: parse -> max(0)
- taxa_pct: parse only (negative allowed)
- seguro: "Sim" or "Não"
- base_comissao: "venda" or "credito"
- parcelas: six valid statuses (read-repair)

The create path also requires cotas > 0 and valor_unit > 0. The update
path does not (enforce_positive=False), so an edit may correct a record
down to zero quotas.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from .constants import (
    SALE_TEXT_FIELDS,
    SEGURO_SIM,
    SEGURO_NAO,
    BASE_VENDA,
    BASE_CREDITO,
)
from .calculator import normalize_parcelas, commission_amounts, coerce_quantities

logger = logging.getLogger(__name__)

MISSING_REQUIRED = "missing_required"
NON_POSITIVE_QUANTITY = "non_positive_quantity"


class SaleValidationError(ValueError):
    """Raised when sale input fails validation."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass(frozen=True)
class CanonicalSale:
    """Validated sale fields plus derived figures."""
    cliente: str
    produto: str
    data: str
    seguro: str
    cotas: int
    valor_unit: float
    valor_venda: float
    base_comissao: str
    taxa_pct: float
    parcelas: Tuple[str, ...]
    credito_raw: float
    credito: float
    comissao_total: float
    parcela_valor: float

    def to_raw_fields(self) -> Dict[str, Any]:
        """Input fields that normalize back to this same sale."""
        return {
            'cliente': self.cliente,
            'produto': self.produto,
            'data': self.data,
            'seguro': self.seguro,
            'cotas': self.cotas,
            'valor_unit': self.valor_unit,
            'valor_venda': self.valor_venda,
            'base_comissao': self.base_comissao,
            'taxa_pct': self.taxa_pct,
            'parcelas': list(self.parcelas),
        }

    def to_record(self) -> Dict[str, Any]:
        """Storable fields (derived money fields are kept for reference only)."""
        record = self.to_raw_fields()
        record.update({
            'credito_raw': self.credito_raw,
            'credito': self.credito,
            'comissao_total': self.comissao_total,
        })
        return record


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_sale_input(raw_fields: Mapping[str, Any], *, enforce_positive: bool = True) -> CanonicalSale:
    """
    Validate and canonicalize raw sale fields.

    Args:
        raw_fields: Form / request fields
        enforce_positive: Require cotas > 0 and valor_unit > 0 (create path)

    Returns:
        CanonicalSale

    Raises:
        SaleValidationError: missing required text or non-positive quantity
    """
    raw_fields = raw_fields or {}

    text_fields = {name: _text(raw_fields.get(name)) for name in SALE_TEXT_FIELDS}
    missing = [name for name, value in text_fields.items() if not value]
    if missing:
        logger.debug(f"Sale input rejected: missing {missing}")
        raise SaleValidationError("Preencha cliente, produto e data.", MISSING_REQUIRED)

    cotas, valor_unit, valor_venda, taxa_pct = coerce_quantities(raw_fields)

    if enforce_positive and (cotas <= 0 or valor_unit <= 0):
        logger.debug(f"Sale input rejected: cotas={cotas}, valor_unit={valor_unit}")
        raise SaleValidationError("Informe cotas e valor unitário (> 0).", NON_POSITIVE_QUANTITY)

    seguro = SEGURO_SIM if raw_fields.get('seguro') == SEGURO_SIM else SEGURO_NAO
    base_comissao = BASE_VENDA if raw_fields.get('base_comissao') == BASE_VENDA else BASE_CREDITO

    amounts = commission_amounts(cotas, valor_unit, valor_venda, base_comissao, taxa_pct)

    return CanonicalSale(
        cliente=text_fields['cliente'],
        produto=text_fields['produto'],
        data=text_fields['data'],
        seguro=seguro,
        cotas=cotas,
        valor_unit=valor_unit,
        valor_venda=valor_venda,
        base_comissao=base_comissao,
        taxa_pct=taxa_pct,
        parcelas=tuple(normalize_parcelas(raw_fields.get('parcelas'))),
        credito_raw=amounts['credito_raw'],
        credito=amounts['credito'],
        comissao_total=amounts['comissao_total'],
        parcela_valor=amounts['parcela_valor'],
    )
