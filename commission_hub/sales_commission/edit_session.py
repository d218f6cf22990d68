# commission_hub/sales_commission/edit_session.py
"""
Edit session for one sale.

Holds the in-progress edit (raw form fields + installment statuses) as a
plain value. The page keeps it in st.session_state; every operation
returns a new session, so a cancelled edit simply drops the value.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from .constants import PARCELA_STATUSES, NUM_PARCELAS, STATUS_PENDENTE
from .calculator import DerivedFigures, compute_derived, normalize_parcelas, next_status
from .schedule import Installment, installment_schedule, auto_mark_overdue

EDITABLE_FIELDS = [
    'cliente', 'produto', 'data', 'seguro', 'cotas', 'valor_unit',
    'valor_venda', 'base_comissao', 'taxa_pct', 'user_id', 'consultor_name',
]


@dataclass(frozen=True)
class EditSession:
    sale_id: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)
    parcelas: tuple = (STATUS_PENDENTE,) * NUM_PARCELAS

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "EditSession":
        """Start editing a stored sale."""
        return cls(
            sale_id=record.get('id'),
            fields={name: record.get(name) for name in EDITABLE_FIELDS},
            parcelas=tuple(normalize_parcelas(record.get('parcelas'))),
        )

    def with_fields(self, **changes) -> "EditSession":
        return replace(self, fields={**self.fields, **changes})

    def with_status(self, index: int, status: str) -> "EditSession":
        """Set installment `index` (1..6) to `status`."""
        if not 1 <= index <= NUM_PARCELAS:
            raise ValueError(f"index must be between 1 and {NUM_PARCELAS}")
        if status not in PARCELA_STATUSES:
            raise ValueError(f"Invalid installment status: {status!r}")
        parcelas = list(self.parcelas)
        parcelas[index - 1] = status
        return replace(self, parcelas=tuple(parcelas))

    def cycle_status(self, index: int) -> "EditSession":
        """Advance installment `index` one step (Pendente -> Pago -> Atrasado)."""
        if not 1 <= index <= NUM_PARCELAS:
            raise ValueError(f"index must be between 1 and {NUM_PARCELAS}")
        return self.with_status(index, next_status(self.parcelas[index - 1]))

    def with_overdue_marked(self, today: date) -> "EditSession":
        marked = auto_mark_overdue(self.parcelas, self.fields.get('data'), today)
        return replace(self, parcelas=tuple(marked))

    def to_raw_fields(self) -> Dict[str, Any]:
        """Fields to hand to SalesService.update_sale()."""
        return {**self.fields, 'parcelas': list(self.parcelas)}

    def preview(self) -> DerivedFigures:
        """Derived figures of the edit as it stands (nothing is validated)."""
        return compute_derived(self.to_raw_fields())

    def schedule(self, today: date) -> List[Installment]:
        return installment_schedule(self.to_raw_fields(), today)
