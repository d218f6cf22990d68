# commission_hub/sales_commission/filters.py
"""
Filter Engine for Sales Commission

A FilterSpec is a plain value describing the active filters:
- date_from / date_to: inclusive ISO date bounds on `data`
- status: keep sales with ANY installment in this status
- consultor: exact consultor name ("—" matches sales without one)
- free_text: case-insensitive substring over consultor, cliente, produto, data

Empty values and the ALL sentinel mean "no constraint". All predicates
are ANDed. The engine knows nothing about the caller: AccessControl
scopes the spec before it gets here.

The active spec lives in st.session_state, owned by the page.

VERSION: 1.0.0
"""

import logging
from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, List, Optional, Tuple
import pandas as pd
import streamlit as st

from .constants import ALL, PLACEHOLDER, PARCELA_STATUSES, STATUS_COUNT_COLUMNS

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text or text == ALL:
        return None
    return text


def consultor_label(name: Any) -> str:
    """Display/grouping label of a consultor; missing names fold to "—"."""
    if name is None or (not isinstance(name, str) and pd.isna(name)):
        return PLACEHOLDER
    return str(name) or PLACEHOLDER


# =============================================================================
# FILTER SPEC
# =============================================================================

@dataclass
class FilterSpec:
    """Declarative filter over sale records."""
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    status: Optional[str] = None
    consultor: Optional[str] = None
    free_text: Optional[str] = None

    def __post_init__(self):
        for f in fields(self):
            if f.name != 'free_text':
                setattr(self, f.name, _clean(getattr(self, f.name)))
        # a search term is never the ALL sentinel
        if self.free_text is not None:
            self.free_text = str(self.free_text).strip() or None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def without_consultor(self) -> "FilterSpec":
        return replace(self, consultor=None)

    def merge(self, other: "FilterSpec") -> "FilterSpec":
        """
        AND of two specs.

        Date ranges intersect. Other dimensions can hold one value only,
        so two different non-empty values raise ValueError.
        """
        merged = {}
        for f in fields(self):
            a, b = getattr(self, f.name), getattr(other, f.name)
            if a is None or b is None:
                merged[f.name] = a if b is None else b
            elif f.name == 'date_from':
                merged[f.name] = max(a, b)
            elif f.name == 'date_to':
                merged[f.name] = min(a, b)
            elif a != b:
                raise ValueError(f"Conflicting values for {f.name}: {a!r} / {b!r}")
            else:
                merged[f.name] = a
        return FilterSpec(**merged)

    def describe(self) -> str:
        """Short summary for captions."""
        parts = []
        if self.date_from or self.date_to:
            parts.append(f"📅 {self.date_from or '…'} → {self.date_to or '…'}")
        if self.status:
            parts.append(f"🏷️ {self.status}")
        if self.consultor:
            parts.append(f"👤 {self.consultor}")
        if self.free_text:
            parts.append(f"🔎 \"{self.free_text}\"")
        return " | ".join(parts) if parts else "Sem filtros"


def validate_filters(spec: FilterSpec) -> Tuple[bool, Optional[str]]:
    """
    Validate a filter spec before applying it.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if spec.date_from and spec.date_to and spec.date_from > spec.date_to:
        return False, "Data inicial maior que a data final."
    if spec.status and spec.status not in PARCELA_STATUSES:
        return False, f"Status inválido: {spec.status}"
    return True, None


# =============================================================================
# FILTER APPLICATION
# =============================================================================

def filter_sales(df: pd.DataFrame, spec: Optional[FilterSpec]) -> pd.DataFrame:
    """
    Apply a FilterSpec to the enriched sales frame.

    Args:
        df: Frame from build_sales_frame()
        spec: Filters to apply (None = no filters)

    Returns:
        New DataFrame with matching rows in their original order
    """
    if df.empty or spec is None or spec.is_empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)
    sale_dates = df['data'].fillna('').astype(str)

    if spec.consultor:
        mask &= df['consultor_name'].map(consultor_label) == spec.consultor

    if spec.status:
        count_col = STATUS_COUNT_COLUMNS.get(spec.status)
        if count_col is None:
            mask &= False
        else:
            mask &= df[count_col] > 0

    if spec.date_from:
        mask &= sale_dates >= spec.date_from

    if spec.date_to:
        mask &= sale_dates <= spec.date_to

    if spec.free_text:
        query = spec.free_text.lower()
        haystack = (
            df['consultor_name'].fillna('').astype(str) + ' ' +
            df['cliente'].fillna('').astype(str) + ' ' +
            df['produto'].fillna('').astype(str) + ' ' +
            sale_dates
        ).str.lower()
        mask &= haystack.str.contains(query, na=False, regex=False)

    filtered = df[mask].copy()
    logger.debug(f"filter_sales: {len(df)} -> {len(filtered)} rows ({spec.describe()})")
    return filtered


def consultor_options(df: pd.DataFrame) -> List[str]:
    """Distinct consultor labels, alphabetically."""
    if df.empty:
        return []
    return sorted(set(df['consultor_name'].map(consultor_label)), key=str.casefold)


# =============================================================================
# SIDEBAR WIDGETS
# =============================================================================

def _to_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def render_filter_sidebar(
    sales_df: pd.DataFrame,
    current: FilterSpec,
    show_consultor: bool,
    key: str = "sc_filters"
) -> FilterSpec:
    """
    Render sidebar filters and return the spec the user applied.

    NOTE: Must be called inside `with st.sidebar:` context manager.

    Args:
        sales_df: Frame used to build the consultor options
        current: Spec currently applied (pre-fills the widgets)
        show_consultor: Whether to show the consultor selector (admins)
        key: Widget key prefix

    Returns:
        FilterSpec - `current` unchanged unless Apply/Clear was clicked
    """
    st.markdown("### 🔎 Filtros")

    free_text = st.text_input(
        "Buscar",
        value=current.free_text or "",
        placeholder="Consultor, cliente, produto, data...",
        key=f"{key}_q"
    )

    with st.form(f"{key}_form", border=False):
        consultor = None
        if show_consultor:
            options = [ALL] + consultor_options(sales_df)
            index = options.index(current.consultor) if current.consultor in options else 0
            consultor = st.selectbox("Consultor", options, index=index, key=f"{key}_consultor")

        status_options = [ALL] + PARCELA_STATUSES
        status_index = status_options.index(current.status) if current.status in status_options else 0
        status = st.selectbox(
            "Status de parcela",
            status_options,
            index=status_index,
            help="Mostra vendas com PELO MENOS uma parcela neste status",
            key=f"{key}_status"
        )

        col1, col2 = st.columns(2)
        with col1:
            date_from = st.date_input("De", value=_to_date(current.date_from), format="DD/MM/YYYY", key=f"{key}_from")
        with col2:
            date_to = st.date_input("Até", value=_to_date(current.date_to), format="DD/MM/YYYY", key=f"{key}_to")

        col_apply, col_clear = st.columns(2)
        with col_apply:
            applied = st.form_submit_button("✅ Aplicar", type="primary", use_container_width=True)
        with col_clear:
            cleared = st.form_submit_button("🧹 Limpar", use_container_width=True)

    if cleared:
        return FilterSpec(free_text=free_text)

    if applied:
        return FilterSpec(
            date_from=date_from,
            date_to=date_to,
            status=status,
            consultor=consultor,
            free_text=free_text,
        )

    # Free-text search applies as you type
    return replace(current, free_text=free_text)
