# commission_hub/sales_commission/fragments.py
"""
Streamlit Fragments for Sales Commission

Uses @st.fragment for the forms so typing in them only reruns the form,
NOT the whole dashboard. Saving a sale triggers a full app rerun so the
tables and KPIs pick up the change.

Money is formatted for display here only (R$ 1.234,56); the frames
passed in always hold raw floats.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional
import pandas as pd
import streamlit as st

from .constants import (
    SEGURO_OPTIONS,
    BASE_OPTIONS,
    BASE_LABELS,
    STATUS_PAGO,
    STATUS_ATRASADO,
    STATUS_COLORS,
    NUM_PARCELAS,
    LIMIT_CREDITO,
    SALES_DISPLAY_COLUMNS,
    RANKING_DISPLAY_COLUMNS,
)
from .parsing import parse_number, exceeds_credit_limit
from .calculator import compute_derived
from .normalizer import SaleValidationError
from .edit_session import EditSession
from .access_control import AccessControl
from .service import SalesService, SaleServiceError
from .charts import CommissionCharts
from .export import CommissionExport, export_filename

logger = logging.getLogger(__name__)


# =============================================================================
# FORMATTING
# =============================================================================

def format_brl(value: Any) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    number = float(parse_number(value))
    text = f"{abs(number):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-R$ {text}" if number < 0 else f"R$ {text}"


def format_pct(value: Any, decimals: int = 2) -> str:
    """5.5 -> '5,50%'"""
    return f"{float(parse_number(value)):.{decimals}f}".replace(".", ",") + "%"


def _number_text(value: Any) -> str:
    """Raw number -> pt-BR text for a text input ('' for zero/missing)."""
    number = parse_number(value)
    if not number:
        return ""
    if float(number).is_integer():
        return f"{int(number)}"
    return f"{number}".replace(".", ",")


# =============================================================================
# KPI CARDS
# =============================================================================

def render_kpi_cards(kpis: Dict):
    """Overview metric cards."""
    with st.container(border=True):
        col1, col2, col3, col4 = st.columns(4)

        with col1:
            st.metric(
                "💰 Comissão total",
                format_brl(kpis['total_commission']),
                delta=f"{kpis['sale_count']:,} vendas",
                delta_color="off",
                help="Σ taxa × base (crédito ou venda) das vendas filtradas"
            )
        with col2:
            st.metric(
                "✅ Pago",
                format_brl(kpis['paid_amount']),
                delta=f"{format_pct(kpis['paid_percent'], 1)} do total",
                delta_color="off",
                help="Parcelas marcadas como Pago × valor da parcela"
            )
        with col3:
            st.metric(
                "⏳ Pendente",
                format_brl(kpis['pending_amount']),
                delta=f"{kpis['pending_installments']:,} parcelas",
                delta_color="off"
            )
        with col4:
            st.metric(
                "⚠️ Atrasado",
                format_brl(kpis['overdue_amount']),
                delta=f"{kpis['overdue_installments']:,} parcelas",
                delta_color="inverse" if kpis['overdue_installments'] else "off"
            )

        st.caption(f"Ticket médio de comissão: **{format_brl(kpis['average_ticket'])}**")


# =============================================================================
# TABLES
# =============================================================================

def render_ranking_table(ranking_df: pd.DataFrame):
    if ranking_df.empty:
        st.info("Nenhuma venda no filtro atual")
        return

    display_df = ranking_df[list(RANKING_DISPLAY_COLUMNS)].copy()
    for col in ['total_commission', 'paid_amount', 'pending_amount', 'overdue_amount']:
        display_df[col] = display_df[col].map(format_brl)

    st.dataframe(
        display_df.rename(columns=RANKING_DISPLAY_COLUMNS),
        use_container_width=True,
        hide_index=True
    )


def _status_badges(parcelas: List[str]) -> str:
    icons = {STATUS_PAGO: "🟢", STATUS_ATRASADO: "🔴"}
    return "".join(icons.get(s, "🟡") for s in parcelas)


def render_sales_table(sales_df: pd.DataFrame, total_count: int) -> Optional[str]:
    """
    Sales list with a selector for the sale to edit.

    Returns:
        id of the selected sale, or None
    """
    st.markdown(f"**{len(sales_df):,} vendas** (de {total_count:,})")

    if sales_df.empty:
        st.info("Nenhuma venda encontrada")
        return None

    display_df = sales_df[list(SALES_DISPLAY_COLUMNS)].copy()
    display_df['base_comissao'] = display_df['base_comissao'].map(lambda b: BASE_LABELS.get(b, b))
    display_df['parcelas'] = sales_df['parcelas'].map(_status_badges)
    display_df['pago'] = sales_df['parcela_valor'] * sales_df['pago_n']

    st.dataframe(
        display_df,
        column_config={
            **{col: st.column_config.TextColumn(label) for col, label in SALES_DISPLAY_COLUMNS.items()},
            'cotas': st.column_config.NumberColumn("Cotas", format="%d"),
            'valor_unit': st.column_config.NumberColumn("Valor unit.", format="R$ %.2f"),
            'credito': st.column_config.NumberColumn(
                "Crédito",
                help=f"Cotas × valor unitário, limitado a {format_brl(LIMIT_CREDITO)}",
                format="R$ %.2f"
            ),
            'taxa_pct': st.column_config.NumberColumn("Taxa %", format="%.2f%%"),
            'comissao_total': st.column_config.NumberColumn("Comissão", format="R$ %.2f"),
            'pago': st.column_config.NumberColumn("Pago", format="R$ %.2f"),
            'parcelas': st.column_config.TextColumn(
                "Parcelas",
                help="🟢 Pago  🟡 Pendente  🔴 Atrasado"
            ),
        },
        use_container_width=True,
        hide_index=True,
        height=min(500, 38 * (len(display_df) + 1))
    )

    labels = {
        row['id']: f"{row['data']} · {row['cliente']} · {row['produto']} · {format_brl(row['comissao_total'])}"
        for _, row in sales_df.iterrows()
    }
    return st.selectbox(
        "✏️ Editar venda",
        options=[None] + list(labels),
        format_func=lambda sale_id: "—" if sale_id is None else labels[sale_id],
        key="sc_selected_sale"
    )


# =============================================================================
# SALE FORM FIELDS (shared by create and edit)
# =============================================================================

def _owner_inputs(users: List[Dict], current: Dict, key: str) -> Dict[str, Any]:
    """Owner selector for admins: returns user_id / consultor_name fields."""
    if not users:
        return {}
    by_id = {str(u['id']): u for u in users}
    options = list(by_id)
    current_id = str(current.get('user_id') or '')
    index = options.index(current_id) if current_id in options else 0
    user_id = st.selectbox(
        "Consultor",
        options,
        index=index,
        format_func=lambda uid: by_id[uid]['display_name'],
        key=f"{key}_owner"
    )
    return {'user_id': user_id, 'consultor_name': by_id[user_id]['display_name']}


def _sale_field_inputs(values: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Raw sale fields as typed (numbers stay pt-BR text)."""
    col1, col2, col3 = st.columns(3)
    with col1:
        cliente = st.text_input("Cliente", value=values.get('cliente') or "", key=f"{key}_cliente")
    with col2:
        produto = st.text_input("Produto", value=values.get('produto') or "", key=f"{key}_produto")
    with col3:
        sale_date = st.text_input(
            "Data (AAAA-MM-DD)",
            value=values.get('data') or "",
            key=f"{key}_data"
        )

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        cotas = st.text_input("Cotas", value=_number_text(values.get('cotas')), key=f"{key}_cotas")
    with col2:
        valor_unit = st.text_input(
            "Valor unitário (R$)",
            value=_number_text(values.get('valor_unit')),
            placeholder="1.234,56",
            key=f"{key}_valor_unit"
        )
    with col3:
        valor_venda = st.text_input(
            "Valor da venda (R$)",
            value=_number_text(values.get('valor_venda')),
            key=f"{key}_valor_venda"
        )
    with col4:
        taxa_pct = st.text_input("Taxa (%)", value=_number_text(values.get('taxa_pct')), key=f"{key}_taxa")

    col1, col2 = st.columns(2)
    with col1:
        seguro_current = values.get('seguro')
        seguro = st.radio(
            "Seguro",
            SEGURO_OPTIONS,
            index=SEGURO_OPTIONS.index(seguro_current) if seguro_current in SEGURO_OPTIONS else 1,
            horizontal=True,
            key=f"{key}_seguro"
        )
    with col2:
        base_current = values.get('base_comissao')
        base_comissao = st.radio(
            "Base da comissão",
            BASE_OPTIONS,
            index=BASE_OPTIONS.index(base_current) if base_current in BASE_OPTIONS else 0,
            format_func=lambda b: BASE_LABELS[b],
            horizontal=True,
            key=f"{key}_base"
        )

    return {
        'cliente': cliente,
        'produto': produto,
        'data': sale_date,
        'seguro': seguro,
        'cotas': cotas,
        'valor_unit': valor_unit,
        'valor_venda': valor_venda,
        'base_comissao': base_comissao,
        'taxa_pct': taxa_pct,
    }


def _render_preview(raw_fields: Dict[str, Any]):
    """Live derived figures + credit-limit warning."""
    figures = compute_derived(raw_fields)

    if exceeds_credit_limit(figures.credito_raw):
        st.warning(
            f"⚠️ Crédito bruto ({format_brl(figures.credito_raw)}) passou do limite; "
            f"será considerado {format_brl(LIMIT_CREDITO)}."
        )

    col1, col2, col3 = st.columns(3)
    col1.metric("Crédito", format_brl(figures.credito))
    col2.metric("Comissão total", format_brl(figures.comissao_total))
    col3.metric(f"Parcela (1/{NUM_PARCELAS})", format_brl(figures.parcela_valor))


# =============================================================================
# FRAGMENT: NEW SALE
# =============================================================================

@st.fragment
def new_sale_fragment(
    service: SalesService,
    access: AccessControl,
    users: List[Dict],
    fragment_key: str = "new_sale"
):
    """Form to register a sale, with live commission preview."""
    with st.expander("➕ Nova venda", expanded=False):
        owner = _owner_inputs(users, {'user_id': access.user_id}, fragment_key) if access.is_admin else {}
        raw_fields = _sale_field_inputs({}, fragment_key)

        _render_preview(raw_fields)

        if st.button("💾 Salvar venda", type="primary", key=f"{fragment_key}_save"):
            try:
                sale = service.create_sale({**raw_fields, **owner})
            except SaleValidationError as e:
                st.error(e.message)
                return

            # Clear the form for the next sale
            for name in list(st.session_state.keys()):
                if str(name).startswith(f"{fragment_key}_"):
                    del st.session_state[name]

            st.toast(f"Venda registrada: {sale['cliente']}", icon="✅")
            _refresh_app()


# =============================================================================
# FRAGMENT: SALE EDITOR
# =============================================================================

def _session_key(sale_id: str) -> str:
    return f"sc_edit_{sale_id}"


@st.fragment
def sale_editor_fragment(
    service: SalesService,
    access: AccessControl,
    record: Dict[str, Any],
    users: List[Dict],
    today: date
):
    """
    Edit one sale: fields, installment statuses, delete.

    The in-progress edit lives in st.session_state as an EditSession; it is
    only written to storage on Save.
    """
    state_key = _session_key(record['id'])
    session: EditSession = st.session_state.get(state_key) or EditSession.from_record(record)
    widget_key = f"sc_edit_{record['id']}"

    with st.container(border=True):
        st.markdown(f"#### ✏️ {record.get('cliente')} · {record.get('produto')}")

        if not access.can_modify(record):
            st.info("Somente leitura: esta venda pertence a outro consultor.")
            return

        owner = _owner_inputs(users, session.fields, widget_key) if access.is_admin else {}
        session = session.with_fields(**_sale_field_inputs(session.fields, widget_key), **owner)

        _render_preview(session.to_raw_fields())

        # ------------------------------------------------------------------
        # Installments: click to cycle Pendente -> Pago -> Atrasado
        # ------------------------------------------------------------------
        st.markdown("**Parcelas**")
        schedule = session.schedule(today)
        figures = session.preview()
        cols = st.columns(NUM_PARCELAS)
        for col, installment in zip(cols, schedule):
            with col:
                due = installment.vencimento.strftime('%d/%m/%Y') if installment.vencimento else "—"
                st.markdown(
                    f"<span style='color:{STATUS_COLORS[installment.status]}'>●</span> "
                    f"**{installment.numero}ª** {due}",
                    unsafe_allow_html=True
                )
                if st.button(
                    installment.status,
                    key=f"{widget_key}_p{installment.numero}",
                    use_container_width=True,
                    help=format_brl(figures.parcela_valor)
                ):
                    st.session_state[state_key] = session.cycle_status(installment.numero)
                    st.rerun(scope="fragment")
                if installment.vencida:
                    st.caption("vencida")

        st.session_state[state_key] = session

        col_late, col_save, col_cancel, col_delete = st.columns(4)
        with col_late:
            if st.button("⏰ Marcar atrasadas", key=f"{widget_key}_late", use_container_width=True):
                st.session_state[state_key] = session.with_overdue_marked(today)
                st.rerun(scope="fragment")
        with col_save:
            save = st.button("💾 Salvar", type="primary", key=f"{widget_key}_save", use_container_width=True)
        with col_cancel:
            cancel = st.button("↩️ Descartar", key=f"{widget_key}_cancel", use_container_width=True)
        with col_delete:
            delete = st.button("🗑️ Excluir", key=f"{widget_key}_delete", use_container_width=True)

        if cancel:
            _drop_edit_state(record['id'], widget_key)
            st.rerun(scope="app")

        if save:
            try:
                service.update_sale(record['id'], session.to_raw_fields())
            except SaleValidationError as e:
                st.error(e.message)
                return
            except SaleServiceError as e:
                st.error(str(e))
                return
            _drop_edit_state(record['id'], widget_key)
            st.toast("Venda atualizada", icon="✅")
            _refresh_app()

        if delete:
            st.session_state[f"{widget_key}_confirm_delete"] = True

        if st.session_state.get(f"{widget_key}_confirm_delete"):
            st.warning("Excluir esta venda definitivamente?")
            col_yes, col_no = st.columns(2)
            if col_yes.button("Sim, excluir", key=f"{widget_key}_delete_yes"):
                try:
                    service.delete_sale(record['id'])
                except SaleServiceError as e:
                    st.error(str(e))
                    return
                _drop_edit_state(record['id'], widget_key)
                st.session_state.pop("sc_selected_sale", None)
                st.toast("Venda excluída", icon="🗑️")
                _refresh_app()
            if col_no.button("Cancelar", key=f"{widget_key}_delete_no"):
                st.session_state.pop(f"{widget_key}_confirm_delete", None)
                st.rerun(scope="fragment")


def _refresh_app():
    """Drop cached sale lists and rerun the whole page."""
    st.cache_data.clear()
    st.rerun(scope="app")


def _drop_edit_state(sale_id: str, widget_key: str):
    st.session_state.pop(_session_key(sale_id), None)
    for name in list(st.session_state.keys()):
        if str(name).startswith(f"{widget_key}_"):
            del st.session_state[name]


# =============================================================================
# CHARTS + EXPORT
# =============================================================================

def render_charts(aggregates: Dict):
    col1, col2 = st.columns([2, 1])
    with col1:
        st.altair_chart(
            CommissionCharts.build_monthly_status_chart(aggregates['series']),
            use_container_width=True
        )
    with col2:
        st.altair_chart(
            CommissionCharts.build_status_donut(aggregates['kpis']),
            use_container_width=True
        )

    st.altair_chart(
        CommissionCharts.build_ranking_chart(aggregates['ranking']),
        use_container_width=True
    )


def render_export_buttons(
    sales_df: pd.DataFrame,
    aggregates: Dict,
    filter_summary: str,
    today: date,
    excel_enabled: bool = True
):
    """CSV (always) and Excel (feature flag) downloads of the filtered sales."""
    exporter = CommissionExport()
    col1, col2 = st.columns(2)

    with col1:
        st.download_button(
            label="📥 Exportar CSV",
            data=exporter.to_csv(sales_df),
            file_name=export_filename(today, "csv"),
            mime="text/csv",
            use_container_width=True
        )

    if excel_enabled:
        with col2:
            st.download_button(
                label="📊 Exportar Excel",
                data=exporter.to_excel(
                    sales_df,
                    ranking_df=aggregates['ranking'],
                    kpis=aggregates['kpis'],
                    filter_summary=filter_summary
                ),
                file_name=export_filename(today, "xlsx"),
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True
            )
