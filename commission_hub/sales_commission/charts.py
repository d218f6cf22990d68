# commission_hub/sales_commission/charts.py
"""
Altair Chart Builders for Sales Commission

All visualization components using Altair:
- Monthly commission by installment status (stacked bars)
- Consultor ranking (horizontal bars)
- Status split donut

Charts consume aggregator output only (CommissionMetrics).
"""

import logging
from typing import Dict
import pandas as pd
import altair as alt

from .constants import (
    COLORS,
    STATUS_COLORS,
    STATUS_PAGO,
    STATUS_PENDENTE,
    STATUS_ATRASADO,
    CHART_WIDTH,
    CHART_HEIGHT,
    TOP_N_CONSULTORES,
)

logger = logging.getLogger(__name__)

STATUS_AMOUNT_COLUMNS = {
    'paid_amount': STATUS_PAGO,
    'pending_amount': STATUS_PENDENTE,
    'overdue_amount': STATUS_ATRASADO,
}

_STATUS_DOMAIN = [STATUS_PAGO, STATUS_PENDENTE, STATUS_ATRASADO]


def _status_scale() -> alt.Scale:
    return alt.Scale(
        domain=_STATUS_DOMAIN,
        range=[STATUS_COLORS[s] for s in _STATUS_DOMAIN]
    )


class CommissionCharts:
    """
    Chart builders for the commission dashboard.

    All methods are static - can be called without instantiation.

    Usage:
        chart = CommissionCharts.build_monthly_status_chart(series_df)
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # MONTHLY
    # =========================================================================

    @staticmethod
    def build_monthly_status_chart(
        series_df: pd.DataFrame,
        title: str = "📊 Comissão por mês"
    ) -> alt.Chart:
        """
        Stacked bars of paid / pending / overdue commission per sale month.

        Args:
            series_df: Output of CommissionMetrics.aggregate_by_month()
            title: Chart title
        """
        if series_df.empty:
            return CommissionCharts._empty_chart("Sem dados")

        bar_data = series_df.melt(
            id_vars=['mes'],
            value_vars=list(STATUS_AMOUNT_COLUMNS),
            var_name='Status',
            value_name='Valor'
        )
        bar_data['Status'] = bar_data['Status'].map(STATUS_AMOUNT_COLUMNS)

        bars = alt.Chart(bar_data).mark_bar().encode(
            x=alt.X('mes:N', sort='ascending', title='Mês'),
            y=alt.Y('Valor:Q', title='Comissão (R$)', stack='zero', axis=alt.Axis(format='~s')),
            color=alt.Color('Status:N', scale=_status_scale(), legend=alt.Legend(orient='bottom')),
            order=alt.Order('Status:N'),
            tooltip=[
                alt.Tooltip('mes:N', title='Mês'),
                alt.Tooltip('Status:N', title='Status'),
                alt.Tooltip('Valor:Q', title='Valor', format=',.2f')
            ]
        )

        totals = alt.Chart(series_df).mark_text(
            align='center', baseline='bottom', dy=-5, fontSize=10
        ).encode(
            x=alt.X('mes:N', sort='ascending'),
            y=alt.Y('total_commission:Q'),
            text=alt.Text('total_commission:Q', format=',.0f'),
            color=alt.value(COLORS['text_dark'])
        )

        return alt.layer(bars, totals).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # RANKING
    # =========================================================================

    @staticmethod
    def build_ranking_chart(
        ranking_df: pd.DataFrame,
        top_n: int = TOP_N_CONSULTORES,
        title: str = "🏆 Ranking de consultores"
    ) -> alt.Chart:
        """Horizontal paid-vs-total bars for the top N of the ranking."""
        if ranking_df.empty:
            return CommissionCharts._empty_chart("Sem dados")

        df = ranking_df.head(top_n)
        order = df['consultor_name'].tolist()

        total_bars = alt.Chart(df).mark_bar(color=COLORS['grid']).encode(
            y=alt.Y('consultor_name:N', sort=order, title=''),
            x=alt.X('total_commission:Q', title='Comissão (R$)', axis=alt.Axis(format='~s')),
            tooltip=[
                alt.Tooltip('consultor_name:N', title='Consultor'),
                alt.Tooltip('sale_count:Q', title='Vendas'),
                alt.Tooltip('total_commission:Q', title='Total', format=',.2f'),
                alt.Tooltip('paid_amount:Q', title='Pago', format=',.2f'),
            ]
        )

        paid_bars = alt.Chart(df).mark_bar(color=COLORS['pago'], height=10).encode(
            y=alt.Y('consultor_name:N', sort=order),
            x=alt.X('paid_amount:Q'),
        )

        return alt.layer(total_bars, paid_bars).properties(
            width=CHART_WIDTH,
            height=max(120, 32 * len(df)),
            title=title
        )

    # =========================================================================
    # STATUS SPLIT
    # =========================================================================

    @staticmethod
    def build_status_donut(kpis: Dict, title: str = "Parcelas por status") -> alt.Chart:
        """Donut of commission amount per installment status."""
        data = pd.DataFrame({
            'Status': _STATUS_DOMAIN,
            'Valor': [
                kpis.get('paid_amount', 0),
                kpis.get('pending_amount', 0),
                kpis.get('overdue_amount', 0),
            ],
        })

        if data['Valor'].sum() <= 0:
            return CommissionCharts._empty_chart("Sem comissão no filtro")

        return alt.Chart(data).mark_arc(innerRadius=60).encode(
            theta=alt.Theta('Valor:Q'),
            color=alt.Color('Status:N', scale=_status_scale(), legend=alt.Legend(orient='bottom')),
            tooltip=[
                alt.Tooltip('Status:N', title='Status'),
                alt.Tooltip('Valor:Q', title='Valor', format=',.2f')
            ]
        ).properties(
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _empty_chart(message: str = "Sem dados") -> alt.Chart:
        """Create an empty chart with a message."""
        return alt.Chart(pd.DataFrame({'note': [message]})).mark_text(
            text=message,
            fontSize=16,
            color=COLORS['text_light']
        ).properties(
            width=CHART_WIDTH,
            height=200
        )
