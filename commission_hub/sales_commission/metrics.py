# commission_hub/sales_commission/metrics.py
"""
KPI Calculations for Sales Commission

Handles all aggregations over the (filtered) sales frame:
- Overall KPIs (total / paid / pending / overdue commission, counts, ticket)
- Ranking by consultor
- Monthly series

Status amounts are installment weighted: parcela_valor x number of
installments in that status. This assumes six equal installments; uneven
installments would need a per-installment amount column instead.

Every aggregation is an independent sum-based reduction over the same
frame, so aggregate() returns exactly what the three calls return.
"""

import logging
from typing import Dict, Optional
import pandas as pd
import numpy as np

from .constants import NUM_PARCELAS
from .data_processor import month_key
from .filters import consultor_label

logger = logging.getLogger(__name__)

AMOUNT_COLUMNS = ['total_commission', 'paid_amount', 'pending_amount', 'overdue_amount']
RANKING_COLUMNS = ['rank', 'consultor_name', 'sale_count'] + AMOUNT_COLUMNS
SERIES_COLUMNS = ['mes', 'sale_count'] + AMOUNT_COLUMNS


class CommissionMetrics:
    """
    KPI calculations for the commission dashboard.

    Usage:
        metrics = CommissionMetrics(filtered_df)

        kpis = metrics.calculate_kpis()
        ranking = metrics.aggregate_by_consultor()
        series = metrics.aggregate_by_month()
    """

    def __init__(self, sales_df: pd.DataFrame):
        """
        Initialize with data.

        Args:
            sales_df: Frame from build_sales_frame(), usually filtered
        """
        self.sales_df = sales_df

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _with_amounts(df: pd.DataFrame) -> pd.DataFrame:
        """Copy of df with per-sale status amount columns."""
        df = df.copy()
        counts = df[['pago_n', 'pendente_n', 'atrasado_n']].to_numpy(dtype=float)
        parcela = df['parcela_valor'].to_numpy(dtype=float)[:, np.newaxis]
        amounts = counts * parcela

        df['total_commission'] = df['comissao_total'].astype(float)
        df['paid_amount'] = amounts[:, 0]
        df['pending_amount'] = amounts[:, 1]
        df['overdue_amount'] = amounts[:, 2]
        return df

    # =========================================================================
    # OVERVIEW KPIs
    # =========================================================================

    def calculate_kpis(self) -> Dict:
        """
        Calculate overview KPIs for the metric cards.

        Returns:
            Dict with amounts, counts, average ticket and paid percentage
        """
        df = self.sales_df

        if df.empty:
            return self._get_empty_kpis()

        df = self._with_amounts(df)

        total = float(df['total_commission'].sum())
        paid = float(df['paid_amount'].sum())
        sale_count = len(df)

        return {
            # Amounts
            'total_commission': total,
            'paid_amount': paid,
            'pending_amount': float(df['pending_amount'].sum()),
            'overdue_amount': float(df['overdue_amount'].sum()),

            # Counts
            'sale_count': sale_count,
            'installment_count': NUM_PARCELAS * sale_count,
            'paid_installments': int(df['pago_n'].sum()),
            'pending_installments': int(df['pendente_n'].sum()),
            'overdue_installments': int(df['atrasado_n'].sum()),

            # Ratios
            'average_ticket': total / sale_count,
            'paid_percent': (paid / total * 100) if total > 0 else 0,
        }

    def _get_empty_kpis(self) -> Dict:
        """Return empty KPI dict."""
        return {
            'total_commission': 0,
            'paid_amount': 0,
            'pending_amount': 0,
            'overdue_amount': 0,
            'sale_count': 0,
            'installment_count': 0,
            'paid_installments': 0,
            'pending_installments': 0,
            'overdue_installments': 0,
            'average_ticket': 0,
            'paid_percent': 0,
        }

    # =========================================================================
    # RANKING
    # =========================================================================

    def aggregate_by_consultor(self) -> pd.DataFrame:
        """
        Ranking by consultor.

        Sorted by paid amount, then total commission, then sale count (all
        descending). Exact ties keep the order in which consultors first
        appear in the frame.
        """
        df = self.sales_df

        if df.empty:
            return pd.DataFrame(columns=RANKING_COLUMNS)

        df = self._with_amounts(df)
        df['consultor_key'] = df['consultor_name'].map(consultor_label)

        ranking = df.groupby('consultor_key', sort=False).agg(
            sale_count=('total_commission', 'size'),
            total_commission=('total_commission', 'sum'),
            paid_amount=('paid_amount', 'sum'),
            pending_amount=('pending_amount', 'sum'),
            overdue_amount=('overdue_amount', 'sum'),
        ).reset_index().rename(columns={'consultor_key': 'consultor_name'})

        # multi-key sort_values is a stable lexsort
        ranking = ranking.sort_values(
            ['paid_amount', 'total_commission', 'sale_count'],
            ascending=False,
            kind='stable'
        ).reset_index(drop=True)

        ranking.insert(0, 'rank', range(1, len(ranking) + 1))
        return ranking[RANKING_COLUMNS]

    def top_consultor(self) -> Optional[Dict]:
        """First row of the ranking, or None without data."""
        ranking = self.aggregate_by_consultor()
        if ranking.empty:
            return None
        return ranking.iloc[0].to_dict()

    # =========================================================================
    # MONTHLY SERIES
    # =========================================================================

    def aggregate_by_month(self) -> pd.DataFrame:
        """
        Commission amounts per sale month (YYYY-MM), ascending.

        Sales without a readable date are grouped under "—".
        """
        df = self.sales_df

        if df.empty:
            return pd.DataFrame(columns=SERIES_COLUMNS)

        df = self._with_amounts(df)
        if 'mes' not in df.columns:
            df['mes'] = df['data'].map(month_key)

        series = df.groupby('mes', sort=True).agg(
            sale_count=('total_commission', 'size'),
            total_commission=('total_commission', 'sum'),
            paid_amount=('paid_amount', 'sum'),
            pending_amount=('pending_amount', 'sum'),
            overdue_amount=('overdue_amount', 'sum'),
        ).reset_index()

        return series[SERIES_COLUMNS]

    # =========================================================================
    # ALL AT ONCE
    # =========================================================================

    def aggregate(self) -> Dict:
        """KPIs, ranking and monthly series of the same frame."""
        return {
            'kpis': self.calculate_kpis(),
            'ranking': self.aggregate_by_consultor(),
            'series': self.aggregate_by_month(),
        }
