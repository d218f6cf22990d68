# commission_hub/sales_commission/export.py
"""
Export for Sales Commission

- rows_for_export(): flat table of sales + derived figures (one column per
  installment status, p1..p6)
- CSV: UTF-8 with BOM, every cell quoted (opens cleanly in Excel pt-BR)
- XLSX: formatted workbook with a sales sheet and a ranking sheet

Uses openpyxl for formatting capabilities.
"""

import csv
import logging
from datetime import date, datetime
from io import BytesIO
from typing import Dict, Optional
import pandas as pd

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from .constants import (
    EXPORT_COLUMNS,
    EXPORT_MONEY_COLUMNS,
    EXCEL_STYLES,
    NUM_PARCELAS,
    RANKING_DISPLAY_COLUMNS,
)
from .calculator import normalize_parcelas

logger = logging.getLogger(__name__)

EXPORT_HEADERS = {
    'consultor_name': 'Consultor',
    'cliente': 'Cliente',
    'produto': 'Produto',
    'data': 'Data',
    'seguro': 'Seguro',
    'cotas': 'Cotas',
    'valor_unit': 'Valor unitário',
    'credito': 'Crédito',
    'base_comissao': 'Base comissão',
    'valor_venda': 'Valor venda',
    'taxa_pct': 'Taxa %',
    'comissao_total': 'Comissão total',
}


def export_filename(today: date, extension: str = "csv") -> str:
    """vendas_YYYY-MM-DD.<extension>"""
    return f"vendas_{today.isoformat()}.{extension}"


def rows_for_export(df: pd.DataFrame) -> pd.DataFrame:
    """
    Flatten the enriched sales frame for export.

    Args:
        df: Frame from build_sales_frame() (derived fields present)

    Returns:
        DataFrame with EXPORT_COLUMNS, same row order
    """
    if df.empty:
        return pd.DataFrame(columns=EXPORT_COLUMNS)

    export_df = df[[c for c in EXPORT_COLUMNS if c in df.columns]].copy()
    export_df['consultor_name'] = df['consultor_name'].fillna('')

    statuses = pd.DataFrame(
        [normalize_parcelas(p) for p in df['parcelas']],
        columns=[f"p{i}" for i in range(1, NUM_PARCELAS + 1)],
        index=df.index,
    )
    export_df = pd.concat([export_df, statuses], axis=1)

    return export_df[EXPORT_COLUMNS].reset_index(drop=True)


class CommissionExport:
    """
    CSV / Excel generator for the commission dashboard.

    Usage:
        exporter = CommissionExport()
        csv_bytes = exporter.to_csv(filtered_df)
        excel_bytes = exporter.to_excel(filtered_df, ranking_df, kpis)

        st.download_button(
            label="Baixar CSV",
            data=csv_bytes,
            file_name=export_filename(today),
            mime="text/csv"
        )
    """

    def __init__(self):
        """Initialize with default styles."""
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        """Initialize reusable styles."""
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )

        self.header_font = Font(
            bold=True,
            color=EXCEL_STYLES['header_font_color'],
            size=11
        )

        self.title_font = Font(bold=True, size=16)
        self.subtitle_font = Font(bold=True, size=12)

        thin_border = Side(style='thin', color='000000')
        self.cell_border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border
        )

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.right_align = Alignment(horizontal='right', vertical='center')

        self.currency_format = EXCEL_STYLES['currency_format']
        self.percent_format = EXCEL_STYLES['percent_format']

    # =========================================================================
    # CSV
    # =========================================================================

    def to_csv(self, sales_df: pd.DataFrame) -> bytes:
        """CSV bytes of rows_for_export(sales_df)."""
        export_df = rows_for_export(sales_df)
        text = export_df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        logger.info(f"CSV export created: {len(export_df)} rows")
        return text.encode("utf-8-sig")

    # =========================================================================
    # EXCEL
    # =========================================================================

    def to_excel(
        self,
        sales_df: pd.DataFrame,
        ranking_df: pd.DataFrame = None,
        kpis: Dict = None,
        filter_summary: Optional[str] = None
    ) -> BytesIO:
        """
        Create formatted Excel report.

        Args:
            sales_df: Enriched (filtered) sales frame
            ranking_df: Optional output of aggregate_by_consultor()
            kpis: Optional output of calculate_kpis()
            filter_summary: Optional text describing the active filters

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_sales_sheet(rows_for_export(sales_df))

        if ranking_df is not None and not ranking_df.empty:
            self._create_ranking_sheet(ranking_df)

        if kpis:
            self._create_summary_sheet(kpis, filter_summary)

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info("Excel report created successfully")
        return output

    def _write_header(self, ws, headers, widths):
        for col_idx, (header, width) in enumerate(zip(headers, widths), 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = width

    def _create_sales_sheet(self, export_df: pd.DataFrame):
        """Sales sheet (always present, even without rows)."""
        ws = self.wb.active
        ws.title = "Vendas"

        headers = [EXPORT_HEADERS.get(col, col.upper()) for col in EXPORT_COLUMNS]
        widths = [12 if col.startswith('p') and col[1:].isdigit() else 18 for col in EXPORT_COLUMNS]
        self._write_header(ws, headers, widths)

        for row_idx, row in enumerate(export_df.itertuples(index=False), 2):
            for col_idx, (col_name, value) in enumerate(zip(EXPORT_COLUMNS, row), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border

                if col_name in EXPORT_MONEY_COLUMNS:
                    cell.number_format = self.currency_format
                    cell.alignment = self.right_align
                elif col_name == 'taxa_pct':
                    cell.number_format = self.percent_format
                    cell.alignment = self.right_align
                elif col_name == 'cotas':
                    cell.alignment = self.center_align

        ws.freeze_panes = 'A2'

    def _create_ranking_sheet(self, ranking_df: pd.DataFrame):
        ws = self.wb.create_sheet("Ranking")

        columns = list(RANKING_DISPLAY_COLUMNS)
        self._write_header(
            ws,
            [RANKING_DISPLAY_COLUMNS[c] for c in columns],
            [6 if c == 'rank' else 18 for c in columns]
        )

        for row_idx, row in enumerate(ranking_df[columns].itertuples(index=False), 2):
            for col_idx, (col_name, value) in enumerate(zip(columns, row), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border
                if col_name.endswith('_amount') or col_name == 'total_commission':
                    cell.number_format = self.currency_format
                    cell.alignment = self.right_align
                elif col_name in ('rank', 'sale_count'):
                    cell.alignment = self.center_align

        ws.freeze_panes = 'A2'

    def _create_summary_sheet(self, kpis: Dict, filter_summary: Optional[str]):
        """Summary sheet with KPI values."""
        ws = self.wb.create_sheet("Resumo", 0)

        ws.cell(row=1, column=1, value="Relatório de Comissões").font = self.title_font
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=3)

        ws.cell(row=3, column=1, value="Gerado em:")
        ws.cell(row=3, column=2, value=datetime.now().strftime('%Y-%m-%d %H:%M'))
        ws.cell(row=4, column=1, value="Filtros:")
        ws.cell(row=4, column=2, value=filter_summary or "Sem filtros")

        row = 6
        ws.cell(row=row, column=1, value="Indicadores").font = self.subtitle_font
        row += 1

        kpi_rows = [
            ("Comissão total", kpis.get('total_commission', 0), True),
            ("Pago", kpis.get('paid_amount', 0), True),
            ("Pendente", kpis.get('pending_amount', 0), True),
            ("Atrasado", kpis.get('overdue_amount', 0), True),
            ("Vendas", kpis.get('sale_count', 0), False),
            ("Ticket médio", kpis.get('average_ticket', 0), True),
        ]

        for label, value, is_money in kpi_rows:
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=value)
            cell.alignment = self.right_align
            if is_money:
                cell.number_format = self.currency_format
            row += 1

        ws.column_dimensions['A'].width = 22
        ws.column_dimensions['B'].width = 24
