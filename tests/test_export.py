# tests/test_export.py

import csv
import io
from datetime import date

import pytest
from openpyxl import load_workbook

from commission_hub.sales_commission.constants import EXPORT_COLUMNS
from commission_hub.sales_commission.data_processor import build_sales_frame
from commission_hub.sales_commission.export import CommissionExport, rows_for_export, export_filename
from commission_hub.sales_commission.metrics import CommissionMetrics


@pytest.fixture
def sales_df(sample_records):
    return build_sales_frame(sample_records)


def test_rows_for_export_columns_and_values(sales_df):
    rows = rows_for_export(sales_df)

    assert rows.columns.tolist() == EXPORT_COLUMNS
    first = rows.iloc[0]
    assert first['credito'] == pytest.approx(1_500_000)
    assert first['comissao_total'] == pytest.approx(75_000)
    assert [first[f"p{i}"] for i in range(1, 7)] == ['Pago', 'Pago', 'Pendente', 'Pendente', 'Pendente', 'Atrasado']

    # missing consultor name exports as an empty cell
    assert rows.iloc[2]['consultor_name'] == ''
    assert rows.iloc[2]['p2'] == 'Pendente'


def test_rows_for_export_empty():
    assert rows_for_export(build_sales_frame([])).columns.tolist() == EXPORT_COLUMNS


def test_csv_has_bom_and_quotes_every_cell(sales_df):
    data = CommissionExport().to_csv(sales_df)

    assert data.startswith(b"\xef\xbb\xbf")
    text = data.decode("utf-8-sig")
    lines = text.splitlines()
    assert lines[0].startswith('"consultor_name","cliente"')
    assert all(line.startswith('"') and line.endswith('"') for line in lines)

    parsed = list(csv.reader(io.StringIO(text)))
    assert len(parsed) == 1 + len(sales_df)


def test_excel_sheets(sales_df):
    aggregates = CommissionMetrics(sales_df).aggregate()
    output = CommissionExport().to_excel(sales_df, aggregates['ranking'], aggregates['kpis'], "Sem filtros")

    wb = load_workbook(output)
    assert wb.sheetnames == ["Resumo", "Vendas", "Ranking"]

    ws = wb["Vendas"]
    assert ws.max_row == 1 + len(sales_df)
    assert ws.freeze_panes == "A2"
    assert ws.cell(row=2, column=EXPORT_COLUMNS.index('comissao_total') + 1).value == pytest.approx(75_000)


def test_excel_without_rows_still_has_sales_sheet():
    wb = load_workbook(CommissionExport().to_excel(build_sales_frame([])))
    assert wb.sheetnames == ["Vendas"]


def test_export_filename():
    assert export_filename(date(2024, 6, 15)) == "vendas_2024-06-15.csv"
    assert export_filename(date(2024, 6, 15), "xlsx") == "vendas_2024-06-15.xlsx"
