# tests/test_metrics.py

import pandas as pd
import pytest

from commission_hub.sales_commission.data_processor import build_sales_frame, month_key
from commission_hub.sales_commission.filters import FilterSpec, filter_sales
from commission_hub.sales_commission.metrics import CommissionMetrics, RANKING_COLUMNS, SERIES_COLUMNS


@pytest.fixture
def sales_df(sample_records):
    return build_sales_frame(sample_records)


def test_single_sale_kpis(sample_records):
    kpis = CommissionMetrics(build_sales_frame(sample_records[:1])).calculate_kpis()

    assert kpis['total_commission'] == pytest.approx(75_000)
    assert kpis['paid_amount'] == pytest.approx(25_000)
    assert kpis['pending_amount'] == pytest.approx(37_500)
    assert kpis['overdue_amount'] == pytest.approx(12_500)
    assert kpis['sale_count'] == 1
    assert kpis['installment_count'] == 6


def test_kpis_over_all_sales(sales_df):
    kpis = CommissionMetrics(sales_df).calculate_kpis()

    assert kpis['total_commission'] == pytest.approx(87_600)
    assert kpis['paid_amount'] == pytest.approx(31_600)
    assert kpis['pending_amount'] == pytest.approx(43_500)
    assert kpis['overdue_amount'] == pytest.approx(12_500)
    assert kpis['sale_count'] == 4
    assert kpis['paid_installments'] + kpis['pending_installments'] + kpis['overdue_installments'] == 24
    assert kpis['average_ticket'] == pytest.approx(87_600 / 4)
    assert kpis['paid_percent'] == pytest.approx(31_600 / 87_600 * 100)


def test_status_amounts_add_up_to_total(sales_df):
    kpis = CommissionMetrics(sales_df).calculate_kpis()
    assert kpis['paid_amount'] + kpis['pending_amount'] + kpis['overdue_amount'] == pytest.approx(kpis['total_commission'])


def test_empty_frame_gives_zeros():
    metrics = CommissionMetrics(build_sales_frame([]))
    kpis = metrics.calculate_kpis()
    assert kpis['total_commission'] == 0
    assert kpis['average_ticket'] == 0
    assert metrics.aggregate_by_consultor().columns.tolist() == RANKING_COLUMNS
    assert metrics.aggregate_by_month().empty
    assert metrics.top_consultor() is None


def test_ranking_order(sales_df):
    ranking = CommissionMetrics(sales_df).aggregate_by_consultor()

    assert ranking['consultor_name'].tolist() == ['Maria Souza', '—', 'Carlos Dias']
    assert ranking['rank'].tolist() == [1, 2, 3]

    maria = ranking.iloc[0]
    assert maria['sale_count'] == 2
    assert maria['total_commission'] == pytest.approx(81_000)
    assert maria['paid_amount'] == pytest.approx(31_000)


def test_ranking_ties_keep_first_appearance():
    records = [
        {'id': str(i), 'consultor_name': name, 'cliente': 'c', 'produto': 'p', 'data': '2024-01-01',
         'cotas': 1, 'valor_unit': 1000, 'taxa_pct': 6, 'parcelas': ['Pago'] * 6}
        for i, name in enumerate(['Zeca', 'Ana', 'Bia'])
    ]
    df = build_sales_frame(records)
    ranking = CommissionMetrics(df).aggregate_by_consultor()
    assert ranking['consultor_name'].tolist() == ['Zeca', 'Ana', 'Bia']

    reversed_ranking = CommissionMetrics(df.iloc[::-1]).aggregate_by_consultor()
    assert reversed_ranking['consultor_name'].tolist() == ['Bia', 'Ana', 'Zeca']


def test_ranking_tie_break_on_total_then_count():
    base = {'cliente': 'c', 'produto': 'p', 'data': '2024-01-01', 'parcelas': ['Pendente'] * 6}
    records = [
        {**base, 'id': '1', 'consultor_name': 'Um', 'cotas': 1, 'valor_unit': 1000, 'taxa_pct': 10},
        {**base, 'id': '2', 'consultor_name': 'Dois', 'cotas': 1, 'valor_unit': 2000, 'taxa_pct': 10},
        {**base, 'id': '3', 'consultor_name': 'Tres', 'cotas': 1, 'valor_unit': 500, 'taxa_pct': 10},
        {**base, 'id': '4', 'consultor_name': 'Tres', 'cotas': 1, 'valor_unit': 500, 'taxa_pct': 10},
    ]
    ranking = CommissionMetrics(build_sales_frame(records)).aggregate_by_consultor()
    # Dois: 200 total; Um and Tres both 100 total, Tres has more sales
    assert ranking['consultor_name'].tolist() == ['Dois', 'Tres', 'Um']


def test_monthly_series(sales_df):
    series = CommissionMetrics(sales_df).aggregate_by_month()

    assert series.columns.tolist() == SERIES_COLUMNS
    assert series['mes'].tolist() == ['2024-01', '2024-02', '—']
    assert series['total_commission'].tolist() == pytest.approx([75_000, 9_000, 3_600])
    assert series['sale_count'].tolist() == [1, 2, 1]


def test_aggregate_matches_individual_calls(sales_df):
    filtered = filter_sales(sales_df, FilterSpec(status="Pago"))
    metrics = CommissionMetrics(filtered)
    combined = metrics.aggregate()

    assert combined['kpis'] == metrics.calculate_kpis()
    pd.testing.assert_frame_equal(combined['ranking'], metrics.aggregate_by_consultor())
    pd.testing.assert_frame_equal(combined['series'], metrics.aggregate_by_month())


def test_frame_recomputes_stored_derived_values(sample_records):
    tampered = [{**sample_records[0], 'comissao_total': 1.0, 'credito': 2_000_000}]
    df = build_sales_frame(tampered)
    assert df.loc[0, 'comissao_total'] == pytest.approx(75_000)
    assert df.loc[0, 'credito'] == pytest.approx(1_500_000)


@pytest.mark.parametrize("data, expected", [("2024-03-05", "2024-03"), ("2024-3-5", "—"), (None, "—"), ("", "—")])
def test_month_key(data, expected):
    assert month_key(data) == expected
