# tests/test_charts.py

import pytest

from commission_hub.sales_commission.charts import CommissionCharts
from commission_hub.sales_commission.data_processor import build_sales_frame
from commission_hub.sales_commission.metrics import CommissionMetrics


@pytest.fixture
def aggregates(sample_records):
    return CommissionMetrics(build_sales_frame(sample_records)).aggregate()


@pytest.fixture
def empty_aggregates():
    return CommissionMetrics(build_sales_frame([])).aggregate()


def _is_placeholder(spec):
    return spec['mark']['type'] == 'text' and 'layer' not in spec


def test_monthly_status_chart(aggregates):
    spec = CommissionCharts.build_monthly_status_chart(aggregates['series']).to_dict()

    assert len(spec['layer']) == 2
    assert spec['layer'][0]['mark']['type'] == 'bar'


def test_ranking_chart_limits_to_top_n(aggregates):
    chart = CommissionCharts.build_ranking_chart(aggregates['ranking'], top_n=2)
    spec = chart.to_dict()

    assert len(spec['layer']) == 2
    names = {
        tuple(row['consultor_name'] for row in rows)
        for rows in spec['datasets'].values()
    }
    assert names == {('Maria Souza', '—')}


def test_status_donut(aggregates):
    spec = CommissionCharts.build_status_donut(aggregates['kpis']).to_dict()
    assert spec['mark']['type'] == 'arc'


def test_empty_inputs_give_placeholder(empty_aggregates):
    charts = [
        CommissionCharts.build_monthly_status_chart(empty_aggregates['series']),
        CommissionCharts.build_ranking_chart(empty_aggregates['ranking']),
        CommissionCharts.build_status_donut(empty_aggregates['kpis']),
    ]
    for chart in charts:
        assert _is_placeholder(chart.to_dict())
