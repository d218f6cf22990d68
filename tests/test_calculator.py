# tests/test_calculator.py

import pandas as pd
import pytest

from commission_hub.sales_commission.calculator import compute_derived, coerce_quantities, normalize_parcelas, next_status
from commission_hub.sales_commission.normalizer import normalize_sale_input


def test_end_to_end_example():
    figures = compute_derived({
        'cotas': 10,
        'valor_unit': 200_000,
        'valor_venda': 0,
        'base_comissao': 'credito',
        'taxa_pct': 5,
        'parcelas': ['Pago', 'Pago', 'Pendente', 'Pendente', 'Pendente', 'Atrasado'],
    })

    assert figures.credito_raw == pytest.approx(2_000_000)
    assert figures.credito == pytest.approx(1_500_000)
    assert figures.comissao_total == pytest.approx(75_000)
    assert figures.parcela_valor == pytest.approx(12_500)
    assert (figures.pago_n, figures.pendente_n, figures.atrasado_n) == (2, 3, 1)
    assert figures.amount_for('Pago') == pytest.approx(25_000)
    assert figures.amount_for('Pendente') == pytest.approx(37_500)
    assert figures.amount_for('Atrasado') == pytest.approx(12_500)


def test_base_venda_uses_sale_value():
    figures = compute_derived({
        'cotas': 2, 'valor_unit': 50_000, 'valor_venda': 100_000,
        'base_comissao': 'venda', 'taxa_pct': 3,
    })
    assert figures.base == pytest.approx(100_000)
    assert figures.comissao_total == pytest.approx(3_000)


def test_missing_fields_count_as_zero():
    figures = compute_derived({})
    assert figures.credito == 0
    assert figures.comissao_total == 0
    assert figures.pendente_n == 6


def test_parcela_value_is_not_rounded():
    figures = compute_derived({'cotas': 1, 'valor_unit': 100, 'taxa_pct': 1})
    assert figures.parcela_valor == pytest.approx(1 / 6)


@pytest.mark.parametrize("parcelas", [
    None, [], ['Pago'] * 3, ['Atrasado'] * 8, ['x', None, 3], 'Pago', ('Pago', 'Pendente'),
])
def test_status_counts_always_sum_to_six(parcelas):
    figures = compute_derived({'parcelas': parcelas})
    assert figures.pago_n + figures.pendente_n + figures.atrasado_n == 6


def test_normalize_parcelas_truncates_and_pads():
    assert normalize_parcelas(['Pago'] * 8) == ['Pago'] * 6
    assert normalize_parcelas(['Atrasado']) == ['Atrasado'] + ['Pendente'] * 5
    assert normalize_parcelas('Pago') == ['Pendente'] * 6


def test_works_on_series_and_canonical_sale(raw_sale):
    canonical = normalize_sale_input(raw_sale)
    from_sale = compute_derived(canonical)
    from_series = compute_derived(pd.Series(canonical.to_raw_fields()))
    assert from_sale == from_series
    assert from_sale.comissao_total == pytest.approx(canonical.comissao_total)


@pytest.mark.parametrize("current, expected", [
    ('Pendente', 'Pago'),
    ('Pago', 'Atrasado'),
    ('Atrasado', 'Pendente'),
    ('bogus', 'Pago'),
    (None, 'Pago'),
    (['Pago'], 'Pago'),
    ({'status': 'Pago'}, 'Pago'),
])
def test_next_status_cycles(current, expected):
    assert next_status(current) == expected


@pytest.mark.parametrize("raw", [
    {'cotas': '2,5', 'valor_unit': '100', 'taxa_pct': '10'},
    {'cotas': '-2', 'valor_unit': '-100', 'taxa_pct': '10'},
    {'cotas': '3', 'valor_unit': '100', 'valor_venda': '-500', 'base_comissao': 'venda', 'taxa_pct': '10'},
    {'cotas': '1,9', 'valor_unit': '1.000,50', 'valor_venda': '2.000', 'base_comissao': 'venda', 'taxa_pct': '-5'},
])
def test_raw_input_figures_match_stored_figures(raw):
    raw = {'cliente': 'C', 'produto': 'P', 'data': '2024-01-15', **raw}
    preview = compute_derived(raw)
    saved = normalize_sale_input(raw, enforce_positive=False)

    assert preview.credito == pytest.approx(saved.credito)
    assert preview.comissao_total == pytest.approx(saved.comissao_total)
    assert preview.parcela_valor == pytest.approx(saved.parcela_valor)


def test_coerce_quantities():
    assert coerce_quantities({'cotas': '2,5', 'valor_unit': '-1', 'valor_venda': 'x', 'taxa_pct': '-3'}) == (2, 0.0, 0.0, -3.0)
    assert coerce_quantities({}) == (0, 0.0, 0.0, 0.0)
