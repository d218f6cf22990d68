# tests/test_schedule.py

from datetime import date

import pytest

from commission_hub.sales_commission.schedule import (
    parse_sale_date,
    due_date,
    due_dates,
    is_overdue,
    installment_schedule,
    auto_mark_overdue,
)


@pytest.mark.parametrize("sale_date, index, expected", [
    ("2024-01-31", 1, date(2024, 2, 29)),
    ("2023-01-31", 1, date(2023, 2, 28)),
    ("2024-08-31", 6, date(2025, 2, 28)),
    ("2024-03-31", 1, date(2024, 4, 30)),
    ("2024-07-15", 6, date(2025, 1, 15)),
    (date(2024, 12, 10), 1, date(2025, 1, 10)),
])
def test_due_date_clamps_to_month_end(sale_date, index, expected):
    assert due_date(sale_date, index) == expected


@pytest.mark.parametrize("sale_date", [None, "", "sem data", "2024-13-01", "2024-02-30", "31/01/2024"])
def test_due_date_unreadable_sale_date(sale_date):
    assert due_date(sale_date, 1) is None


@pytest.mark.parametrize("index", [0, 7, -1])
def test_due_date_rejects_bad_index(index):
    with pytest.raises(ValueError):
        due_date("2024-01-01", index)


def test_parse_sale_date_ignores_time_suffix():
    assert parse_sale_date("2024-05-06T10:00:00Z") == date(2024, 5, 6)
    assert parse_sale_date("2024-02-30") is None


def test_due_dates_are_monthly():
    assert due_dates("2024-01-31") == [
        date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30),
        date(2024, 5, 31), date(2024, 6, 30), date(2024, 7, 31),
    ]


def test_is_overdue_day_granularity():
    today = date(2024, 6, 15)
    assert is_overdue(date(2024, 6, 14), today)
    assert not is_overdue(date(2024, 6, 15), today)
    assert not is_overdue(None, today)


def test_installment_schedule_marks_unpaid_past_due(today):
    sale = {'data': '2024-01-31', 'parcelas': ['Pago', 'Pendente', 'Atrasado', 'Pendente', 'Pendente', 'Pendente']}
    rows = installment_schedule(sale, today)

    assert [r.numero for r in rows] == [1, 2, 3, 4, 5, 6]
    # due: 02-29, 03-31, 04-30, 05-31, 06-30, 07-31
    assert [r.vencida for r in rows] == [False, True, True, True, False, False]


def test_auto_mark_overdue(today):
    marked = auto_mark_overdue(['Pago', 'Pendente', 'Pendente', 'Pendente', 'Pendente', 'Pendente'], '2024-01-31', today)
    assert marked == ['Pago', 'Atrasado', 'Atrasado', 'Atrasado', 'Pendente', 'Pendente']


def test_auto_mark_overdue_without_date_changes_nothing(today):
    assert auto_mark_overdue(['Pendente'] * 6, 'sem data', today) == ['Pendente'] * 6
