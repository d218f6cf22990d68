# tests/test_edit_session.py

import pytest

from commission_hub.sales_commission.edit_session import EditSession
from commission_hub.sales_commission.normalizer import normalize_sale_input


@pytest.fixture
def session(sample_records):
    return EditSession.from_record(sample_records[0])


def test_from_record_repairs_parcelas(sample_records):
    session = EditSession.from_record(sample_records[2])
    assert session.sale_id == 's3'
    assert session.parcelas == ('Pago',) + ('Pendente',) * 5


def test_operations_return_new_sessions(session):
    changed = session.with_fields(cliente="Outro")
    assert changed.fields['cliente'] == "Outro"
    assert session.fields['cliente'] == "Cliente A"

    cycled = session.cycle_status(3)
    assert cycled.parcelas[2] == 'Pago'
    assert session.parcelas[2] == 'Pendente'


def test_cycle_status_wraps(session):
    # installment 6 starts as Atrasado
    assert session.cycle_status(6).parcelas[5] == 'Pendente'
    assert session.cycle_status(1).parcelas[0] == 'Atrasado'


def test_with_status_validates(session):
    with pytest.raises(ValueError):
        session.with_status(0, 'Pago')
    with pytest.raises(ValueError):
        session.with_status(1, 'Quitado')


def test_preview_follows_edits(session):
    assert session.preview().comissao_total == pytest.approx(75_000)
    figures = session.with_fields(taxa_pct='10').preview()
    assert figures.comissao_total == pytest.approx(150_000)
    assert figures.pago_n == 2


def test_with_overdue_marked(session, today):
    marked = session.with_overdue_marked(today)
    # sale 2024-01-31: installments 1-4 are due before 2024-06-15
    assert marked.parcelas == ('Pago', 'Pago', 'Atrasado', 'Atrasado', 'Pendente', 'Atrasado')


def test_to_raw_fields_round_trips_through_service_input(session):
    raw = session.cycle_status(3).to_raw_fields()
    assert raw['parcelas'][2] == 'Pago'
    assert raw['cliente'] == 'Cliente A'
    assert 'id' not in raw


def test_schedule(session, today):
    rows = session.schedule(today)
    assert len(rows) == 6
    assert rows[0].vencimento.isoformat() == '2024-02-29'


def test_preview_matches_saved_figures(session):
    edited = session.with_fields(cotas="2,5", valor_unit="100", valor_venda="-500", base_comissao="venda", taxa_pct="10")
    saved = normalize_sale_input(edited.to_raw_fields(), enforce_positive=False)

    assert saved.comissao_total == 0
    assert edited.preview().comissao_total == pytest.approx(saved.comissao_total)
    assert edited.with_fields(base_comissao="credito").preview().comissao_total == pytest.approx(20)
