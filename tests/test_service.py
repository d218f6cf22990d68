# tests/test_service.py

from datetime import datetime, timezone

import pytest

from commission_hub.sales_commission.normalizer import SaleValidationError
from commission_hub.sales_commission.service import SaleNotFoundError, SalePermissionError

NOW = datetime(2024, 6, 15, 10, 30, tzinfo=timezone.utc)


def test_create_binds_consultor_to_self(ana_service, raw_sale):
    sale = ana_service.create_sale({**raw_sale, 'user_id': 'u-bruno', 'consultor_name': 'Bruno'}, now=NOW)

    assert sale['user_id'] == 'u-ana'
    assert sale['consultor_name'] == 'Ana Lima'
    assert sale['cliente'] == 'João Pereira'
    assert sale['comissao_total'] == pytest.approx(75_000)
    assert sale['created_at'] == sale['updated_at'] == NOW.isoformat()
    assert len(sale['id']) == 32


def test_admin_creates_for_another_consultor(admin_service, raw_sale):
    sale = admin_service.create_sale({**raw_sale, 'user_id': 'u-bruno', 'consultor_name': 'Bruno Souza'})
    assert (sale['user_id'], sale['consultor_name']) == ('u-bruno', 'Bruno Souza')


def test_invalid_create_stores_nothing(ana_service, raw_sale):
    with pytest.raises(SaleValidationError):
        ana_service.create_sale({**raw_sale, 'cotas': '0'})
    assert ana_service.list_sales() == []


def test_list_is_scoped(ana_service, bruno_service, admin_service, raw_sale):
    ana_service.create_sale(raw_sale)
    bruno_service.create_sale(raw_sale)

    assert len(ana_service.list_sales()) == 1
    assert len(bruno_service.list_sales()) == 1
    assert len(admin_service.list_sales()) == 2


def test_update_allows_zero_quotas(ana_service, raw_sale):
    sale = ana_service.create_sale(raw_sale, now=NOW)
    later = datetime(2024, 6, 16, tzinfo=timezone.utc)

    updated = ana_service.update_sale(sale['id'], {**raw_sale, 'cotas': '0'}, now=later)

    assert updated['cotas'] == 0
    assert updated['comissao_total'] == 0
    assert updated['created_at'] == NOW.isoformat()
    assert updated['updated_at'] == later.isoformat()


def test_update_keeps_owner_when_admin_leaves_it_blank(ana_service, admin_service, raw_sale):
    sale = ana_service.create_sale(raw_sale)
    updated = admin_service.update_sale(sale['id'], {**raw_sale, 'parcelas': ['Pago'] * 6})

    assert (updated['user_id'], updated['consultor_name']) == ('u-ana', 'Ana Lima')
    assert updated['parcelas'] == ['Pago'] * 6


def test_update_still_requires_text_fields(ana_service, raw_sale):
    sale = ana_service.create_sale(raw_sale)
    with pytest.raises(SaleValidationError):
        ana_service.update_sale(sale['id'], {**raw_sale, 'cliente': ''})
    assert ana_service.repository.get_sale(sale['id'])['cliente'] == 'João Pereira'


def test_consultor_cannot_touch_another_sale(ana_service, bruno_service, raw_sale):
    sale = bruno_service.create_sale(raw_sale)

    with pytest.raises(SalePermissionError):
        ana_service.update_sale(sale['id'], raw_sale)
    with pytest.raises(SalePermissionError):
        ana_service.delete_sale(sale['id'])

    assert bruno_service.repository.get_sale(sale['id']) is not None


def test_missing_sale(ana_service, raw_sale):
    with pytest.raises(SaleNotFoundError):
        ana_service.update_sale('missing', raw_sale)
    with pytest.raises(SaleNotFoundError):
        ana_service.delete_sale('missing')


def test_delete(admin_service, ana_service, raw_sale):
    sale = ana_service.create_sale(raw_sale)
    assert admin_service.delete_sale(sale['id']) is True
    assert ana_service.list_sales() == []
