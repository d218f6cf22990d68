# tests/test_access_control.py

from commission_hub.sales_commission.access_control import AccessControl
from commission_hub.sales_commission.filters import FilterSpec


def test_access_levels(admin_access, ana_access):
    assert admin_access.get_access_level() == 'full'
    assert ana_access.get_access_level() == 'self'
    assert AccessControl('ADMIN', 1).is_admin
    assert not AccessControl(None, None).is_admin


def test_scope_filter_drops_consultor_for_non_admin(admin_access, ana_access):
    spec = FilterSpec(consultor="Bruno Souza", status="Pago")
    assert admin_access.scope_filter(spec) == spec

    scoped = ana_access.scope_filter(spec)
    assert scoped.consultor is None
    assert scoped.status == "Pago"


def test_can_modify(admin_access, ana_access):
    sale = {'id': 's1', 'user_id': 'u-bruno'}
    assert admin_access.can_modify(sale)
    assert not ana_access.can_modify(sale)
    assert ana_access.can_modify({'id': 's2', 'user_id': 'u-ana'})


def test_consultor_is_always_bound_to_self(ana_access):
    owner = ana_access.resolve_owner({'user_id': 'u-bruno', 'consultor_name': 'Bruno Souza'})
    assert owner == ('u-ana', 'Ana Lima')


def test_admin_may_reassign(admin_access):
    assert admin_access.resolve_owner({'user_id': 'u-bruno', 'consultor_name': 'Bruno Souza'}) == ('u-bruno', 'Bruno Souza')


def test_admin_blank_owner_falls_back(admin_access):
    # create: the admin themselves
    assert admin_access.resolve_owner({'user_id': ' ', 'consultor_name': ''}) == ('u-admin', 'Administrador')

    # update: the current owner
    current = {'user_id': 'u-ana', 'consultor_name': 'Ana Lima'}
    assert admin_access.resolve_owner({}, current) == ('u-ana', 'Ana Lima')
