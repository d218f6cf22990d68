# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Each test gets its own in-memory SQLite engine (StaticPool keeps the
#   single connection alive so every `connect()` sees the same database)
# - Sample records mirror what SalesRepository returns (parcelas as lists)
# - "today" is always fixed; nothing reads the clock
# ---------------------------------------------------------------------

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from commission_hub.sales_commission.access_control import AccessControl
from commission_hub.sales_commission.repository import SalesRepository
from commission_hub.sales_commission.service import SalesService


@pytest.fixture
def today():
    return date(2024, 6, 15)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield eng
    eng.dispose()


@pytest.fixture
def repository(engine):
    repo = SalesRepository(engine)
    repo.init_schema()
    return repo


@pytest.fixture
def admin_access():
    return AccessControl(user_role="admin", user_id="u-admin", user_name="Administrador")


@pytest.fixture
def ana_access():
    return AccessControl(user_role="consultor", user_id="u-ana", user_name="Ana Lima")


@pytest.fixture
def bruno_access():
    return AccessControl(user_role="consultor", user_id="u-bruno", user_name="Bruno Souza")


@pytest.fixture
def admin_service(repository, admin_access):
    return SalesService(repository, admin_access)


@pytest.fixture
def ana_service(repository, ana_access):
    return SalesService(repository, ana_access)


@pytest.fixture
def bruno_service(repository, bruno_access):
    return SalesService(repository, bruno_access)


@pytest.fixture
def raw_sale():
    """Form input as typed (pt-BR numbers)."""
    return {
        'cliente': '  João Pereira ',
        'produto': 'Consórcio Auto',
        'data': '2024-01-15',
        'seguro': 'Sim',
        'cotas': '10',
        'valor_unit': '200.000',
        'valor_venda': '0',
        'base_comissao': 'credito',
        'taxa_pct': '5',
    }


def _record(sale_id, consultor_name, cliente, data, cotas, valor_unit, taxa_pct, parcelas,
            base_comissao='credito', valor_venda=0, user_id=None, created_at=None):
    created_at = created_at or f"{data}T12:00:00+00:00"
    return {
        'id': sale_id,
        'user_id': user_id or f"u-{sale_id}",
        'consultor_name': consultor_name,
        'cliente': cliente,
        'produto': 'Consórcio Imóvel',
        'data': data,
        'seguro': 'Não',
        'cotas': cotas,
        'valor_unit': valor_unit,
        'valor_venda': valor_venda,
        'base_comissao': base_comissao,
        'taxa_pct': taxa_pct,
        'parcelas': parcelas,
        'created_at': created_at,
        'updated_at': created_at,
    }


@pytest.fixture
def sample_records():
    """
    s1: Maria Souza, credit clamped to 1.5M, 5% -> 75k (2 Pago, 3 Pendente, 1 Atrasado)
    s2: Carlos Dias, base venda 100k at 3% -> 3k, all Pendente
    s3: no consultor name, malformed parcelas
    s4: Maria Souza again, different month
    """
    return [
        _record('s1', 'Maria Souza', 'Cliente A', '2024-01-31', 10, 200_000, 5,
                ['Pago', 'Pago', 'Pendente', 'Pendente', 'Pendente', 'Atrasado'], user_id='u-maria'),
        _record('s2', 'Carlos Dias', 'Cliente B', '2024-02-10', 2, 50_000, 3,
                ['Pendente'] * 6, base_comissao='venda', valor_venda=100_000, user_id='u-carlos'),
        _record('s3', None, 'Cliente C', 'sem data', 1, 60_000, 6,
                ['Pago', 'Quitado'], user_id='u-x', created_at='2024-01-01T09:00:00+00:00'),
        _record('s4', 'Maria Souza', 'Cliente D', '2024-02-20', 1, 120_000, 5,
                ['Pago'] * 6, user_id='u-maria'),
    ]
