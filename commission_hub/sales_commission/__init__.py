# commission_hub/sales_commission/__init__.py
"""
Sales Commission Module

Commission computation and aggregation for the consultor dashboard.
All components are self-contained within this module.

Components:
- parsing / normalizer / calculator: one sale -> canonical fields + derived figures
- schedule: installment due dates and overdue detection
- data_processor: records -> enriched DataFrame
- filters / metrics: filter engine and KPI / ranking / monthly aggregation
- edit_session: in-progress edit of one sale
- access_control / repository / service: who sees what, storage, use-cases
- charts / export / fragments: Streamlit presentation

Usage:
    from commission_hub.sales_commission import (
        AccessControl,
        SalesRepository,
        SalesService,
        CommissionMetrics,
        FilterSpec,
        filter_sales,
        build_sales_frame,
    )
"""

from .parsing import parse_number, clamp_credito, exceeds_credit_limit
from .normalizer import normalize_sale_input, CanonicalSale, SaleValidationError
from .calculator import compute_derived, coerce_quantities, DerivedFigures, normalize_parcelas, next_status
from .schedule import (
    Installment,
    parse_sale_date,
    due_date,
    due_dates,
    is_overdue,
    installment_schedule,
    auto_mark_overdue,
    today_utc,
)
from .data_processor import build_sales_frame, month_key
from .filters import FilterSpec, filter_sales, validate_filters, consultor_options
from .metrics import CommissionMetrics
from .edit_session import EditSession
from .access_control import AccessControl
from .repository import SalesRepository
from .service import SalesService, SaleServiceError, SaleNotFoundError, SalePermissionError
from .export import CommissionExport, rows_for_export, export_filename
from .charts import CommissionCharts

# Constants
from .constants import (
    LIMIT_CREDITO,
    NUM_PARCELAS,
    PARCELA_STATUSES,
    STATUS_PENDENTE,
    STATUS_PAGO,
    STATUS_ATRASADO,
    ALL,
    FULL_ACCESS_ROLES,
    SELF_ACCESS_ROLES,
)

__all__ = [
    # Core
    'parse_number',
    'clamp_credito',
    'exceeds_credit_limit',
    'normalize_sale_input',
    'CanonicalSale',
    'SaleValidationError',
    'compute_derived',
    'coerce_quantities',
    'DerivedFigures',
    'normalize_parcelas',
    'next_status',
    'Installment',
    'parse_sale_date',
    'due_date',
    'due_dates',
    'is_overdue',
    'installment_schedule',
    'auto_mark_overdue',
    'today_utc',
    'build_sales_frame',
    'month_key',
    'FilterSpec',
    'filter_sales',
    'validate_filters',
    'consultor_options',
    'CommissionMetrics',
    'EditSession',

    # Boundary
    'AccessControl',
    'SalesRepository',
    'SalesService',
    'SaleServiceError',
    'SaleNotFoundError',
    'SalePermissionError',

    # Presentation
    'CommissionExport',
    'rows_for_export',
    'export_filename',
    'CommissionCharts',

    # Constants
    'LIMIT_CREDITO',
    'NUM_PARCELAS',
    'PARCELA_STATUSES',
    'STATUS_PENDENTE',
    'STATUS_PAGO',
    'STATUS_ATRASADO',
    'ALL',
    'FULL_ACCESS_ROLES',
    'SELF_ACCESS_ROLES',
]

__version__ = '1.0.0'
