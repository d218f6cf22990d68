# commission_hub/sales_commission/constants.py
"""
Constants for Sales Commission Module

Centralized configuration for:
- Business rules (credit ceiling, installment count)
- Enumerations (installment status, insurance flag, commission base)
- Role definitions
- Color schemes and chart settings
- Export settings
"""

# =====================================================================
# BUSINESS RULES
# =====================================================================

# Maximum financeable credit amount (cotas x valor_unit is clamped to it)
LIMIT_CREDITO = 1_500_000

# Every sale pays its commission in six equal monthly installments
NUM_PARCELAS = 6

# =====================================================================
# ENUMERATIONS
# =====================================================================

STATUS_PENDENTE = "Pendente"
STATUS_PAGO = "Pago"
STATUS_ATRASADO = "Atrasado"

PARCELA_STATUSES = [STATUS_PENDENTE, STATUS_PAGO, STATUS_ATRASADO]

# Click-to-toggle order used by the installment editor
STATUS_CYCLE = {
    STATUS_PENDENTE: STATUS_PAGO,
    STATUS_PAGO: STATUS_ATRASADO,
    STATUS_ATRASADO: STATUS_PENDENTE,
}

# Derived count column per status
STATUS_COUNT_COLUMNS = {
    STATUS_PAGO: "pago_n",
    STATUS_PENDENTE: "pendente_n",
    STATUS_ATRASADO: "atrasado_n",
}

SEGURO_SIM = "Sim"
SEGURO_NAO = "Não"
SEGURO_OPTIONS = [SEGURO_SIM, SEGURO_NAO]

BASE_VENDA = "venda"
BASE_CREDITO = "credito"
BASE_OPTIONS = [BASE_CREDITO, BASE_VENDA]
BASE_LABELS = {BASE_VENDA: "Venda", BASE_CREDITO: "Crédito"}

# Filter sentinel meaning "no constraint on this dimension"
ALL = "Todos"

# Bucket for records without consultor name / valid sale date
PLACEHOLDER = "—"

# =====================================================================
# ROLE DEFINITIONS
# =====================================================================

ROLE_ADMIN = "admin"
ROLE_CONSULTOR = "consultor"

# Full access: can view and edit every consultor's sales
FULL_ACCESS_ROLES = [ROLE_ADMIN]

# Self access: can only view and edit own sales
SELF_ACCESS_ROLES = [ROLE_CONSULTOR]

# =====================================================================
# RECORD COLUMNS
# =====================================================================

SALE_TEXT_FIELDS = ["cliente", "produto", "data"]

SALE_FIELDS = [
    "id", "user_id", "consultor_name",
    "cliente", "produto", "data", "seguro",
    "cotas", "valor_unit", "valor_venda", "base_comissao", "taxa_pct",
    "parcelas", "created_at", "updated_at",
]

DERIVED_FIELDS = [
    "credito_raw", "credito", "base", "comissao_total", "parcela_valor",
    "pago_n", "pendente_n", "atrasado_n",
]

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    # Installment status
    "pago": "#28a745",                 # Green
    "pendente": "#ffc107",             # Amber
    "atrasado": "#dc3545",             # Red

    # Totals
    "total": "#1f77b4",                # Blue
    "accent": "#2563eb",

    # Misc
    "text_dark": "#333333",
    "text_light": "#666666",
    "grid": "#e0e0e0",
}

STATUS_COLORS = {
    STATUS_PAGO: COLORS["pago"],
    STATUS_PENDENTE: COLORS["pendente"],
    STATUS_ATRASADO: COLORS["atrasado"],
}

# =====================================================================
# CHART SETTINGS
# =====================================================================

CHART_WIDTH = 'container'
CHART_HEIGHT = 350
TOP_N_CONSULTORES = 15

# =====================================================================
# EXPORT SETTINGS
# =====================================================================

EXPORT_COLUMNS = [
    "consultor_name", "cliente", "produto", "data", "seguro", "cotas",
    "valor_unit", "credito", "base_comissao", "valor_venda", "taxa_pct",
    "comissao_total", "p1", "p2", "p3", "p4", "p5", "p6",
]

EXPORT_MONEY_COLUMNS = ["valor_unit", "credito", "valor_venda", "comissao_total"]

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "currency_format": '"R$" #,##0.00',
    "percent_format": '0.00',
    "date_format": 'YYYY-MM-DD',
}

# =====================================================================
# DISPLAY COLUMN MAPPINGS
# =====================================================================

SALES_DISPLAY_COLUMNS = {
    'consultor_name': 'Consultor',
    'cliente': 'Cliente',
    'produto': 'Produto',
    'data': 'Data',
    'seguro': 'Seguro',
    'cotas': 'Cotas',
    'valor_unit': 'Valor unit.',
    'credito': 'Crédito',
    'base_comissao': 'Base',
    'taxa_pct': 'Taxa %',
    'comissao_total': 'Comissão',
}

RANKING_DISPLAY_COLUMNS = {
    'rank': '#',
    'consultor_name': 'Consultor',
    'sale_count': 'Vendas',
    'total_commission': 'Total',
    'paid_amount': 'Pago',
    'pending_amount': 'Pendente',
    'overdue_amount': 'Atrasado',
}
