# commission_hub/sales_commission/schedule.py
"""
Installment Schedule Generator

Installment N falls due N calendar months after the sale date. When the
sale day does not exist in the target month the due date is the last day
of that month (Jan 31 -> Feb 28/29, never a rollover into March).

All dates are naive calendar dates; "today" is always passed in by the
caller so every function here stays deterministic.
"""

import re
import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Tuple

from .constants import NUM_PARCELAS, STATUS_PAGO, STATUS_ATRASADO
from .calculator import normalize_parcelas

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")


@dataclass(frozen=True)
class Installment:
    """One row of the installment schedule."""
    numero: int
    vencimento: Optional[date]
    status: str
    vencida: bool


def _date_parts(value: Any) -> Optional[Tuple[int, int, int]]:
    """(year, month, day) from a date or ISO text; None when unreadable."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.year, value.month, value.day

    if not isinstance(value, str):
        return None

    match = _ISO_DATE_RE.match(value)
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    if year < 1 or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return year, month, day


def parse_sale_date(value: Any) -> Optional[date]:
    """Strictly parse a sale date; None when absent or invalid."""
    parts = _date_parts(value)
    if parts is None:
        return None
    try:
        return date(*parts)
    except ValueError:
        return None


def due_date(sale_date: Any, installment_index: int) -> Optional[date]:
    """
    Due date of one installment.

    Args:
        sale_date: date or ISO "YYYY-MM-DD" text
        installment_index: 1..6

    Returns:
        Due date, or None when the sale date is absent/unparseable
    """
    if not 1 <= installment_index <= NUM_PARCELAS:
        raise ValueError(f"installment_index must be between 1 and {NUM_PARCELAS}")

    start = parse_sale_date(sale_date)
    if start is None:
        return None

    year, month, day = start.year, start.month, start.day
    months = (month - 1) + installment_index
    target_year = year + months // 12
    target_month = months % 12 + 1

    try:
        last_day = calendar.monthrange(target_year, target_month)[1]
        return date(target_year, target_month, min(day, last_day))
    except ValueError:
        # beyond date.max
        return None


def due_dates(sale_date: Any) -> List[Optional[date]]:
    return [due_date(sale_date, index) for index in range(1, NUM_PARCELAS + 1)]


def is_overdue(due: Optional[date], today: date) -> bool:
    """
    True when the due date is strictly before today (day granularity).

    A "Pago" installment is never overdue; callers check the status first.
    """
    if due is None:
        return False
    if isinstance(due, datetime):
        due = due.date()
    if isinstance(today, datetime):
        today = today.date()
    return due < today


def installment_schedule(sale: Any, today: date) -> List[Installment]:
    """Six rows of (numero, vencimento, status, vencida) for a sale mapping."""
    sale_date = sale.get('data') if hasattr(sale, 'get') else getattr(sale, 'data', None)
    parcelas = sale.get('parcelas') if hasattr(sale, 'get') else getattr(sale, 'parcelas', None)

    rows = []
    for index, (status, due) in enumerate(zip(normalize_parcelas(parcelas), due_dates(sale_date)), start=1):
        rows.append(Installment(
            numero=index,
            vencimento=due,
            status=status,
            vencida=status != STATUS_PAGO and is_overdue(due, today),
        ))
    return rows


def auto_mark_overdue(parcelas: Any, sale_date: Any, today: date) -> List[str]:
    """
    New status list with every past-due, unpaid installment set to "Atrasado".

    Paid installments are left alone, as are installments not yet due.
    """
    marked = [
        STATUS_ATRASADO if status != STATUS_PAGO and is_overdue(due, today) else status
        for status, due in zip(normalize_parcelas(parcelas), due_dates(sale_date))
    ]
    logger.debug(f"auto_mark_overdue: {marked}")
    return marked


def today_utc() -> date:
    """Current UTC calendar date (boundary helper for pages)."""
    return datetime.now(timezone.utc).date()
