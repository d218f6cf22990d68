# commission_hub/sales_commission/data_processor.py
"""
Data Processor for Sales Commission

Turns stored sale records into one pandas DataFrame with every derived
figure recomputed. Filters, metrics, charts and exports all read this
frame, so derived values are never trusted from storage.

Pattern: "Load Once, Filter Many" - the page loads records once per
rerun, builds the frame, then filters/aggregates in memory.
"""

import re
import logging
from typing import Any, Iterable, Mapping
import pandas as pd

from .constants import SALE_FIELDS, DERIVED_FIELDS, PLACEHOLDER
from .calculator import compute_derived, normalize_parcelas

logger = logging.getLogger(__name__)

_MONTH_RE = re.compile(r"^\d{4}-\d{2}")

FRAME_COLUMNS = SALE_FIELDS + DERIVED_FIELDS + ['mes']


def month_key(data: Any) -> str:
    """YYYY-MM prefix of a sale date, or the placeholder bucket."""
    text = str(data) if data is not None else ""
    return text[:7] if _MONTH_RE.match(text) else PLACEHOLDER


def build_sales_frame(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Build the enriched sales DataFrame.

    Args:
        records: Stored sale records (dicts), in display order

    Returns:
        DataFrame with FRAME_COLUMNS, one row per record, input order kept
    """
    if isinstance(records, pd.DataFrame):
        records = records.to_dict('records')

    rows = []
    for record in records:
        row = {field: record.get(field) for field in SALE_FIELDS}
        row['parcelas'] = normalize_parcelas(record.get('parcelas'))
        row.update(compute_derived(row).to_dict())
        row['mes'] = month_key(row['data'])
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    logger.debug(f"Built sales frame: {len(df)} rows")
    return df
