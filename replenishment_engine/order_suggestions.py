# StockPulse/replenishment_engine/order_suggestions.py
import logging

import numpy as np
import pandas as pd

from .stock_status import PRIORITY_ORDER, determine_priority, determine_urgency, numeric_column

logger = logging.getLogger(__name__)

SUGGESTION_COLUMNS = [
    'product_id', 'product_name', 'sku', 'vendor', 'current_stock',
    'suggested_order_quantity', 'final_order_quantity', 'priority', 'urgency',
    'reason', 'is_risk_vendor', 'days_inv_in_hand', 'days_inv_total',
    'is_base_unit', 'is_bundled_variant', 'base_unit_name', 'base_unit_sku', 'pack_size', 'bundled_skus',
]


def _number(value, default=0.0) -> float:
    return default if value is None or pd.isna(value) else float(value)


def _flag(row, column) -> bool:
    value = row.get(column)
    return bool(value) if value is not None and not pd.isna(value) else False


def is_bundled_variant(row) -> bool:
    """A non-base member of a bundle; its need has been folded into the base unit."""
    base_unit_id = row.get('base_unit_id')
    has_base = isinstance(base_unit_id, str) and base_unit_id != ''
    return has_base and not _flag(row, 'is_base_unit')


def vendor_label(row) -> str:
    for column in ('vendor2', 'vendor_amz'):
        value = row.get(column)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return 'Unknown'


def needs_ordering(row) -> bool:
    if _number(row.get('to_order')) > 0:
        return True
    if _flag(row, 'is_base_unit') and _number(row.get('final_to_order_base_units')) > 0:
        return True
    return _flag(row, 'is_low_stock')


def suggested_quantity(row) -> float:
    final_to_order = row.get('final_to_order_base_units')
    if _flag(row, 'is_base_unit') and final_to_order is not None and not pd.isna(final_to_order):
        return float(final_to_order)
    return _number(row.get('to_order'))


def build_reason(row, days_inv_in_hand: float, is_risk_vendor: bool, base_unit_sku: str) -> str:
    """Explanatory text only; it plays no part in eligibility or ranking."""
    parts = [f"{days_inv_in_hand:.1f} days of inventory in hand."]
    if is_risk_vendor:
        parts.append("Designated-risk vendor.")

    bundled_skus = row.get('bundled_skus')
    if _flag(row, 'is_base_unit') and isinstance(bundled_skus, list) and bundled_skus:
        parts.append(f"Includes {len(bundled_skus)} bundled SKUs.")
    elif is_bundled_variant(row):
        parts.append(f"Bundled with base SKU: {base_unit_sku}.")
    elif _number(row.get('to_order')) != 0:
        parts.append("Sheet suggests ordering.")
    else:
        parts.append("Low stock alert.")
    return ' '.join(parts)


def generate_order_suggestions(products_df: pd.DataFrame) -> pd.DataFrame:
    """
    Builds the ranked list of recommended purchase actions.

    A product is suggested when its sheet To Order is positive, when it is a
    base unit with a positive rolled-up need, or when it is flagged low stock.
    Bundled variants always carry a final order quantity of zero.
    Ranked by priority (P1 first), then by ascending days of inventory in hand.
    """
    if products_df is None or products_df.empty:
        logger.warning("SUGGEST: Product data is empty. No order suggestions generated.")
        return pd.DataFrame(columns=SUGGESTION_COLUMNS)

    ids_to_rows = {row['id']: row for _, row in products_df.iterrows()}

    suggestions = []
    for _, row in products_df.iterrows():
        if not needs_ordering(row):
            continue

        days = _number(row.get('days_inv_in_hand'))
        is_risk_vendor = _flag(row, 'is_risk_vendor')
        priority = row.get('priority')
        if not isinstance(priority, str):
            priority = determine_priority(days, is_risk_vendor)
        urgency = row.get('urgency')
        if not isinstance(urgency, str):
            urgency = determine_urgency(days)

        bundled_variant = is_bundled_variant(row)
        base_unit_name, base_unit_sku = '', ''
        if bundled_variant:
            base_row = ids_to_rows.get(row['base_unit_id'])
            if base_row is not None:
                base_unit_name = base_row.get('name') or ''
                base_unit_sku = base_row.get('sku') or ''

        suggested = suggested_quantity(row)
        final_quantity = 0.0 if bundled_variant else suggested

        suggestions.append({
            'product_id': row['id'],
            'product_name': row.get('name'),
            'sku': row.get('sku'),
            'vendor': vendor_label(row),
            'current_stock': _number(row.get('wh')) + _number(row.get('fba')),
            'suggested_order_quantity': suggested,
            'final_order_quantity': final_quantity,
            'priority': priority,
            'urgency': urgency,
            'reason': build_reason(row, days, is_risk_vendor, base_unit_sku),
            'is_risk_vendor': is_risk_vendor,
            'days_inv_in_hand': days,
            'days_inv_total': _number(row.get('days_inv_total')),
            'is_base_unit': _flag(row, 'is_base_unit'),
            'is_bundled_variant': bundled_variant,
            'base_unit_name': base_unit_name,
            'base_unit_sku': base_unit_sku,
            'pack_size': int(_number(row.get('pack_size'))),
            'bundled_skus': row.get('bundled_skus') if isinstance(row.get('bundled_skus'), list) else [],
        })

    suggestions_df = pd.DataFrame(suggestions, columns=SUGGESTION_COLUMNS)
    if suggestions_df.empty:
        logger.info("SUGGEST: No products require action.")
        return suggestions_df

    suggestions_df['_priority_rank'] = suggestions_df['priority'].map(PRIORITY_ORDER).fillna(len(PRIORITY_ORDER) + 1)
    suggestions_df = suggestions_df.sort_values(
        ['_priority_rank', 'days_inv_in_hand'], kind='stable'
    ).drop(columns='_priority_rank').reset_index(drop=True)

    logger.info(f"SUGGEST: Generated {len(suggestions_df)} order suggestions from {len(products_df)} products.")
    return suggestions_df


def filter_order_suggestions(
    suggestions_df: pd.DataFrame,
    search: str = None,
    priority: str = None,
    vendor: str = None,
    exclude_bundled_variants: bool = False,
) -> pd.DataFrame:
    """Applies the suggestion-list filters; None or 'all' disables a filter. Ranking is preserved."""
    if suggestions_df is None or suggestions_df.empty:
        return pd.DataFrame(columns=SUGGESTION_COLUMNS)

    filtered_df = suggestions_df
    if search:
        query = search.strip().lower()
        matches_name = filtered_df['product_name'].fillna('').astype(str).str.lower().str.contains(query, regex=False)
        matches_sku = filtered_df['sku'].fillna('').astype(str).str.lower().str.contains(query, regex=False)
        filtered_df = filtered_df[matches_name | matches_sku]
    if priority and priority != 'all':
        filtered_df = filtered_df[filtered_df['priority'] == priority]
    if vendor and vendor != 'all':
        filtered_df = filtered_df[filtered_df['vendor'] == vendor]
    if exclude_bundled_variants:
        filtered_df = filtered_df[~filtered_df['is_bundled_variant'].astype(bool)]
    return filtered_df.reset_index(drop=True)


def get_vendor_list(suggestions_df: pd.DataFrame) -> list:
    if suggestions_df is None or suggestions_df.empty:
        return []
    return sorted(suggestions_df['vendor'].dropna().unique().tolist())


def get_priority_counts(suggestions_df: pd.DataFrame) -> dict:
    counts = {level: 0 for level in PRIORITY_ORDER}
    if suggestions_df is not None and not suggestions_df.empty:
        for level, count in suggestions_df['priority'].value_counts().items():
            if level in counts:
                counts[level] = int(count)
    counts['total'] = 0 if suggestions_df is None else len(suggestions_df)
    return counts


def build_vendor_order_lines(products_df: pd.DataFrame, vendor: str, hide_non_positive: bool = True, cover_days: int = 30) -> list:
    """
    Collects (product row, quantity) pairs for a bulk order to one vendor.

    Base units order their rolled-up need and bundled variants order nothing.
    Other products order their sheet To Order, or PASD x cover_days - WH when
    the sheet has none.
    """
    if products_df is None or products_df.empty or not vendor:
        return []

    vendor_mask = pd.Series(False, index=products_df.index)
    for column in ('vendor2', 'vendor_amz'):
        if column in products_df.columns:
            vendor_mask = vendor_mask | (products_df[column] == vendor)

    pasd = numeric_column(products_df, 'pasd').fillna(0)
    wh = numeric_column(products_df, 'wh').fillna(0)

    lines = []
    for label, row in products_df[vendor_mask].iterrows():
        if is_bundled_variant(row):
            quantity = 0
        elif _flag(row, 'is_base_unit') and not pd.isna(row.get('final_to_order_base_units', np.nan)):
            quantity = int(round(row['final_to_order_base_units']))
        elif _number(row.get('to_order')) != 0:
            quantity = int(round(row['to_order']))
        else:
            quantity = max(int(round(pasd[label] * cover_days - wh[label])), 0)

        if hide_non_positive and quantity <= 0:
            continue
        lines.append((row, quantity))

    logger.info(f"SUGGEST: Built {len(lines)} order lines for vendor '{vendor}'.")
    return lines
