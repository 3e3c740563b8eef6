# StockPulse/replenishment_engine/bundling.py
import logging
import math
import re

import numpy as np
import pandas as pd

from .stock_status import overstock_mask

logger = logging.getLogger(__name__)

_FIRST_INTEGER = re.compile(r'\d+')


def extract_pack_size(variant) -> int:
    """
    Extracts the pack size from a variant label, e.g. "60 Tablets" -> 60.
    Returns 0 when the label is missing or has no digits.
    """
    if variant is None or (isinstance(variant, float) and math.isnan(variant)):
        return 0
    match = _FIRST_INTEGER.search(str(variant))
    return int(match.group(0)) if match else 0


def _value_or_zero(value) -> float:
    return 0.0 if value is None or pd.isna(value) else float(value)


def member_need(row) -> float:
    """Raw replenishment need of one variant: MP Demand - Transit - WH. Not clamped."""
    return _value_or_zero(row.get('mp_demand')) - _value_or_zero(row.get('transit')) - _value_or_zero(row.get('wh'))


def _resolve_group(group_df: pd.DataFrame) -> dict:
    """
    Picks the base unit of one product family and computes each member's
    bundle fields. Returns {row label: field dict}.
    """
    valid = group_df[group_df['pack_size'] > 0]
    # idxmin keeps the first occurrence on ties, i.e. encounter order
    base_label = valid['pack_size'].idxmin()
    base_row = group_df.loc[base_label]
    base_pack_size = int(base_row['pack_size'])
    base_unit_id = base_row['id']

    updates = {}
    bundled_skus = []
    final_to_order = 0.0

    for label, row in group_df.iterrows():
        pack_size = int(row['pack_size'])
        need = member_need(row)
        if label == base_label:
            updates[label] = {'is_base_unit': True, 'base_unit_id': base_unit_id, 'conversion_multiplier': 1}
            final_to_order += need
            continue

        multiplier = 1
        if pack_size > 0:
            multiplier = math.ceil(pack_size / base_pack_size)
            sku = row.get('sku')
            bundled_skus.append(sku if isinstance(sku, str) and sku else row['id'])
        updates[label] = {'is_base_unit': False, 'base_unit_id': base_unit_id, 'conversion_multiplier': multiplier}
        final_to_order += need * multiplier

    updates[base_label]['final_to_order_base_units'] = final_to_order
    updates[base_label]['bundled_skus'] = bundled_skus
    return updates


def calculate_bundle_information(products_df: pd.DataFrame, parameters: dict = None) -> pd.DataFrame:
    """
    Groups products by family, designates the smallest pack as the base unit
    and rolls every variant's replenishment need up into base-unit terms.

    Every input row is returned in its original order. Rows without a
    family name, singleton families and families without any parsable pack
    size pass through with only `pack_size` and `is_overstock` attached.
    """
    if products_df is None or products_df.empty:
        logger.warning("BUNDLE: Product data is empty. Nothing to bundle.")
        return pd.DataFrame() if products_df is None else products_df.copy()

    parameters = parameters or {}
    df = products_df.copy()
    df['pack_size'] = df['variant'].map(extract_pack_size).astype(int)
    df['is_overstock'] = overstock_mask(df, parameters.get('overstock_multiplier', 1.5))
    df['is_base_unit'] = False
    df['base_unit_id'] = None
    df['conversion_multiplier'] = 1
    df['bundled_skus'] = None
    df['final_to_order_base_units'] = np.nan

    family = df['product'].where(df['product'].notna() & (df['product'].astype(str).str.strip() != ''))
    base_units_found = 0

    for _, group_df in df[family.notna()].groupby(family.dropna(), sort=False):
        if len(group_df) <= 1 or not (group_df['pack_size'] > 0).any():
            continue

        for label, fields in _resolve_group(group_df).items():
            for column, value in fields.items():
                df.at[label, column] = value
        base_units_found += 1

    df['conversion_multiplier'] = df['conversion_multiplier'].astype(int)
    df['is_base_unit'] = df['is_base_unit'].astype(bool)

    logger.info(
        f"BUNDLE: Found {base_units_found} base units; "
        f"{int(df['is_overstock'].sum())} overstocked products out of {len(df)}."
    )
    return df


def get_bundle_groups(products_df: pd.DataFrame) -> pd.DataFrame:
    """One summary row per base unit, for review screens and reports."""
    columns = ['product', 'base_sku', 'base_pack_size', 'bundled_sku_count', 'bundled_skus', 'final_to_order_base_units']
    if products_df is None or products_df.empty or 'is_base_unit' not in products_df.columns:
        return pd.DataFrame(columns=columns)

    base_units = products_df[products_df['is_base_unit']]
    summary = pd.DataFrame({
        'product': base_units['product'],
        'base_sku': base_units['sku'],
        'base_pack_size': base_units['pack_size'],
        'bundled_sku_count': base_units['bundled_skus'].map(lambda skus: len(skus) if skus else 0),
        'bundled_skus': base_units['bundled_skus'],
        'final_to_order_base_units': base_units['final_to_order_base_units'],
    })
    return summary.reset_index(drop=True)[columns]
