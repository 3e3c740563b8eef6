# StockPulse/replenishment_engine/stock_status.py
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_RISK_VENDOR_MARKER = 'china'
DEFAULT_OVERSTOCK_MULTIPLIER = 1.5
DEFAULT_PRIORITY_CUTOFFS = {
    'risk_vendor': (30, 45),
    'default': (15, 30),
}
DEFAULT_URGENCY_CUTOFFS = (7, 14)
PRIORITY_ORDER = {'P1': 1, 'P2': 2, 'P3': 3}


def numeric_column(df: pd.DataFrame, column: str) -> pd.Series:
    """Column as floats; missing columns come back all-NaN."""
    if column not in df.columns:
        return pd.Series(np.nan, index=df.index, dtype=float)
    return pd.to_numeric(df[column], errors='coerce').astype(float)


def low_stock_mask(df: pd.DataFrame) -> pd.Series:
    """
    (WH + FBA) < PASD x (Lead Time + Transit).

    Rows without PASD, Lead Time or a numeric WH are out of scope and never
    flagged. Transit and FBA default to 0. A non-positive threshold never flags.
    """
    wh = numeric_column(df, 'wh')
    fba = numeric_column(df, 'fba').fillna(0)
    pasd = numeric_column(df, 'pasd')
    lead_time = numeric_column(df, 'lead_time')
    transit = numeric_column(df, 'transit').fillna(0)

    in_scope = pasd.notna() & lead_time.notna() & wh.notna()
    threshold = pasd * (lead_time + transit)
    available = wh + fba
    flagged = in_scope & (threshold > 0) & (available < threshold)
    return flagged.fillna(False).astype(bool)


def overstock_mask(df: pd.DataFrame, multiplier: float = DEFAULT_OVERSTOCK_MULTIPLIER) -> pd.Series:
    """WH > PASD x Order Frequency x 1.5, with WH/PASD defaulting to 0 and Order Frequency to 1."""
    wh = numeric_column(df, 'wh').fillna(0)
    pasd = numeric_column(df, 'pasd').fillna(0)
    order_freq = numeric_column(df, 'order_freq').fillna(1)
    return (wh > pasd * order_freq * multiplier).astype(bool)


def risk_vendor_mask(df: pd.DataFrame, marker: str = DEFAULT_RISK_VENDOR_MARKER) -> pd.Series:
    """True when either vendor column mentions the marker, case-insensitively."""
    flagged = pd.Series(False, index=df.index)
    if not marker:
        return flagged
    for column in ('vendor2', 'vendor_amz'):
        if column in df.columns:
            vendor_text = df[column].fillna('').astype(str)
            flagged = flagged | vendor_text.str.contains(marker, case=False, regex=False)
    return flagged.astype(bool)


def determine_priority(days_inv_in_hand, is_risk_vendor: bool, cutoffs: dict = None) -> str:
    """P1/P2/P3 from days of inventory in hand; designated-risk vendors get wider cutoffs."""
    cutoffs = cutoffs or DEFAULT_PRIORITY_CUTOFFS
    days = 0 if days_inv_in_hand is None or pd.isna(days_inv_in_hand) else days_inv_in_hand
    p1_below, p2_below = cutoffs['risk_vendor'] if is_risk_vendor else cutoffs['default']
    if days < p1_below:
        return 'P1'
    if days < p2_below:
        return 'P2'
    return 'P3'


def determine_urgency(days_inv_in_hand, cutoffs=DEFAULT_URGENCY_CUTOFFS) -> str:
    days = 0 if days_inv_in_hand is None or pd.isna(days_inv_in_hand) else days_inv_in_hand
    high_below, medium_below = cutoffs
    if days < high_below:
        return 'high'
    if days < medium_below:
        return 'medium'
    return 'low'


def _priority_cutoffs(parameters: dict) -> dict:
    configured = parameters.get('priority_cutoffs') or {}
    return {
        'risk_vendor': tuple(configured.get('risk_vendor', DEFAULT_PRIORITY_CUTOFFS['risk_vendor'])),
        'default': tuple(configured.get('default', DEFAULT_PRIORITY_CUTOFFS['default'])),
    }


def classify_stock(products_df: pd.DataFrame, parameters: dict = None) -> pd.DataFrame:
    """
    Attaches stock-health flags to every product:
    is_low_stock, is_overstock, is_risk_vendor, priority and urgency.
    The input frame is left untouched.
    """
    if products_df is None or products_df.empty:
        logger.warning("CLASSIFIER: Product data is empty. Nothing to classify.")
        return pd.DataFrame() if products_df is None else products_df.copy()

    parameters = parameters or {}
    priority_cutoffs = _priority_cutoffs(parameters)
    urgency_cutoffs = tuple(parameters.get('urgency_cutoffs', DEFAULT_URGENCY_CUTOFFS))

    df = products_df.copy()
    df['is_low_stock'] = low_stock_mask(df)
    df['is_overstock'] = overstock_mask(df, parameters.get('overstock_multiplier', DEFAULT_OVERSTOCK_MULTIPLIER))
    df['is_risk_vendor'] = risk_vendor_mask(df, parameters.get('risk_vendor_marker', DEFAULT_RISK_VENDOR_MARKER))

    days = numeric_column(df, 'days_inv_in_hand')
    df['priority'] = [
        determine_priority(d, risk, priority_cutoffs) for d, risk in zip(days, df['is_risk_vendor'])
    ]
    df['urgency'] = [determine_urgency(d, urgency_cutoffs) for d in days]

    logger.info(
        f"CLASSIFIER: {int(df['is_low_stock'].sum())} low stock, "
        f"{int(df['is_overstock'].sum())} overstocked, "
        f"{int(df['is_risk_vendor'].sum())} designated-risk vendor products out of {len(df)}."
    )
    return df
