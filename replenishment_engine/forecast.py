# StockPulse/replenishment_engine/forecast.py
import logging

import numpy as np
import pandas as pd

from .stock_status import numeric_column

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 90


def _check_horizon(horizon_days):
    if horizon_days < 0:
        raise ValueError(f"Forecast horizon must be zero or positive, got {horizon_days}.")


def project_depletion(products_df: pd.DataFrame, horizon_days: int = DEFAULT_HORIZON_DAYS):
    """
    Yields (day, aggregate_stock) for day = 1..horizon_days.

    Each product with both PASD and WH depletes linearly at PASD units per
    day, floored at zero; the curve is the sum across those products. No
    replenishment arrivals are modeled.
    """
    _check_horizon(horizon_days)
    if products_df is None or products_df.empty:
        stock = np.empty(0)
        pasd = np.empty(0)
    else:
        wh = numeric_column(products_df, 'wh')
        daily = numeric_column(products_df, 'pasd')
        valid = wh.notna() & daily.notna()
        stock = wh[valid].to_numpy()
        pasd = daily[valid].to_numpy()

    logger.debug(f"FORECAST: Projecting {len(stock)} products over {horizon_days} days.")
    for day in range(1, horizon_days + 1):
        yield day, float(np.maximum(0, stock - pasd * day).sum())


def project_product_depletion(product, horizon_days: int = DEFAULT_HORIZON_DAYS):
    """Same depletion curve for a single product row; empty when PASD or WH is absent."""
    _check_horizon(horizon_days)
    wh = product.get('wh')
    pasd = product.get('pasd')
    if wh is None or pasd is None or pd.isna(wh) or pd.isna(pasd):
        return
    for day in range(1, horizon_days + 1):
        yield day, max(0.0, float(wh) - float(pasd) * day)


def forecast_to_frame(points) -> pd.DataFrame:
    """Collects forecast points into a chart-ready frame with whole-unit stock."""
    forecast_df = pd.DataFrame(list(points), columns=['day', 'stock'])
    forecast_df['stock'] = forecast_df['stock'].round().astype(int)
    return forecast_df


def calculate_reorder_suggestions(products_df: pd.DataFrame, safety_factor: float = 1.5, cover_factor: float = 2.0) -> pd.DataFrame:
    """
    Reorder-point screen over current stock only.

    Flags products with WH below PASD x Lead Time x 1.5 and suggests
    ceil(PASD x Lead Time x 2 - WH) units, largest first.
    """
    if products_df is None or products_df.empty:
        return pd.DataFrame()

    df = products_df.copy()
    wh = numeric_column(df, 'wh')
    pasd = numeric_column(df, 'pasd')
    lead_time = numeric_column(df, 'lead_time')

    has_data = wh.notna() & pasd.notna() & lead_time.notna()
    reorder_point = pasd * lead_time * safety_factor
    df = df[has_data & (wh < reorder_point)].copy()
    if df.empty:
        logger.info("FORECAST: No products below their reorder point.")
        return df

    quantity = np.ceil(pasd[df.index] * lead_time[df.index] * cover_factor - wh[df.index])
    df['reorder_quantity'] = quantity.clip(lower=0).astype(int)
    df = df.sort_values('reorder_quantity', ascending=False, kind='stable')
    logger.info(f"FORECAST: {len(df)} products below their reorder point.")
    return df
