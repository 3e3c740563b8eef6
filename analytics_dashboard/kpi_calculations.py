# StockPulse/analytics_dashboard/kpi_calculations.py
import logging

import numpy as np
import pandas as pd

from replenishment_engine.stock_status import low_stock_mask, overstock_mask, numeric_column

logger = logging.getLogger(__name__)

EMPTY_METRICS = {
    'total_products': 0,
    'total_value': 0,
    'low_stock_items': 0,
    'out_of_stock_items': 0,
    'overstock_items': 0,
    'avg_drr': 0,
    'avg_doc': 0,
    'target_achievement': 0,
    'inventory_health_score': 0,
    'total_transit': 0,
    'items_in_transit': 0,
    'total_to_order': 0,
    'items_to_order': 0,
    'avg_pasd': 0,
    'overstock_rate': 0,
    'stockout_rate': 0,
}


def calculate_health_score(stockout_rate: float, target_achievement: float, avg_drr: float) -> int:
    """
    Blended 0-100 inventory health score.
    The weights are a business heuristic awaiting review, not a derived model.
    """
    efficiency = (100 - stockout_rate * 0.5 + target_achievement * 0.3 + avg_drr * 10) / 1.8
    return int(round(min(max(efficiency, 0), 100)))


def calculate_inventory_metrics(products_df: pd.DataFrame) -> dict:
    """Portfolio KPIs over the current product set, using only the data each metric needs."""
    if products_df is None or products_df.empty:
        logger.warning("KPI_CALC: Product data is empty. Returning zeroed metrics.")
        return dict(EMPTY_METRICS)

    total_products = len(products_df)
    wh = numeric_column(products_df, 'wh')
    pasd = numeric_column(products_df, 'pasd')
    transit = numeric_column(products_df, 'transit')
    to_order = numeric_column(products_df, 'to_order')
    target = numeric_column(products_df, 'ct_target_inventory')
    days_in_hand = numeric_column(products_df, 'days_inv_in_hand')

    low_stock = products_df['is_low_stock'] if 'is_low_stock' in products_df.columns else low_stock_mask(products_df)
    overstock = products_df['is_overstock'] if 'is_overstock' in products_df.columns else overstock_mask(products_df)
    low_stock_items = int(low_stock.sum())
    overstock_items = int(overstock.sum())

    # DOC: the sheet's own figure when present, else WH / PASD for selling products
    doc = days_in_hand.where(days_in_hand.notna(), np.where(pasd > 0, wh / pasd, np.nan))
    avg_doc = float(doc.mean()) if doc.notna().any() else 0.0

    avg_pasd = float(pasd.mean()) if pasd.notna().any() else 0.0

    has_target = target.notna() & (target > 0) & wh.notna()
    if has_target.any():
        achieved = (wh[has_target] >= target[has_target]).sum()
        target_achievement = float(achieved) / int(has_target.sum()) * 100
    else:
        target_achievement = 0.0

    stockout_rate = low_stock_items / total_products * 100
    overstock_rate = overstock_items / total_products * 100

    metrics = {
        'total_products': total_products,
        'total_value': float(wh.sum()),
        'low_stock_items': low_stock_items,
        'out_of_stock_items': int((wh == 0).sum()),
        'overstock_items': overstock_items,
        'avg_drr': avg_pasd,
        'avg_doc': avg_doc,
        'target_achievement': target_achievement,
        'inventory_health_score': calculate_health_score(stockout_rate, target_achievement, avg_pasd),
        'total_transit': float(transit.sum()),
        'items_in_transit': int((transit > 0).sum()),
        'total_to_order': float(to_order.sum()),
        'items_to_order': int((to_order > 0).sum()),
        'avg_pasd': avg_pasd,
        'overstock_rate': overstock_rate,
        'stockout_rate': stockout_rate,
    }
    logger.info(f"KPI_CALC: Calculated inventory metrics for {total_products} products.")
    return metrics
