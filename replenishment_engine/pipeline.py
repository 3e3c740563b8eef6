# StockPulse/replenishment_engine/pipeline.py
import logging

import pandas as pd

from data_ingestion.field_normalizer import normalize_rows
from .bundling import calculate_bundle_information
from .stock_status import classify_stock
from .order_suggestions import generate_order_suggestions

logger = logging.getLogger(__name__)


def build_products(raw_rows, parameters: dict = None) -> pd.DataFrame:
    """Normalizer -> Bundle Aggregator -> Stock Classifier. Raises IngestionError on an empty or unparsable upload."""
    parameters = parameters or {}
    products_df = normalize_rows(raw_rows)
    bundled_df = calculate_bundle_information(products_df, parameters)
    return classify_stock(bundled_df, parameters)


def run_pipeline(raw_rows, parameters: dict = None) -> tuple:
    """
    Full recomputation for one upload.

    Returns (products_df, suggestions_df). Each stage returns a new frame,
    so the caller can simply replace whatever result it held before.
    """
    logger.info("PIPELINE: Starting full recomputation.")
    products_df = build_products(raw_rows, parameters)
    suggestions_df = generate_order_suggestions(products_df)
    logger.info(
        f"PIPELINE: Finished. {len(products_df)} products, "
        f"{int(products_df['is_base_unit'].sum())} base units, "
        f"{int(products_df['is_low_stock'].sum())} low stock, "
        f"{len(suggestions_df)} order suggestions."
    )
    return products_df, suggestions_df
